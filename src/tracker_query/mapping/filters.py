"""Parse compact filter expressions into resolved filter mappings.

Expressions take the form ``UID[:OP:VALUE]*[,UID[:OP:VALUE]*]*``. Each comma
separated group is keyed by the field UID that starts it; the remaining colon
separated tokens pair up into ``(operator, value)`` filters. A bare UID is a
valid group with no filters. A ``/`` before ``,``, ``:`` or ``/`` escapes it, so
values such as ``10/:30`` keep their separators.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Mapping, Sequence
from typing import TypeVar

from tracker_query.models.metadata import DataElement, IdentifiableObject, TrackedEntityAttribute
from tracker_query.models.query import QueryFilter, QueryOperator, freeze_filters

from .errors import DuplicateFilterError, InvalidFilterError
from .identifiers import IdentifierResolver

_EntityT = TypeVar("_EntityT", bound=IdentifiableObject)

GROUP_SEPARATOR = ","
TOKEN_SEPARATOR = ":"
ESCAPE = "/"
_ESCAPABLE = frozenset({ESCAPE, GROUP_SEPARATOR, TOKEN_SEPARATOR})

ATTRIBUTE_FILTER_PARAMETER = "filterAttributes"
DATA_ELEMENT_FILTER_PARAMETER = "filter"


def _split(text: str, separator: str) -> list[str]:
    """Split on ``separator`` unless it is escaped; escapes are kept."""
    parts: list[str] = []
    current: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == ESCAPE and text[index + 1 : index + 2] in _ESCAPABLE:
            current.append(text[index : index + 2])
            index += 2
            continue
        if char == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    parts.append("".join(current))
    return parts


def _unescape(token: str) -> str:
    chars: list[str] = []
    index = 0
    while index < len(token):
        if token[index] == ESCAPE and token[index + 1 : index + 2] in _ESCAPABLE:
            index += 1
        chars.append(token[index])
        index += 1
    return "".join(chars)


def _escape(value: str) -> str:
    return "".join(ESCAPE + char if char in _ESCAPABLE else char for char in value)


def parse_filter_groups(expression: str, *, parameter: str) -> list[tuple[str, list[QueryFilter]]]:
    """Split ``expression`` into ``(uid, filters)`` groups without resolving UIDs.

    Raises:
        InvalidFilterError: On an empty group, a missing UID, a dangling
            operator or an unknown operator token.
    """
    groups: list[tuple[str, list[QueryFilter]]] = []
    for raw_group in _split(expression, GROUP_SEPARATOR):
        group = raw_group.strip()
        if not group:
            raise InvalidFilterError(f"{parameter} contains an empty filter: '{expression}'")
        uid, *tokens = (_unescape(token.strip()) for token in _split(group, TOKEN_SEPARATOR))
        if not uid:
            raise InvalidFilterError(f"{parameter} contains a filter without a UID: '{group}'")
        if len(tokens) % 2:
            raise InvalidFilterError(
                f"{parameter} contains an operator without a value: '{group}'"
            )
        filters: list[QueryFilter] = []
        for token, value in zip(tokens[::2], tokens[1::2]):
            operator = QueryOperator.from_token(token)
            if operator is None:
                raise InvalidFilterError(
                    f"{parameter} contains an unknown operator '{token}': '{group}'"
                )
            filters.append(QueryFilter(operator=operator, filter=value))
        groups.append((uid, filters))
    return groups


def format_filters(filters: Mapping[IdentifiableObject, Sequence[QueryFilter]]) -> str:
    """Serialise a parsed filter mapping back into its compact form."""
    groups = []
    for entity, entity_filters in filters.items():
        tokens = [entity.uid]
        for query_filter in entity_filters:
            tokens.extend((query_filter.operator.value, _escape(query_filter.filter)))
        groups.append(TOKEN_SEPARATOR.join(tokens))
    return GROUP_SEPARATOR.join(groups)


class FilterParser:
    """Parse attribute and data element filter expressions."""

    def __init__(self, resolver: IdentifierResolver) -> None:
        self._resolver = resolver

    def parse_attribute_filters(
        self, expression: str | None
    ) -> Mapping[TrackedEntityAttribute, tuple[QueryFilter, ...]]:
        if not expression:
            return freeze_filters({})
        groups = self._groups(
            expression, parameter=ATTRIBUTE_FILTER_PARAMETER, kind="tracked entity attribute"
        )
        candidates = self._resolver.attributes_by_uid()
        return self._resolve(
            groups, lambda uid: self._resolver.resolve_attribute(uid, candidates)
        )

    def parse_data_element_filters(
        self, expression: str | None
    ) -> Mapping[DataElement, tuple[QueryFilter, ...]]:
        if not expression:
            return freeze_filters({})
        groups = self._groups(
            expression, parameter=DATA_ELEMENT_FILTER_PARAMETER, kind="data element"
        )
        return self._resolve(groups, self._resolver.resolve_data_element)

    @staticmethod
    def _groups(
        expression: str, *, parameter: str, kind: str
    ) -> list[tuple[str, list[QueryFilter]]]:
        groups = parse_filter_groups(expression, parameter=parameter)
        counts = Counter(uid for uid, _ in groups)
        duplicates = [uid for uid, count in counts.items() if count > 1]
        if duplicates:
            raise DuplicateFilterError(parameter, kind, duplicates)
        return groups

    @staticmethod
    def _resolve(
        groups: list[tuple[str, list[QueryFilter]]],
        resolve: Callable[[str], _EntityT | None],
    ) -> Mapping[_EntityT, tuple[QueryFilter, ...]]:
        resolved: dict[_EntityT, list[QueryFilter]] = {}
        for uid, filters in groups:
            entity = resolve(uid)
            assert entity is not None
            resolved[entity] = filters
        return freeze_filters(resolved)


__all__ = [
    "ATTRIBUTE_FILTER_PARAMETER",
    "DATA_ELEMENT_FILTER_PARAMETER",
    "FilterParser",
    "format_filters",
    "parse_filter_groups",
]
