"""Resolve requested sort keys into order terms."""

from __future__ import annotations

from collections.abc import Collection, Sequence

from tracker_query.models.params import UID, OrderParam
from tracker_query.models.query import AttributeOrder, DataElementOrder, FieldOrder, OrderTerm
from tracker_query.utils.validation import is_valid_uid

from .errors import InvalidOrderError
from .identifiers import IdentifierResolver


class OrderResolver:
    """Turn ``(key, direction)`` pairs into :data:`OrderTerm` values.

    A plain key found in ``orderable_fields`` becomes a :class:`FieldOrder`.
    Any other UID shaped key is looked up as a tracked entity attribute and,
    failing that, as a data element. Output order mirrors the request.
    """

    def __init__(self, resolver: IdentifierResolver, orderable_fields: Collection[str]) -> None:
        self._resolver = resolver
        self._orderable_fields = frozenset(orderable_fields)

    def resolve(self, order: Sequence[OrderParam]) -> tuple[OrderTerm, ...]:
        return tuple(self._resolve_one(param) for param in order)

    def _resolve_one(self, param: OrderParam) -> OrderTerm:
        key = param.key
        if not isinstance(key, UID) and key in self._orderable_fields:
            return FieldOrder(field=key, direction=param.direction)
        uid = param.key_value
        if not is_valid_uid(uid):
            raise InvalidOrderError(uid)
        attribute = self._resolver.find_attribute(uid)
        if attribute is not None:
            return AttributeOrder(attribute=attribute, direction=param.direction)
        data_element = self._resolver.find_data_element(uid)
        if data_element is not None:
            return DataElementOrder(data_element=data_element, direction=param.direction)
        raise InvalidOrderError(uid)


def resolve_field_order(
    order: Sequence[OrderParam], orderable_fields: Collection[str]
) -> tuple[FieldOrder, ...]:
    """Resolve keys that may only name static fields."""
    allowed = frozenset(orderable_fields)
    terms = []
    for param in order:
        if isinstance(param.key, UID) or param.key not in allowed:
            raise InvalidOrderError(param.key_value)
        terms.append(FieldOrder(field=param.key, direction=param.direction))
    return tuple(terms)


__all__ = ["OrderResolver", "resolve_field_order"]
