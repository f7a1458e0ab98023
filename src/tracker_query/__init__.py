"""Query parameter mapping and authorization scoping for tracker data queries."""

from .mapping import EnrollmentCriteriaMapper, EventOperationParamsMapper

__all__ = ["EnrollmentCriteriaMapper", "EventOperationParamsMapper"]

__version__ = "0.1.0"
