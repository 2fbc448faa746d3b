"""
Core data models for recordgate.

All models use Pydantic for runtime validation and type safety.
"""

from .error_entry import ErrorEntry, ValidationOutcome
from .event_config import DEFAULT_OPERATIONS, EventConfig, OperationType
from .http import Request, Response
from .record_result import RecordResult
from .requirements import SchemaReference, ValidationRequirements

__all__ = [
    "ErrorEntry",
    "ValidationOutcome",
    "EventConfig",
    "OperationType",
    "DEFAULT_OPERATIONS",
    "Request",
    "Response",
    "RecordResult",
    "ValidationRequirements",
    "SchemaReference",
]
