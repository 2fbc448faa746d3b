"""
RecordResult model: a classified record together with its validation state.
"""

from typing import Any, List

from pydantic import BaseModel, Field

from .error_entry import ErrorEntry


class RecordResult(BaseModel):
    """
    Wrapper threaded through the event pipeline.

    Validation writes its verdict here instead of onto the record, and
    invalid results keep flowing until the explicit validity filter.

    Attributes:
        record: The classified record (any record adapter)
        valid: Outcome of the validation step (True until validated otherwise)
        errors: Error entries produced while validating the record body
    """

    record: Any
    valid: bool = True
    errors: List[ErrorEntry] = Field(default_factory=list)

    @property
    def operation(self) -> str:
        return self.record.operation

    @property
    def body(self) -> Any:
        return self.record.body

    def mark_invalid(self, errors: List[ErrorEntry]) -> None:
        """Record a failed validation."""
        self.valid = False
        self.errors = list(errors)
