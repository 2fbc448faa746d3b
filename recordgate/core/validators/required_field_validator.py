"""
RequiredFieldCheck - ensures every named field is present.
"""

from typing import Any

from recordgate.core.models import ErrorEntry

from .base_validator import BaseCheck


class RequiredFieldCheck(BaseCheck):
    """
    Validates that each required field name is present in the area.

    Only absence fails: empty strings, 0 and False count as present.
    """

    def check(self, requirement: list[str], sent: Any) -> list[ErrorEntry]:
        sent = sent or {}
        return [
            ErrorEntry(key=self.area, message=f"Please provide {field} for {self.area}")
            for field in requirement
            if field not in sent
        ]

    @property
    def check_type(self) -> str:
        return "required_fields"
