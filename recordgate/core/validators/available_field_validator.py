"""
AvailableFieldCheck - rejects fields outside a declared allow-list.
"""

from typing import Any

from recordgate.core.models import ErrorEntry

from .base_validator import BaseCheck


class AvailableFieldCheck(BaseCheck):
    """
    Validates that every field sent in the area is one of the allowed names.

    Fails once per unexpected field, in the order the fields were sent.
    """

    def check(self, requirement: list[str], sent: Any) -> list[ErrorEntry]:
        sent = sent or {}
        return [
            ErrorEntry(key=self.area, message=f"{field} is not an available {self.area}")
            for field in sent
            if field not in requirement
        ]

    @property
    def check_type(self) -> str:
        return "available_fields"
