"""
Base interface for requirement checks.

Each check inspects one area of a request (headers, query parameters,
body) against one declared requirement and returns ErrorEntry values.
"""

from abc import ABC, abstractmethod
from typing import Any

from recordgate.core.models import ErrorEntry


class BaseCheck(ABC):
    """
    Abstract base class for requirement checks.

    Subclasses implement a single check method (required fields,
    allowed fields, body schema).
    """

    def __init__(self, area: str):
        """
        Initialize check.

        Args:
            area: Request area the check reads; used as the error key
        """
        self.area = area

    @abstractmethod
    def check(self, requirement: Any, sent: Any) -> list[ErrorEntry]:
        """
        Check what was sent against a requirement.

        Args:
            requirement: The declared requirement (field list or schema reference)
            sent: The request area's content

        Returns:
            Error entries, empty when the requirement is met
        """
        pass

    @property
    @abstractmethod
    def check_type(self) -> str:
        """Return the check type identifier."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(area={self.area})"
