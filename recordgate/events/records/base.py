"""
Base record interface shared by every event source.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any


class BaseRecord(ABC):
    """
    Uniform view over one unit of cloud event data.

    Each record keeps its own deep copy of the raw payload. Concrete
    records add source-specific accessors on top of id, source,
    operation and body.
    """

    def __init__(self, raw_record: dict[str, Any]):
        """
        Initialize record.

        Args:
            raw_record: The record exactly as delivered by the event source
        """
        self._raw = copy.deepcopy(raw_record)

    @property
    def raw_record(self) -> dict[str, Any]:
        return self._raw

    @property
    def source(self) -> str:
        return self._raw.get("eventSource") or ""

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable identity of the record."""
        pass

    @property
    @abstractmethod
    def operation(self) -> str:
        """One of create, update, delete, unknown."""
        pass

    @property
    @abstractmethod
    def body(self) -> Any:
        """Payload subject to validation."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, operation={self.operation!r})"


class UnrecognizedRecord(BaseRecord):
    """
    Fallback for records whose source tag is not recognized.

    Always a valid create whose body is the raw record.
    """

    @property
    def id(self) -> str:
        return ""

    @property
    def operation(self) -> str:
        return "create"

    @property
    def body(self) -> dict[str, Any]:
        return self._raw
