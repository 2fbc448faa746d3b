"""
BodySchemaCheck - validates a request body against a schema reference.
"""

from typing import Any

from recordgate.core.models import ErrorEntry
from recordgate.core.schema import SchemaStore, error_instance_path

from .base_validator import BaseCheck


class BodySchemaCheck(BaseCheck):
    """
    Runs full schema validation on the body.

    The requirement is an entity name or inline schema; each schema error
    becomes an entry keyed by its instance path ("root" at the top level).
    """

    def __init__(self, area: str, store: SchemaStore):
        super().__init__(area)
        self.store = store

    def check(self, requirement: str | dict, sent: Any) -> list[ErrorEntry]:
        return [
            ErrorEntry(key=error_instance_path(error) or "root", message=error.message)
            for error in self.store.validate(requirement, sent)
        ]

    @property
    def check_type(self) -> str:
        return "body_schema"
