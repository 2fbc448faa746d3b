"""
Exception hierarchy for recordgate.

Schema-resolution and configuration errors always propagate: they point at
a deployment or programming mistake. ValidationFailureError and
OperationNotAllowedError are raised only when the matching error mode is
switched on; otherwise the pipeline marks or drops records and carries on.
"""

from __future__ import annotations

import json
from typing import Any


class RecordGateError(Exception):
    """Base exception for all recordgate errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(RecordGateError):
    """Mutually exclusive or incomplete options were supplied."""
    pass


class SchemaError(RecordGateError):
    """Base for problems locating or resolving a schema."""
    pass


class SchemaNotFoundError(SchemaError):
    """A named entity is absent from components.schemas."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Schema with name {name} is not found", details={"name": name})


class SchemaReferenceError(SchemaError):
    """A $ref pointer could not be resolved."""

    def __init__(self, ref: str, reason: str) -> None:
        self.ref = ref
        super().__init__(f"unable to resolve $ref '{ref}': {reason}", details={"ref": ref})


class SchemaMergeError(SchemaError):
    """allOf branches declare values that cannot be combined."""

    def __init__(self, keyword: str, values: list[Any]) -> None:
        self.keyword = keyword
        self.values = values
        super().__init__(
            f"could not merge allOf values for '{keyword}': {values!r}",
            details={"keyword": keyword},
        )


class OperationNotFoundError(SchemaError):
    """No operation is declared for the path/method pair."""

    def __init__(self, path: str, method: str, reason: str = "Operation not found") -> None:
        self.path = path
        self.method = method
        super().__init__(
            f"problem with importing your schema for {method}::{path}: {reason}",
            details={"path": path, "method": method},
        )


class ResponseSchemaNotFoundError(SchemaError):
    """No schema is declared for the path/method/status/content-type combination."""

    def __init__(
        self,
        path: str,
        method: str,
        status_code: int | str,
        content_type: str,
        reason: str = "Schema not found",
    ) -> None:
        self.path = path
        self.method = method
        self.status_code = status_code
        self.content_type = content_type
        super().__init__(
            f"problem with finding response schema for {method}::{path} "
            f"{status_code}::{content_type}: {reason}",
            details={
                "path": path,
                "method": method,
                "status_code": status_code,
                "content_type": content_type,
            },
        )


class ValidationFailureError(RecordGateError):
    """
    A record failed schema validation while validation_error mode is on.

    The message is the JSON encoding of every {path, message} pair, in the
    order the schema engine produced them.
    """

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        super().__init__(json.dumps(errors))


class OperationNotAllowedError(RecordGateError):
    """A record's operation is outside the allow-list while operation_error mode is on."""

    def __init__(self, operation: str, allowed: list[str]) -> None:
        self.operation = operation
        self.allowed = list(allowed)
        super().__init__(
            f"record is operation: {operation}; only allowed {','.join(self.allowed)}",
            details={"operation": operation, "allowed": self.allowed},
        )
