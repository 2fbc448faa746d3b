"""
SchemaStore: loads, dereferences, flattens and compiles validation schemas.

A store is either file-backed (an OpenAPI document on disk) or inline (a
bare JSON Schema). File-backed stores re-read their file before every
validation call, so edits to the schema file are picked up without
rebuilding the store. This trades throughput for freshness; the reload is
intentional and has no invalidation signal other than "always".
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator, FormatChecker
from jsonschema.exceptions import ValidationError as JsonSchemaError

from recordgate.core.errors import (
    OperationNotFoundError,
    ResponseSchemaNotFoundError,
    SchemaNotFoundError,
)
from recordgate.observability.logger import get_logger

from .dereference import Dereferencer
from .merge import expand_nullable, merge_all_of
from .openapi import OperationValidator

# Compiled validators kept for inline stores before the cache is reset
MAX_COMPILED_VALIDATORS = 64


def normalize_route(route: str) -> str:
    """Prefix a leading '/' when absent."""
    return route if route.startswith("/") else f"/{route}"


def error_instance_path(error: JsonSchemaError) -> str:
    """Slash-separated location of the failing value ("" at the root)."""
    return "".join(f"/{segment}" for segment in error.absolute_path)


class SchemaStore:
    """
    Holds an OpenAPI document and/or an inline JSON Schema.

    Exactly one of the two is consulted per validation call: a non-empty
    string entity name selects components.schemas in the OpenAPI document,
    anything else selects the given schema object or the inline schema.
    """

    def __init__(
        self,
        openapi_document: dict | None = None,
        inline_schema: dict | None = None,
        schema_path: str | Path | None = None,
        strict_validation: bool = False,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize schema store.

        Args:
            openapi_document: Parsed OpenAPI document
            inline_schema: Bare JSON Schema used when no entity name is given
            schema_path: File backing the OpenAPI document (enables reload)
            strict_validation: Reject unknown properties and assert formats
            logger: Logger instance (one is created when omitted)
        """
        self.openapi_document: dict = openapi_document or {}
        self.inline_schema: dict = inline_schema or {}
        self.schema_path = Path(schema_path) if schema_path else None
        self.strict_validation = strict_validation
        self.logger = logger or get_logger(__name__)
        self.format_checker = FormatChecker() if strict_validation else None
        self.operation_validator = OperationValidator(self.format_checker)
        self._compiled: dict[int, tuple[Any, Draft202012Validator]] = {}

    @classmethod
    def from_file_path(
        cls,
        schema_path: str | Path,
        strict_validation: bool = False,
        logger: logging.Logger | None = None,
    ) -> "SchemaStore":
        """
        Build a store backed by a YAML or JSON document on disk.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        if not Path(schema_path).exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")
        store = cls(schema_path=schema_path, strict_validation=strict_validation, logger=logger)
        store.reload()
        return store

    @classmethod
    def from_inline_schema(
        cls,
        inline_schema: dict,
        strict_validation: bool = False,
        logger: logging.Logger | None = None,
    ) -> "SchemaStore":
        """Build a store around a bare JSON Schema."""
        return cls(inline_schema=inline_schema, strict_validation=strict_validation, logger=logger)

    def reload(self) -> None:
        """Re-read the backing file; no-op for inline stores."""
        if self.schema_path is None:
            return
        with open(self.schema_path) as f:
            self.openapi_document = yaml.safe_load(f) or {}
        self._compiled.clear()
        self.logger.debug(f"Reloaded schema document from {self.schema_path}")

    def dereferenced(self) -> dict:
        """Fully dereferenced copy of the OpenAPI document."""
        return Dereferencer(self.schema_path).dereference(self.openapi_document)

    def resolve(self, entity: str | dict = "") -> dict:
        """
        Resolve an entity name or schema object to a flat JSON Schema.

        Args:
            entity: components.schemas name, a schema object, or "" for the inline schema

        Returns:
            Schema ready for compilation

        Raises:
            SchemaNotFoundError: If the named entity is absent
        """
        if self.openapi_document and isinstance(entity, str) and entity:
            document = self.dereferenced()
            schemas = (document.get("components") or {}).get("schemas") or {}
            if entity not in schemas:
                raise SchemaNotFoundError(entity)
            schema = dict(merge_all_of(schemas[entity]))
            schema["additionalProperties"] = not self.strict_validation
            return schema
        if isinstance(entity, dict):
            return entity
        return self.inline_schema

    def compile(self, schema: dict) -> Draft202012Validator:
        """Compile a resolved schema, reusing the validator for the same schema object."""
        cached = self._compiled.get(id(schema))
        if cached is not None and cached[0] is schema:
            return cached[1]

        if len(self._compiled) >= MAX_COMPILED_VALIDATORS:
            self._compiled.clear()
        validator = Draft202012Validator(expand_nullable(schema), format_checker=self.format_checker)
        self._compiled[id(schema)] = (schema, validator)
        return validator

    def validate(self, entity: str | dict = "", data: Any = None) -> list[JsonSchemaError]:
        """
        Structurally validate data against a resolved schema.

        Returns:
            Schema engine errors in the order produced (empty when valid)
        """
        self.reload()
        validator = self.compile(self.resolve(entity))
        return list(validator.iter_errors(data))

    def operation_schema(self, path: str, method: str, document: dict | None = None) -> dict:
        """
        Look up paths[path][method] in the dereferenced document.

        Raises:
            OperationNotFoundError: If the path or method is not declared
        """
        route = normalize_route(path)
        document = document if document is not None else self.dereferenced()
        path_item = (document.get("paths") or {}).get(route)
        if not isinstance(path_item, dict):
            raise OperationNotFoundError(route, method.lower(), "Path not found")
        operation = path_item.get(method.lower())
        if not isinstance(operation, dict):
            raise OperationNotFoundError(route, method.lower())
        return operation

    def response_schema(
        self,
        path: str,
        method: str,
        status_code: int | str,
        content_type: str,
        document: dict | None = None,
    ) -> dict:
        """
        Drill into operation.responses[status].content[content_type].schema.

        Raises:
            OperationNotFoundError: If the operation is not declared
            ResponseSchemaNotFoundError: If any later link in the chain is missing
        """
        route = normalize_route(path)
        operation = self.operation_schema(route, method, document)
        responses = operation.get("responses") or {}

        response = responses.get(str(status_code))
        if response is None and str(status_code).isdigit():
            response = responses.get(int(status_code))
        if not isinstance(response, dict):
            raise ResponseSchemaNotFoundError(route, method.lower(), status_code, content_type, "Response not found")

        media = (response.get("content") or {}).get(content_type)
        if not isinstance(media, dict) or not isinstance(media.get("schema"), dict):
            raise ResponseSchemaNotFoundError(route, method.lower(), status_code, content_type)
        return media["schema"]

    def validate_openapi(self, path: str, method: str, request: dict) -> list[dict[str, str]]:
        """
        Validate a translated request against the operation for (path, method).

        Returns:
            Native {path, message} errors
        """
        self.reload()
        document = self.dereferenced()
        operation = self.operation_schema(path, method, document)
        path_item = document["paths"][normalize_route(path)]
        return self.operation_validator.validate(operation, request, path_item.get("parameters"))

    def validate_openapi_response(
        self,
        path: str,
        method: str,
        status_code: int | str,
        content_type: str,
        body: Any,
    ) -> list[JsonSchemaError]:
        """Validate a response body against its declared OpenAPI response schema."""
        self.reload()
        schema = merge_all_of(self.response_schema(path, method, status_code, content_type, self.dereferenced()))
        return list(self.compile(schema).iter_errors(body))

    def get_schema(self, path: str, method: str) -> dict | None:
        """Raw (non-dereferenced) operation object, or None when absent."""
        path_item = (self.openapi_document.get("paths") or {}).get(normalize_route(path))
        if not isinstance(path_item, dict):
            return None
        return path_item.get(method.lower())
