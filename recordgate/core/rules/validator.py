"""
Validator: orchestrates request, response and record validation.

Three entry points share one SchemaStore and converge on ErrorEntry:
OpenAPI operation validation, declarative requirement validation, and
direct record-body validation.
"""

import logging
from enum import Enum
from typing import Any, Callable, NamedTuple

from jsonschema.exceptions import ValidationError as JsonSchemaError

from recordgate.core.errors import ValidationFailureError
from recordgate.core.models import (
    ErrorEntry,
    RecordResult,
    Request,
    Response,
    ValidationRequirements,
)
from recordgate.core.schema import SchemaStore, error_instance_path, normalize_route
from recordgate.core.validators import (
    AvailableFieldCheck,
    BaseCheck,
    BodySchemaCheck,
    RequiredFieldCheck,
)
from recordgate.observability.logger import get_logger
from recordgate.observability.metrics import increment_counter, request_validation_errors_total

REQUEST_ERROR_CODE = 400
RESPONSE_ERROR_CODE = 422


class RequirementKind(Enum):
    """Requirement kinds, in the order they are checked."""

    REQUIRED_HEADERS = "required_headers"
    AVAILABLE_HEADERS = "available_headers"
    REQUIRED_QUERY = "required_query"
    AVAILABLE_QUERY = "available_query"
    REQUIRED_BODY = "required_body"


class Pairing(NamedTuple):
    """A requirement kind bound to the request area it reads and its check."""

    kind: RequirementKind
    read: Callable[[Request], Any]
    check: BaseCheck
    code: int


class Validator:
    """
    Validates requests, responses and records against a SchemaStore.

    The requirement pairings are fixed at construction; their order
    (headers required, headers available, query required, query available,
    body required) determines error order.
    """

    def __init__(
        self,
        store: SchemaStore,
        validation_error: bool = True,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize validator.

        Args:
            store: Schema store used for every schema lookup
            validation_error: Raise ValidationFailureError on invalid records
            logger: Logger instance (one is created when omitted)
        """
        self.store = store
        self.validation_error = validation_error
        self.logger = logger or get_logger(__name__)
        self.pairings: list[Pairing] = self._build_pairings()

    def _build_pairings(self) -> list[Pairing]:
        headers = lambda request: request.headers
        query = lambda request: request.query_params
        body = lambda request: request.body
        return [
            Pairing(RequirementKind.REQUIRED_HEADERS, headers, RequiredFieldCheck("headers"), REQUEST_ERROR_CODE),
            Pairing(RequirementKind.AVAILABLE_HEADERS, headers, AvailableFieldCheck("headers"), REQUEST_ERROR_CODE),
            Pairing(RequirementKind.REQUIRED_QUERY, query, RequiredFieldCheck("query_params"), REQUEST_ERROR_CODE),
            Pairing(RequirementKind.AVAILABLE_QUERY, query, AvailableFieldCheck("query_params"), REQUEST_ERROR_CODE),
            Pairing(RequirementKind.REQUIRED_BODY, body, BodySchemaCheck("body", self.store), REQUEST_ERROR_CODE),
        ]

    # =======================
    # REQUEST VALIDATION
    # =======================

    def validate_with_openapi(self, request: Request, response: Response) -> None:
        """
        Validate a request against the OpenAPI operation for its route and method.

        Raises:
            OperationNotFoundError: If the document has no such operation
        """
        translated = {
            "headers": request.headers,
            "queryParameters": request.query_params,
            "pathParameters": request.path_params,
            "body": request.body,
        }
        route = normalize_route(request.route)
        errors = self.store.validate_openapi(route, request.method, translated)
        self._translate_openapi_errors(errors, response)

    def validate_with_requirements(
        self,
        request: Request,
        response: Response,
        requirements: ValidationRequirements | dict,
    ) -> None:
        """
        Validate a request against declarative requirements.

        Args:
            request: Request to validate
            response: Response that receives error entries
            requirements: Requirement bundle (model or mapping with camelCase keys)
        """
        if isinstance(requirements, dict):
            requirements = ValidationRequirements.model_validate(requirements)

        for pairing in self.pairings:
            requirement = getattr(requirements, pairing.kind.value)
            # An empty allow-list is still a constraint: nothing is allowed
            if requirement is None or requirement == "":
                continue
            entries = pairing.check.check(requirement, pairing.read(request))
            if entries:
                response.code = pairing.code
                response.set_errors(entries)
                increment_counter(request_validation_errors_total, len(entries), mode="requirements")

    # =======================
    # RECORD VALIDATION
    # =======================

    def record_errors(self, entity: str | dict, body: Any) -> list[dict[str, str]]:
        """
        Validate a record body and return {path, message} pairs.

        Args:
            entity: Entity name, inline schema, or "" for the store's inline schema
            body: Record body
        """
        return [
            {"path": error_instance_path(error) or "root", "message": error.message}
            for error in self.store.validate(entity, body)
        ]

    def validate_record(self, result: RecordResult, entity: str | dict = "") -> bool:
        """
        Validate one record's body.

        Args:
            result: Record wrapper; marked invalid on failure
            entity: Entity name, inline schema, or "" for the store's inline schema

        Returns:
            True when the body is valid, False otherwise

        Raises:
            ValidationFailureError: On failure while validation_error mode is on
        """
        throwables = self.record_errors(entity, result.body)
        if not throwables:
            return True

        self.logger.debug(
            "Record failed validation",
            extra={"record_id": getattr(result.record, "id", ""), "error_count": len(throwables)}
        )
        if self.validation_error:
            raise ValidationFailureError(throwables)

        result.mark_invalid([ErrorEntry(key=item["path"], message=item["message"]) for item in throwables])
        return False

    # =======================
    # RESPONSE VALIDATION
    # =======================

    def validate_response_with_openapi(self, request: Request, response: Response) -> None:
        """
        Validate a response body against the OpenAPI response schema.

        Raises:
            OperationNotFoundError / ResponseSchemaNotFoundError: If no schema is declared
        """
        route = normalize_route(request.route)
        errors = self.store.validate_openapi_response(
            route, request.method, response.code, response.content_type, response.body
        )
        self._translate_response_errors(errors, response)

    def validate_response(self, response: Response, requirements: ValidationRequirements | dict) -> None:
        """Validate a response body against the declared response schema, if any."""
        if isinstance(requirements, dict):
            requirements = ValidationRequirements.model_validate(requirements)
        if requirements.response:
            errors = self.store.validate(requirements.response, response.body)
            self._translate_response_errors(errors, response)

    # =======================
    # ERROR TRANSLATION
    # =======================

    def _translate_openapi_errors(self, errors: list[dict[str, str]], response: Response) -> None:
        if not errors:
            return
        response.code = REQUEST_ERROR_CODE
        for error in errors:
            path = error.get("path")
            if not path:
                continue
            parts = path.split(".")
            key = parts[1] if len(parts) > 1 and parts[1] else path
            response.set_error(key, error.get("message") or "Validation error")
        increment_counter(request_validation_errors_total, len(errors), mode="openapi")

    def _translate_response_errors(self, errors: list[JsonSchemaError], response: Response) -> None:
        if not errors:
            return
        response.code = RESPONSE_ERROR_CODE
        for error in errors:
            path = error_instance_path(error) or "root"
            response.set_error(path.replace("/", "."), error.message or "Validation error")
        increment_counter(request_validation_errors_total, len(errors), mode="response")
