"""
OpenAPI operation validation for translated requests.

Checks a request of the shape {headers, queryParameters, pathParameters,
body} against one dereferenced operation object: its header, query and path
parameters plus requestBody.content["application/json"].schema.

Errors come back in native form: {"path": "request.<area>[.<field>...]",
"message": ...}. Callers translate them into ErrorEntry values.
"""

from typing import Any

from jsonschema import Draft202012Validator, FormatChecker

from .merge import expand_nullable

# OpenAPI "in" value -> key of the translated request
PARAMETER_AREAS = {
    "header": "headers",
    "path": "pathParameters",
    "query": "queryParameters",
}

JSON_MEDIA_TYPE = "application/json"

_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}


def coerce_parameter(value: Any, schema: dict) -> Any:
    """
    Convert a string parameter to the primitive type its schema declares.

    Values that cannot be converted are returned unchanged so the
    structural check reports the type mismatch.
    """
    if not isinstance(value, str) or not isinstance(schema, dict):
        return value

    declared = schema.get("type")
    types = declared if isinstance(declared, list) else [declared]

    if "array" in types:
        items = schema.get("items") if isinstance(schema.get("items"), dict) else {}
        return [coerce_parameter(part, items) for part in value.split(",")] if value else []
    if "integer" in types:
        try:
            return int(value)
        except ValueError:
            pass
    if "number" in types:
        try:
            return float(value)
        except ValueError:
            pass
    if "boolean" in types:
        if value.lower() in _TRUE_STRINGS:
            return True
        if value.lower() in _FALSE_STRINGS:
            return False
    return value


class OperationValidator:
    """
    Validates translated requests against an OpenAPI operation.

    Query parameters not declared by the operation are rejected once it
    declares any query parameter. Header names compare case-insensitively
    and undeclared headers are allowed.
    """

    def __init__(self, format_checker: FormatChecker | None = None):
        self.format_checker = format_checker

    def validate(
        self,
        operation: dict,
        request: dict,
        path_parameters: list | None = None,
    ) -> list[dict[str, str]]:
        """
        Validate a translated request.

        Args:
            operation: Dereferenced operation object
            request: {headers, queryParameters, pathParameters, body}
            path_parameters: Parameters declared on the enclosing path item

        Returns:
            Native errors in the order they were found
        """
        parameters = self._declared_parameters(operation, path_parameters or [])
        errors: list[dict[str, str]] = []

        for location in ("header", "path", "query"):
            declared = [p for p in parameters if p.get("in") == location]
            if not declared:
                continue
            schema = self._parameter_schema(location, declared)
            values = self._parameter_values(location, request.get(PARAMETER_AREAS[location]) or {}, declared)
            errors.extend(self._check(schema, values, f"request.{location}"))

        errors.extend(self._check_body(operation.get("requestBody"), request.get("body")))
        return errors

    def _declared_parameters(self, operation: dict, path_parameters: list) -> list[dict]:
        # Operation-level parameters override path-level ones with the same name and location
        by_identity: dict[tuple[str, str], dict] = {}
        for parameter in [*path_parameters, *(operation.get("parameters") or [])]:
            if isinstance(parameter, dict) and "name" in parameter:
                by_identity[(parameter.get("in", ""), parameter["name"])] = parameter
        return list(by_identity.values())

    def _parameter_schema(self, location: str, declared: list[dict]) -> dict:
        properties = {}
        required = []
        for parameter in declared:
            name = parameter["name"].lower() if location == "header" else parameter["name"]
            properties[name] = expand_nullable(parameter.get("schema") or {})
            if parameter.get("required") or location == "path":
                required.append(name)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
            "additionalProperties": location != "query",
        }

    def _parameter_values(self, location: str, sent: dict, declared: list[dict]) -> dict:
        if location == "header":
            sent = {str(name).lower(): value for name, value in sent.items()}
            schemas = {p["name"].lower(): p.get("schema") or {} for p in declared}
        else:
            schemas = {p["name"]: p.get("schema") or {} for p in declared}
        return {name: coerce_parameter(value, schemas.get(name, {})) for name, value in sent.items()}

    def _check_body(self, request_body: Any, body: Any) -> list[dict[str, str]]:
        if not isinstance(request_body, dict):
            return []
        if body is None:
            if request_body.get("required"):
                return [{"path": "request.body", "message": "request.body is required"}]
            return []

        content = request_body.get("content") or {}
        media = content.get(JSON_MEDIA_TYPE) or next(iter(content.values()), None)
        if not isinstance(media, dict) or not isinstance(media.get("schema"), dict):
            return []
        return self._check(expand_nullable(media["schema"]), body, "request.body")

    def _check(self, schema: dict, instance: Any, prefix: str) -> list[dict[str, str]]:
        validator = Draft202012Validator(schema, format_checker=self.format_checker)
        errors = []
        for error in validator.iter_errors(instance):
            path = prefix + "".join(f".{segment}" for segment in error.absolute_path)
            errors.append({"path": path, "message": f"{prefix} {error.message}"})
        return errors
