"""
Narrow request/response views consumed by the Validator.

Header and body marshaling belong to the HTTP wrapper; these models only
carry what validation reads and writes.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .error_entry import ErrorEntry


class Request(BaseModel):
    """
    Inbound API request as seen by validation.

    Attributes:
        method: HTTP method (any case)
        route: Matched route template, e.g. "/items/{item_id}"
        headers: Request headers
        query_params: Query string parameters
        path_params: Path parameters extracted by the router
        body: Decoded request body
    """

    method: str = "get"
    route: str = "/"
    headers: Dict[str, Any] = Field(default_factory=dict)
    query_params: Dict[str, Any] = Field(default_factory=dict)
    path_params: Dict[str, Any] = Field(default_factory=dict)
    body: Any = None


class Response(BaseModel):
    """
    Outbound API response that validation attaches errors to.

    Attributes:
        code: HTTP status code
        content_type: Response media type used for OpenAPI response lookup
        body: Response body (validated by response validation)
        errors: Error entries in the order they were attached
    """

    code: int = 200
    content_type: str = "application/json"
    body: Any = None
    errors: List[ErrorEntry] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def raw_body(self) -> Any:
        """Errors envelope when errors exist, otherwise the body."""
        if self.has_errors:
            return {"errors": [error.model_dump() for error in self.errors]}
        return self.body

    def set_error(self, key: str, message: str) -> None:
        self.errors.append(ErrorEntry(key=key, message=message))

    def set_errors(self, entries: List[ErrorEntry]) -> None:
        self.errors.extend(entries)
