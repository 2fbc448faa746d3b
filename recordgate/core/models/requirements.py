"""
ValidationRequirements model: the declarative bundle consumed from the route table.
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field

SchemaReference = Union[str, Dict[str, Any]]


class ValidationRequirements(BaseModel):
    """
    Which parts of a request/response must be checked, and how.

    A missing key means no constraint for that area.

    Attributes:
        required_headers: Header names that must be present
        available_headers: Header names allowed to be present
        required_query: Query parameter names that must be present
        available_query: Query parameter names allowed to be present
        required_body: Entity name or inline schema the body must satisfy
        response: Entity name or inline schema the response body must satisfy
    """

    required_headers: List[str] | None = Field(None, alias="requiredHeaders")
    available_headers: List[str] | None = Field(None, alias="availableHeaders")
    required_query: List[str] | None = Field(None, alias="requiredQuery")
    available_query: List[str] | None = Field(None, alias="availableQuery")
    required_body: SchemaReference | None = Field(None, alias="requiredBody")
    response: SchemaReference | None = None

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "requiredHeaders": ["x-api-key"],
                "availableQuery": ["name", "page"],
                "requiredBody": "v1-create-item-request"
            }
        }
