"""
ErrorEntry model: the single error shape every validation mode converges on.
"""

from typing import List, Optional

from pydantic import BaseModel


class ErrorEntry(BaseModel):
    """
    One validation problem attached to a response or a record.

    Attributes:
        key: Location or field path (e.g. "headers", "query", "/id", "root")
        message: Human-readable description
    """

    key: str
    message: str

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "key": "/id",
                "message": "1 is not of type 'string'"
            }
        }


# None (or an empty list) means valid; order is the order the engine produced
ValidationOutcome = Optional[List[ErrorEntry]]
