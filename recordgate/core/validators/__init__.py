"""
Requirement check implementations.

Provides checks for required fields, allowed fields and body schemas.
"""

from .available_field_validator import AvailableFieldCheck
from .base_validator import BaseCheck
from .body_schema_validator import BodySchemaCheck
from .required_field_validator import RequiredFieldCheck

__all__ = [
    "BaseCheck",
    "RequiredFieldCheck",
    "AvailableFieldCheck",
    "BodySchemaCheck",
]
