"""
EventConfig model: options controlling how an event batch is processed.
"""

from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from recordgate.core.errors import ConfigurationError

OperationType = Literal["create", "update", "delete", "unknown"]

DEFAULT_OPERATIONS: List[OperationType] = ["create", "update", "delete"]


class EventConfig(BaseModel):
    """
    Caller-supplied configuration for an EventPipeline.

    Attributes:
        operations: Operations allowed through the operation filter
        validation_error: Raise on the first invalid record instead of marking it
        operation_error: Raise on a disallowed operation instead of dropping it
        strict_validation: Reject unknown properties and enforce formats
        required_body: Entity name (needs schema_path) or inline schema for bodies
        schema_path: OpenAPI/JSON Schema document on disk
        get_object: Fetch object-storage payloads before validation
        is_json: Decode fetched payloads as JSON
        is_csv: Decode fetched payloads as delimited text with a header row
    """

    operations: List[OperationType] = Field(default_factory=lambda: list(DEFAULT_OPERATIONS))
    validation_error: bool = Field(True, alias="validationError")
    operation_error: bool = Field(False, alias="operationError")
    strict_validation: bool = Field(False, alias="strictValidation")
    required_body: Union[str, Dict[str, Any], None] = Field(None, alias="requiredBody")
    schema_path: str | None = Field(None, alias="schemaPath")
    get_object: bool = Field(False, alias="getObject")
    is_json: bool = Field(False, alias="isJSON")
    is_csv: bool = Field(False, alias="isCSV")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "operations": ["create", "update"],
                "requiredBody": "v1-item",
                "schemaPath": "openapi.yml",
                "validationError": False
            }
        }

    @model_validator(mode="after")
    def check_option_combinations(self):
        """Reject option combinations that cannot work together."""
        if isinstance(self.required_body, str) and not self.schema_path:
            raise ValueError("Must provide schema_path if using required_body as a reference")
        if self.is_json and not self.get_object:
            raise ValueError("Must enable get_object if expecting JSON from the stored object")
        if self.is_csv and not self.get_object:
            raise ValueError("Must enable get_object if expecting CSV from the stored object")
        if self.is_json and self.is_csv:
            raise ValueError("is_json and is_csv are mutually exclusive")
        return self

    @property
    def needs_full_mode(self) -> bool:
        """True when validation or enrichment is configured."""
        return self.required_body is not None or self.get_object

    @classmethod
    def from_options(cls, options: Dict[str, Any] | None = None, **kwargs) -> "EventConfig":
        """
        Build a config, surfacing bad combinations as ConfigurationError.

        Args:
            options: Mapping of option names (snake_case or camelCase)
            **kwargs: Additional options, overriding those in the mapping

        Raises:
            ConfigurationError: If the options are invalid or inconsistent
        """
        merged = {**(options or {}), **kwargs}
        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e
