"""
Requirement configuration management.

Loads per-route validation requirements from YAML files and provides a
builder for assembling them in code.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from recordgate.core.errors import ConfigurationError
from recordgate.core.models import ValidationRequirements
from recordgate.core.schema import normalize_route


def route_key(method: str, route: str) -> str:
    """Canonical lookup key, e.g. "get /items"."""
    return f"{method.lower()} {normalize_route(route)}"


class RequirementConfigLoader:
    """
    Loads validation requirements from YAML configuration files.

    Expected YAML format:
    ```yaml
    routes:
      GET /items:
        requiredHeaders: [x-api-key]
        requiredQuery: [unit_id]

      POST /items:
        requiredBody: v1-create-item
        response: v1-item
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the requirement config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Requirement configuration file not found: {config_path}")

    def load(self) -> dict[str, ValidationRequirements]:
        """
        Load and parse requirements keyed by route_key().

        Raises:
            ConfigurationError: If the YAML is missing sections or declares bad requirements
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if not config or "routes" not in config:
            raise ConfigurationError("Configuration file must contain 'routes' section")

        requirements = {}
        for route, definition in config["routes"].items():
            method, _, path = str(route).partition(" ")
            if not path:
                raise ConfigurationError(f"Route '{route}' must look like 'METHOD /path'")
            requirements[route_key(method, path.strip())] = self._parse(route, definition)
        return requirements

    def _parse(self, route: str, definition: Any) -> ValidationRequirements:
        if not isinstance(definition, dict):
            raise ConfigurationError(f"Requirements for route '{route}' must be a mapping")
        try:
            return ValidationRequirements.model_validate(definition)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid requirements for route '{route}': {e}") from e


class RequirementsBuilder:
    """
    Programmatically build a requirement bundle (for testing or dynamic routes).
    """

    def __init__(self):
        self.values: dict[str, Any] = {}

    def require_headers(self, *names: str) -> "RequirementsBuilder":
        self.values["required_headers"] = [*self.values.get("required_headers", []), *names]
        return self

    def allow_headers(self, *names: str) -> "RequirementsBuilder":
        self.values["available_headers"] = [*self.values.get("available_headers", []), *names]
        return self

    def require_query(self, *names: str) -> "RequirementsBuilder":
        self.values["required_query"] = [*self.values.get("required_query", []), *names]
        return self

    def allow_query(self, *names: str) -> "RequirementsBuilder":
        self.values["available_query"] = [*self.values.get("available_query", []), *names]
        return self

    def require_body(self, schema: str | dict) -> "RequirementsBuilder":
        self.values["required_body"] = schema
        return self

    def expect_response(self, schema: str | dict) -> "RequirementsBuilder":
        self.values["response"] = schema
        return self

    def build(self) -> ValidationRequirements:
        """Build and return the requirement bundle."""
        return ValidationRequirements(**self.values)
