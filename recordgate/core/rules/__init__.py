"""
Validation orchestration and requirement configuration.
"""

from .requirement_config import RequirementConfigLoader, RequirementsBuilder, route_key
from .validator import Pairing, RequirementKind, Validator

__all__ = [
    "Validator",
    "RequirementKind",
    "Pairing",
    "RequirementConfigLoader",
    "RequirementsBuilder",
    "route_key",
]
