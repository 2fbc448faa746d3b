"""
Schema loading, dereferencing, allOf flattening and compilation.
"""

from .dereference import Dereferencer, dereference, load_local_document
from .merge import AllOfMerger, expand_nullable, merge_all_of
from .openapi import OperationValidator, coerce_parameter
from .store import SchemaStore, error_instance_path, normalize_route

__all__ = [
    "Dereferencer",
    "dereference",
    "load_local_document",
    "AllOfMerger",
    "merge_all_of",
    "expand_nullable",
    "OperationValidator",
    "coerce_parameter",
    "SchemaStore",
    "error_instance_path",
    "normalize_route",
]
