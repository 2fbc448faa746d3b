"""
$ref dereferencing for OpenAPI and JSON Schema documents.

Internal pointers ("#/components/schemas/item") and relative file
references ("common.yml#/components/schemas/address") are replaced by
jsonref with the data they point at. Repeated references share one object
and circular references become cyclic structures.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

import jsonref
import yaml

from recordgate.core.errors import SchemaReferenceError


def load_local_document(uri: str) -> Any:
    """
    jsonref loader for YAML or JSON files on the local filesystem.

    Accepts file: URIs and plain relative paths (references from a document
    that was not read from a file).

    Raises:
        ValueError: For remote (http/https) references
    """
    parsed = urlparse(uri)
    if parsed.scheme in ("http", "https"):
        raise ValueError(f"remote references are not supported: {uri}")
    path = url2pathname(parsed.path) if parsed.scheme == "file" else uri
    with open(path) as f:
        return yaml.safe_load(f)


class Dereferencer:
    """
    Replaces every $ref in a document with the schema fragment it points to.

    Sibling keywords next to a $ref are laid over a copy of the target.
    """

    def __init__(self, base_path: str | Path | None = None):
        """
        Args:
            base_path: File the root document was read from; relative file
                references resolve against its directory (cwd when None)
        """
        self.base_uri = Path(base_path).resolve().as_uri() if base_path else ""

    def dereference(self, document: Any) -> Any:
        """
        Produce a fully dereferenced copy of the document.

        Raises:
            SchemaReferenceError: If a reference cannot be loaded or resolved
        """
        try:
            return jsonref.replace_refs(
                document,
                base_uri=self.base_uri,
                loader=load_local_document,
                merge_props=True,
                proxies=False,
                lazy_load=False,
            )
        except jsonref.JsonRefError as e:
            ref = e.reference.get("$ref", "") if isinstance(e.reference, Mapping) else str(e.reference)
            raise SchemaReferenceError(ref, e.message) from e


def dereference(document: Any, base_path: str | Path | None = None) -> Any:
    return Dereferencer(base_path).dereference(document)
