"""
allOf flattening for dereferenced JSON Schemas.

Every allOf composition, at any depth, is folded into the schema that
declares it. Precedence when keywords collide:

- properties / patternProperties / $defs: union, shared names merged recursively
- required: union, first-seen order
- type / enum: intersection (integer satisfies number); empty -> SchemaMergeError
- lower bounds take the maximum, upper bounds the minimum
- pattern: both patterns must match (lookahead conjunction)
- anyOf / oneOf: cross product of the branches
- not: negation of either
- additionalProperties: False wins, schemas merge, True yields
- annotations and any other keyword: the declaring schema first, then
  allOf branches in order; the first value wins

OpenAPI's "nullable: true" is expanded into a "null" type by expand_nullable().
"""

import math
from typing import Any

from recordgate.core.errors import SchemaMergeError

_LOWER_BOUNDS = {"minimum", "exclusiveMinimum", "minLength", "minItems", "minProperties", "minContains"}
_UPPER_BOUNDS = {"maximum", "exclusiveMaximum", "maxLength", "maxItems", "maxProperties", "maxContains"}
_SCHEMA_MAPS = {"properties", "patternProperties", "$defs", "definitions", "dependentSchemas"}
_SUBSCHEMAS = {"items", "contains", "propertyNames", "unevaluatedProperties"}
_ANY_TRUE = {"uniqueItems", "readOnly", "writeOnly", "deprecated"}


class AllOfMerger:
    """
    Folds allOf compositions into flat schemas.

    Works on cyclic (self-referencing) schemas: each input node is flattened
    once and later encounters reuse the result.
    """

    def __init__(self):
        self._memo: dict[int, Any] = {}

    def flatten(self, node: Any) -> Any:
        """
        Return a copy of node with every allOf merged away.

        Args:
            node: Schema (or any JSON value inside one)

        Returns:
            Flattened copy; the input is not modified
        """
        if isinstance(node, list):
            return [self.flatten(item) for item in node]
        if not isinstance(node, dict):
            return node
        if id(node) in self._memo:
            return self._memo[id(node)]

        result: dict = {}
        self._memo[id(node)] = result

        flattened = {key: self.flatten(value) for key, value in node.items()}
        branches = flattened.pop("allOf", None)
        if isinstance(branches, list):
            for branch in branches:
                if isinstance(branch, dict):
                    flattened = self.combine(flattened, branch)

        result.update(flattened)
        return result

    def combine(self, first: dict, second: dict) -> dict:
        """
        Merge two already-flat schemas; first takes precedence for annotations.
        """
        merged = dict(first)
        for keyword, value in second.items():
            if keyword not in merged:
                merged[keyword] = value
                continue
            merged[keyword] = self._combine_keyword(keyword, merged[keyword], value)
        return merged

    def _combine_keyword(self, keyword: str, current: Any, incoming: Any) -> Any:
        if keyword in _SCHEMA_MAPS and isinstance(current, dict) and isinstance(incoming, dict):
            combined = dict(current)
            for name, schema in incoming.items():
                if name in combined and isinstance(combined[name], dict) and isinstance(schema, dict):
                    combined[name] = self.combine(combined[name], schema)
                elif name not in combined:
                    combined[name] = schema
            return combined

        if keyword == "required":
            return list(dict.fromkeys([*current, *incoming]))

        if keyword == "type":
            return _intersect_types(current, incoming)

        if keyword == "enum":
            values = [value for value in current if value in incoming]
            if not values:
                raise SchemaMergeError(keyword, [current, incoming])
            return values

        if keyword == "const":
            if current != incoming:
                raise SchemaMergeError(keyword, [current, incoming])
            return current

        if keyword in _LOWER_BOUNDS:
            return max(current, incoming)

        if keyword in _UPPER_BOUNDS:
            return min(current, incoming)

        if keyword in _ANY_TRUE:
            return bool(current or incoming)

        if keyword == "nullable":
            return bool(current and incoming)

        if keyword == "multipleOf":
            if isinstance(current, int) and isinstance(incoming, int):
                return current * incoming // math.gcd(current, incoming)
            if current != incoming:
                raise SchemaMergeError(keyword, [current, incoming])
            return current

        if keyword == "pattern":
            if current == incoming:
                return current
            return f"^(?=.*?(?:{current}))(?=.*?(?:{incoming}))"

        if keyword in ("anyOf", "oneOf"):
            return [
                self.combine(left, right) if isinstance(left, dict) and isinstance(right, dict) else left
                for left in current
                for right in incoming
            ]

        if keyword == "not":
            return {"anyOf": [current, incoming]}

        if keyword == "additionalProperties":
            if current is False or incoming is False:
                return False
            if isinstance(current, dict) and isinstance(incoming, dict):
                return self.combine(current, incoming)
            return incoming if current is True else current

        if keyword in _SUBSCHEMAS and isinstance(current, dict) and isinstance(incoming, dict):
            return self.combine(current, incoming)

        if keyword == "format" and current != incoming:
            raise SchemaMergeError(keyword, [current, incoming])

        # Annotations and everything else: first declaration wins
        return current


def _intersect_types(current: Any, incoming: Any) -> Any:
    left = current if isinstance(current, list) else [current]
    right = incoming if isinstance(incoming, list) else [incoming]

    types = []
    for name in left:
        if name in right:
            types.append(name)
        elif name == "integer" and "number" in right:
            types.append("integer")
        elif name == "number" and "integer" in right:
            types.append("integer")
    types = list(dict.fromkeys(types))

    if not types:
        raise SchemaMergeError("type", [current, incoming])
    return types[0] if len(types) == 1 else types


def merge_all_of(schema: Any) -> Any:
    """Flatten every allOf in schema (see module docstring for precedence)."""
    return AllOfMerger().flatten(schema)


def expand_nullable(schema: Any, _memo: dict | None = None) -> Any:
    """
    Rewrite OpenAPI "nullable: true" into a JSON Schema "null" type.

    Returns a copy; cyclic schemas are handled.
    """
    memo = {} if _memo is None else _memo
    if isinstance(schema, list):
        return [expand_nullable(item, memo) for item in schema]
    if not isinstance(schema, dict):
        return schema
    if id(schema) in memo:
        return memo[id(schema)]

    result: dict = {}
    memo[id(schema)] = result
    result.update({key: expand_nullable(value, memo) for key, value in schema.items()})

    if result.get("nullable") is True:
        del result["nullable"]
        declared = result.get("type")
        if isinstance(declared, str) and declared != "null":
            result["type"] = [declared, "null"]
        elif isinstance(declared, list) and "null" not in declared:
            result["type"] = [*declared, "null"]
        if isinstance(result.get("enum"), list) and None not in result["enum"]:
            result["enum"] = [*result["enum"], None]
    return result
