"""
Tool argument handling: schema defaults and validation.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

from jsonschema import Draft7Validator

from .errors import ToolError

JSON = Dict[str, Any]


def apply_defaults(schema: JSON, value: Any) -> Any:
    """
    Return a copy of ``value`` with schema defaults filled in.

    Walks object ``properties`` and array ``items`` recursively. Absent
    properties with a ``default`` get a deep copy of it; present values are
    never overwritten.
    """
    if isinstance(value, dict) and schema.get("type") == "object":
        out = dict(value)
        for key, prop in (schema.get("properties") or {}).items():
            if key not in out and "default" in prop:
                out[key] = copy.deepcopy(prop["default"])
            if key in out:
                out[key] = apply_defaults(prop, out[key])
        return out
    if isinstance(value, list) and isinstance(schema.get("items"), dict):
        return [apply_defaults(schema["items"], item) for item in value]
    return value


def validate_arguments(tool_name: str, schema: JSON, arguments: JSON) -> JSON:
    """
    Fill defaults then validate; raises ToolError(invalid_params) listing every violation.
    """
    args = apply_defaults(schema, arguments or {})
    validator = Draft7Validator(schema)
    problems = []
    for err in sorted(validator.iter_errors(args), key=lambda e: list(e.absolute_path)):
        where = "/".join(str(p) for p in err.absolute_path) or "<root>"
        problems.append(f"{where}: {err.message}")
    if problems:
        raise ToolError(
            f"Invalid arguments for {tool_name}: " + "; ".join(problems),
            code="invalid_params",
            data={"problems": problems},
        )
    return args
