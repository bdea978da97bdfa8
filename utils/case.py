"""
Key normalization for raw request maps.
Clients may send camelCase (fullName, proposedLoan); validation works on snake_case only.
Uses Pydantic's alias_generators for consistency with schema aliases.
"""
from typing import Any

from pydantic.alias_generators import to_snake


def to_snake_key(s: str) -> str:
    """Convert a single camelCase key to snake_case."""
    return to_snake(s)


def dict_keys_to_snake(obj: Any) -> Any:
    """Recursively convert dict keys from camelCase to snake_case for input normalization."""
    if isinstance(obj, dict):
        return {to_snake_key(k): dict_keys_to_snake(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [dict_keys_to_snake(x) for x in obj]
    return obj
