"""Shared utilities for the backend."""
from utils.case import dict_keys_to_snake, to_snake_key

__all__ = [
    "to_snake_key",
    "dict_keys_to_snake",
]
