"""Utilities for handling YAML parsing quirks."""

from typing import Any, Dict, TypeVar

V = TypeVar("V")


def normalize_yaml_dict_keys(data: Dict[Any, V]) -> Dict[str, V]:
    """Return a copy of ``data`` with every key as a string.

    YAML 1.1 turns keys such as ``yes``/``no``/``on``/``off`` into booleans
    and bare numbers into ints. Configuration keys are names, so they are
    converted back to strings ("True"/"False" for booleans).

    Examples:
        >>> normalize_yaml_dict_keys({True: 1, 3: 2, "seed": 3})
        {'True': 1, '3': 2, 'seed': 3}
    """
    return {str(key): value for key, value in data.items()}
