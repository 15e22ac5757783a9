"""
Small helpers shared by the KVP builders and the parsers.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, MutableMapping, Optional, Union

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

_DATETIME = TypeAdapter(datetime)


def object_to_kvp(params: Optional[Mapping[str, Any]]) -> str:
    """
    Serialize a flat mapping to a KVP encoded string.

    Keys and values are written verbatim, in the mapping's iteration order.

    Args:
        params: Mapping of parameter names to values

    Returns:
        The ``key=value`` pairs joined with ``&``
    """
    if not params:
        return ""
    return "&".join(f"{key}={value}" for key, value in params.items())


def string_to_int_array(value: Optional[str], separator: Optional[str] = None) -> List[int]:
    """Split a string and parse the parts as integers, skipping unparsable parts."""
    result: List[int] = []
    for part in _split(value, separator):
        try:
            result.append(int(part))
        except ValueError:
            logger.debug("Skipping non-integer value '%s'", part)
    return result


def string_to_float_array(value: Optional[str], separator: Optional[str] = None) -> List[float]:
    """Split a string and parse the parts as floats, skipping unparsable parts."""
    result: List[float] = []
    for part in _split(value, separator):
        try:
            result.append(float(part))
        except ValueError:
            logger.debug("Skipping non-numeric value '%s'", part)
    return result


def _split(value: Optional[str], separator: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part for part in value.split(separator) if part.strip()]


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse an integer, returning ``None`` for missing or malformed input."""
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        logger.debug("Failed to parse integer '%s'", value)
        return None


def parse_number(value: Optional[str]) -> Optional[Union[int, float]]:
    """Parse an integer when possible, a float otherwise."""
    if not value:
        return None
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        logger.debug("Failed to parse number '%s'", value)
        return None


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as used by GML time positions."""
    if not value:
        return None
    try:
        return _DATETIME.validate_python(value.strip())
    except ValidationError:
        logger.debug("Failed to parse datetime '%s'", value)
        return None


def format_datetime(value: Union[datetime, str]) -> str:
    """Render a timestamp for a KVP subset, using ``Z`` for UTC."""
    if isinstance(value, str):
        return value
    if value.tzinfo is not None and value.utcoffset() == timezone.utc.utcoffset(None):
        return value.replace(tzinfo=None).isoformat() + "Z"
    return value.isoformat()


def deep_merge(target: MutableMapping[str, Any], other: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """
    Recursively merge ``other`` into ``target``.

    Where both sides hold a mapping for a key, the mappings are merged;
    any other value in ``other`` replaces the value in ``target``.
    Mappings taken over from ``other`` are copied, so later merges never
    write into the caller's data.

    Args:
        target: The mapping the other one will be merged into
        other: The mapping that will be merged into the target

    Returns:
        ``target``, for convenience
    """
    for key, value in other.items():
        current = target.get(key)
        if isinstance(current, MutableMapping) and isinstance(value, Mapping):
            deep_merge(current, value)
        elif isinstance(value, Mapping):
            target[key] = deep_merge({}, value)
        else:
            target[key] = value
    return target

