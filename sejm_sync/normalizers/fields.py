"""
Ordered-fallback field access for loosely-typed API payloads.

The API has renamed fields across versions (Polish and English names,
camelCase and snake_case). Normalizers resolve each column through an
explicit list of candidate names, first present value wins.
"""

from typing import Any, Dict, List, Optional


def pick(raw: Dict[str, Any], *names: str, default: Any = None) -> Any:
    """
    Return the first value among ``names`` that is neither missing, None
    nor an empty string.

    Example:
        >>> pick({"imie": "Jan"}, "firstName", "imie")
        'Jan'
    """
    for name in names:
        value = raw.get(name)
        if value is not None and value != "":
            return value
    return default


def as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "tak", "t")
    return bool(value)


def as_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def as_str_list(value: Any) -> List[str]:
    """Coerce a scalar, list or missing value to a list of strings."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and v != ""]
    return [str(value)]


def date_part(value: Any) -> Optional[str]:
    """First 10 characters of an ISO date/datetime string."""
    text = as_str(value)
    return text[:10] if text else None
