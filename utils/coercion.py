# utils/coercion.py

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def to_float(value: Any, default: float = 0.0) -> float:
    """
    Coerce a document value to float. None and "" become `default`;
    anything else that doesn't parse raises ValueError.
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    return float(value)


def to_optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return to_float(value)


def to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValueError(f"Expected an integer, got {value!r}")
    if isinstance(value, float):
        return int(value)
    return int(str(value).strip())


def to_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return to_int(value)


def to_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "on")
    return bool(value)


def to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def to_mapping(value: Any) -> Dict[str, Any]:
    """Nested document object; None and "" become {}."""
    if value is None or value == "":
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Expected an object, got {value!r}")
    return value


def to_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"Expected a list, got {value!r}")
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or pass through a datetime) into an aware
    datetime. Naive values are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
