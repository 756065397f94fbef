from __future__ import annotations

"""
Configuration Validation Service.

Ensures the loader configuration dictionary conforms to the expected
schema. Handles type coercion and default value injection so the chain
walker can read values without further checks.
"""

import logging
from typing import Any, Dict, List, Tuple

from rdatree.domain.config import get_default_config

logger = logging.getLogger(__name__)

_INT_FIELDS = ["encryption_seed", "max_workers"]
_BOOL_FIELDS = ["strict_chain"]
_STR_FIELDS = ["root_name"]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a loader configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raise on invalid values instead of falling back.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized configuration and warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    unknown = sorted(k for k in config if k not in defaults)
    if unknown:
        warnings.append(f"Ignoring unknown config keys: {', '.join(unknown)}.")

    for field in _INT_FIELDS:
        merged[field] = _as_int(merged.get(field), defaults[field], field, warnings, strict)
    for field in _BOOL_FIELDS:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)
    for field in _STR_FIELDS:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    # Domain ranges
    if merged["max_workers"] < 0:
        _reject(f"Field 'max_workers' must be >= 0, received {merged['max_workers']}.", warnings, strict)
        merged["max_workers"] = defaults["max_workers"]
    if not 0 <= merged["encryption_seed"] <= 0xFFFFFFFF:
        _reject("Field 'encryption_seed' must fit in 32 bits.", warnings, strict)
        merged["encryption_seed"] = defaults["encryption_seed"]

    return merged, warnings

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _reject(msg: str, warnings: List[str], strict: bool) -> None:
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Accept ints and decimal/hex strings ('0x71C71C71')."""
    if value is None:
        return fallback
    if isinstance(value, bool):
        _reject(f"Invalid field '{field}': expected int, received bool.", warnings, strict)
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            converted = int(value.strip(), 0)
        except ValueError:
            _reject(f"Invalid field '{field}': '{value}' is not an integer.", warnings, strict)
            return fallback
        warnings.append(f"Field '{field}' converted from '{value}' to {converted}.")
        return converted

    msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback
