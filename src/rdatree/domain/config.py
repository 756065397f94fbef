from __future__ import annotations

"""
Loader Configuration Domain.

Provides the default runtime configuration that drives archive loading.
Configuration is a plain dictionary so it can be merged with CLI overrides
and dumped as JSON without conversion.
"""

from typing import Any, Dict

from rdatree.domain.constants import DEFAULT_ENCRYPTION_SEED, DEFAULT_ROOT_NAME

DEFAULT_MAX_WORKERS = 4


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default loader configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Decoding
        "encryption_seed": DEFAULT_ENCRYPTION_SEED,
        "max_workers": DEFAULT_MAX_WORKERS,

        # Chain traversal
        "strict_chain": False,

        # Tree
        "root_name": DEFAULT_ROOT_NAME,
    }
