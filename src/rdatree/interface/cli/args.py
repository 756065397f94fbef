from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
loader configuration overrides.
"""

import argparse
from typing import Any, Dict, List

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the rdatree CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="rdatree",
        description="Load a resource archive (RDA V2.2) and print its file tree.",
    )

    p.add_argument(
        "archive",
        help="Path to the archive file.",
    )

    # --- Queries ---
    p.add_argument(
        "--lookup",
        dest="lookup_path",
        default=None,
        help="Print a single entry, given as a slash-delimited path.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print a JSON summary of the load instead of the tree.",
    )

    # --- Loader configuration ---
    p.add_argument(
        "--workers",
        dest="max_workers",
        type=int,
        default=None,
        help="Payload decoding threads (0 or 1 decodes inline).",
    )
    p.add_argument(
        "--seed",
        dest="encryption_seed",
        default=None,
        help="Cipher seed, decimal or 0x-prefixed hex.",
    )
    p.add_argument(
        "--strict-chain",
        action="store_true",
        help="Fail on block chain cycles or out-of-range pointers instead of stopping.",
    )

    # --- Diagnostics ---
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this rotating file.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a loader configuration dictionary.

    Only options given on the command line are included.
    """
    overrides: Dict[str, Any] = {}

    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers
    if args.encryption_seed is not None:
        overrides["encryption_seed"] = args.encryption_seed
    if args.strict_chain:
        overrides["strict_chain"] = True

    return overrides


def split_lookup_path(value: str) -> List[str]:
    """Split a slash-delimited path into non-empty components."""
    return [part for part in value.replace("\\", "/").split("/") if part]
