from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Bootstraps logging, merges CLI overrides into the default configuration,
runs the archive load and renders the outcome.
"""

import json
import os
import sys
from typing import List, Optional

from rdatree.core.loader.engine import run_load
from rdatree.core.loader.validator import validate_config
from rdatree.core.tree.tree_renderer import render_node
from rdatree.domain.config import get_default_config
from rdatree.domain.load_models import LoadResult
from rdatree.infra.logging import LoggingConfig, configure_logging, get_logger
from rdatree.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 on load failure, 2 for a missing input,
             130 when interrupted.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    configure_logging(LoggingConfig.for_cli(args.debug, args.log_file))

    raw_conf = get_default_config()
    raw_conf.update(cli_args.args_to_overrides(args))
    try:
        clean_conf, warnings = validate_config(raw_conf, strict=True)
    except (TypeError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    for w in warnings:
        logger.debug(f"Configuration: {w}")

    if not os.path.isfile(args.archive):
        msg = f"Archive not found: {args.archive}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    try:
        result = run_load(args.archive, clean_conf)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130

    if args.json_output:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return 0 if result.ok else 1

    if not result.ok:
        print(f"ERROR: {result.error_kind}: {result.error}", file=sys.stderr)
        return 1

    if args.lookup_path is not None:
        return _print_lookup(result, args.lookup_path)

    print(result.tree.display())
    return 0

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _print_lookup(result: LoadResult, lookup_path: str) -> int:
    """Print one entry of the loaded tree, or report that it is missing."""
    node = result.tree.lookup(cli_args.split_lookup_path(lookup_path))
    if node is None:
        print(f"ERROR: No entry at '{lookup_path}'", file=sys.stderr)
        return 1
    print(render_node(node))
    return 0
