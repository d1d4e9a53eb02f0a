"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m airdrop_cli sample [--out sample.csv]
    python -m airdrop_cli build <allocations> [--out merkle.json] [--claims-csv PATH] [--json]
    python -m airdrop_cli root <distribution> [--json]
    python -m airdrop_cli proof <distribution> <recipient> [--json]
    python -m airdrop_cli verify <distribution> <recipient> <amount> [--proof PATH] [--json]
    python -m airdrop_cli verify <distribution> --all
    python -m airdrop_cli config --init

Environment Variables:
    AIRDROP_HASH_ALGORITHM      sha256 or keccak256 (default: sha256)
    AIRDROP_LEAF_ENCODING       text or packed (default: text)
    AIRDROP_DOMAIN_SEPARATION   Prefix leaves and nodes (default: false)
    AIRDROP_CACHE_MAX_CAMPAIGNS Campaign tree cache size (default: 128)
    AIRDROP_LOG_LEVEL           Log level (default: INFO)
    AIRDROP_LOG_FILE            Also log to this file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from airdrop_cli import __version__
from airdrop_cli.commands import build, claims, sample
from core.config import RuntimeConfig, get_default_config_template


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="airdrop",
        description="Airdrop Merkle CLI - Build distributions, print proofs, and verify claims.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./airdrop.yaml or ~/.config/airdrop/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on unexpected errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- sample command ---
    sample_parser = subparsers.add_parser(
        "sample",
        help="Write a sample allocation CSV",
    )
    sample_parser.add_argument(
        "--out", "-o",
        type=str,
        default="sample.csv",
        help="Output path (default: sample.csv)",
    )
    sample_parser.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite an existing file",
    )
    sample_parser.set_defaults(func=sample.sample_cmd)

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a distribution from an allocation file",
        description="Read a CSV or JSON allocation file, build the Merkle tree and write every claim with its proof.",
    )
    build_parser.add_argument(
        "input",
        type=str,
        help="Allocation file (.csv or .json)",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default="merkle.json",
        help="Output distribution file (default: merkle.json)",
    )
    build_parser.add_argument(
        "--claims-csv",
        type=str,
        default=None,
        help="Also write a flat claims CSV",
    )
    build_parser.add_argument(
        "--campaign-id",
        type=str,
        default=None,
        help="Campaign identifier (default: input file name)",
    )
    build_parser.add_argument(
        "--encoding",
        type=str,
        choices=["text", "packed"],
        default=None,
        help="Leaf encoding (default: from config)",
    )
    build_parser.add_argument(
        "--hash",
        type=str,
        choices=["sha256", "keccak256"],
        default=None,
        help="Hash algorithm (default: from config)",
    )
    build_parser.add_argument(
        "--domain-separation",
        dest="domain_separation",
        action="store_true",
        default=None,
        help="Prefix leaf and node hashes",
    )
    build_parser.add_argument(
        "--no-domain-separation",
        dest="domain_separation",
        action="store_false",
        help="Hash leaves and nodes without prefixes",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- root command ---
    root_parser = subparsers.add_parser(
        "root",
        help="Print the Merkle root of a distribution",
    )
    root_parser.add_argument("distribution", type=str, help="Distribution file")
    root_parser.add_argument("--json", action="store_true", help="JSON output")
    root_parser.set_defaults(func=claims.root_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Print the claim and proof for a recipient",
    )
    proof_parser.add_argument("distribution", type=str, help="Distribution file")
    proof_parser.add_argument("recipient", type=str, help="Recipient address or identifier")
    proof_parser.add_argument("--json", action="store_true", help="JSON output")
    proof_parser.set_defaults(func=claims.proof_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a claim against a distribution root",
        description="Recompute the leaf for RECIPIENT and AMOUNT and walk the proof up to the published root.",
    )
    verify_parser.add_argument("distribution", type=str, help="Distribution file")
    verify_parser.add_argument("recipient", type=str, nargs="?", default=None, help="Recipient")
    verify_parser.add_argument("amount", type=str, nargs="?", default=None, help="Claimed amount")
    verify_parser.add_argument(
        "--proof",
        type=str,
        default=None,
        help="JSON file with the proof to check (default: proof stored in the distribution)",
    )
    verify_parser.add_argument(
        "--all",
        action="store_true",
        default=False,
        help="Verify every claim in the distribution",
    )
    verify_parser.add_argument("--json", action="store_true", help="JSON output")
    verify_parser.set_defaults(func=claims.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="airdrop.yaml",
        help="Path for config file (default: airdrop.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (AIRDROP_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        config: RuntimeConfig = args.runtime_config
        print(json.dumps(config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: airdrop config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = RuntimeConfig.load(args.config)
    except (OSError, ValueError, TypeError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.logging.level
    try:
        setup_logging(level=log_level, log_file=config.logging.file)
    except OSError as e:
        print(f"Error: cannot open log file: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
