"""
CLI Build Command

Build a campaign distribution from an allocation file.

Usage:
    airdrop build allocations.csv --out merkle.json [--claims-csv claims.csv]
        [--campaign-id ID] [--encoding text|packed] [--hash sha256|keccak256]
        [--domain-separation] [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from airdrop_cli.output import file_not_found, report_error
from core.allocation import load_allocations
from core.config import RuntimeConfig
from core.crypto.hashing import HashAlgorithm, TreeHasher
from core.distribution import build_distribution, save_claims_csv, save_distribution
from core.schemas.errors import InvalidInputError


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class BuildSummary:
    """Summary of a distribution build for CLI output."""
    campaign_id: str = ""
    input_path: str = ""
    output_path: str = ""
    claims_csv: str | None = None
    merkle_root: str = ""
    leaf_count: int = 0
    depth: int = 0
    token_total: str = "0"
    hash_algorithm: str = ""
    leaf_encoding: str = ""
    domain_separated: bool = False

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["claims_csv"] is None:
            del d["claims_csv"]
        return d


def resolve_hasher(args: Namespace, config: RuntimeConfig) -> TreeHasher:
    """Command-line flags win over configuration."""
    algorithm = args.hash or config.merkle.hash_algorithm
    domain_separated = config.merkle.domain_separation
    if args.domain_separation is not None:
        domain_separated = args.domain_separation
    return TreeHasher(algorithm=HashAlgorithm(algorithm), domain_separated=domain_separated)


def print_summary_human(summary: BuildSummary) -> None:
    print(f"campaign: {summary.campaign_id}")
    print(f"merkle_root: {summary.merkle_root}")
    print(f"leaves: {summary.leaf_count} (depth {summary.depth})")
    print(f"token_total: {summary.token_total}")
    print(f"hashing: {summary.hash_algorithm}, encoding: {summary.leaf_encoding}, "
          f"domain_separated: {str(summary.domain_separated).lower()}")
    print(f"wrote: {summary.output_path}")
    if summary.claims_csv:
        print(f"wrote: {summary.claims_csv}")


def build_cmd(args: Namespace) -> int:
    """Handle the build command."""
    config: RuntimeConfig = args.runtime_config
    input_path = Path(args.input)

    try:
        hasher = resolve_hasher(args, config)
        encoding = args.encoding or config.merkle.leaf_encoding
        campaign_id = args.campaign_id or input_path.stem

        allocations = load_allocations(input_path)
        distribution, tree = build_distribution(
            campaign_id,
            allocations,
            encoding=encoding,
            hasher=hasher,
        )
    except FileNotFoundError as e:
        report_error(file_not_found(e), as_json=args.json)
        return EXIT_RUNTIME_ERROR
    except InvalidInputError as e:
        report_error(e, as_json=args.json)
        return EXIT_RUNTIME_ERROR

    out_path = save_distribution(distribution, args.out)
    claims_path = save_claims_csv(distribution, args.claims_csv) if args.claims_csv else None

    summary = BuildSummary(
        campaign_id=distribution.campaign_id,
        input_path=str(input_path),
        output_path=str(out_path),
        claims_csv=str(claims_path) if claims_path else None,
        merkle_root=distribution.merkle_root,
        leaf_count=distribution.leaf_count,
        depth=tree.depth,
        token_total=distribution.token_total,
        hash_algorithm=distribution.hash_algorithm.value,
        leaf_encoding=distribution.leaf_encoding.value,
        domain_separated=distribution.domain_separated,
    )

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS
