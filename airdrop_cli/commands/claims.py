"""
CLI Claim Commands

Read-only commands against a distribution file.

Usage:
    airdrop root merkle.json [--json]
    airdrop proof merkle.json RECIPIENT [--json]
    airdrop verify merkle.json RECIPIENT AMOUNT [--proof proof.json] [--json]
    airdrop verify merkle.json --all [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path
from typing import Any

from airdrop_cli.output import file_not_found, report_error, usage_error
from core.distribution import (
    Distribution,
    audit_distribution,
    load_distribution,
    verify_claim,
)
from core.schemas.errors import AirdropError, DistributionFormatError, ErrorCodes


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def _load(path: str, as_json: bool) -> Distribution | None:
    try:
        return load_distribution(path)
    except FileNotFoundError as e:
        report_error(file_not_found(e), as_json=as_json)
    except DistributionFormatError as e:
        report_error(e, as_json=as_json)
    return None


def root_cmd(args: Namespace) -> int:
    """Print the published root of a distribution."""
    distribution = _load(args.distribution, args.json)
    if distribution is None:
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps({
            "campaign_id": distribution.campaign_id,
            "merkle_root": distribution.merkle_root,
            "leaf_count": distribution.leaf_count,
            "token_total": distribution.token_total,
        }, indent=2))
    else:
        print(distribution.merkle_root)
    return EXIT_SUCCESS


def proof_cmd(args: Namespace) -> int:
    """Print the claim (index, amount, proof) for one recipient."""
    distribution = _load(args.distribution, args.json)
    if distribution is None:
        return EXIT_RUNTIME_ERROR

    claim = distribution.get_claim(args.recipient)
    if claim is None:
        report_error(
            AirdropError(
                code=ErrorCodes.RECIPIENT_NOT_FOUND,
                message=f"recipient not found in distribution: {args.recipient}",
                details={"recipient": args.recipient, "campaign_id": distribution.campaign_id},
            ),
            as_json=args.json,
        )
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps(claim.model_dump(mode="json"), indent=2))
    else:
        print(f"recipient: {claim.recipient}")
        print(f"index: {claim.index}")
        print(f"amount: {claim.amount}")
        print(f"leaf: {claim.leaf}")
        print(f"proof ({len(claim.proof)}):")
        for entry in claim.proof:
            print(f"  {entry.position:<5} {entry.hash}")
    return EXIT_SUCCESS


def _load_proof_file(path: str) -> list[dict[str, Any]]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    # Accept either a bare proof list or a full claim object
    if isinstance(data, dict):
        data = data.get("proof", [])
    if not isinstance(data, list):
        raise ValueError("Proof file must hold a list of proof steps")
    return data


def verify_cmd(args: Namespace) -> int:
    """Verify one claim, or every claim with --all."""
    distribution = _load(args.distribution, args.json)
    if distribution is None:
        return EXIT_RUNTIME_ERROR

    if args.all:
        failed = audit_distribution(distribution)
        if args.json:
            print(json.dumps({"valid": not failed, "failed": failed}, indent=2))
        else:
            print(f"claims checked: {len(distribution.claims)}")
            print(f"valid: {str(not failed).lower()}")
            for recipient in failed[:10]:
                print(f"  ✗ {recipient}")
        return EXIT_SUCCESS if not failed else EXIT_VERIFICATION_FAILED

    if args.recipient is None or args.amount is None:
        report_error(usage_error("verify needs RECIPIENT and AMOUNT (or --all)"), as_json=args.json)
        return EXIT_RUNTIME_ERROR

    proof = None
    if args.proof:
        try:
            proof = _load_proof_file(args.proof)
        except FileNotFoundError as e:
            report_error(file_not_found(e), as_json=args.json)
            return EXIT_RUNTIME_ERROR
        except (OSError, ValueError) as e:
            report_error(
                usage_error(f"cannot read proof file: {e}", path=args.proof),
                as_json=args.json,
            )
            return EXIT_RUNTIME_ERROR

    valid = verify_claim(distribution, args.recipient, args.amount, proof)
    logger.info(f"Claim for {args.recipient} in campaign {distribution.campaign_id}: valid={valid}")

    if args.json:
        print(json.dumps({
            "campaign_id": distribution.campaign_id,
            "recipient": args.recipient,
            "amount": args.amount,
            "valid": valid,
        }, indent=2))
    else:
        print(f"valid: {str(valid).lower()}")

    return EXIT_SUCCESS if valid else EXIT_VERIFICATION_FAILED
