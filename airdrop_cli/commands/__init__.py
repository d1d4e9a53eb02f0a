"""
CLI command modules.
"""

from airdrop_cli.commands import build, claims, sample

__all__ = ["build", "claims", "sample"]
