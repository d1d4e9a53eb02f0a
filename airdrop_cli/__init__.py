"""
Airdrop CLI

Command-line interface for building and checking Merkle airdrop distributions.

Usage:
    python -m airdrop_cli build allocations.csv --out merkle.json
    python -m airdrop_cli root merkle.json
    python -m airdrop_cli proof merkle.json 0x1111111111111111111111111111111111111111
    python -m airdrop_cli verify merkle.json 0x1111111111111111111111111111111111111111 1000
    python -m airdrop_cli config --init
"""

__version__ = "0.1.0"
