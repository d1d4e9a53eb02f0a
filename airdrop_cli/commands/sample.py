"""
CLI Sample Command

Write an example allocation CSV to start from.

Usage:
    airdrop sample [--out sample.csv]
"""

from __future__ import annotations

import csv
import sys
from argparse import Namespace
from pathlib import Path


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


SAMPLE_ROWS = [
    ("0x1111111111111111111111111111111111111111", "1000"),
    ("0x2222222222222222222222222222222222222222", "2500"),
    ("0x3333333333333333333333333333333333333333", "5000"),
]


def sample_cmd(args: Namespace) -> int:
    out_path = Path(args.out)
    if out_path.exists() and not args.force:
        print(f"Error: file already exists: {out_path} (use --force)", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["address", "amount"])
        writer.writerows(SAMPLE_ROWS)

    print(f"Sample CSV written to {out_path}")
    return EXIT_SUCCESS
