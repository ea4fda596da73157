"""
Superstore Dataset Generator
Writes a synthetic Superstore-shaped CSV for demos and local runs.
"""

import argparse
from pathlib import Path

from superstore_analytics.data.generators import write_superstore_csv

OUTPUT_PATH = Path(__file__).parent.parent / "data" / "superstore.csv"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic Superstore CSV")
    parser.add_argument("--rows", type=int, default=9994, help="Number of order lines (default: 9994)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--output", default=str(OUTPUT_PATH), help=f"CSV path (default: {OUTPUT_PATH})")
    parser.add_argument("--with-names", action="store_true", help="Include a Customer Name column")
    args = parser.parse_args()

    print("=" * 60)
    print("Superstore Dataset Generator")
    print("=" * 60 + "\n")

    path = write_superstore_csv(args.output, n=args.rows, seed=args.seed, with_customer_names=args.with_names)

    size = path.stat().st_size / 1024 / 1024
    print(f"   {path.name}: {args.rows:,} rows ({size:.2f} MB)")
    print(f"\nOutput: {path}\n")


if __name__ == "__main__":
    main()
