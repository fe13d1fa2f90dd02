#!/usr/bin/env python3
import sys

from hash_utils import ALGORITHMS, UnavailableCryptoPrimitive, hash_lines
from export_utils import batch_to_csv, batch_to_json

FORMATS = {
    "csv": batch_to_csv,
    "json": batch_to_json,
}

def load_lines(filename):
    """Read the whole input file, dropping a BOM; blank lines are dropped by hash_lines."""
    with open(filename, "r", encoding="utf-8-sig", errors="replace") as f:
        return f.read()

def main():
    if len(sys.argv) not in (3, 4):
        print(f"Usage: {sys.argv[0]} <{'|'.join(ALGORITHMS)}> <input.txt> [csv|json]")
        sys.exit(1)

    algorithm = sys.argv[1].lower()
    input_file = sys.argv[2]
    fmt = sys.argv[3].lower() if len(sys.argv) == 4 else "csv"

    if algorithm not in ALGORITHMS:
        print(f"Unknown algorithm '{algorithm}'. Choose one of: {', '.join(ALGORITHMS)}")
        sys.exit(1)
    if fmt not in FORMATS:
        print(f"Unknown format '{fmt}'. Choose csv or json.")
        sys.exit(1)

    try:
        results = hash_lines(load_lines(input_file), algorithm)
    except UnavailableCryptoPrimitive as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(FORMATS[fmt](results))
    print(f"Processed {len(results)} lines.", file=sys.stderr)

if __name__ == "__main__":
    main()
