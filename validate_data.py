#!/usr/bin/env python3
"""Validate stored myGaadi data files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import ValidationError

from gaadi import keys
from gaadi.records import load_schema, validate_payload


def validate_data_file(filepath: Path, key: str) -> list[str]:
    """Validate a single stored key file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate_payload(key, data)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def main(argv=None):
    """Validate every stored key file in the data directory."""
    argv = sys.argv[1:] if argv is None else argv
    data_dir = Path(argv[0]) if argv else Path("data")

    if not data_dir.exists():
        print(f"Error: data directory not found: {data_dir}")
        return 1

    known = set(load_schema()["properties"])
    files = [data_dir / f"{key}.yaml" for key in keys.DURABLE if key in known]
    files = [f for f in files if f.exists()]

    if not files:
        print(f"Warning: No data files found in {data_dir}")
        return 0

    all_valid = True
    for filepath in files:
        errors = validate_data_file(filepath, filepath.stem)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
