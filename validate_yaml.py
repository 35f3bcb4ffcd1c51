#!/usr/bin/env python3
"""Validate console collection YAML files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import Draft7Validator

from console_maint import calc_next_due, parse_date

SECTIONS = ("consoles", "accessories")


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def describe_location(data, path) -> str:
    """Human-readable location of a schema error, naming the item it is in."""
    path = list(path)
    if len(path) >= 2 and path[0] in SECTIONS and isinstance(path[1], int):
        section, index = path[0], path[1]
        item = data[section][index]
        label = f"{section}[{index}]"
        if isinstance(item, dict) and item.get("id") is not None:
            label += f" (id {item['id']})"
        elif isinstance(item, dict) and item.get("name") is not None:
            label += f" ({item['name']})"
        field = ".".join(str(p) for p in path[2:])
        return f"{label} {field}".rstrip()
    return ".".join(str(p) for p in path)


def check_collection(data: dict) -> list[str]:
    """Checks across items that the schema cannot express."""
    errors = []
    seen = {}
    console_ids = {c.get("id") for c in data.get("consoles") or []}

    for section in SECTIONS:
        for index, item in enumerate(data.get(section) or []):
            label = f"{section}[{index}] (id {item.get('id')})"

            if item["id"] in seen:
                errors.append(f"{label}: duplicate id, first used by {seen[item['id']]}")
            else:
                seen[item["id"]] = label

            if section == "accessories" and item.get("consoleId") not in (None, *console_ids):
                errors.append(f"{label}: consoleId {item['consoleId']} is not a known console")

            next_date = item.get("nextMaintenanceDate")
            try:
                expected = calc_next_due(
                    item.get("lastMaintenanceDate"), item.get("maintenanceIntervalMonths")
                )
                stale = expected is not None and (
                    next_date is None or parse_date(next_date) != parse_date(expected)
                )
            except ValueError as e:
                errors.append(f"{label}: {e}")
                continue
            if stale:
                errors.append(
                    f"{label}: nextMaintenanceDate is {next_date}, "
                    f"expected {expected}"
                )
    return errors


def validate_collection_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single collection YAML file. Returns list of errors."""
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    schema_errors = sorted(
        Draft7Validator(schema).iter_errors(data),
        key=lambda e: [str(p) for p in e.absolute_path],
    )
    if schema_errors:
        errors = []
        for e in schema_errors:
            errors.append(f"Schema validation error: {e.message}")
            if e.absolute_path:
                errors.append(f"  at: {describe_location(data, e.absolute_path)}")
        return errors

    return check_collection(data or {})


def main(argv=None):
    """Validate the collection files named on the command line."""
    paths = [Path(p) for p in (sys.argv[1:] if argv is None else argv)]
    if not paths:
        print("Usage: validate_yaml.py COLLECTION_FILE [COLLECTION_FILE ...]")
        return 1

    schema = load_schema()
    all_valid = True
    for filepath in paths:
        errors = validate_collection_file(filepath, schema)
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
