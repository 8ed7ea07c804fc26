"""Compare locale files and report keys missing from any language.

Run before a deploy to catch translations that would silently fall back to
the default language at render time.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Set

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_LOCALE_DIR = BASE_DIR / "homepage" / "locales"


def collect_keys(node: object, prefix: str = "") -> tuple[Set[str], List[str]]:
    """Return dotted string-leaf keys and the keys of invalid leaves."""

    keys: Set[str] = set()
    invalid: List[str] = []
    if not isinstance(node, dict):
        return keys, invalid
    for name, value in node.items():
        dotted = f"{prefix}{name}"
        if isinstance(value, str):
            keys.add(dotted)
        elif isinstance(value, dict):
            child_keys, child_invalid = collect_keys(value, prefix=f"{dotted}.")
            keys |= child_keys
            invalid.extend(child_invalid)
        else:
            invalid.append(dotted)
    return keys, invalid


def check_locales(locale_dir: Path) -> int:
    files = sorted(locale_dir.glob("*.json"))
    if not files:
        print(f"No locale files found in {locale_dir}")
        return 1

    keys_by_lang: Dict[str, Set[str]] = {}
    problems = 0
    for path in files:
        lang = path.stem
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            print(f"{lang}: cannot be loaded ({exc})")
            problems += 1
            continue
        keys, invalid = collect_keys(data)
        keys_by_lang[lang] = keys
        for key in invalid:
            print(f"{lang}: {key} is not a string and will never be rendered")
            problems += 1

    all_keys = set().union(*keys_by_lang.values()) if keys_by_lang else set()
    for lang, keys in keys_by_lang.items():
        for key in sorted(all_keys - keys):
            print(f"{lang}: missing {key}")
            problems += 1

    if problems == 0:
        print(f"Checked {len(files)} locale files, no problems found.")
    return 1 if problems else 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check that all locale files define the same keys.")
    parser.add_argument(
        "--locale-dir",
        type=Path,
        default=DEFAULT_LOCALE_DIR,
        help="Directory containing <lang>.json files (default: homepage/locales).",
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    sys.exit(check_locales(args.locale_dir))
