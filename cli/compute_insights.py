#!/usr/bin/env python3
"""CLI script that reads MAL lists JSON from stdin and outputs insights JSON to stdout.

Usage:
    cat data/<user>/lists.json | python -m cli.compute_insights --year 2025 > insights.json
    cat data/<user>/lists.json | python -m cli.compute_insights --all-years > insights.json
"""

import argparse
import json
import sys

from malwrapped import records
from malwrapped.engine import aggregate


def compute_for_years(data: dict, years) -> dict:
    """Insight dicts keyed by year selector (``"all"`` or the year as a string)."""
    anime = data.get("anime", [])
    manga = data.get("manga", [])
    if not isinstance(anime, list):
        anime = []
    if not isinstance(manga, list):
        manga = []
    profile = {"gender": data.get("gender")}

    result = {}
    for year in years:
        model = aggregate(anime, manga, year, profile)
        result[str(model.selected_year)] = model.to_dict()
    return result


def main():
    parser = argparse.ArgumentParser(description="Compute MAL wrapped insights from lists JSON.")
    parser.add_argument("--year", default="all", help='Year to summarize, or "all" (default)')
    parser.add_argument(
        "--all-years",
        action="store_true",
        help="Compute every year present in the lists plus the all-time view",
    )
    args = parser.parse_args()

    raw = sys.stdin.read()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        print(json.dumps({"error": f"Invalid JSON input: {exc}"}), file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(json.dumps({"error": "Expected a JSON object with anime/manga lists"}), file=sys.stderr)
        sys.exit(1)

    if args.all_years:
        years = [records.ALL_TIME] + records.available_years(data.get("anime"), data.get("manga"))
    else:
        try:
            years = [records.normalize_year(args.year)]
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)

    result = {
        "user_id": data.get("user_id"),
        "user_name": data.get("user_name"),
        "insights": compute_for_years(data, years),
    }

    json.dump(result, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
