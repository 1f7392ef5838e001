#!/usr/bin/env python3
"""Print a company's location/asset tree with optional search and filters."""

import argparse
import os
from typing import Optional, Sequence

from dotenv import load_dotenv

from asset_source import JsonDataSource
from domain_data import collect_companies, collect_tree, resolve_company
from domain_types import FilterCriteria
from tree_filters import apply_filters
from tree_render import render_ascii, render_json


def list_companies_text(source: JsonDataSource) -> str:
    """Describe the companies a tree can be printed for."""

    companies = collect_companies(source)
    if not companies:
        return "No companies found in the data directory."
    lines = ["Available companies:"]
    lines.extend(f"  {company.id}  {company.name}" for company in companies)
    return "\n".join(lines)


def render_company_tree(
    source: JsonDataSource,
    company_key: str,
    search: str,
    criteria: FilterCriteria,
    output_format: str,
    max_depth: Optional[int],
) -> str:
    company = resolve_company(source, company_key)
    tree = collect_tree(source, company.id)
    filtered = apply_filters(tree, search, criteria)

    if output_format == "json":
        return render_json(filtered)

    if not filtered:
        if search.strip() or criteria.is_active:
            return "No results found; try different search terms."
        return "No items available."
    return render_ascii(filtered, max_depth=max_depth)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for printing asset trees."""

    parser = argparse.ArgumentParser(
        description="Locations -> assets -> components tree viewer"
    )
    parser.add_argument(
        "--data-dir",
        default=os.getenv("ASSET_TREE_DATA_DIR"),
        help=(
            "Directory holding companies.json and per-company exports "
            "(defaults to ASSET_TREE_DATA_DIR from the environment/.env)."
        ),
    )
    parser.add_argument(
        "-c", "--company",
        help="Company id or name. Lists companies when omitted.",
    )
    parser.add_argument(
        "-s", "--search",
        default="",
        help="Case-insensitive text matched against node names.",
    )
    parser.add_argument(
        "--energy",
        action="store_true",
        help="Only show energy sensors and their ancestors.",
    )
    parser.add_argument(
        "--critical",
        action="store_true",
        help="Only show nodes in alert status and their ancestors.",
    )
    parser.add_argument(
        "-f", "--format",
        choices=["ascii", "json"],
        default="ascii",
        help="Output format (default: ascii).",
    )
    parser.add_argument(
        "-d", "--depth",
        type=int,
        default=None,
        help="Maximum number of levels printed below the roots.",
    )

    args = parser.parse_args(argv)

    if not args.data_dir:
        raise SystemExit(
            "A data directory is required (--data-dir or ASSET_TREE_DATA_DIR)."
        )
    try:
        source = JsonDataSource(args.data_dir)
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    if not args.company:
        print(list_companies_text(source))
        return 0

    message = render_company_tree(
        source,
        args.company,
        args.search,
        FilterCriteria(
            energy_sensors=args.energy,
            critical_status=args.critical,
        ),
        args.format,
        args.depth,
    )

    print(message)
    return 0


if __name__ == "__main__":

    load_dotenv()

    main()
