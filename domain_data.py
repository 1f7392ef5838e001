"""Domain-level data helpers tying the data source to the tree builder."""

from __future__ import annotations

from typing import List

from asset_source import JsonDataSource
from domain_types import Company, TreeNode
from tree_builder import build_tree

__all__ = [
    "collect_companies",
    "collect_tree",
    "resolve_company",
]


def collect_companies(source: JsonDataSource) -> List[Company]:
    """Fetch companies sorted by display name."""

    companies = source.list_companies()
    companies.sort(key=lambda company: (company.name.casefold(), company.id))
    return companies


def resolve_company(source: JsonDataSource, key: str) -> Company:
    """Return the company named or identified by ``key``."""

    company = source.get_company(key)
    if company is None:
        available = ", ".join(c.name or c.id for c in collect_companies(source))
        raise SystemExit(
            f"Unknown company '{key}'. Available companies: {available}"
        )
    return company


def collect_tree(source: JsonDataSource, company_id: str) -> List[TreeNode]:
    """Load a company's locations and assets and build the forest."""

    locations = source.list_locations(company_id)
    assets = source.list_assets(company_id)
    return build_tree(locations, assets)
