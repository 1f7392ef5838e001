"""Ancestor-preserving filters over a built forest."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Sequence

from domain_types import FilterCriteria, TreeNode

__all__ = [
    "apply_filters",
    "filter_by_criteria",
    "filter_by_text",
]


def _prune(
    forest: Sequence[TreeNode],
    predicate: Callable[[TreeNode], bool],
) -> list[TreeNode]:
    """Keep nodes that match or lead to a match, re-checking every child."""

    def prune_node(node: TreeNode) -> TreeNode | None:
        kept_children = tuple(
            kept
            for kept in (prune_node(child) for child in node.children)
            if kept is not None
        )
        if kept_children or predicate(node):
            return replace(node, children=kept_children)
        return None

    return [
        kept
        for kept in (prune_node(root) for root in forest)
        if kept is not None
    ]


def filter_by_text(forest: Sequence[TreeNode], query: str) -> list[TreeNode]:
    """Return the nodes whose name contains ``query`` plus their ancestors.

    Matching is case-insensitive on the trimmed query. A blank query
    leaves the forest as it is.
    """

    needle = (query or "").strip().lower()
    if not needle:
        return list(forest)
    return _prune(forest, lambda node: needle in (node.name or "").lower())


def filter_by_criteria(
    forest: Sequence[TreeNode],
    criteria: FilterCriteria,
) -> list[TreeNode]:
    """Return the nodes satisfying any enabled criterion plus their ancestors."""

    if not criteria.is_active:
        return list(forest)
    return _prune(forest, criteria.matches)


def apply_filters(
    forest: Sequence[TreeNode],
    query: str = "",
    criteria: FilterCriteria | None = None,
) -> list[TreeNode]:
    """Run the text filter, then the criteria filter on its output."""

    filtered = filter_by_text(forest, query)
    if criteria is None:
        return filtered
    return filter_by_criteria(filtered, criteria)
