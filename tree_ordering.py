from __future__ import annotations

from typing import Iterable

from domain_types import NodeType, TreeNode

__all__ = ["TYPE_RANK", "order_siblings"]

TYPE_RANK: dict[NodeType, int] = {
    NodeType.LOCATION: 0,
    NodeType.ASSET: 1,
    NodeType.COMPONENT: 2,
}


def order_siblings(children: Iterable[TreeNode]) -> list[TreeNode]:
    """Locations first, then assets, then components; stable within a type."""

    return sorted(children, key=lambda node: TYPE_RANK[node.type])
