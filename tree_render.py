"""Text and JSON rendering plus id-keyed lookups for asset forests."""

from __future__ import annotations

import json
from collections import Counter
from typing import Any, Collection, Iterator, Sequence

from domain_types import NodeType, TreeNode
from tree_ordering import order_siblings

__all__ = [
    "count_nodes",
    "default_expanded_ids",
    "find_node",
    "node_path",
    "node_to_dict",
    "render_ascii",
    "render_json",
    "visible_rows",
]

# Number of levels shown expanded on first display.
DEFAULT_EXPAND_DEPTH = 2


def _walk(forest: Sequence[TreeNode]) -> Iterator[TreeNode]:
    for node in forest:
        yield node
        yield from _walk(node.children)


def count_nodes(forest: Sequence[TreeNode]) -> dict[NodeType, int]:
    """Count nodes per type across the whole forest."""

    counts = Counter(node.type for node in _walk(forest))
    return {node_type: counts.get(node_type, 0) for node_type in NodeType}


def find_node(forest: Sequence[TreeNode], node_id: str | None) -> TreeNode | None:
    """Return the first node with ``node_id`` in display order."""

    path = node_path(forest, node_id)
    return path[-1] if path else None


def node_path(forest: Sequence[TreeNode], node_id: str | None) -> list[TreeNode]:
    """Return the root-to-node chain for ``node_id`` or an empty list."""

    if not node_id:
        return []

    def walk(nodes: Sequence[TreeNode], ancestors: list[TreeNode]) -> list[TreeNode]:
        for node in order_siblings(nodes):
            current = ancestors + [node]
            if node.id == node_id:
                return current
            found = walk(node.children, current)
            if found:
                return found
        return []

    return walk(forest, [])


def default_expanded_ids(
    forest: Sequence[TreeNode],
    depth: int = DEFAULT_EXPAND_DEPTH,
    expand_all: bool = False,
) -> set[str]:
    """Ids of parent nodes shown open before the user toggles anything."""

    expanded: set[str] = set()

    def walk(nodes: Sequence[TreeNode], level: int) -> None:
        for node in nodes:
            if not node.children:
                continue
            if expand_all or level < depth:
                expanded.add(node.id)
            walk(node.children, level + 1)

    walk(forest, 0)
    return expanded


def visible_rows(
    forest: Sequence[TreeNode],
    expanded_ids: Collection[str] | None = None,
) -> list[tuple[TreeNode, int]]:
    """Flatten the ordered forest into ``(node, depth)`` display rows.

    Children are listed only under expanded ids; ``None`` expands all.
    """

    rows: list[tuple[TreeNode, int]] = []

    def walk(nodes: Sequence[TreeNode], depth: int) -> None:
        for node in order_siblings(nodes):
            rows.append((node, depth))
            if expanded_ids is None or node.id in expanded_ids:
                walk(node.children, depth + 1)

    walk(forest, 0)
    return rows


def _format_label(node: TreeNode) -> str:
    bracket_parts: list[str] = [str(node.type)]
    if node.sensor_type:
        bracket_parts.append(str(node.sensor_type))
    if node.status:
        bracket_parts.append(str(node.status))
    return f"{node.name} [{', '.join(bracket_parts)}]"


def _render_subtree(
    node: TreeNode,
    prefix: str,
    is_last: bool,
    depth: int,
    max_depth: int | None,
) -> list[str]:
    connector = "└── " if is_last else "├── "
    lines = [prefix + connector + _format_label(node)]
    if max_depth is not None and depth >= max_depth:
        return lines
    extension = "    " if is_last else "│   "
    children = order_siblings(node.children)
    for i, child in enumerate(children):
        lines.extend(
            _render_subtree(
                child,
                prefix + extension,
                i == len(children) - 1,
                depth + 1,
                max_depth,
            )
        )
    return lines


def render_ascii(
    forest: Sequence[TreeNode],
    max_depth: int | None = None,
) -> str:
    """Render the forest as box-drawing text followed by a totals line.

    ``max_depth`` limits how many levels below the roots are printed.
    """

    lines: list[str] = []
    for root in order_siblings(forest):
        lines.append(_format_label(root))
        if max_depth is not None and max_depth <= 0:
            continue
        children = order_siblings(root.children)
        for i, child in enumerate(children):
            lines.extend(
                _render_subtree(child, "", i == len(children) - 1, 1, max_depth)
            )

    counts = count_nodes(forest)
    total = sum(counts.values())
    if lines:
        lines.append("")
    lines.append(
        f"{total} nodes | {counts[NodeType.LOCATION]} locations | "
        f"{counts[NodeType.ASSET]} assets | "
        f"{counts[NodeType.COMPONENT]} components"
    )
    return "\n".join(lines)


def node_to_dict(node: TreeNode) -> dict[str, Any]:
    """Convert a node into the camelCase payload used by the dashboard."""

    payload: dict[str, Any] = {
        "id": node.id,
        "name": node.name,
        "type": str(node.type),
        "status": str(node.status) if node.status else None,
        "sensorType": str(node.sensor_type) if node.sensor_type else None,
    }
    if node.parent_type:
        payload["parentType"] = str(node.parent_type)
    if node.sensor_id:
        payload["sensorId"] = node.sensor_id
    if node.gateway_id:
        payload["gatewayId"] = node.gateway_id
    payload["children"] = [
        node_to_dict(child) for child in order_siblings(node.children)
    ]
    return payload


def render_json(forest: Sequence[TreeNode]) -> str:
    """Render the ordered forest as a JSON document."""

    counts = count_nodes(forest)
    output = {
        "total_nodes": sum(counts.values()),
        "counts": {str(node_type): count for node_type, count in counts.items()},
        "tree": [node_to_dict(root) for root in order_siblings(forest)],
    }
    return json.dumps(output, indent=2)
