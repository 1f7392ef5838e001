"""Build the location/asset forest from two flat collections."""

from __future__ import annotations

from typing import Iterable, Sequence

from domain_types import Asset, Location, NodeType, TreeNode

__all__ = [
    "DuplicateIdError",
    "HierarchyCycleError",
    "build_tree",
]

# Locations and assets live in independent id spaces, so every internal
# lookup is keyed by (kind, id).
_Key = tuple[str, str]
_LOCATION = "location"
_ASSET = "asset"


class DuplicateIdError(ValueError):
    """Raised when one input collection repeats an id."""

    def __init__(self, kind: str, ids: Sequence[str]) -> None:
        self.kind = kind
        self.ids = list(ids)
        super().__init__(
            f"Duplicate {kind} ids: {', '.join(self.ids)}"
        )


class HierarchyCycleError(ValueError):
    """Raised when parent references loop back on themselves."""

    def __init__(self, ids: Sequence[str]) -> None:
        self.ids = list(ids)
        super().__init__(
            f"Parent references form a cycle around: {', '.join(self.ids)}"
        )


def _check_unique(kind: str, ids: Iterable[str]) -> None:
    seen: set[str] = set()
    duplicates: list[str] = []
    for entity_id in ids:
        if entity_id in seen and entity_id not in duplicates:
            duplicates.append(entity_id)
        seen.add(entity_id)
    if duplicates:
        raise DuplicateIdError(kind, duplicates)


def _asset_type(asset: Asset) -> NodeType:
    return NodeType.COMPONENT if asset.sensor_type else NodeType.ASSET


def _resolve_asset_parent(
    asset: Asset,
    asset_map: dict[str, Asset],
    location_map: dict[str, Location],
) -> tuple[_Key, NodeType] | None:
    """Return the attachment point of ``asset`` or ``None`` for a root.

    Only the first populated reference is consulted: an asset whose
    ``parent_id`` does not resolve stays a root even if ``location_id``
    would.
    """

    if asset.parent_id:
        parent = asset_map.get(asset.parent_id)
        if parent is None:
            return None
        return (_ASSET, parent.id), _asset_type(parent)
    if asset.location_id:
        if asset.location_id not in location_map:
            return None
        return (_LOCATION, asset.location_id), NodeType.LOCATION
    return None


def build_tree(
    locations: Sequence[Location],
    assets: Sequence[Asset],
) -> list[TreeNode]:
    """Link locations and assets into a forest of immutable nodes.

    Unresolved references turn the entity into a root. Asset roots come
    before location roots; callers order siblings for display.
    """

    _check_unique(_LOCATION, (loc.id for loc in locations))
    _check_unique(_ASSET, (asset.id for asset in assets))

    location_map = {loc.id: loc for loc in locations}
    asset_map = {asset.id: asset for asset in assets}

    children: dict[_Key, list[_Key]] = {}
    parent_types: dict[_Key, NodeType] = {}
    asset_roots: list[_Key] = []
    location_roots: list[_Key] = []

    for asset in assets:
        key = (_ASSET, asset.id)
        children.setdefault(key, [])
        attachment = _resolve_asset_parent(asset, asset_map, location_map)
        if attachment is None:
            asset_roots.append(key)
            continue
        parent_key, parent_type = attachment
        children.setdefault(parent_key, []).append(key)
        parent_types[key] = parent_type

    for loc in locations:
        key = (_LOCATION, loc.id)
        children.setdefault(key, [])
        if loc.parent_id and loc.parent_id in location_map:
            parent_key = (_LOCATION, loc.parent_id)
            children.setdefault(parent_key, []).append(key)
            parent_types[key] = NodeType.LOCATION
        else:
            location_roots.append(key)

    roots = asset_roots + location_roots
    _check_acyclic(roots, children, len(location_map) + len(asset_map))

    def freeze(key: _Key) -> TreeNode:
        kind, entity_id = key
        frozen_children = tuple(freeze(child) for child in children[key])
        parent_type = parent_types.get(key)
        if kind == _LOCATION:
            loc = location_map[entity_id]
            return TreeNode(
                id=loc.id,
                name=loc.name,
                type=NodeType.LOCATION,
                children=frozen_children,
                parent_type=parent_type,
            )
        asset = asset_map[entity_id]
        return TreeNode(
            id=asset.id,
            name=asset.name,
            type=_asset_type(asset),
            status=asset.status,
            sensor_type=asset.sensor_type,
            children=frozen_children,
            parent_type=parent_type,
            sensor_id=asset.sensor_id,
            gateway_id=asset.gateway_id,
        )

    return [freeze(root) for root in roots]


def _check_acyclic(
    roots: Sequence[_Key],
    children: dict[_Key, list[_Key]],
    total: int,
) -> None:
    """Every entity has one parent, so anything unreachable sits on a cycle."""

    reached: set[_Key] = set()
    stack = list(roots)
    while stack:
        key = stack.pop()
        reached.add(key)
        stack.extend(children[key])
    if len(reached) == total:
        return
    stranded = sorted(
        entity_id
        for kind, entity_id in children
        if (kind, entity_id) not in reached
    )
    raise HierarchyCycleError(stranded)
