from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class NodeType(StrEnum):
    LOCATION = "location"
    ASSET = "asset"
    COMPONENT = "component"


class SensorType(StrEnum):
    ENERGY = "energy"
    VIBRATION = "vibration"


class AssetStatus(StrEnum):
    OPERATING = "operating"
    ALERT = "alert"


@dataclass(frozen=True)
class Company:
    id: str
    name: str


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    parent_id: str | None = None


@dataclass(frozen=True)
class Asset:
    """Raw asset record; a sensor-bearing asset is a component."""

    id: str
    name: str
    parent_id: str | None = None
    location_id: str | None = None
    sensor_type: SensorType | None = None
    status: AssetStatus | None = None
    sensor_id: str | None = None
    gateway_id: str | None = None


@dataclass(frozen=True)
class TreeNode:
    id: str
    name: str
    type: NodeType
    status: AssetStatus | None = None
    sensor_type: SensorType | None = None
    children: tuple[TreeNode, ...] = ()
    parent_type: NodeType | None = None
    sensor_id: str | None = None
    gateway_id: str | None = None


@dataclass(frozen=True)
class FilterCriteria:
    """Boolean attribute filters, combined with OR."""

    energy_sensors: bool = False
    critical_status: bool = False

    @property
    def is_active(self) -> bool:
        return self.energy_sensors or self.critical_status

    def matches(self, node: TreeNode) -> bool:
        if self.energy_sensors and node.sensor_type == SensorType.ENERGY:
            return True
        return self.critical_status and node.status == AssetStatus.ALERT
