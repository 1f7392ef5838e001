"""JSON data source that supplies companies, locations and assets."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, TypeVar

from domain_types import Asset, AssetStatus, Company, Location, SensorType

E = TypeVar("E", bound=StrEnum)

COMPANIES_FILE = "companies.json"
COMPANIES_DIR = "companies"
LOCATIONS_FILE = "locations.json"
ASSETS_FILE = "assets.json"


@dataclass
class JsonDataSource:
    """Reads the monitoring data export laid out like the REST resources.

    ``companies.json`` lists the companies; each company's locations and
    assets live under ``companies/<id>/``.
    """

    data_dir: str | Path

    def __post_init__(self) -> None:
        if not self.data_dir:
            raise RuntimeError("Asset tree data directory is required.")
        root = Path(self.data_dir).expanduser()
        if not root.is_dir():
            raise RuntimeError(f"Data directory '{root}' does not exist.")
        self.data_dir = root

    @property
    def root(self) -> Path:
        return Path(self.data_dir)

    def list_companies(self) -> list[Company]:
        """Return the companies available in the export."""

        companies: list[Company] = []
        for payload in self._load_records(self.root / COMPANIES_FILE):
            companies.append(
                Company(
                    id=self._require_id(payload, COMPANIES_FILE),
                    name=self._as_str(payload.get("name")),
                )
            )
        return companies

    def get_company(self, key: str) -> Company | None:
        """Look a company up by id, then by case-insensitive name."""

        companies = self.list_companies()
        for company in companies:
            if company.id == key:
                return company
        wanted = (key or "").strip().casefold()
        for company in companies:
            if company.name.strip().casefold() == wanted:
                return company
        return None

    def list_locations(self, company_id: str) -> list[Location]:
        """Return the company's locations as domain objects."""

        path = self._company_dir(company_id) / LOCATIONS_FILE
        return [
            Location(
                id=self._require_id(payload, path.name),
                name=self._as_str(payload.get("name")),
                parent_id=self._as_ref(payload.get("parentId")),
            )
            for payload in self._load_records(path)
        ]

    def list_assets(self, company_id: str) -> list[Asset]:
        """Return the company's assets and components as domain objects."""

        path = self._company_dir(company_id) / ASSETS_FILE
        assets: list[Asset] = []
        for payload in self._load_records(path):
            asset_id = self._require_id(payload, path.name)
            assets.append(
                Asset(
                    id=asset_id,
                    name=self._as_str(payload.get("name")),
                    parent_id=self._as_ref(payload.get("parentId")),
                    location_id=self._as_ref(payload.get("locationId")),
                    sensor_type=self._as_enum(
                        SensorType, payload.get("sensorType"), asset_id
                    ),
                    status=self._as_enum(
                        AssetStatus, payload.get("status"), asset_id
                    ),
                    sensor_id=self._as_ref(payload.get("sensorId")),
                    gateway_id=self._as_ref(payload.get("gatewayId")),
                )
            )
        return assets

    def _company_dir(self, company_id: str) -> Path:
        if not company_id or "/" in company_id or company_id in {".", ".."}:
            raise RuntimeError(f"Invalid company id '{company_id}'.")
        return self.root / COMPANIES_DIR / company_id

    def _load_records(self, path: Path) -> list[dict[str, Any]]:
        try:
            with open(path, encoding="utf-8") as handle:
                payload = json.load(handle)
        except OSError as exc:
            raise RuntimeError(f"Unable to read '{path}': {exc}") from exc
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"Invalid JSON in '{path}': {exc}") from exc

        if not isinstance(payload, list):
            raise RuntimeError(f"Expected a list of records in '{path}'.")
        records: list[dict[str, Any]] = []
        for index, record in enumerate(payload):
            if not isinstance(record, dict):
                raise RuntimeError(
                    f"Record {index} in '{path}' is not an object."
                )
            records.append(record)
        return records

    def _require_id(self, payload: dict[str, Any], source: str) -> str:
        record_id = self._as_str(payload.get("id")).strip()
        if not record_id:
            raise RuntimeError(f"Record without an id in '{source}'.")
        return record_id

    def _as_str(self, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    def _as_ref(self, value: Any) -> str | None:
        text = self._as_str(value).strip()
        return text or None

    def _as_enum(self, enum_cls: type[E], value: Any, record_id: str) -> E | None:
        text = self._as_str(value).strip().lower()
        if not text:
            return None
        try:
            return enum_cls(text)
        except ValueError as exc:
            allowed = ", ".join(member.value for member in enum_cls)
            raise RuntimeError(
                f"Asset '{record_id}' has unknown {enum_cls.__name__} "
                f"'{value}' (expected one of: {allowed})."
            ) from exc
