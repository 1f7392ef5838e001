import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any

from asset_source import JsonDataSource
from domain_data import collect_companies, collect_tree, resolve_company
from domain_types import AssetStatus, NodeType, SensorType


def write_export(root: Path, company_id: str = "c-1", **files: Any) -> None:
    """Write a company export; ``files`` override the default payloads."""

    (root / "companies.json").write_text(
        json.dumps(
            files.get(
                "companies",
                [{"id": company_id, "name": "Jaguar Unit"}, {"id": "c-2", "name": "Apex Unit"}],
            )
        ),
        encoding="utf-8",
    )
    company_dir = root / "companies" / company_id
    company_dir.mkdir(parents=True, exist_ok=True)
    (company_dir / "locations.json").write_text(
        json.dumps(
            files.get(
                "locations",
                [
                    {"id": "L1", "name": "Plant", "parentId": None},
                    {"id": "L2", "name": "Line", "parentId": "L1"},
                ],
            )
        ),
        encoding="utf-8",
    )
    (company_dir / "assets.json").write_text(
        json.dumps(
            files.get(
                "assets",
                [
                    {"id": "A1", "name": "Pump", "locationId": "L2", "parentId": None},
                    {
                        "id": "A2",
                        "name": "Motor",
                        "parentId": "A1",
                        "sensorType": "energy",
                        "status": "alert",
                        "sensorId": "SN-1",
                        "gatewayId": "GW-1",
                    },
                ],
            )
        ),
        encoding="utf-8",
    )


class JsonDataSourceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_requires_existing_directory(self) -> None:
        with self.assertRaises(RuntimeError):
            JsonDataSource("")
        with self.assertRaises(RuntimeError):
            JsonDataSource(self.root / "missing")

    def test_list_locations_and_assets(self) -> None:
        write_export(self.root)
        source = JsonDataSource(self.root)

        locations = source.list_locations("c-1")
        self.assertEqual([loc.id for loc in locations], ["L1", "L2"])
        self.assertIsNone(locations[0].parent_id)
        self.assertEqual(locations[1].parent_id, "L1")

        assets = source.list_assets("c-1")
        pump, motor = assets
        self.assertEqual(pump.location_id, "L2")
        self.assertIsNone(pump.sensor_type)
        self.assertEqual(motor.sensor_type, SensorType.ENERGY)
        self.assertEqual(motor.status, AssetStatus.ALERT)
        self.assertEqual(motor.sensor_id, "SN-1")
        self.assertEqual(motor.gateway_id, "GW-1")

    def test_blank_references_become_none(self) -> None:
        write_export(
            self.root,
            assets=[{"id": "A1", "name": "Pump", "parentId": "", "locationId": "  ",
                     "sensorType": "", "status": None}],
        )
        (asset,) = JsonDataSource(self.root).list_assets("c-1")
        self.assertIsNone(asset.parent_id)
        self.assertIsNone(asset.location_id)
        self.assertIsNone(asset.sensor_type)
        self.assertIsNone(asset.status)

    def test_unknown_enum_value_is_rejected(self) -> None:
        write_export(
            self.root,
            assets=[{"id": "A1", "name": "Pump", "sensorType": "pressure"}],
        )
        with self.assertRaises(RuntimeError) as ctx:
            JsonDataSource(self.root).list_assets("c-1")
        self.assertIn("pressure", str(ctx.exception))

    def test_invalid_json_is_reported(self) -> None:
        write_export(self.root)
        (self.root / "companies" / "c-1" / "locations.json").write_text(
            "{not json", encoding="utf-8")
        with self.assertRaises(RuntimeError) as ctx:
            JsonDataSource(self.root).list_locations("c-1")
        self.assertIn("Invalid JSON", str(ctx.exception))

    def test_non_list_payload_is_reported(self) -> None:
        write_export(self.root, locations={"id": "L1"})
        with self.assertRaises(RuntimeError):
            JsonDataSource(self.root).list_locations("c-1")

    def test_missing_id_is_reported(self) -> None:
        write_export(self.root, locations=[{"name": "Nameless"}])
        with self.assertRaises(RuntimeError):
            JsonDataSource(self.root).list_locations("c-1")

    def test_missing_company_files_are_reported(self) -> None:
        write_export(self.root)
        with self.assertRaises(RuntimeError):
            JsonDataSource(self.root).list_assets("c-404")

    def test_company_id_cannot_escape_directory(self) -> None:
        write_export(self.root)
        with self.assertRaises(RuntimeError):
            JsonDataSource(self.root).list_assets("../c-1")

    def test_get_company_by_id_or_name(self) -> None:
        write_export(self.root)
        source = JsonDataSource(self.root)
        company = source.get_company("c-1")
        assert company is not None
        self.assertEqual(company.name, "Jaguar Unit")
        by_name = source.get_company(" jaguar unit ")
        assert by_name is not None
        self.assertEqual(by_name.id, "c-1")
        self.assertIsNone(source.get_company("Tobias"))


class DomainDataTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = TemporaryDirectory()
        self.root = Path(self.tmp.name)
        write_export(self.root)
        self.source = JsonDataSource(self.root)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_collect_companies_sorted_by_name(self) -> None:
        names = [company.name for company in collect_companies(self.source)]
        self.assertEqual(names, ["Apex Unit", "Jaguar Unit"])

    def test_resolve_company_unknown_exits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            resolve_company(self.source, "Tobias")
        self.assertIn("Apex Unit", str(ctx.exception))

    def test_collect_tree(self) -> None:
        (plant,) = collect_tree(self.source, "c-1")
        (line,) = plant.children
        (pump,) = line.children
        (motor,) = pump.children
        self.assertEqual(motor.type, NodeType.COMPONENT)
        self.assertEqual(motor.parent_type, NodeType.ASSET)


if __name__ == "__main__":
    unittest.main()
