import io
import json
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from tempfile import TemporaryDirectory

from asset_tree import main
from test_asset_source import write_export


class AssetTreeCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = TemporaryDirectory()
        self.root = Path(self.tmp.name)
        write_export(self.root)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def _run(self, *args: str) -> str:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = main(["--data-dir", str(self.root), *args])
        self.assertEqual(code, 0)
        return buffer.getvalue()

    def test_lists_companies_without_company(self) -> None:
        output = self._run()
        self.assertIn("Available companies:", output)
        self.assertIn("c-1  Jaguar Unit", output)

    def test_prints_tree(self) -> None:
        output = self._run("-c", "Jaguar Unit")
        self.assertIn("Plant [location]", output)
        self.assertIn("Motor [component, energy, alert]", output)

    def test_search_without_match(self) -> None:
        output = self._run("-c", "c-1", "-s", "zzz")
        self.assertIn("No results found", output)

    def test_json_output_with_criteria(self) -> None:
        output = self._run("-c", "c-1", "--critical", "--format", "json")
        document = json.loads(output)
        self.assertEqual(document["total_nodes"], 4)
        self.assertEqual(document["tree"][0]["id"], "L1")

    def test_unknown_company_exits(self) -> None:
        with self.assertRaises(SystemExit):
            self._run("-c", "Tobias")

    def test_missing_data_dir_exits(self) -> None:
        with self.assertRaises(SystemExit):
            main(["--data-dir", str(self.root / "missing")])


if __name__ == "__main__":
    unittest.main()
