import json
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from simplab.cli import app


class TestCli(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_catalog_json(self):
        result = self.runner.invoke(app, ["catalog", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        ids = [entry["id"] for entry in json.loads(result.stdout)]
        self.assertIn("KMnO4", ids)

    def test_catalog_table(self):
        result = self.runner.invoke(app, ["catalog"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Hydrochloric Acid", result.stdout)

    def test_mix(self):
        result = self.runner.invoke(app, ["mix", "HCl", "NaOH"])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.stdout)
        self.assertEqual(payload["type"], "neutralization")
        self.assertEqual(payload["pH"], 7)

    def test_mix_export(self):
        result = self.runner.invoke(
            app, ["mix", "AgNO3", "NaCl", "--export", "--container-id", "flask-9"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.stdout)
        self.assertEqual(payload["container_id"], "flask-9")
        self.assertEqual(payload["conditions"]["temperature_kelvin"], 298)

    def test_mix_unknown_substance(self):
        result = self.runner.invoke(app, ["mix", "Unobtainium"])
        self.assertEqual(result.exit_code, 1)

    def test_bad_catalog_file_is_reported(self):
        bad_entry = self.tmp_path / "bad.json"
        bad_entry.write_text(json.dumps({"X": ["not", "a", "mapping"]}))
        not_json = self.tmp_path / "broken.json"
        not_json.write_text("{not json")
        for path in (bad_entry, not_json, self.tmp_path / "missing.json"):
            for args in (["mix", "HCl", "NaOH"], ["catalog"]):
                result = self.runner.invoke(app, args + ["--catalog", str(path)])
                self.assertEqual(result.exit_code, 1, result.output)
                self.assertIsInstance(result.exception, SystemExit)
                self.assertIn("Error:", result.output)

    def test_mix_with_extra_catalog(self):
        catalog_file = self.tmp_path / "extra.json"
        catalog_file.write_text(json.dumps({
            "Vinegar": {"name": "Vinegar", "category": "weak-acid", "color": "#FAFAF0", "pH": 3}
        }))
        result = self.runner.invoke(app, ["mix", "Vinegar", "KOH", "--catalog", str(catalog_file)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.stdout)["type"], "neutralization")

    def test_run_script_and_history(self):
        script = self.tmp_path / "demo.json"
        script.write_text(json.dumps({"steps": [
            {"op": "new"},
            {"op": "add", "substance": "AgNO3"},
            {"op": "add", "substance": "NaCl"},
            {"op": "record"},
            {"op": "add", "substance": "Unobtainium"},
            {"op": "new", "label": "Second"},
            {"op": "add", "substance": "H2O2"},
            {"op": "record"},
            {"op": "remove_last"},
            {"op": "record"},
        ]}))
        output = self.tmp_path / "out.json"
        session_file = self.tmp_path / "lab.sqlite"

        result = self.runner.invoke(app, [
            "run", str(script), "--output", str(output), "--session-file", str(session_file),
        ])
        self.assertEqual(result.exit_code, 0, result.output)

        payload = json.loads(output.read_text(encoding="utf-8"))
        types = [entry["result"]["type"] for entry in payload["history"]]
        self.assertEqual(types, ["precipitation", "decomposition_peroxide"])
        # One rejected substance, one record of an empty container
        self.assertEqual([e["step"] for e in payload["errors"]], [4, 9])
        self.assertEqual([c["container_id"] for c in payload["containers"]], ["beaker-1", "beaker-2"])

        result = self.runner.invoke(app, ["history", str(session_file)])
        self.assertEqual(result.exit_code, 0, result.output)
        stored = json.loads(result.stdout)
        self.assertEqual(stored["session_id"], payload["session_id"])
        self.assertEqual(len(stored["history"]), 2)

    def test_run_skips_malformed_steps(self):
        script = self.tmp_path / "malformed.json"
        script.write_text(json.dumps([
            {"op": "new"},
            {"op": "add", "substance": "HCl"},
            {"op": "record"},
            {"op": "add"},
            {"op": "bogus"},
            "add NaOH",
            {"op": "add", "substance": "NaOH"},
        ]))
        output = self.tmp_path / "out.json"
        result = self.runner.invoke(app, ["run", str(script), "--output", str(output)])
        self.assertEqual(result.exit_code, 0, result.output)

        payload = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual([e["step"] for e in payload["errors"]], [3, 4, 5])
        self.assertEqual([e["result"]["type"] for e in payload["history"]], ["single"])
        chemicals = [c["id"] for c in payload["containers"][0]["chemicals"]]
        self.assertEqual(chemicals, ["HCl", "NaOH"])

    def test_run_script_without_container(self):
        script = self.tmp_path / "orphan.json"
        script.write_text(json.dumps([{"op": "add", "substance": "HCl"}]))
        output = self.tmp_path / "out.json"
        result = self.runner.invoke(app, ["run", str(script), "--output", str(output)])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual([e["step"] for e in payload["errors"]], [0])
        self.assertEqual(payload["containers"], [])

    def test_run_with_settings(self):
        script = self.tmp_path / "full.json"
        script.write_text(json.dumps([
            {"op": "new"},
            {"op": "add", "substance": "H2O"},
            {"op": "add", "substance": "H2O"},
        ]))
        settings = self.tmp_path / "settings.json"
        settings.write_text(json.dumps({"max_substances": 1}))
        output = self.tmp_path / "out.json"
        result = self.runner.invoke(app, [
            "run", str(script), "--settings", str(settings), "--output", str(output),
        ])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual(len(payload["containers"][0]["chemicals"]), 1)
        self.assertEqual(payload["errors"][0]["step"], 2)

    def test_history_missing_file(self):
        result = self.runner.invoke(app, ["history", str(self.tmp_path / "missing.sqlite")])
        self.assertEqual(result.exit_code, 1)


if __name__ == '__main__':
    unittest.main()
