import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from generate_code import generate_outputs, main
from generator_settings import DEFAULT_SETTINGS, load_settings, settings_from_dict
from schema_model import ParseError


FIXTURES = Path(__file__).resolve().parent / "fixtures"
CONFIG_PATH = FIXTURES / "config.json"
SETTINGS_PATH = FIXTURES / "settings.yaml"

EXPECTED_FILES = {
    "models": ["common.go", "user_orders.go", "users.go"],
    "sql": [
        "__all_table_create.sql",
        "__all_table_field_add.sql",
        "__all_table_field_alter.sql",
        "__all_table_field_drop.sql",
    ],
}


def run_main(*argv: str) -> tuple[int, str, str]:
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        code = main(list(argv))
    return code, out.getvalue(), err.getvalue()


class TestGenerateCode(unittest.TestCase):
    def test_generation_is_deterministic(self) -> None:
        models1, sql1, _ = generate_outputs(CONFIG_PATH)
        models2, sql2, _ = generate_outputs(CONFIG_PATH)
        self.assertEqual(models1, models2)
        self.assertEqual(sql1, sql2)

    def test_spec_example_table(self) -> None:
        models, sql, tables = generate_outputs(CONFIG_PATH)
        self.assertEqual(tables[0].name, "users")
        create = sql["__all_table_create.sql"]
        self.assertLess(create.index("`id` bigint"), create.index("`name` varchar(32)"))
        self.assertIn("PRIMARY KEY(`id`)", create)
        self.assertEqual(models["users.go"].count(";pk"), 1)
        self.assertIn('\tId int64 `orm:"column(id);pk"`', models["users.go"])

    def test_writes_all_files(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            model_dir = Path(td) / "models"
            sql_dir = Path(td) / "sql"
            code, out, _ = run_main("--config", str(CONFIG_PATH), "--model-dir", str(model_dir), "--sql-dir", str(sql_dir))
            self.assertEqual(code, 0)
            self.assertEqual(sorted(p.name for p in model_dir.iterdir()), EXPECTED_FILES["models"])
            self.assertEqual(sorted(p.name for p in sql_dir.iterdir()), EXPECTED_FILES["sql"])
            self.assertIn(f"Generated {model_dir / 'users.go'}", out)

            models, sql, _ = generate_outputs(CONFIG_PATH)
            self.assertEqual((model_dir / "users.go").read_text(encoding="utf-8"), models["users.go"])
            self.assertEqual(
                (sql_dir / "__all_table_create.sql").read_text(encoding="utf-8"),
                sql["__all_table_create.sql"],
            )

    def test_check_mode(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            args = ["--config", str(CONFIG_PATH), "--model-dir", str(Path(td) / "m"), "--sql-dir", str(Path(td) / "s")]

            code, _, err = run_main(*args, "--check")
            self.assertEqual(code, 1)
            self.assertIn("[check] missing file:", err)

            self.assertEqual(run_main(*args)[0], 0)
            code, _, err = run_main(*args, "--check")
            self.assertEqual(code, 0)
            self.assertEqual(err, "")

            drop_path = Path(td) / "s" / "__all_table_field_drop.sql"
            drop_path.write_text("-- edited\n", encoding="utf-8")
            code, _, err = run_main(*args, "--check")
            self.assertEqual(code, 1)
            self.assertIn("[check] drift detected:", err)
            self.assertEqual(drop_path.read_text(encoding="utf-8"), "-- edited\n")

    def test_parse_error_writes_nothing(self) -> None:
        doc = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        doc["user_orders"]["status"]["type"] = "float"
        with tempfile.TemporaryDirectory() as td:
            config = Path(td) / "config.json"
            config.write_text(json.dumps(doc), encoding="utf-8")
            model_dir = Path(td) / "models"
            sql_dir = Path(td) / "sql"
            code, out, err = run_main("--config", str(config), "--model-dir", str(model_dir), "--sql-dir", str(sql_dir))
            self.assertEqual(code, 1)
            self.assertIn("[error]", err)
            self.assertIn("user_orders.status.type", err)
            self.assertIn("'float'", err)
            self.assertEqual(out, "")
            self.assertFalse(model_dir.exists())
            self.assertFalse(sql_dir.exists())

    def test_unreadable_inputs_report_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            nan_config = Path(td) / "nan.json"
            nan_config.write_text(
                CONFIG_PATH.read_text(encoding="utf-8").replace('"sn": 2,', '"sn": NaN,', 1),
                encoding="utf-8",
            )
            binary_config = Path(td) / "binary.json"
            binary_config.write_bytes(b"\xff\xfe")
            binary_settings = Path(td) / "settings.yaml"
            binary_settings.write_bytes(b"models:\n  package: \xff\n")

            cases = [
                (["--config", str(nan_config)], "users.name.sn"),
                (["--config", str(binary_config)], "binary.json"),
                (["--config", str(CONFIG_PATH), "--settings", str(binary_settings)], "settings.yaml"),
            ]
            out_dir = Path(td) / "out"
            for argv, fragment in cases:
                with self.subTest(fragment=fragment):
                    code, out, err = run_main(*argv, "--model-dir", str(out_dir), "--sql-dir", str(out_dir))
                    self.assertEqual(code, 1)
                    self.assertIn("[error]", err)
                    self.assertIn(fragment, err)
                    self.assertEqual(out, "")
            self.assertFalse(out_dir.exists())

    def test_missing_config_reports_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            code, _, err = run_main("--config", str(Path(td) / "nope.json"), "--model-dir", td, "--sql-dir", td)
        self.assertEqual(code, 1)
        self.assertIn("[error] cannot read input", err)

    def test_settings_file_is_applied(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            model_dir = Path(td) / "models"
            sql_dir = Path(td) / "sql"
            code, _, _ = run_main(
                "--config", str(CONFIG_PATH),
                "--settings", str(SETTINGS_PATH),
                "--model-dir", str(model_dir),
                "--sql-dir", str(sql_dir),
            )
            self.assertEqual(code, 0)
            registry = (model_dir / "common.go").read_text(encoding="utf-8")
            create = (sql_dir / "__all_table_create.sql").read_text(encoding="utf-8")
        self.assertTrue(registry.startswith("package dbmodels\n"))
        self.assertIn('import "shop_server/common"', registry)
        self.assertIn("ENGINE=MyISAM", create)
        self.assertIn("DEFAULT CHARSET=utf8mb4", create)


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        self.assertEqual(load_settings(None), DEFAULT_SETTINGS)
        self.assertEqual(settings_from_dict(None), DEFAULT_SETTINGS)
        self.assertEqual(settings_from_dict({}), DEFAULT_SETTINGS)

    def test_partial_override_keeps_other_defaults(self) -> None:
        settings = load_settings(SETTINGS_PATH)
        self.assertEqual(settings.package, "dbmodels")
        self.assertEqual(settings.engine, "MyISAM")
        self.assertEqual(settings.extension, DEFAULT_SETTINGS.extension)
        self.assertEqual(settings.register_func, DEFAULT_SETTINGS.register_func)

    def test_malformed_settings(self) -> None:
        for raw in [["models"], {"models": "dbmodels"}, {"sql": {"engine": 1}}]:
            with self.subTest(raw=raw):
                with self.assertRaises(ParseError):
                    settings_from_dict(raw)


if __name__ == "__main__":
    unittest.main()
