import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "apps" / "desktop"))
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from sysmon_app.cli import build_parser


class CliParserTests(unittest.TestCase):
    def test_run_command(self):
        args = build_parser().parse_args(["run"])
        self.assertEqual(args.command, "run")

    def test_watch_command(self):
        args = build_parser().parse_args(["watch", "--count", "3", "--json", "--interval-ms", "250"])
        self.assertEqual(args.command, "watch")
        self.assertEqual(args.count, 3)
        self.assertTrue(args.json)
        self.assertEqual(args.interval_ms, 250)

    def test_watch_count_must_be_positive(self):
        for bad in ("0", "-3"):
            with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
                build_parser().parse_args(["watch", "--count", bad])

    def test_render_command(self):
        args = build_parser().parse_args(["render", "--out", "dash.png", "--theme", "Deep Blue"])
        self.assertEqual(args.out, "dash.png")
        self.assertEqual(args.theme, "Deep Blue")

    def test_doctor_command(self):
        args = build_parser().parse_args(["doctor", "--export", "--out-dir", "/tmp/x"])
        self.assertTrue(args.export)
        self.assertEqual(args.out_dir, "/tmp/x")


class CliCommandTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        (root / "stat").write_text("cpu  100 0 100 800 0 0 0 0 0 0\n", encoding="utf-8")
        (root / "meminfo").write_text("MemTotal: 16384000 kB\nMemAvailable: 8192000 kB\n", encoding="utf-8")
        (root / "temp").write_text("45230\n", encoding="utf-8")
        self.config = root / "config.json"
        self.config.write_text(
            json.dumps(
                {
                    "poll": {"interval_ms": 100},
                    "sources": {
                        "proc_stat": str(root / "stat"),
                        "meminfo": str(root / "meminfo"),
                        "thermal_zone": str(root / "temp"),
                    },
                }
            ),
            encoding="utf-8",
        )

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, argv):
        args = build_parser().parse_args(argv)
        buf = io.StringIO()
        with redirect_stdout(buf):
            rc = args.func(args)
        return rc, buf.getvalue()

    def test_snapshot_prints_json(self):
        rc, out = self._run(["snapshot", "--config", str(self.config), "--gpu-output", "NVIDIA RTX 3080, 42"])
        self.assertEqual(rc, 0)
        data = json.loads(out)
        self.assertEqual(data["memory"]["total_mb"], 16000)
        self.assertEqual(data["gpu"]["usage_percent"], 42.0)
        self.assertEqual(data["temperature"]["celsius"], 45.23)
        # Counters in the fixture never advance.
        self.assertIsNone(data["cpu"])

    def test_watch_stops_after_count(self):
        rc, out = self._run(
            ["watch", "--config", str(self.config), "--count", "2", "--gpu-output", "NVIDIA RTX 3080, 42"]
        )
        self.assertEqual(rc, 0)
        self.assertEqual(out.count("RAM: 8000 MB / 16000 MB (50.0%)"), 2)
        self.assertIn("GPU: NVIDIA RTX 3080 (42.0%)", out)
        self.assertIn("CPU temperature: 45.2°C", out)


if __name__ == "__main__":
    unittest.main()
