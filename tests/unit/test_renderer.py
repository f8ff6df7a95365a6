from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from sysmon_renderer import DEFAULT_THEME_NAME, DashboardData, get_theme, list_themes
from sysmon_renderer.text import cpu_label, fraction, gpu_label, labels, ram_label, temp_label

STAMP = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

FULL = DashboardData(
    cpu_percent=12.34,
    ram_used_mb=8000,
    ram_total_mb=16000,
    ram_percent=50.0,
    gpu_name="NVIDIA RTX 3080",
    gpu_percent=42.0,
    temp_c=45.23,
    timestamp=STAMP,
)

EMPTY = DashboardData(
    cpu_percent=None,
    ram_used_mb=None,
    ram_total_mb=None,
    ram_percent=None,
    gpu_name="Graphics adapter",
    gpu_percent=None,
    temp_c=None,
    timestamp=STAMP,
)


def test_labels_with_values() -> None:
    assert labels(FULL) == [
        "CPU: 12.3%",
        "RAM: 8000 MB / 16000 MB (50.0%)",
        "GPU: NVIDIA RTX 3080 (42.0%)",
        "CPU temperature: 45.2°C",
    ]


def test_unknown_values_render_not_available() -> None:
    assert cpu_label(EMPTY) == "CPU: N/A"
    assert ram_label(EMPTY) == "RAM: N/A"
    assert gpu_label(EMPTY) == "GPU: Graphics adapter (N/A)"
    assert temp_label(EMPTY) == "CPU temperature: N/A"


@pytest.mark.parametrize("value,expected", [(None, 0.0), (-3.0, 0.0), (50.0, 0.5), (140.0, 1.0)])
def test_fraction_clamped(value, expected) -> None:
    assert fraction(value) == expected


def test_themes() -> None:
    assert DEFAULT_THEME_NAME in list_themes()
    assert get_theme(None).name == DEFAULT_THEME_NAME
    assert get_theme("missing").name == DEFAULT_THEME_NAME
    assert get_theme("Neon Slate").accent == "#35D9FF"


def test_dashboard_png(tmp_path: Path) -> None:
    pytest.importorskip("PIL")
    from sysmon_renderer.dashboard import DashboardRenderer

    renderer = DashboardRenderer(width=320, height=240)
    out = renderer.save_png(EMPTY, tmp_path / "out" / "dash.png")
    assert out.read_bytes().startswith(b"\x89PNG")
    image = renderer.render_image(FULL, "Solar Drift")
    assert image.size == (320, 240)
    assert renderer.preview_data_url(FULL).startswith("data:image/png;base64,")
