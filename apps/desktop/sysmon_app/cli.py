"""CLI entrypoints for the SysMon window, terminal watch, snapshots, diagnostics, and benchmarks."""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import asdict
from pathlib import Path

from sysmon_core import (
    AppConfig,
    DiagnosticsExporter,
    PerformanceController,
    PerformanceTargets,
    Poller,
    build_doctor_payload,
    load_config,
)
from sysmon_core.logging_setup import configure_logging, get_logger
from sysmon_renderer import DashboardRenderer, list_themes
from sysmon_telemetry import CannedGpuProvider, TelemetryProvider

from .consumers import TerminalConsumer, snapshot_to_dashboard, snapshot_to_dict


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _load(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(Path(args.config).expanduser() if args.config else None)
    if args.interval_ms is not None:
        cfg.poll.interval_ms = max(100, min(60000, args.interval_ms))
    return cfg


def _provider(cfg: AppConfig, args: argparse.Namespace) -> TelemetryProvider:
    canned = CannedGpuProvider(args.gpu_output) if args.gpu_output is not None else None
    return TelemetryProvider.from_config(cfg, gpu_provider=canned)


def cmd_run(args: argparse.Namespace) -> int:
    from .app import run_gui

    return run_gui(_load(args))


def cmd_watch(args: argparse.Namespace) -> int:
    cfg = _load(args)
    provider = _provider(cfg, args)
    consumer = TerminalConsumer(sys.stdout, json_lines=args.json, limit=args.count)
    poller = Poller(provider.poll, consumer, interval_s=cfg.poll.interval_ms / 1000)

    poller.start()
    try:
        while not consumer.done.wait(0.25):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop()
    return 0


def cmd_snapshot(args: argparse.Namespace) -> int:
    cfg = _load(args)
    snap = _provider(cfg, args).settled_poll()
    _print_json(snapshot_to_dict(snap))
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    cfg = _load(args)
    if DashboardRenderer is None:
        get_logger("cli").error("Pillow is required for render")
        return 1
    snap = _provider(cfg, args).settled_poll()
    out = DashboardRenderer().save_png(
        snapshot_to_dashboard(snap),
        Path(args.out).expanduser(),
        theme_name=args.theme or cfg.ui.theme,
    )
    _print_json({"success": True, "path": str(out)})
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    cfg = _load(args)
    payload = build_doctor_payload(cfg, provider=_provider(cfg, args))

    if args.export:
        exporter = DiagnosticsExporter()
        out_dir = Path(args.out_dir).expanduser().resolve() if args.out_dir else None
        bundle = exporter.bundle(cfg=cfg, doctor_payload=payload, output_dir=out_dir)
        payload["diagnostics_bundle"] = str(bundle)

    _print_json(payload)
    return 0


def cmd_benchmark(args: argparse.Namespace) -> int:
    cfg = _load(args)
    provider = _provider(cfg, args)
    perf = PerformanceController(
        PerformanceTargets(
            cpu_percent_max=cfg.performance.cpu_percent_max,
            rss_mb_max=cfg.performance.rss_mb_max,
            tick_ms_max=cfg.performance.tick_ms_max,
        )
    )
    samples = []

    def _record(_snap) -> None:
        samples.append(asdict(perf.sample(poller.status.last_tick_ms, cfg.poll.interval_ms)))

    poller = Poller(provider.poll, _record, interval_s=cfg.poll.interval_ms / 1000)
    start = time.perf_counter()
    poller.start()
    try:
        time.sleep(max(args.seconds, 0))
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop()
    elapsed = max(time.perf_counter() - start, 1e-9)

    cpu_max = max((s["cpu_percent"] for s in samples), default=0.0)
    rss_max = max((s["rss_mb"] for s in samples), default=0.0)
    tick_max = max((s["tick_ms"] for s in samples), default=0.0)
    tick_avg = sum(s["tick_ms"] for s in samples) / len(samples) if samples else 0.0

    pass_cpu = cpu_max <= cfg.performance.cpu_percent_max
    pass_mem = rss_max <= cfg.performance.rss_mb_max
    pass_tick = tick_max <= cfg.performance.tick_ms_max

    _print_json(
        {
            "seconds": round(elapsed, 3),
            "ticks": len(samples),
            "interval_ms": cfg.poll.interval_ms,
            "overruns": poller.status.overruns,
            "tick_ms": {"avg": tick_avg, "max": tick_max},
            "budget": {
                "targets": asdict(cfg.performance),
                "max_observed": {
                    "cpu_percent": cpu_max,
                    "rss_mb": rss_max,
                    "tick_ms": tick_max,
                },
                "pass": bool(pass_cpu and pass_mem and pass_tick),
                "checks": {
                    "cpu": pass_cpu,
                    "memory": pass_mem,
                    "tick": pass_tick,
                },
                "warnings": sorted({s["warning"] for s in samples if s["warning"]}),
            },
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Settings file (defaults to the per-user config)")
    common.add_argument("--interval-ms", type=int, default=None, help="Override the poll interval")
    common.add_argument("--gpu-output", default=None, help="Use fixed GPU query output instead of the real backend")

    parser = argparse.ArgumentParser(prog="sysmon", description="SysMon host resource monitor")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", parents=[common], help="Open the monitor window")
    run_cmd.set_defaults(func=cmd_run)

    watch_cmd = sub.add_parser("watch", parents=[common], help="Print live readings to the terminal")
    watch_cmd.add_argument("--count", type=_positive_int, default=None, help="Stop after this many snapshots")
    watch_cmd.add_argument("--json", action="store_true", help="Emit one JSON object per line")
    watch_cmd.set_defaults(func=cmd_watch)

    snap_cmd = sub.add_parser("snapshot", parents=[common], help="Print one snapshot as JSON")
    snap_cmd.set_defaults(func=cmd_snapshot)

    render_cmd = sub.add_parser("render", parents=[common], help="Render one snapshot to a PNG file")
    render_cmd.add_argument("--out", required=True, help="Output PNG path")
    render_cmd.add_argument("--theme", choices=list_themes(), default=None)
    render_cmd.set_defaults(func=cmd_render)

    doctor_cmd = sub.add_parser("doctor", parents=[common], help="Report which metric sources are available")
    doctor_cmd.add_argument("--export", action="store_true", help="Export offline diagnostics bundle")
    doctor_cmd.add_argument("--out-dir", default=None, help="Optional output directory for diagnostics bundle")
    doctor_cmd.set_defaults(func=cmd_doctor)

    bench_cmd = sub.add_parser("benchmark", parents=[common], help="Measure sampling cost and monitor overhead")
    bench_cmd.add_argument("--seconds", type=int, default=10)
    bench_cmd.set_defaults(func=cmd_benchmark)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(_load(args).diagnostics, console=False)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
