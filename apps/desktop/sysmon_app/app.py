"""Desktop window fed by the poller through a queued Qt signal."""

from __future__ import annotations

import sys

from PySide6.QtCore import QObject, Qt, Signal, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QApplication, QGroupBox, QLabel, QMainWindow, QProgressBar, QVBoxLayout, QWidget

from sysmon_core import AppConfig, Poller, load_config
from sysmon_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from sysmon_renderer import get_theme
from sysmon_renderer.models import ThemeConfig
from sysmon_renderer.text import cpu_label, fraction, gpu_label, ram_label, temp_label
from sysmon_telemetry import Snapshot, TelemetryProvider

from .consumers import snapshot_to_dashboard


def _stylesheet(theme: ThemeConfig) -> str:
    return f"""
    QMainWindow {{
        background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
            stop:0 {theme.background_start}, stop:0.5 {theme.background_end}, stop:1 {theme.background_start});
    }}
    QLabel {{ color: {theme.text_primary}; font-size: 14px; font-weight: bold; margin: 5px; }}
    QLabel#header {{ color: {theme.text_secondary}; font-size: 24px; margin: 15px; }}
    QGroupBox {{ color: {theme.text_secondary}; border: 1px solid {theme.card_bg}; border-radius: 8px; margin-top: 12px; }}
    QProgressBar {{ background: rgba(255, 255, 255, 0.2); border: none; border-radius: 10px; min-height: 20px; margin: 5px; }}
    QProgressBar::chunk {{
        background: qlineargradient(x1:0, y1:0, x2:1, y2:0, stop:0 {theme.accent}, stop:1 {theme.accent_alt});
        border-radius: 10px;
    }}
    """


class SnapshotBridge(QObject):
    """Hands snapshots from the poller thread to the GUI thread."""

    snapshotReady = Signal(object)

    def deliver(self, snap: Snapshot) -> None:
        self.snapshotReady.emit(snap)


class MonitorWindow(QMainWindow):
    def __init__(self, cfg: AppConfig) -> None:
        super().__init__()
        self.config = cfg
        self.logger = get_logger("app")
        self.telemetry = TelemetryProvider.from_config(cfg)
        self.bridge = SnapshotBridge()
        self.bridge.snapshotReady.connect(self.apply_snapshot, Qt.ConnectionType.QueuedConnection)
        self.poller = Poller(self.telemetry.poll, self.bridge.deliver, interval_s=cfg.poll.interval_ms / 1000)

        self.setWindowTitle("System Monitor")
        self.resize(600, 400)
        self.setStyleSheet(_stylesheet(get_theme(cfg.ui.theme)))

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(10)
        header = QLabel("System Monitor")
        header.setObjectName("header")
        header.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(header)

        self.cpu_label, self.cpu_bar = self._section(layout, "Processor (CPU)", "CPU: loading...")
        self.ram_label, self.ram_bar = self._section(layout, "Memory (RAM)", "RAM: loading...")
        self.gpu_label, self.gpu_bar = self._section(layout, "Graphics (GPU)", "GPU: loading...")
        self.temp_label, _ = self._section(layout, "Temperature", "CPU temperature: loading...", with_bar=False)
        self.setCentralWidget(central)

    @staticmethod
    def _section(layout: QVBoxLayout, title: str, placeholder: str, with_bar: bool = True):
        frame = QGroupBox(title)
        inner = QVBoxLayout(frame)
        inner.setContentsMargins(10, 10, 10, 10)
        label = QLabel(placeholder)
        inner.addWidget(label)
        bar = None
        if with_bar:
            bar = QProgressBar()
            bar.setRange(0, 1000)
            bar.setTextVisible(False)
            inner.addWidget(bar)
        layout.addWidget(frame, 1)
        return label, bar

    @Slot(object)
    def apply_snapshot(self, snap: Snapshot) -> None:
        data = snapshot_to_dashboard(snap)
        self.cpu_label.setText(cpu_label(data))
        self.cpu_bar.setValue(int(fraction(data.cpu_percent) * 1000))
        self.ram_label.setText(ram_label(data))
        self.ram_bar.setValue(int(fraction(data.ram_percent) * 1000))
        self.gpu_label.setText(gpu_label(data))
        self.gpu_bar.setValue(int(fraction(data.gpu_percent) * 1000))
        self.temp_label.setText(temp_label(data))

    def start(self) -> None:
        self.poller.start()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.poller.stop()
        super().closeEvent(event)


def run_gui(cfg: AppConfig | None = None) -> int:
    cfg = cfg or load_config()
    configure_logging(cfg.diagnostics)
    install_crash_hooks()
    logger = get_logger()

    app = QApplication(sys.argv)
    app.setApplicationName("SysMon")

    window = MonitorWindow(cfg)
    window.show()
    window.start()

    exit_code = app.exec()
    window.poller.stop()
    logger.info("app shutdown", extra={"event": "shutdown", "exit_code": int(exit_code)})
    return int(exit_code)
