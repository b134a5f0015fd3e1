"""Application settings schema and loader.

Defaults are the demo's fixed parameters. An optional JSON file (path from the
caller or ``CAMTOP_CONFIG``) can override them; it is only ever read.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from camtop.errors import ConfigError

CONFIG_ENV_VAR = "CAMTOP_CONFIG"

PROBES = ("ping", "interface")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class CaptureConfig:
    device_index: int = 0
    frame_delay_s: float = 0.05


@dataclass
class DetectionConfig:
    cascade_path: str | None = None
    frame_skip: int = 3
    scale_factor: float = 1.1
    min_neighbors: int = 4
    min_size: int = 30


@dataclass
class TelemetryConfig:
    # CPU is refreshed every frame_skip * cpu_refresh_every frames
    cpu_refresh_every: int = 5


@dataclass
class NetworkConfig:
    probe: str = "ping"
    host: str = "8.8.8.8"
    count: int = 1
    timeout_s: float = 2.0
    interval_s: float = 5.0


@dataclass
class DisplayConfig:
    window_title: str = "Red-Tinted Face Detection"
    key_poll_ms: int = 10
    quit_key: str = "q"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = False


@dataclass
class AppConfig:
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def config_path() -> Path | None:
    value = os.environ.get(CONFIG_ENV_VAR)
    return Path(value) if value else None


def _merge(dataclass_type, raw: Any):
    defaults = dataclass_type()
    if not isinstance(raw, dict):
        return defaults
    known = {f.name for f in fields(dataclass_type)}
    for k, v in raw.items():
        if k in known:
            setattr(defaults, k, v)
    return defaults


def _normalize_capture(cfg: AppConfig) -> None:
    cfg.capture.device_index = max(0, int(cfg.capture.device_index))
    cfg.capture.frame_delay_s = max(0.0, float(cfg.capture.frame_delay_s))


def _normalize_detection(cfg: AppConfig) -> None:
    det = cfg.detection
    det.frame_skip = max(1, int(det.frame_skip))
    det.scale_factor = max(1.01, float(det.scale_factor))
    det.min_neighbors = max(0, int(det.min_neighbors))
    det.min_size = max(1, int(det.min_size))
    if det.cascade_path is not None:
        det.cascade_path = str(det.cascade_path)


def _normalize_telemetry(cfg: AppConfig) -> None:
    cfg.telemetry.cpu_refresh_every = max(1, int(cfg.telemetry.cpu_refresh_every))


def _normalize_network(cfg: AppConfig) -> None:
    net = cfg.network
    if net.probe not in PROBES:
        raise ConfigError(f"unknown network probe {net.probe!r}, expected one of {PROBES}")
    net.host = str(net.host)
    net.count = max(1, int(net.count))
    net.timeout_s = max(0.1, float(net.timeout_s))
    net.interval_s = max(0.1, float(net.interval_s))


def _normalize_display(cfg: AppConfig) -> None:
    cfg.display.key_poll_ms = max(1, int(cfg.display.key_poll_ms))
    if not isinstance(cfg.display.quit_key, str) or len(cfg.display.quit_key) != 1:
        raise ConfigError("display.quit_key must be a single character")


def _normalize_logging(cfg: AppConfig) -> None:
    cfg.logging.level = str(cfg.logging.level).upper()
    if cfg.logging.level not in LOG_LEVELS:
        raise ConfigError(f"unknown log level {cfg.logging.level!r}")
    if not isinstance(cfg.logging.json, bool):
        raise ConfigError("logging.json must be true or false")


def load_config(path: Path | None = None) -> AppConfig:
    """
    Load settings, falling back to defaults for anything not given.

    Raises:
        ConfigError: The file exists but is not valid JSON, or holds values
            that cannot be used.
    """
    path = path or config_path()
    if path is None or not path.exists():
        cfg = AppConfig()
    else:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigError(f"cannot read config {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"config {path} must hold a JSON object")

        cfg = AppConfig(
            capture=_merge(CaptureConfig, raw.get("capture", {})),
            detection=_merge(DetectionConfig, raw.get("detection", {})),
            telemetry=_merge(TelemetryConfig, raw.get("telemetry", {})),
            network=_merge(NetworkConfig, raw.get("network", {})),
            display=_merge(DisplayConfig, raw.get("display", {})),
            logging=_merge(LoggingConfig, raw.get("logging", {})),
        )

    try:
        _normalize_capture(cfg)
        _normalize_detection(cfg)
        _normalize_telemetry(cfg)
        _normalize_network(cfg)
        _normalize_display(cfg)
        _normalize_logging(cfg)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid config value: {exc}") from exc
    return cfg
