from __future__ import annotations

import json
import math
import os
from typing import Dict, Optional

DEFAULT_BANDWIDTH_THRESHOLD = 21474836480   # bits per second (20 Gbps)
DEFAULT_SUPPRESSION_DURATION = 3600000      # milliseconds
DEFAULT_SAMPLE_INTERVAL = 1000              # milliseconds
DEFAULT_ACTIVITY_LOG = "/var/log/bandwidth-guard/activity.log"


class ConfigurationError(ValueError):
    pass


class Config:
    """
    Guard configuration, read from a JSON object:
      - controller:            base URL of the controller REST API (required)
      - username / password:   basic auth credentials (default onos / rocks)
      - token:                 bearer token, used instead of basic auth when set
      - verify_tls:            verify controller certificate
      - request_timeout:       seconds allowed for any single REST call
      - bandwidth_threshold:   bits per second above which a port is disabled
      - suppression_duration:  milliseconds a disabled port stays down
      - sample_interval:       milliseconds between two samples of a port
      - activity_log:          file receiving the activity log
    """
    def __init__(self, data: Dict, path: str = ""):
        self.path = path
        self.data = data
        # Required
        self.controller = self._req("controller")
        # Controller access
        self.username = self._get("username", "onos")
        self.password = self._get("password", "rocks")
        self.token: Optional[str] = self._get("token")
        self.verify_tls = str(self._get("verify_tls", "false")).lower() in ("1", "true", "yes", "on")
        self.request_timeout = self._num("request_timeout", 10.0)
        # Behavior
        self.bandwidth_threshold = self._num("bandwidth_threshold", DEFAULT_BANDWIDTH_THRESHOLD)
        self.suppression_duration = self._num("suppression_duration", DEFAULT_SUPPRESSION_DURATION)
        self.sample_interval = self._num("sample_interval", DEFAULT_SAMPLE_INTERVAL)
        # Files
        self.log_file = self._get("activity_log", DEFAULT_ACTIVITY_LOG)

    @classmethod
    def load(cls, path: str) -> "Config":
        if not os.path.exists(path):
            raise ConfigurationError(f"Config file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Config is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError("Config must be a JSON object")
        cfg = cls(data, path=path)
        cfg.validate()
        return cfg

    # ---- derived values ----

    @property
    def suppression_seconds(self) -> float:
        return self.suppression_duration / 1000.0

    @property
    def sample_seconds(self) -> float:
        return self.sample_interval / 1000.0

    def validate(self) -> None:
        if not str(self.controller).strip():
            raise ConfigurationError("controller must not be empty")
        for key in ("bandwidth_threshold", "suppression_duration", "sample_interval", "request_timeout"):
            if not math.isfinite(getattr(self, key)):
                raise ConfigurationError(f"{key} must be finite, got {getattr(self, key)}")
        if self.bandwidth_threshold <= 0:
            raise ConfigurationError(f"bandwidth_threshold must be positive, got {self.bandwidth_threshold}")
        if self.suppression_duration <= 0:
            raise ConfigurationError(f"suppression_duration must be positive, got {self.suppression_duration}")
        if self.sample_interval <= 0:
            raise ConfigurationError(f"sample_interval must be positive, got {self.sample_interval}")
        if self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be positive, got {self.request_timeout}")

    def _req(self, key: str):
        if key not in self.data:
            raise ConfigurationError(f"Missing required config key: {key}")
        return self.data[key]

    def _get(self, key: str, default=None):
        return self.data.get(key, default)

    def _num(self, key: str, default: float) -> float:
        raw = self._get(key, default)
        if isinstance(raw, bool):
            raise ConfigurationError(f"{key} must be a number, got {raw!r}")
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{key} must be a number, got {raw!r}")
        if not math.isfinite(value):
            raise ConfigurationError(f"{key} must be finite, got {raw!r}")
        return value
