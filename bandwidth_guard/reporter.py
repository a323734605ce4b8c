from __future__ import annotations

import os
import sys
import threading
from datetime import datetime, timezone
from typing import Optional

from .models import PortIdentity


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_line(path: str, msg: str):
    """Append to configured log file; on failure, fall back to stderr so journald shows it."""
    ts = utcnow_iso()
    try:
        d = os.path.dirname(path)
        if d:
            os.makedirs(d, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"{ts} {msg}\n")
    except OSError as e:
        sys.stderr.write(f"{ts} [log-fail] {path}: {e} :: {msg}\n")


def format_event(kind: str, port: Optional[PortIdentity] = None, **fields) -> str:
    parts = [f"[{kind}]"]
    if port is not None:
        parts.append(f"device={port.device_id}")
        parts.append(f"port={port.port_number}")
    for key, value in fields.items():
        if isinstance(value, float):
            value = f"{value:.0f}"
        parts.append(f"{key}={value}")
    return " ".join(parts)


class Reporter:
    """
    Activity sink shared by every monitor and timer thread.

    Event kinds:
      monitoring-started, no-data, stats-failed, breach-detected,
      port-suppressed, port-reactivated, action-failed,
      guard-started, guard-stopped, port-left-disabled
    """
    def __init__(self, log_file: str):
        self.log_file = log_file
        self._lock = threading.Lock()

    def event(self, kind: str, port: Optional[PortIdentity] = None, **fields) -> None:
        line = format_event(kind, port, **fields)
        with self._lock:
            log_line(self.log_file, line)
