#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Daemon entry point:
  - load the JSON config
  - bind the guard to the ONOS REST API
  - run until SIGINT/SIGTERM, then stop cleanly

Exit codes: 0 clean stop, 1 configuration error, 2 fatal error.
"""
from __future__ import annotations

import argparse
import signal
import sys
import threading

from .config import Config, ConfigurationError, DEFAULT_ACTIVITY_LOG
from .guard import GuardService
from .onos import OnosClient
from .reporter import Reporter, log_line
from .scheduler import ThreadScheduler


def build_guard(cfg: Config) -> GuardService:
    reporter = Reporter(cfg.log_file)
    client = OnosClient(cfg)
    scheduler = ThreadScheduler(
        on_error=lambda name, exc: log_line(cfg.log_file, f"[error] task {name}: {exc!r}"),
    )
    return GuardService(cfg, client, client, client, scheduler, reporter)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Per-port bandwidth guard for an ONOS controller")
    ap.add_argument("-c", "--config", required=True, help="Path to JSON config")
    args = ap.parse_args(argv)

    try:
        cfg = Config.load(args.config)
    except ConfigurationError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)

    stop_requested = threading.Event()

    def _signal_stop(signum, frame):
        stop_requested.set()

    signal.signal(signal.SIGINT, _signal_stop)
    signal.signal(signal.SIGTERM, _signal_stop)

    guard = None
    try:
        guard = build_guard(cfg)
        guard.start()
        while not stop_requested.wait(1.0):
            pass
        guard.stop()
        guard.scheduler.shutdown()
    except ConfigurationError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        log_line(getattr(cfg, "log_file", DEFAULT_ACTIVITY_LOG), f"[fatal] {e}")
        if guard is not None:
            guard.stop()
            guard.scheduler.shutdown()
        sys.exit(2)
    sys.exit(0)


if __name__ == "__main__":
    main()
