from __future__ import annotations

import logging
import sys
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TextIO


class PipelineLogger:
    """Run logger for batch extraction with three sinks.

    - console   : INFO+ to stderr, so stdout stays free for JSON results
    - info_file : INFO+ persisted copy of the console
    - trace_file: everything, including per-contact detail

    Writes are serialized so worker threads can share one logger.
    """

    LEVELS: dict[str, int] = {
        "TRACE": -1,
        "DEBUG": 0,
        "INFO": 1,
        "PROG": 1,
        "METRIC": 1,
        "WARN": 2,
        "ERROR": 3,
    }

    def __init__(
        self,
        log_file: str | Path | None = None,
        trace_file: str | Path | None = None,
        console: bool = True,
        min_level: str = "INFO",
        stream: TextIO | None = None,
    ) -> None:
        self.console = console
        self.min_level = self.LEVELS.get(min_level.upper(), 1)
        self.stream = stream or sys.stderr
        self.log_path = Path(log_file) if log_file else None
        self.trace_path = Path(trace_file) if trace_file else None
        self._info_file = self._open(self.log_path, "Log")
        self._trace_file = self._open(self.trace_path, "Trace")
        self._timings: dict[str, float] = {}
        self._metrics: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._start = time.perf_counter()

    @staticmethod
    def _open(path: Path | None, kind: str) -> TextIO | None:
        if path is None:
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(path, "w", encoding="utf-8", buffering=1)
        handle.write(f"callsheet {kind} | {time.strftime('%Y-%m-%d %H:%M:%S')}\n\n")
        return handle

    def _write(self, line: str, level_int: int) -> None:
        with self._lock:
            if self.console and level_int >= self.min_level:
                print(line, file=self.stream, flush=True)
            if self._info_file and level_int >= 1:
                self._info_file.write(line + "\n")
            if self._trace_file:
                self._trace_file.write(line + "\n")

    def _emit(self, level: str, msg: str) -> None:
        elapsed = time.perf_counter() - self._start
        self._write(f"[{elapsed:8.2f}s] {level:6} | {msg}", self.LEVELS.get(level, 1))

    def trace(self, msg: str) -> None:
        self._emit("TRACE", msg)

    def debug(self, msg: str) -> None:
        self._emit("DEBUG", msg)

    def info(self, msg: str) -> None:
        self._emit("INFO", msg)

    def warn(self, msg: str) -> None:
        self._emit("WARN", msg)

    def error(self, msg: str) -> None:
        self._emit("ERROR", msg)

    def section(self, title: str) -> None:
        rule = "=" * 72
        for line in (rule, f"  {title}", rule):
            self._write(line, 1)

    def progress(self, current: int, total: int, label: str = "") -> None:
        pct = (current / total * 100) if total else 0.0
        msg = f"[{current}/{total}] {pct:5.1f}%"
        self._emit("PROG", f"{msg}  {label}" if label else msg)

    def metric(self, name: str, value: Any, unit: str = "") -> None:
        self._metrics[name] = value
        shown = f"{value:.3f}" if isinstance(value, float) else str(value)
        self._emit("METRIC", f"{name} = {shown}{' ' + unit if unit else ''}")

    @contextmanager
    def timer(self, name: str):
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - started
            self._timings[name] = elapsed
            self._emit("METRIC", f"timer:{name} = {elapsed:.3f}s")

    def summary(self) -> None:
        self.section("Run summary")
        self.info(f"Wall time: {time.perf_counter() - self._start:.2f}s")
        for name, elapsed in sorted(self._timings.items(), key=lambda item: -item[1]):
            self.info(f"  {name:<40} {elapsed:>8.3f}s")
        if self.log_path:
            self.info(f"Info log : {self.log_path}")
        if self.trace_path:
            self.info(f"Trace log: {self.trace_path}")

    def install_stdlib_bridge(self, root_logger: str = "", level: int = logging.INFO) -> None:
        """Route stdlib ``logging`` records from *root_logger* into these sinks."""
        root = logging.getLogger(root_logger)
        root.setLevel(min(root.level or logging.DEBUG, level))
        if not any(isinstance(h, _BridgeHandler) for h in root.handlers):
            handler = _BridgeHandler(self)
            handler.setLevel(level)
            root.addHandler(handler)

    def remove_stdlib_bridge(self, root_logger: str = "") -> None:
        root = logging.getLogger(root_logger)
        for handler in [h for h in root.handlers if isinstance(h, _BridgeHandler)]:
            root.removeHandler(handler)

    def close(self) -> None:
        for handle in (self._info_file, self._trace_file):
            if handle:
                handle.close()
        self._info_file = None
        self._trace_file = None

    def __enter__(self) -> "PipelineLogger":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class _BridgeHandler(logging.Handler):
    _LEVEL_NAMES = {
        logging.DEBUG: "debug",
        logging.INFO: "info",
        logging.WARNING: "warn",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def __init__(self, target: PipelineLogger) -> None:
        super().__init__()
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        try:
            method = getattr(self.target, self._LEVEL_NAMES.get(record.levelno, "info"))
            method(f"[{record.name}] {self.format(record)}")
        except Exception:
            self.handleError(record)
