"""Structured logging: console plus an optional JSON-lines event log."""

import json
import logging
import os
import sys
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import IO, Any

from omnisearch.core.config import config


def _format_duration(seconds: float) -> str:
    if seconds < 0:
        return "0s"
    if seconds >= 60:
        m = int(seconds // 60)
        s = seconds % 60
        if s < 0.05:
            return f"{m}m"
        return f"{m}m {s:.0f}s" if s >= 1 else f"{m}m {s:.1f}s"
    if seconds >= 1:
        return f"{seconds:.1f}s"
    if seconds >= 0.001:
        return f"{seconds * 1000:.0f}ms"
    if seconds > 0:
        return "<1ms"
    return "0s"


def _short_reason(reason: str | None, max_len: int = 80) -> str:
    """One-line short reason for console (failed provider)."""
    if not reason or not reason.strip():
        return ""
    s = reason.strip().replace("\n", " ").strip()
    return s[:max_len] + "..." if len(s) > max_len else s


def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


def _c(role: str) -> str:
    if not _use_color():
        return ""
    # 38;5;N = foreground 256-color
    codes = {
        "dim": "\033[38;5;239m",
        "provider": "\033[38;5;81m",
        "ok": "\033[38;5;78m",
        "fail": "\033[38;5;203m",
        "duration": "\033[38;5;221m",
    }
    return codes.get(role, "")


def _reset() -> str:
    if not _use_color():
        return ""
    return "\033[0m"


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class OmnisearchLogger:
    def __init__(self):
        self.log_file = config.logs_dir / "omnisearch.log"
        self._file_lock = threading.Lock()
        self._log_file_handle: IO[str] | None = None
        self._setup_console_logger()

    def _setup_console_logger(self):
        self.console = logging.getLogger("omnisearch")
        self.console.setLevel(logging.DEBUG)
        self._console_formatter = logging.Formatter(
            "%(asctime)s │ %(message)s", datefmt="%H:%M:%S"
        )
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(getattr(logging, config.log_level, logging.INFO))
            handler.setFormatter(self._console_formatter)
            self.console.addHandler(handler)

    def log_event(self, event: LogEvent) -> None:
        if not config.log_to_file:
            return
        with self._file_lock:
            if self._log_file_handle is None:
                config.logs_dir.mkdir(parents=True, exist_ok=True)
                self._log_file_handle = open(self.log_file, "a", encoding="utf-8")
            self._log_file_handle.write(event.to_json() + "\n")
            self._log_file_handle.flush()

    def close(self) -> None:
        with self._file_lock:
            if self._log_file_handle is not None:
                self._log_file_handle.close()
                self._log_file_handle = None

    def _timestamp(self) -> str:
        return datetime.now().isoformat()

    def provider_registered(self, name: str, provider_type: str):
        self.log_event(
            LogEvent(
                event_type="PROVIDER_REGISTERED",
                timestamp=self._timestamp(),
                data={"provider": name, "type": provider_type},
            )
        )
        self.console.debug(f"+ provider {_c('provider')}{name}{_reset()} ({provider_type})")

    def provider_removed(self, name: str):
        self.log_event(
            LogEvent(
                event_type="PROVIDER_REMOVED",
                timestamp=self._timestamp(),
                data={"provider": name},
            )
        )
        self.console.debug(f"- provider {_c('provider')}{name}{_reset()}")

    def query_dispatched(self, query: str, generation: int, call_count: int):
        self.log_event(
            LogEvent(
                event_type="QUERY_DISPATCHED",
                timestamp=self._timestamp(),
                data={"query": query[:200], "generation": generation, "calls": call_count},
            )
        )
        self.console.debug(
            f"Query #{generation} {query[:60]!r} → {call_count} provider call(s)"
        )

    def provider_settled(self, name: str, scope: str, result_count: int, duration_seconds: float):
        self.log_event(
            LogEvent(
                event_type="PROVIDER_SETTLED",
                timestamp=self._timestamp(),
                data={
                    "provider": name,
                    "scope": scope,
                    "results": result_count,
                    "duration_seconds": round(duration_seconds, 3),
                },
            )
        )
        dur = f"{_c('duration')}{_format_duration(duration_seconds)}{_reset()}"
        self.console.debug(
            f"  {_c('ok')}✓{_reset()} {_c('provider')}{name}{_reset()} [{scope}]  "
            f"{result_count} result(s) in {dur}"
        )

    def provider_failed(self, name: str, scope: str, reason: str, duration_seconds: float):
        self.log_event(
            LogEvent(
                event_type="PROVIDER_FAILED",
                timestamp=self._timestamp(),
                data={
                    "provider": name,
                    "scope": scope,
                    "error_reason": reason[:500],
                    "duration_seconds": round(duration_seconds, 3),
                },
            )
        )
        dur = f"{_c('duration')}{_format_duration(duration_seconds)}{_reset()}"
        self.console.warning(
            f"  {_c('fail')}✗{_reset()} {_c('provider')}{name}{_reset()} [{scope}]  "
            f"failed after {dur}: {_short_reason(reason)}"
        )

    def stale_discarded(self, name: str, scope: str, generation: int, current: int | None):
        """current is None when the orchestrator was disposed before settlement."""
        self.log_event(
            LogEvent(
                event_type="STALE_DISCARDED",
                timestamp=self._timestamp(),
                data={
                    "provider": name,
                    "scope": scope,
                    "generation": generation,
                    "current_generation": current,
                },
            )
        )
        if current is None:
            self.console.debug(f"  {_c('dim')}drop {name} [{scope}] after dispose{_reset()}")
        else:
            self.console.debug(
                f"  {_c('dim')}drop {name} [{scope}] #{generation} (current #{current}){_reset()}"
            )

    def directories_updated(self, paths: list[str], changed: bool):
        self.log_event(
            LogEvent(
                event_type="DIRECTORIES_UPDATED",
                timestamp=self._timestamp(),
                data={"paths": paths, "changed": changed},
            )
        )
        self.console.debug(f"Directories ({len(paths)}){'' if changed else ' unchanged'}")

    def warning(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="WARNING",
            timestamp=self._timestamp(),
            data={"message": message[:500]},
        )
        self.log_event(event)

        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.warning(message, *args, **log_kwargs)

    def exception(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="ERROR",
            timestamp=self._timestamp(),
            data={"message": message[:500]},
        )
        self.log_event(event)
        self.console.exception(message, *args, **kwargs)


logger = OmnisearchLogger()
