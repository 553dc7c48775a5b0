"""
ledger_vm.logging
-----------------

Structured logging for the engine, the contracts tooling and the simulator CLI.

Records carry two kinds of structured fields:

* **context** fields bound for a whole scope (trace_id, chain_id, scenario,
  step, contract), stored in a `contextvars.ContextVar` so concurrent callers
  never see each other's values;
* **extras** passed at the call site with `extra={...}`.

Two renderings are available: one JSON object per line, or a single text line
`ts | LEVEL | logger | k=v ... | message` (level colored on a TTY).

Usage
-----
    from ledger_vm import logging as vlog

    vlog.configure(json=False, level="INFO")  # once, from an application
    log = vlog.get_logger(__name__)

    with vlog.trace_scope():
        vlog.bind(scenario="epoch-cap")
        log.info("scenario starting", extra={"steps": 4})

Library modules only call `logging.getLogger(__name__)`; nothing is printed
until an application calls `configure()` (or `configure_from_config()`).
"""

from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

LOGGER_TREES = ("ledger_vm", "contracts")

CONTEXT_KEYS = ("trace_id", "chain_id", "scenario", "step", "contract")

_FIELDS: ContextVar[Mapping[str, Any]] = ContextVar("ledger_vm_log_fields", default={})

# Attributes every LogRecord has; anything else on a record came from `extra=`.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


# --- context ----------------------------------------------------------------


def context() -> Dict[str, Any]:
    """Copy of the fields bound in the current context."""
    return dict(_FIELDS.get())


def bind(**fields: Any) -> None:
    merged = dict(_FIELDS.get())
    for k, v in fields.items():
        merged[k] = _plain(v)
    _FIELDS.set(merged)


def unbind(*keys: str) -> None:
    _FIELDS.set({k: v for k, v in _FIELDS.get().items() if k not in keys})


def clear_context() -> None:
    _FIELDS.set({})


@contextmanager
def trace_scope(trace_id: Optional[str] = None) -> Iterator[str]:
    """Bind a trace id for the block; every field bound inside is dropped on exit."""
    token = _FIELDS.set(dict(_FIELDS.get()))
    tid = trace_id or short_uuid()
    try:
        bind(trace_id=tid)
        yield tid
    finally:
        _FIELDS.reset(token)


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


# --- formatting ---------------------------------------------------------------


def _plain(v: Any) -> Any:
    """Make a value JSON-friendly: bytes as 0x-hex, paths and unknown objects as str."""
    if isinstance(v, (bytes, bytearray, memoryview)):
        return "0x" + bytes(v).hex()
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (list, tuple)):
        return [_plain(x) for x in v]
    if isinstance(v, Mapping):
        return {str(k): _plain(x) for k, x in v.items()}
    if isinstance(v, Path):
        return str(v)
    return str(v)


def _record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS and not k.startswith("_")}


def _timestamp(record: logging.LogRecord) -> str:
    ts = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
    return ts.isoformat(timespec="milliseconds")


class JSONFormatter(logging.Formatter):
    """One JSON object per record; context fields first, then call-site extras."""

    def format(self, record: logging.LogRecord) -> str:
        out: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        out.update(context())
        for k, v in _record_extras(record).items():
            out.setdefault(k, _plain(v))
        if record.exc_info:
            out["err"] = self.formatException(record.exc_info)
        return json.dumps(out, separators=(",", ":"), default=str)


_LEVEL_COLORS = {
    logging.DEBUG: "\x1b[90m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[1;35m",
}


class TextFormatter(logging.Formatter):
    """
    `2026-01-05T12:34:56.789+00:00 | INFO  | ledger_vm.runtime.engine | scenario=basic method=swap | tx failed`
    """

    def __init__(self, stream: Any = None) -> None:
        super().__init__()
        self.color = _is_tty(stream)

    def format(self, record: logging.LogRecord) -> str:
        bound = context()
        pairs: List[str] = [f"{k}={bound[k]}" for k in CONTEXT_KEYS if bound.get(k) is not None]
        pairs += [f"{k}={_plain(v)}" for k, v in _record_extras(record).items() if k not in bound]

        level = f"{record.levelname:<5}"
        if self.color:
            level = f"{_LEVEL_COLORS.get(record.levelno, '')}{level}\x1b[0m"

        parts = [_timestamp(record), level, record.name]
        if pairs:
            parts.append(" ".join(pairs))
        parts.append(record.getMessage())
        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return line


def _is_tty(stream: Any) -> bool:
    if stream is None or os.environ.get("NO_COLOR") is not None:
        return False
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError):
        return False


# --- setup ----------------------------------------------------------------------


def configure(
    *,
    json: Optional[bool] = None,
    level: Any = "INFO",
    stream: Any = None,
    file_path: Optional[Any] = None,
) -> None:
    """
    Attach one console handler (and optionally a JSON file handler) to the
    `ledger_vm` and `contracts` logger trees, replacing handlers from an
    earlier call.

    json=None follows LEDGER_VM_LOG_FORMAT (json|text).
    """
    stream = sys.stderr if stream is None else stream
    lvl = _level(level)
    use_json = json if json is not None else os.environ.get("LEDGER_VM_LOG_FORMAT", "").strip().lower() == "json"

    console = logging.StreamHandler(stream)
    console.setFormatter(JSONFormatter() if use_json else TextFormatter(stream))
    handlers: List[logging.Handler] = [console]
    if file_path:
        path = Path(file_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setFormatter(JSONFormatter())
        handlers.append(fh)

    for tree in LOGGER_TREES:
        logger = logging.getLogger(tree)
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        for h in handlers:
            h.setLevel(lvl)
            logger.addHandler(h)
        logger.setLevel(lvl)
        logger.propagate = False


def configure_from_config(cfg: Any, *, stream: Any = None) -> None:
    """Configure from a `ledger_vm.config.VMConfig` and bind its chain id."""
    bind(chain_id=cfg.chain_id)
    configure(json=cfg.log_format == "json", level=cfg.log_level, stream=stream)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "ledger_vm")


class ContextAdapter(logging.LoggerAdapter):
    """Adds fixed fields to every record; call-site `extra=` keys win."""

    def process(self, msg: Any, kwargs: Any) -> Tuple[Any, Any]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def with_fields(logger: logging.Logger, **fields: Any) -> ContextAdapter:
    return ContextAdapter(logger, {k: _plain(v) for k, v in fields.items()})


def _level(level: Any) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


__all__ = [
    "context",
    "bind",
    "unbind",
    "clear_context",
    "trace_scope",
    "short_uuid",
    "JSONFormatter",
    "TextFormatter",
    "configure",
    "configure_from_config",
    "get_logger",
    "with_fields",
    "ContextAdapter",
]
