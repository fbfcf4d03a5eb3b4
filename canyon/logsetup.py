"""Single-line log formatting for the process-wide logger."""

import json
import logging
import time
from typing import IO, Any, Iterable

# Offsets between neighbouring named levels in the line format.
_LEVEL_STEP = 4


def _level_name(levelno: int) -> str:
    level = (levelno - logging.INFO) * _LEVEL_STEP // 10
    if level < 0:
        base, offset = "DEBUG", level + _LEVEL_STEP
    elif level < _LEVEL_STEP:
        base, offset = "INFO", level
    elif level < 2 * _LEVEL_STEP:
        base, offset = "WARN", level - _LEVEL_STEP
    else:
        base, offset = "ERROR", level - 2 * _LEVEL_STEP
    return base if offset == 0 else f"{base}{offset:+d}"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return json.dumps("true" if value else "false")
    if isinstance(value, (str, int, float)):
        return json.dumps(str(value), ensure_ascii=False)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


class LineFormatter(logging.Formatter):
    """Formats records as 'date time LEVEL [groups] message key=value ...'.

    Key/value pairs are taken from an ``attrs`` mapping passed through ``extra``.
    """

    def __init__(self, groups: Iterable[str] = ()):
        super().__init__()
        self.groups = tuple(groups)

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.created)),
            _level_name(record.levelno),
        ]
        if self.groups:
            parts.append("[" + ",".join(self.groups) + "]")
        parts.append(record.getMessage().removesuffix("\n"))
        line = " ".join(parts)
        attrs = getattr(record, "attrs", None) or {}
        for key, value in attrs.items():
            line += f" {key}={_format_value(value)}"
        return line


def setup_logging(debug: bool, stream: IO[str]) -> logging.Handler:
    """Send all logging to ``stream`` at info level, or debug level when asked."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LineFormatter())
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    return handler