"""Structured load logging.

Responsibilities:
- Emit concise, deterministic phase-level logs for each configuration source.
- Route them through `loguru`, scoped to a dedicated sink when one is given.
"""

from __future__ import annotations

from typing import TextIO

from loguru import logger


_PHASE_KEY = "fieldconf_phase"


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def _is_phase_record(record: dict) -> bool:
    return bool(record["extra"].get(_PHASE_KEY))


class LoadLogger:
    """Emit deterministic phase logs for every configuration source a loader runs.

    Messages are logged under the `fieldconf` namespace and are therefore
    silent until `logger.enable("fieldconf")` is called.
    """

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Bind the phase logger and optionally attach a dedicated sink."""

        self._logger = logger.bind(**{_PHASE_KEY: True})
        self._sink_id: int | None = None
        if sink is not None:
            self._sink_id = logger.add(
                sink,
                format="{message}",
                level=level,
                colorize=False,
                filter=_is_phase_record,
            )

    def close(self) -> None:
        """Detach the dedicated sink, if any."""

        if self._sink_id is not None:
            logger.remove(self._sink_id)
            self._sink_id = None

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured load log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        self._logger.log(level, line)

    def log_stage_start(self, stage: str) -> None:
        """Emit a stage-start event."""

        self._emit("INFO", "start", stage)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete event."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure event without the failing values."""

        self._emit("ERROR", "failure", stage, error_type=error_type)
