# noteflow/logging_config.py
"""
Structured logging for trash lifecycle events.

Every line is one JSON object. A sweep run (or any other batch) binds a
run_id and the current phase into context variables so all lines it emits,
including those from the store and audit layers, can be grouped afterwards.
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime

run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
phase_var: ContextVar[str | None] = ContextVar("phase", default=None)

# Record attributes passed through `extra=` that end up in the payload
TRASH_LOG_FIELDS = (
    "event",
    "user_id",
    "item_id",
    "item_type",
    "action",
    "notes_deleted",
    "folders_deleted",
    "items_processed",
    "items_failed",
    "duration_ms",
)


class TrashLogFormatter(logging.Formatter):
    """
    One JSON object per record:
    {"ts": "...Z", "level": "INFO", "logger": "...", "msg": "...", "run_id": "...", "phase": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        run_id = run_id_var.get()
        if run_id:
            payload["run_id"] = run_id
        phase = phase_var.get()
        if phase:
            payload["phase"] = phase

        payload.update({key: getattr(record, key) for key in TRASH_LOG_FIELDS if hasattr(record, key)})

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(TrashLogFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(name)s | %(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    # SQL echo and access logs drown out lifecycle events
    for noisy in ("sqlalchemy.engine", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# -----------------------------------------------------------------------------
# Sweep phases
# -----------------------------------------------------------------------------


@contextmanager
def bound_run(run_id: str):
    """Tag every line logged inside the block with run_id."""
    token = run_id_var.set(run_id)
    try:
        yield run_id
    finally:
        run_id_var.reset(token)


@contextmanager
def sweep_phase(phase: str):
    """
    Bind a phase for the enclosed block and log how long it took.

    Usage:
        with bound_run(run_id), sweep_phase("purge_expired_notes"):
            ...
    """
    phase_token = phase_var.set(phase)
    logger = logging.getLogger("noteflow.sweep")
    started = time.monotonic()

    logger.info(f"Phase {phase} started", extra={"event": "phase_start"})
    try:
        yield
    except Exception as e:
        logger.error(
            f"Phase {phase} failed: {e}",
            extra={"event": "phase_failed", "duration_ms": int((time.monotonic() - started) * 1000)},
            exc_info=True,
        )
        raise
    else:
        logger.info(
            f"Phase {phase} finished",
            extra={"event": "phase_complete", "duration_ms": int((time.monotonic() - started) * 1000)},
        )
    finally:
        phase_var.reset(phase_token)


# -----------------------------------------------------------------------------
# Batch progress
# -----------------------------------------------------------------------------


@dataclass
class BatchProgress:
    """
    Per-item outcome counter for bulk operations and sweep phases.

    Usage:
        progress = BatchProgress(label="bulk_restore", total=len(note_ids))
        for note_id in note_ids:
            progress.record(ok=restore(note_id))
        progress.done()
    """

    label: str
    total: int
    report_every: int = 25

    succeeded: int = field(default=0, init=False)
    failed: int = field(default=0, init=False)
    _started: float = field(default_factory=time.monotonic, init=False)

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed

    def record(self, ok: bool = True) -> None:
        if ok:
            self.succeeded += 1
        else:
            self.failed += 1

        if self.processed % self.report_every == 0:
            logging.getLogger("noteflow.progress").debug(
                f"{self.label}: {self.processed}/{self.total}, {self.failed} failed",
                extra={"event": "batch_progress", "items_processed": self.processed, "items_failed": self.failed},
            )

    def done(self) -> dict:
        """Log the final tally and return it."""
        duration_ms = int((time.monotonic() - self._started) * 1000)
        logging.getLogger("noteflow.progress").info(
            f"{self.label}: {self.succeeded}/{self.total} succeeded, {self.failed} failed",
            extra={
                "event": "batch_complete",
                "items_processed": self.processed,
                "items_failed": self.failed,
                "duration_ms": duration_ms,
            },
        )
        return {"processed": self.processed, "succeeded": self.succeeded, "failed": self.failed}
