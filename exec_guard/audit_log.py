"""
Execution Audit Log
===================

Append-only, date-partitioned JSONL audit trail of every gateway decision.

This module provides:
- AuditLog: Writes decision entries and execution-result updates, and reads
  them back with updates merged into their entries

File layout:
    <audit_dir>/exec-audit-YYYY-MM-DD.jsonl   (one file per UTC day)

Each line is either a decision entry (AuditLogEntry.to_dict()) or an update
record tagged ``"type": "update"`` that references an entry by ``audit_id``.
Lines are never rewritten. Writes and reads never raise: failures are logged
and reported as False / [].

Usage:
    audit = AuditLog(Path("data/audit"))
    audit.write(entry)
    audit.update_result(entry.id, ExecutionResult.SUCCESS, duration_ms=120)
    for entry in audit.read_recent(limit=20):
        print(entry.id, entry.execution_result)
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator

from .constants import AUDIT_FILE_PREFIX, AUDIT_FILE_SUFFIX
from .models import AuditLogEntry, AuditUpdateRecord, ExecutionResult
from .redact import safe_error_message

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditLog:
    """
    Date-partitioned JSONL audit log.

    Attributes:
        directory: Directory holding the daily files (created on first write)

    Example:
        >>> audit = AuditLog(tmp_path)
        >>> audit.write(entry)
        True
        >>> [e.id for e in audit.read_recent(limit=1)]
        ['audit-1700000000000-1a2b3c4d']
    """

    def __init__(
        self,
        directory: Path | str,
        now: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the audit log.

        Args:
            directory: Audit directory
            now: UTC wall clock used to pick the day file
        """
        self.directory = Path(directory)
        self._now = now or _utc_now

    def path_for(self, day: date | None = None) -> Path:
        """Path of the audit file for a UTC day (today when None)."""
        day = day or self._now().date()
        return self.directory / f"{AUDIT_FILE_PREFIX}{day.isoformat()}{AUDIT_FILE_SUFFIX}"

    def _append(self, record: dict[str, Any]) -> bool:
        try:
            line = json.dumps(record, ensure_ascii=False) + "\n"
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(self.path_for(), "a", encoding="utf-8") as f:
                f.write(line)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write audit record: {safe_error_message(e)}")
            return False
        return True

    def write(self, entry: AuditLogEntry) -> bool:
        """
        Append one decision entry to today's file.

        Returns:
            True if the line was written
        """
        return self._append(entry.to_dict())

    def update_result(
        self,
        audit_id: str,
        result: ExecutionResult,
        duration_ms: int,
    ) -> bool:
        """
        Append an execution-result update for an existing entry.

        The entry may live in an earlier day's file; the update always goes
        to today's file and is merged on read.

        Args:
            audit_id: ID of the entry being updated
            result: How the execution ended
            duration_ms: Wall time of the execution

        Returns:
            True if the update line was written
        """
        record = AuditUpdateRecord(
            audit_id=audit_id,
            execution_result=ExecutionResult(result),
            duration_ms=int(duration_ms),
            timestamp=int(self._now().timestamp() * 1000),
        )
        return self._append(record.to_dict())

    def iter_records(self, day: date | None = None) -> Iterator[dict[str, Any]]:
        """
        Yield the raw records of one day's file, in file order.

        Unparseable lines are skipped. A missing or unreadable file yields
        nothing.
        """
        path = self.path_for(day)
        try:
            with open(path, encoding="utf-8") as f:
                lines = f.readlines()
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error(f"Failed to read audit log {path.name}: {safe_error_message(e)}")
            return

        for line in lines:
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                logger.debug(f"Skipping unparseable audit line in {path.name}")
                continue
            if isinstance(record, dict):
                yield record

    def read_recent(self, limit: int = 50) -> list[AuditLogEntry]:
        """
        Read the most recent entries from today's file.

        Update records are merged into the entry they reference (later
        updates win). Updates whose entry is not in today's file are
        dropped.

        Args:
            limit: Maximum number of entries to return

        Returns:
            Up to ``limit`` entries, oldest first
        """
        if limit <= 0:
            return []

        entries: dict[str, AuditLogEntry] = {}
        for record in self.iter_records():
            if record.get("type") == AuditUpdateRecord.RECORD_TYPE:
                try:
                    update = AuditUpdateRecord.from_dict(record)
                except (KeyError, TypeError, ValueError):
                    continue
                entry = entries.get(update.audit_id)
                if entry is not None:
                    entry.execution_result = update.execution_result
                    entry.duration_ms = update.duration_ms
                continue

            try:
                entry = AuditLogEntry.from_dict(record)
            except (KeyError, TypeError, ValueError):
                continue
            entries[entry.id] = entry

        return list(entries.values())[-limit:]
