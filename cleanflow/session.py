"""Cleaning sessions: per-user table state, journal and state history."""

from collections import OrderedDict
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional
import hashlib
import json
import logging
import uuid

import pandas as pd

from .autopilot import AutopilotResult, run_autopilot
from .config import AutopilotConfig, settings
from .errors import SessionNotFoundError
from .journal import TransformationJournal
from .operations import apply
from .table import Table

logger = logging.getLogger(__name__)


@dataclass
class StateRecord:
    """Metadata for a single committed table state."""
    id: str
    parent: Optional[str]
    timestamp: str
    data_hash: str
    row_count: int
    col_count: int
    delta_summary: str


class CleaningSession:
    """
    Owns one user's current table, the imported original and the journal.

    Tables are immutable, so sessions never share mutable state. The
    journal only ever grows; the original table stays available for
    before/after comparisons.
    """

    def __init__(self, table: Table, name: str = "dataset", session_id: Optional[str] = None):
        self.id = session_id or uuid.uuid4().hex
        self.name = name
        self.created_at = pd.Timestamp.now().isoformat()
        self.journal = TransformationJournal()
        self.history: List[StateRecord] = []

        self._original = table
        self._current = table
        self._commit(table, f"Imported {name}")

    @property
    def original(self) -> Table:
        return self._original

    @property
    def current(self) -> Table:
        return self._current

    def apply(self, operation_name: str, **params: Any) -> Table:
        """
        Apply a named operation to the current table and journal it.

        The current table is left untouched if the operation raises.
        """
        result = apply(self._current, operation_name, params)
        self._current = result.table
        self.journal.append(result.entry)
        self._commit(result.table, result.entry)
        return result.table

    def select_columns(self, keep: List[str]) -> Table:
        return self.apply("select_columns", columns=list(keep))

    def run_autopilot(self, config: Optional[AutopilotConfig] = None) -> AutopilotResult:
        result = run_autopilot(self._current, config)
        self._current = result.table
        self.journal.extend(result.entries)
        self._commit(result.table, f"Autopilot ({len(result.entries)} transformations)")
        return result

    def summary(self) -> Dict[str, Any]:
        terminal = self.history[-1]
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "row_count": self._current.row_count,
            "column_count": self._current.column_count,
            "states": len(self.history),
            "last_modified": terminal.timestamp,
            "transformations": self.journal.to_list()
        }

    def export(self, output_dir: Path) -> None:
        """
        Export the session for reproducibility.

        Creates:
            - data.csv: Current table
            - journal.json: Ordered transformation entries
            - session.json: Session summary and state history
        """
        from .utils.export import export_table

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        (output_dir / "data.csv").write_bytes(export_table(self._current, "csv"))

        with open(output_dir / "journal.json", "w") as f:
            json.dump(self.journal.to_list(), f, indent=2)

        session_export = self.summary()
        session_export["history"] = [asdict(s) for s in self.history]
        with open(output_dir / "session.json", "w") as f:
            json.dump(session_export, f, indent=2, default=str)

        logger.info("Exported session %s to %s", self.id, output_dir)

    def _commit(self, table: Table, delta_summary: str) -> None:
        parent = self.history[-1].id if self.history else None
        self.history.append(StateRecord(
            id=f"state_{len(self.history)}",
            parent=parent,
            timestamp=pd.Timestamp.now().isoformat(),
            data_hash=compute_table_hash(table),
            row_count=table.row_count,
            col_count=table.column_count,
            delta_summary=delta_summary
        ))
        logger.debug("Session %s committed %s: %s", self.id, self.history[-1].id, delta_summary)


def compute_table_hash(table: Table) -> str:
    """Compute hash for integrity verification."""
    df = table.to_frame()
    digest = hashlib.md5(",".join(table.columns).encode("utf-8"))
    if table.column_count:
        digest.update(pd.util.hash_pandas_object(df.astype(str), index=False).values.tobytes())
    return digest.hexdigest()


class SessionStore:
    """In-memory registry of sessions, most recently saved first."""

    def __init__(self, max_sessions: int = None):
        self.max_sessions = max_sessions or settings.MAX_SESSIONS
        self._sessions: "OrderedDict[str, CleaningSession]" = OrderedDict()

    def save(self, session: CleaningSession) -> None:
        self._sessions[session.id] = session
        self._sessions.move_to_end(session.id, last=False)

        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=True)
            logger.info("Evicted session %s", evicted_id)

    def get(self, session_id: str) -> CleaningSession:
        if session_id not in self._sessions:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return self._sessions[session_id]

    def list(self) -> List[Dict[str, Any]]:
        return [session.summary() for session in self._sessions.values()]

    def delete(self, session_id: str) -> None:
        if session_id not in self._sessions:
            raise SessionNotFoundError(f"Session {session_id} not found")
        del self._sessions[session_id]

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
