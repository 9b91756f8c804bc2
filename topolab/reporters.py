"""Simple logging/reporting helpers for lineage bookkeeping."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .topology import MutationStats, TopologyStats


class EventLogger:
    """Append-only text logger with ISO timestamps."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self._path.open("a", encoding="utf-8")

    def __enter__(self) -> EventLogger:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def log(self, message: str) -> None:
        """Append a timestamped message to the log."""
        timestamp = datetime.now(timezone.utc).isoformat()
        self._handle.write(f"{timestamp} {message}\n")
        self._handle.flush()

    def log_mutation(
        self,
        label: str,
        mutation: MutationStats,
        topology: TopologyStats,
    ) -> None:
        """Append one line describing a mutation and the resulting shape."""
        self.log(
            f"{label}: splits={mutation.splits} "
            f"added={mutation.connections_added} "
            f"perturbed={mutation.weights_perturbed} "
            f"hidden={topology.hidden_count} "
            f"connections={topology.connection_count}"
        )

    def close(self) -> None:
        """Close the underlying file handle."""
        if not self._handle.closed:
            self._handle.close()

    @property
    def path(self) -> Path:
        """Return the backing log path."""
        return self._path


__all__ = ["EventLogger"]
