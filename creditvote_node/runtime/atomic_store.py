from __future__ import annotations

"""
Snapshot persistence for the voting runtime.

The runtime itself is storage-agnostic; this store is what the HTTP app uses
when ``persistence.enabled`` is set. It keeps one JSON snapshot of
``VotingService.export_state()`` and:

- writes atomically (temp file, fsync, replace, directory fsync)
- rotates ``.bak1 .. .bakN`` before each write
- leaves a ``.journal`` marker while a save is in flight
- loads primary first, then each backup in turn

``save_from`` builds the snapshot and writes it under one lock, so snapshots
land on disk in the order they were taken.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

log = logging.getLogger(__name__)

JsonDict = Dict[str, Any]
PathLike = Union[str, Path]


class AtomicStateStore:
    def __init__(
        self,
        data_dir: PathLike = "data",
        filename: str = "creditvote_state.json",
        keep_backups: int = 2,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.filename = filename
        self.keep_backups = max(0, int(keep_backups))
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self.data_dir / self.filename

    @property
    def journal_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".journal")

    def backup_path(self, n: int) -> Path:
        return self.path.with_suffix(self.path.suffix + f".bak{n}")

    def exists(self) -> bool:
        return self.path.exists()

    # ---------------------------
    # File primitives
    # ---------------------------
    def _sync_data_dir(self) -> None:
        try:
            fd = os.open(str(self.data_dir), os.O_DIRECTORY)
        except (OSError, AttributeError):
            # O_DIRECTORY is not available everywhere
            return
        try:
            os.fsync(fd)
        finally:
            os.close(fd)

    def _replace_atomically(self, target: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=target.name + ".", suffix=".tmp", dir=str(self.data_dir))
        staged = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(str(staged), str(target))
            self._sync_data_dir()
        finally:
            if staged.exists():
                staged.unlink()

    def _read(self, p: Path) -> Optional[JsonDict]:
        if not p.exists():
            return None
        try:
            obj = json.loads(p.read_bytes().decode("utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            log.warning("could not read snapshot %s: %s", p, e)
            return None
        return obj if isinstance(obj, dict) else None

    def _rotate_backups(self) -> None:
        if self.keep_backups <= 0:
            return
        for i in range(self.keep_backups, 1, -1):
            src = self.backup_path(i - 1)
            if src.exists():
                os.replace(str(src), str(self.backup_path(i)))
        if self.path.exists():
            os.replace(str(self.path), str(self.backup_path(1)))

    def _write(self, state: JsonDict) -> None:
        # sorted keys keep snapshots diffable
        data = json.dumps(state, ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode("utf-8")
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._replace_atomically(self.journal_path, b"1")
        self._rotate_backups()
        self._replace_atomically(self.path, data)
        self.journal_path.unlink()
        log.debug("snapshot saved to %s (%d bytes)", self.path, len(data))

    # ---------------------------
    # Load / save
    # ---------------------------
    def load(self) -> Optional[JsonDict]:
        if self.journal_path.exists():
            log.warning("snapshot journal present at %s; last save may be incomplete", self.journal_path)
        candidates: List[Path] = [self.path] + [self.backup_path(i) for i in range(1, self.keep_backups + 1)]
        for p in candidates:
            obj = self._read(p)
            if obj is not None:
                if p != self.path:
                    log.warning("loaded snapshot from backup %s", p)
                return obj
        return None

    def save(self, state: JsonDict) -> None:
        with self._lock:
            self._write(state)

    def save_from(self, export: Callable[[], JsonDict]) -> None:
        """Call ``export`` and write its result without letting another save in between."""
        with self._lock:
            self._write(export())
