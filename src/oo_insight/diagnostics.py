"""Diagnostic sink for names the coupling heuristic could not resolve.

Unresolved names are expected (dynamic attributes, values that are not
constructor calls) and never affect results. They are kept in memory for
the run result and optionally appended to a JSON-lines file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UnresolvedNames:
    class_path: str
    names: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"class": self.class_path, "names": list(self.names)}


class UnresolvedNameLog:
    """Append-only record of ``(class path, unresolved names)`` reports."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path else None
        self._entries: list[UnresolvedNames] = []
        self._file_failed = False

    def report(self, class_path: str, names: Iterable[str]) -> None:
        entry = UnresolvedNames(class_path, tuple(sorted(names)))
        if not entry.names:
            return
        self._entries.append(entry)
        logger.debug(f"Unresolved names in {class_path}: {', '.join(entry.names)}")
        if self.path is not None:
            self._append(entry)

    def _append(self, entry: UnresolvedNames) -> None:
        if self._file_failed:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry.to_dict()) + "\n")
        except OSError as e:
            # Diagnostics are best effort; stop retrying after the first failure
            self._file_failed = True
            logger.warning(f"Cannot write diagnostics to {self.path}: {e}")

    def __iter__(self) -> Iterator[UnresolvedNames]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def names_for(self, class_path: str) -> set[str]:
        return {n for e in self._entries if e.class_path == class_path for n in e.names}

    def to_dict(self) -> dict[str, list[str]]:
        merged: dict[str, set[str]] = {}
        for entry in self._entries:
            merged.setdefault(entry.class_path, set()).update(entry.names)
        return {path: sorted(names) for path, names in merged.items()}
