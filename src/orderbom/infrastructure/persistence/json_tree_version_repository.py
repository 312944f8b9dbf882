"""JSON-file-backed implementation of TreeVersionRepository.

The file is a list of ``{"id": ..., "status": ...}`` records maintained by
the tree-version service.  Unrecognised statuses read as unknown (None).
"""

from __future__ import annotations

import json
from pathlib import Path

from orderbom.domain.model.tree_version import TreeVersionStatus
from orderbom.domain.repository.tree_version_repository import TreeVersionRepository


class JsonTreeVersionRepository(TreeVersionRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    def get_status(self, tree_version_id: str) -> TreeVersionStatus | None:
        for raw in self._load_raw():
            if raw["id"] == tree_version_id:
                try:
                    return TreeVersionStatus(str(raw.get("status", "")).upper())
                except ValueError:
                    return None
        return None

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
