"""
Editor directory for floorsync.

Answers who an editor is and whether they may review versions.
Stored as one JSON file, ``<data_dir>/editors.json``.
"""

import logging
from pathlib import Path

from floorsync.errors import NotFoundError
from floorsync.merge.models import Editor
from floorsync.schemas import parse_editor
from floorsync.storage.files import read_json, write_json_atomic

logger = logging.getLogger(__name__)


class EditorDirectory:
    """Registry of editors and their priorities."""

    def __init__(self, base_path: str | Path):
        """
        Initialize editor directory.

        Args:
            base_path: Data directory
        """
        self.path = Path(base_path) / "editors.json"
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, Editor]:
        if not self.path.exists():
            return {}
        return {
            editor_id: parse_editor(item)
            for editor_id, item in read_json(self.path).get("editors", {}).items()
        }

    def add(self, editor: Editor) -> Editor:
        """Add or replace an editor."""
        editors = self._load()
        editors[editor.id] = editor
        write_json_atomic(self.path, {"editors": {eid: e.to_dict() for eid, e in editors.items()}})
        logger.info(f"Registered editor {editor.id} with priority {editor.priority}")
        return editor

    def get(self, editor_id: str) -> Editor:
        """
        Get an editor by id.

        Raises:
            NotFoundError: If the editor is unknown
        """
        editor = self._load().get(editor_id)
        if editor is None:
            raise NotFoundError("editor", editor_id)
        return editor

    def list_editors(self) -> list[Editor]:
        """All editors, highest authority first."""
        return sorted(self._load().values(), key=lambda e: (e.priority, e.id))

    def is_head_editor(self, editor_id: str) -> bool:
        """Check whether an editor is the head editor (priority 1)."""
        editor = self._load().get(editor_id)
        return editor is not None and editor.is_head_editor
