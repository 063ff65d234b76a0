"""JSON importer for promptlib.

Re-imports the document written by :func:`promptlib.export.export_json`
(``{"prompts": [...]}``) or a bare array of prompt objects. Objects use the
export's keys: ``content`` (required), ``title``, ``group``,
``subcategory``, ``rating``, ``tags`` and ``createdAt``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from promptlib.errors import ImportSourceError
from promptlib.importers.csv_importer import (
    ProgressCallback,
    PromptImporter,
    dedupe_tags,
    generate_legacy_id,
    generate_title,
    normalize_created_at,
    split_tags,
)
from promptlib.types import MAX_RATING, MIN_RATING, ImportProgress, ImportRecord
from promptlib.utils import clamp, parse_leading_float

logger = logging.getLogger(__name__)


def parse_prompt_json(text: str) -> List[Any]:
    """Decode the payload into a list of prompt objects.

    Raises:
        ImportSourceError: not JSON, or neither a list nor ``{"prompts": list}``
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportSourceError(f"Invalid JSON: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("prompts")
    if not isinstance(payload, list):
        raise ImportSourceError("Expected a list of prompts or an object with a 'prompts' list")
    return payload


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def normalize_item(item: Any, row_number: int = 0) -> Optional[ImportRecord]:
    """Build an :class:`ImportRecord` from one exported prompt object.

    Returns None when ``content`` is empty. Raises ValueError for items that
    are not objects or carry an unparseable ``createdAt``.
    """
    if not isinstance(item, dict):
        raise ValueError(f"expected an object, got {type(item).__name__}")

    content = item.get("content") or ""
    if not isinstance(content, str) or not content.strip():
        return None

    group = _text(item.get("group"))
    subcategory = _text(item.get("subcategory"))
    rating = item.get("rating")
    if isinstance(rating, (int, float)) and not isinstance(rating, bool):
        raw_rating = float(rating)
    else:
        raw_rating = parse_leading_float(_text(rating))

    tags = item.get("tags") or []
    if isinstance(tags, str):
        tags = split_tags(tags)
    tags = [_text(t) for t in tags if _text(t)]

    return ImportRecord(
        content=content,
        title=_text(item.get("title")) or generate_title(subcategory, content),
        legacy_id=generate_legacy_id(content),
        group=group,
        subcategory=subcategory,
        rating=clamp(raw_rating, MIN_RATING, MAX_RATING),
        legacy_score=raw_rating,
        tags=dedupe_tags(tags),
        created_at=normalize_created_at(_text(item.get("createdAt"))),
        row_number=row_number,
    )


class PromptJsonImporter(PromptImporter):
    """Import prompts from a JSON export into one category."""

    source_kind = "json"

    def parse_text(self, text: str) -> List[Any]:
        return parse_prompt_json(text)

    def parse_file(self, path) -> List[Any]:
        file_path = Path(path).expanduser()
        try:
            text = file_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ImportSourceError(f"Cannot read {file_path}: {e}") from e
        return self.parse_text(text)

    def import_text(self, text: str, on_progress: Optional[ProgressCallback] = None) -> ImportProgress:
        """Import a JSON document.

        Raises:
            ImportSourceError: the document is not a prompt list (nothing is written)
        """
        self._start()
        return self._import_items(self.parse_text(text), on_progress)

    def import_file(self, path, on_progress: Optional[ProgressCallback] = None) -> ImportProgress:
        self._start()
        return self._import_items(self.parse_file(path), on_progress)

    def _import_items(self, items: List[Any], on_progress: Optional[ProgressCallback]) -> ImportProgress:
        group_names = [
            _text(item.get("group")) for item in items if isinstance(item, dict) and item.get("group")
        ]

        def normalize(item: Dict[str, Any], index: int) -> Optional[ImportRecord]:
            return normalize_item(item, row_number=index + 1)

        return self.run(items, group_names, normalize, on_progress)
