"""Export prompts to CSV or JSON.

The CSV keeps the localized headers of the web client's export and starts
with a UTF-8 BOM so spreadsheet tools detect the encoding. Its columns are
not the ones the CSV importer reads; the JSON export is the format that
round-trips through :mod:`promptlib.importers.json_importer`.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from promptlib.errors import NotFoundError
from promptlib.types import Prompt, utc_now

logger = logging.getLogger(__name__)

BOM = "\ufeff"

CSV_HEADERS = [
    "ID",
    "Título",
    "Conteúdo",
    "Categoria",
    "Grupo",
    "Subcategoria",
    "Rating",
    "Uso",
    "Tags",
    "Criado em",
    "Atualizado em",
]

EXPORT_FORMATS = ("csv", "json")


def _newest_first(prompts: Sequence[Prompt]) -> List[Prompt]:
    if not prompts:
        raise NotFoundError("No prompts to export")
    return sorted(prompts, key=lambda p: p.created_at or "", reverse=True)


def _quoted(value: Optional[str]) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def _number(value: Optional[float]) -> str:
    value = value or 0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def export_csv(prompts: Sequence[Prompt]) -> str:
    """Render prompts as CSV text, newest first.

    Raises:
        NotFoundError: there is nothing to export
    """
    lines = [",".join(CSV_HEADERS)]
    for prompt in _newest_first(prompts):
        row = [
            prompt.id or "",
            _quoted(prompt.title),
            _quoted(prompt.content),
            _quoted(prompt.category_name),
            _quoted(prompt.group_name),
            _quoted(prompt.subcategory),
            _number(prompt.rating),
            _number(prompt.usage_count),
            _quoted(", ".join(prompt.tags or [])),
            prompt.created_at or "",
            prompt.updated_at or "",
        ]
        lines.append(",".join(row))
    return BOM + "\n".join(lines)


def prompt_to_export_dict(prompt: Prompt) -> Dict[str, Any]:
    return {
        "id": prompt.id,
        "title": prompt.title,
        "content": prompt.content,
        "category": prompt.category_name or None,
        "categorySlug": prompt.category_slug or None,
        "group": prompt.group_name or None,
        "groupSlug": prompt.group_slug or None,
        "subcategory": prompt.subcategory,
        "rating": prompt.rating,
        "usageCount": prompt.usage_count,
        "tags": list(prompt.tags or []),
        "createdAt": prompt.created_at,
        "updatedAt": prompt.updated_at,
    }


def export_json(prompts: Sequence[Prompt], exported_at: Optional[str] = None) -> str:
    """Render prompts as a JSON document, newest first.

    Raises:
        NotFoundError: there is nothing to export
    """
    ordered = _newest_first(prompts)
    document = {
        "exportedAt": exported_at or utc_now(),
        "totalPrompts": len(ordered),
        "prompts": [prompt_to_export_dict(p) for p in ordered],
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def default_export_filename(fmt: str, today: Optional[datetime] = None) -> str:
    """``prompts_export_YYYY-MM-DD.<fmt>`` for the current UTC date."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format: {fmt}")
    today = today or datetime.now(timezone.utc)
    return f"prompts_export_{today.strftime('%Y-%m-%d')}.{fmt}"


def export_prompts(prompts: Sequence[Prompt], fmt: str) -> str:
    if fmt == "csv":
        return export_csv(prompts)
    if fmt == "json":
        return export_json(prompts)
    raise ValueError(f"Unknown export format: {fmt}")
