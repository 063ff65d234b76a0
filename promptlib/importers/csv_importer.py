"""CSV importer for promptlib.

Imports a prompt export (one prompt per row) into a single category:

1. Tokenize the raw text into rows of trimmed cells.
2. Locate the columns by header name (``Text``, ``Category``, ``Rating``,
   ``Comments``, ``Tags`` and any header containing ``created``).
3. Reconcile the taxonomy: every ``"Group > Subcategory"`` path whose group
   is unknown for the category creates a subcategory group first.
4. Upsert the rows one at a time, matching existing prompts by their
   content-derived ``legacy_id``.

Per-row failures are counted, never raised. Only an unreadable source stops
an import, and it does so before anything is written.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from dateutil import parser as date_parser

from promptlib.errors import ImportSourceError
from promptlib.storage.base import Storage
from promptlib.types import (
    MAX_RATING,
    MAX_TAGS,
    MIN_RATING,
    CategoryPath,
    ImportPhase,
    ImportProgress,
    ImportRecord,
    SubcategoryGroup,
    utc_now,
)
from promptlib.utils import clamp, js_string_hash, parse_leading_float, slugify, utf16_prefix

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], None]

TITLE_PREVIEW_LENGTH = 40
DEFAULT_PROGRESS_EVERY = 10

_PHASE_ORDER = [
    ImportPhase.IDLE,
    ImportPhase.PARSING,
    ImportPhase.RECONCILING_TAXONOMY,
    ImportPhase.UPSERTING,
    ImportPhase.DONE,
]


# === Tokenizer ===


def tokenize_csv(text: str) -> List[List[str]]:
    """Split CSV text into rows of trimmed cells.

    Quoted fields may hold commas and line breaks; ``""`` inside quotes is a
    literal quote. Rows end at ``\\n``, ``\\r\\n`` or a lone ``\\r`` outside
    quotes. Rows whose cells are all empty are dropped. An unbalanced quote
    swallows the rest of the input into one cell.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    cell: List[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    def finish_row() -> None:
        row.append("".join(cell).strip())
        if any(c != "" for c in row):
            rows.append(list(row))
        row.clear()
        cell.clear()

    while i < length:
        ch = text[i]
        if ch == '"':
            if in_quotes and i + 1 < length and text[i + 1] == '"':
                cell.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            row.append("".join(cell).strip())
            cell.clear()
        elif ch in "\r\n" and not in_quotes:
            if ch == "\r" and i + 1 < length and text[i + 1] == "\n":
                i += 1
            if cell or row:
                finish_row()
        else:
            cell.append(ch)
        i += 1

    if cell or row:
        finish_row()
    return rows


# === Path parser ===


def parse_category_path(path: str) -> CategoryPath:
    """Split ``"Group > Subcategory"`` into its two taxonomy levels.

    With three or more segments the last one is the subcategory and the
    rest are folded back into a compound group name:

    >>> parse_category_path("Projetos > Som do Coração > LO-FI")
    CategoryPath(group='Projetos > Som do Coração', subcategory='LO-FI')
    """
    parts = [p.strip() for p in path.split(">")]
    if len(parts) >= 3:
        return CategoryPath(group=" > ".join(parts[:-1]), subcategory=parts[-1])
    if len(parts) == 2:
        return CategoryPath(group=parts[0], subcategory=parts[1])
    return CategoryPath(group=parts[0], subcategory="")


# === Record normalizer ===


def generate_title(subcategory: str, content: str) -> str:
    preview = utf16_prefix(content, TITLE_PREVIEW_LENGTH).replace("\n", " ").strip()
    return f"{subcategory}: {preview}..." if subcategory else f"{preview}..."


def generate_legacy_id(content: str) -> str:
    """Identity key of a prompt across repeated imports of the same file.

    Not collision resistant; kept bit-for-bit compatible with ids already
    stored by earlier imports.
    """
    return f"legacy_{abs(js_string_hash(content))}"


def split_tags(value: str) -> List[str]:
    parts = value.replace(";", ",").split(",")
    return [p.strip() for p in parts if p.strip()]


def dedupe_tags(tags: Iterable[str]) -> List[str]:
    """Case-sensitive dedup keeping first occurrences, capped at MAX_TAGS."""
    return list(OrderedDict.fromkeys(tags))[:MAX_TAGS]


def parse_tags(comments: str, tags: str) -> List[str]:
    """Combine comments and tags (both ``,``/``;`` separated), comments first."""
    return dedupe_tags(split_tags(comments or "") + split_tags(tags or ""))


def normalize_created_at(value: str) -> str:
    """ISO-8601 form of a source timestamp; the current time when empty.

    Raises:
        ValueError: the value is not a recognisable date
    """
    if not value or not value.strip():
        return utc_now()
    return date_parser.parse(value.strip()).isoformat()


@dataclass
class ColumnMap:
    """Header positions of the known columns (None when absent)."""

    text: Optional[int] = None
    category: Optional[int] = None
    rating: Optional[int] = None
    comments: Optional[int] = None
    tags: Optional[int] = None
    created: Optional[int] = None

    def cell(self, row: Sequence[str], column: str) -> str:
        index = getattr(self, column)
        if index is None or index >= len(row):
            return ""
        return row[index]


def locate_columns(headers: Sequence[str]) -> ColumnMap:
    """Find the known columns by case-insensitive header name."""
    lowered = [h.strip().lower() for h in headers]

    def exact(name: str) -> Optional[int]:
        return lowered.index(name) if name in lowered else None

    created = next((i for i, h in enumerate(lowered) if "created" in h), None)
    return ColumnMap(
        text=exact("text"),
        category=exact("category"),
        rating=exact("rating"),
        comments=exact("comments"),
        tags=exact("tags"),
        created=created,
    )


def normalize_row(row: Sequence[str], columns: ColumnMap, row_number: int = 0) -> Optional[ImportRecord]:
    """Turn one data row into an :class:`ImportRecord`.

    Returns None for rows without content (skipped, not an error).

    Raises:
        ValueError: the created-at cell is not a date
    """
    content = columns.cell(row, "text")
    if not content.strip():
        return None

    path = parse_category_path(columns.cell(row, "category"))
    raw_rating = parse_leading_float(columns.cell(row, "rating"))
    return ImportRecord(
        content=content,
        title=generate_title(path.subcategory, content),
        legacy_id=generate_legacy_id(content),
        group=path.group,
        subcategory=path.subcategory,
        rating=clamp(raw_rating, MIN_RATING, MAX_RATING),
        legacy_score=raw_rating,
        tags=parse_tags(columns.cell(row, "comments"), columns.cell(row, "tags")),
        created_at=normalize_created_at(columns.cell(row, "created")),
        row_number=row_number,
    )


# === Taxonomy reconciler ===


@dataclass
class GroupPlan:
    """Outcome of reconciliation: a case-insensitive name -> id lookup."""

    lookup: Dict[str, Optional[str]]
    created: List[str]

    def group_id(self, name: str) -> Optional[str]:
        if not name:
            return None
        return self.lookup.get(name.lower())


def reconcile_groups(
    storage: Storage,
    category_id: str,
    group_names: Iterable[str],
    created_by: Optional[str] = None,
    dry_run: bool = False,
) -> GroupPlan:
    """Create the subcategory groups that ``group_names`` need.

    Names are matched case-insensitively against the category's existing
    groups. New groups are created in first-seen order with ``sort_order``
    continuing from the current maximum. A failed insert is logged and
    skipped; rows in that group are then imported without a group.

    With ``dry_run`` nothing is created; the names that would be are
    reported in ``created`` and map to None.
    """
    existing = storage.list_subcategory_groups(category_id)
    lookup: Dict[str, Optional[str]] = {g.name.lower(): g.id for g in existing}
    max_sort_order = max((g.sort_order or 0 for g in existing), default=0)

    pending: "OrderedDict[str, None]" = OrderedDict()
    for name in group_names:
        if name and name.lower() not in lookup:
            pending.setdefault(name, None)

    created: List[str] = []
    for name in pending:
        # Two spellings differing only by case collapse onto the first seen
        if name.lower() in lookup:
            continue
        max_sort_order += 1
        if dry_run:
            lookup[name.lower()] = None
            created.append(name)
            continue
        group = SubcategoryGroup(
            id=None,
            name=name,
            slug=slugify(name),
            category_id=category_id,
            sort_order=max_sort_order,
            created_by=created_by,
        )
        try:
            saved = storage.create_subcategory_group(group)
        except Exception as e:
            logger.warning(f"Could not create subcategory group {name!r}: {e}")
            continue
        lookup[name.lower()] = saved.id
        created.append(name)
        logger.info(f"Created subcategory group {name!r} (sort_order={max_sort_order})")

    return GroupPlan(lookup=lookup, created=created)


# === Pipeline ===


class PromptImporter:
    """Shared two-pass import driver.

    Subclasses turn their source into ``items`` plus a ``normalize`` callable
    (item, index) -> ImportRecord or None, and hand both to :meth:`run`.
    """

    source_kind = "prompts"

    def __init__(
        self,
        storage: Storage,
        user_id: str,
        category_id: str,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
        dry_run: bool = False,
    ):
        if progress_every < 1:
            raise ValueError("progress_every must be at least 1")
        self.storage = storage
        self.user_id = user_id
        self.category_id = category_id
        self.progress_every = progress_every
        self.dry_run = dry_run
        self.phase = ImportPhase.IDLE

    def _advance(self, phase: ImportPhase) -> None:
        if _PHASE_ORDER.index(phase) <= _PHASE_ORDER.index(self.phase):
            raise RuntimeError(f"Import cannot move from {self.phase.value} to {phase.value}")
        self.phase = phase
        logger.info(f"{self.source_kind} import: {phase.value}")

    def _start(self) -> None:
        self.phase = ImportPhase.IDLE
        self._advance(ImportPhase.PARSING)

    def _finish(self, progress: ImportProgress) -> ImportProgress:
        if self.phase != ImportPhase.UPSERTING:
            # Aborted before any row was written
            self.phase = ImportPhase.DONE
        else:
            self._advance(ImportPhase.DONE)
        logger.info(
            f"{self.source_kind} import finished: total={progress.total} "
            f"inserted={progress.inserted} updated={progress.updated} "
            f"errors={progress.errors} groups_created={len(progress.groups_created)}"
            + (" (dry run)" if self.dry_run else "")
        )
        return progress

    def run(
        self,
        items: Sequence[Any],
        group_names: Iterable[str],
        normalize: Callable[[Any, int], Optional[ImportRecord]],
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportProgress:
        progress = ImportProgress(total=len(items))

        self._advance(ImportPhase.RECONCILING_TAXONOMY)
        plan = reconcile_groups(
            self.storage,
            self.category_id,
            group_names,
            created_by=self.user_id,
            dry_run=self.dry_run,
        )
        progress.groups_created = list(plan.created)

        self._advance(ImportPhase.UPSERTING)
        last = len(items) - 1
        for i, item in enumerate(items):
            progress.current = i + 1
            try:
                record = normalize(item, i)
                if record is not None:
                    self._upsert(record, plan, progress)
            except Exception as e:
                progress.errors += 1
                logger.warning(f"Row {i + 1} failed: {type(e).__name__}: {e}")

            if on_progress and (i % self.progress_every == 0 or i == last):
                on_progress(progress.snapshot())

        return self._finish(progress)

    def _prompt_fields(self, record: ImportRecord, plan: GroupPlan) -> Dict[str, Any]:
        return {
            "category_id": self.category_id,
            "subcategory_group_id": plan.group_id(record.group),
            "title": record.title,
            "content": record.content,
            "subcategory": record.subcategory or None,
            "legacy_score": record.legacy_score,
            "rating": record.rating,
            "tags": list(record.tags),
            "legacy_id": record.legacy_id,
        }

    def _upsert(self, record: ImportRecord, plan: GroupPlan, progress: ImportProgress) -> None:
        existing = self.storage.find_prompt_by_legacy_id(record.legacy_id)
        if self.dry_run:
            if existing:
                progress.updated += 1
            else:
                progress.inserted += 1
            return

        fields = self._prompt_fields(record, plan)
        if existing:
            self.storage.update_prompt(existing.id, fields)
            progress.updated += 1
        else:
            fields["created_at"] = record.created_at or utc_now()
            self.storage.insert_prompt(fields)
            progress.inserted += 1


@dataclass
class ParsedCsv:
    """Tokenized source: located columns plus the data rows under the header."""

    columns: ColumnMap
    rows: List[List[str]]


class PromptCsvImporter(PromptImporter):
    """Import prompts from a CSV export into one category.

    Example CSV::

        Text,Category,Rating,Comments,Tags,Created At
        "Write a reggae chorus","Selecionados > Reggae Master",4.5,"funny, short",,2024-01-08
    """

    source_kind = "csv"

    def parse_text(self, text: str) -> ParsedCsv:
        rows = tokenize_csv(text.lstrip("\ufeff"))
        if not rows:
            return ParsedCsv(columns=ColumnMap(), rows=[])
        return ParsedCsv(columns=locate_columns(rows[0]), rows=rows[1:])

    def parse_file(self, path) -> ParsedCsv:
        """Read and tokenize a CSV file.

        Raises:
            ImportSourceError: the file is missing, unreadable or not UTF-8
        """
        file_path = Path(path).expanduser()
        try:
            text = file_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ImportSourceError(f"Cannot read {file_path}: {e}") from e
        return self.parse_text(text)

    def import_text(self, text: str, on_progress: Optional[ProgressCallback] = None) -> ImportProgress:
        self._start()
        return self._import_parsed(self.parse_text(text), on_progress)

    def import_file(self, path, on_progress: Optional[ProgressCallback] = None) -> ImportProgress:
        """Import a CSV file; an unreadable file yields an empty result."""
        self._start()
        try:
            parsed = self.parse_file(path)
        except ImportSourceError as e:
            logger.error(str(e))
            return self._finish(ImportProgress())
        return self._import_parsed(parsed, on_progress)

    def _import_parsed(self, parsed: ParsedCsv, on_progress: Optional[ProgressCallback]) -> ImportProgress:
        columns = parsed.columns
        if columns.text is None:
            logger.error("CSV has no 'Text' column; nothing to import")
            return self._finish(ImportProgress())

        group_names = []
        for row in parsed.rows:
            path = columns.cell(row, "category")
            if path.strip():
                group_names.append(parse_category_path(path).group)

        def normalize(row: List[str], index: int) -> Optional[ImportRecord]:
            return normalize_row(row, columns, row_number=index + 1)

        return self.run(parsed.rows, group_names, normalize, on_progress)
