"""Importers for bringing prompt exports into promptlib.

Supported formats:
- CSV: one prompt per row, ``"Group > Subcategory"`` paths in ``Category``
- JSON: the document produced by ``promptlib export --format json``
"""

from promptlib.importers.csv_importer import (
    PromptCsvImporter,
    PromptImporter,
    generate_legacy_id,
    parse_category_path,
    tokenize_csv,
)
from promptlib.importers.json_importer import PromptJsonImporter

__all__ = [
    "PromptCsvImporter",
    "PromptImporter",
    "PromptJsonImporter",
    "generate_legacy_id",
    "parse_category_path",
    "tokenize_csv",
]
