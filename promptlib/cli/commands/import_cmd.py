"""Import and export commands for the promptlib CLI."""

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from promptlib.cli.commands.helpers import print_progress
from promptlib.export import default_export_filename

if TYPE_CHECKING:
    import argparse

    from promptlib.library import PromptLibrary


def cmd_import(args: "argparse.Namespace", lib: "PromptLibrary"):
    """Import prompts from a CSV or JSON export into a category."""
    on_progress = None if args.json else print_progress
    dry_run = getattr(args, "dry_run", False)

    if args.import_format == "csv":
        if not Path(args.path).expanduser().exists():
            print(f"✗ File not found: {args.path}")
            sys.exit(1)
        progress = lib.import_csv(args.path, args.category, dry_run=dry_run, on_progress=on_progress)
    else:
        progress = lib.import_json(args.path, args.category, dry_run=dry_run, on_progress=on_progress)

    report = progress.snapshot()
    if args.json:
        print(json.dumps(report, indent=2, ensure_ascii=False))
        return

    print()
    label = "Dry run" if dry_run else "Import"
    verb = "would be " if dry_run else ""
    if report["errors"]:
        print(f"⚠ {label} finished with {report['errors']} error(s)")
    else:
        print(f"✓ {label} complete")
    print(f"  Rows:     {report['total']}")
    print(f"  Inserted: {report['inserted']} {verb}".rstrip())
    print(f"  Updated:  {report['updated']} {verb}".rstrip())
    if report["groupsCreated"]:
        print(f"  Groups {verb}created: {', '.join(report['groupsCreated'])}")


def cmd_export(args: "argparse.Namespace", lib: "PromptLibrary"):
    """Export every prompt to CSV or JSON."""
    document = lib.export(args.format)
    output = Path(args.output).expanduser() if args.output else Path(default_export_filename(args.format))
    output.write_text(document, encoding="utf-8")
    print(f"✓ Exported to {output}")
