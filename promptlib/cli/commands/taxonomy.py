"""Taxonomy commands for the promptlib CLI: categories, groups, subcategories."""

from dataclasses import asdict
from typing import TYPE_CHECKING

from promptlib.cli.commands.helpers import print_json, validate_input

if TYPE_CHECKING:
    import argparse

    from promptlib.library import PromptLibrary


def cmd_category(args: "argparse.Namespace", lib: "PromptLibrary"):
    """Handle category subcommands."""
    if args.category_action == "list":
        categories = lib.list_categories()
        if args.json:
            print_json([asdict(c) for c in categories])
            return
        if not categories:
            print("No categories yet. Add one with `promptlib category add NAME`.")
            return
        for c in categories:
            icon = f"{c.icon} " if c.icon else ""
            print(f"  {icon}{c.name}  ({c.slug})  id={c.id}")

    elif args.category_action == "add":
        name = validate_input(args.name, "name", 100)
        category = lib.create_category(
            name, slug=args.slug, icon=args.icon, color=args.color, sort_order=args.sort_order
        )
        print(f"✓ Created category {category.name} ({category.slug})")

    elif args.category_action == "remove":
        lib.delete_category(args.id)
        print(f"✓ Removed category {args.id}")


def cmd_group(args: "argparse.Namespace", lib: "PromptLibrary"):
    """Handle subcategory group subcommands."""
    if args.group_action == "list":
        category_id = lib.resolve_category(args.category).id if args.category else None
        groups = lib.list_groups(category_id)
        if args.json:
            print_json([asdict(g) for g in groups])
            return
        if not groups:
            print("No subcategory groups found.")
            return
        for g in groups:
            print(f"  {g.sort_order if g.sort_order is not None else '-':>3}. {g.name}  id={g.id}")

    elif args.group_action == "add":
        category = lib.resolve_category(args.category)
        name = validate_input(args.name, "name", 100)
        group = lib.create_group(category.id, name, slug=args.slug, sort_order=args.sort_order)
        print(f"✓ Created group {group.name} in {category.name} (sort_order={group.sort_order})")

    elif args.group_action == "remove":
        lib.delete_group(args.id)
        print(f"✓ Removed group {args.id}")


def cmd_subcategories(args: "argparse.Namespace", lib: "PromptLibrary"):
    """Show the subcategories of a group with prompt counts."""
    items = lib.subcategories(args.group_id, order="name" if args.by_name else "count")
    if args.json:
        print_json(items)
        return
    if not items:
        print("No subcategories in this group.")
        return
    for item in items:
        print(f"  {item['count']:>4}  {item['name']}")
