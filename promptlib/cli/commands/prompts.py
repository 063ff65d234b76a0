"""Prompt commands for the promptlib CLI: list, copy, rate, delete, favorite."""

from typing import TYPE_CHECKING

from promptlib.cli.commands.helpers import print_json, print_prompts, print_prompts_grouped, validate_input
from promptlib.export import prompt_to_export_dict

if TYPE_CHECKING:
    import argparse

    from promptlib.library import PromptLibrary


def cmd_list(args: "argparse.Namespace", lib: "PromptLibrary"):
    """List prompts in meritocratic order."""
    search = validate_input(args.search, "search", 1000) if args.search else None
    prompts = lib.list_prompts(
        category_slug=args.category,
        group_id=args.group,
        subcategory=args.subcategory,
        search=search,
        favorites_only=args.favorites,
        limit=args.limit,
    )
    if args.json:
        print_json([prompt_to_export_dict(p) for p in prompts])
    elif args.grouped:
        print_prompts_grouped(prompts)
    else:
        print_prompts(prompts)


def cmd_copy(args: "argparse.Namespace", lib: "PromptLibrary"):
    """Print a prompt's content and count the use."""
    prompt = lib.record_copy(args.id)
    print(prompt.content)


def cmd_rate(args: "argparse.Namespace", lib: "PromptLibrary"):
    prompt = lib.rate_prompt(args.id, args.rating)
    print(f"✓ Rated {prompt.title}: {prompt.rating:g}")


def cmd_delete(args: "argparse.Namespace", lib: "PromptLibrary"):
    deleted = lib.delete_prompts(args.ids)
    print(f"✓ Deleted {deleted} prompt(s)")
    if deleted < len(args.ids):
        print(f"  {len(args.ids) - deleted} id(s) not found")


def cmd_favorite(args: "argparse.Namespace", lib: "PromptLibrary"):
    """Handle favorite subcommands."""
    if args.favorite_action == "add":
        lib.add_favorite(args.id)
        print(f"✓ Added {args.id[:8]} to favorites")
    elif args.favorite_action == "remove":
        if lib.remove_favorite(args.id):
            print(f"✓ Removed {args.id[:8]} from favorites")
        else:
            print(f"{args.id[:8]} is not a favorite")
    elif args.favorite_action == "list":
        print_prompts(lib.list_prompts(favorites_only=True))
