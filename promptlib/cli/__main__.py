"""
promptlib CLI - manage a personal prompt library from the terminal.

Usage:
    promptlib import csv PATH --category ID [--dry-run] [--json]
    promptlib import json PATH --category ID [--json]
    promptlib export [--format csv|json] [--output PATH]
    promptlib list [--category SLUG] [--search Q] [--favorites] [--limit N] [--grouped]
    promptlib copy ID
    promptlib rate ID RATING
    promptlib auth login|logout|status
"""

import argparse
import logging
import os
import sys

from promptlib.cli.commands.auth import cmd_auth
from promptlib.cli.commands.credentials import get_library
from promptlib.cli.commands.helpers import validate_input, validate_limit, validate_rating
from promptlib.cli.commands.import_cmd import cmd_export, cmd_import
from promptlib.cli.commands.projects import cmd_project
from promptlib.cli.commands.prompts import cmd_copy, cmd_delete, cmd_favorite, cmd_list, cmd_rate
from promptlib.cli.commands.taxonomy import cmd_category, cmd_group, cmd_subcategories
from promptlib.logging_config import setup_promptlib_logging

# Set up logging
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promptlib",
        description="Personal prompt library",
    )
    parser.add_argument("--user", "-u", help="User ID (default: signed-in user)", default=None)

    subparsers = parser.add_subparsers(dest="command", required=True)

    # import
    p_import = subparsers.add_parser("import", help="Import prompts from an export file")
    import_sub = p_import.add_subparsers(dest="import_format", required=True)
    for fmt in ("csv", "json"):
        p_fmt = import_sub.add_parser(fmt, help=f"Import a {fmt.upper()} file")
        p_fmt.add_argument("path", help="File to import")
        p_fmt.add_argument("--category", "-c", required=True, help="Target category (id or slug)")
        p_fmt.add_argument("--json", "-j", action="store_true", help="Print the report as JSON")
        if fmt == "csv":
            p_fmt.add_argument(
                "--dry-run",
                dest="dry_run",
                action="store_true",
                help="Report what would change without writing",
            )

    # export
    p_export = subparsers.add_parser("export", help="Export all prompts")
    p_export.add_argument("--format", "-f", choices=["csv", "json"], default="csv")
    p_export.add_argument("--output", "-o", help="Output path (default: prompts_export_<date>)")

    # list
    p_list = subparsers.add_parser("list", help="List prompts (best first)")
    p_list.add_argument("--category", "-c", help="Category slug")
    p_list.add_argument("--group", "-g", help="Subcategory group ID")
    p_list.add_argument("--subcategory", "-s", help="Subcategory name")
    p_list.add_argument("--search", "-q", help="Search title and content")
    p_list.add_argument("--favorites", action="store_true", help="Only favorites")
    p_list.add_argument("--limit", "-l", type=validate_limit, default=None)
    p_list.add_argument("--grouped", action="store_true", help="Group by subcategory group")
    p_list.add_argument("--json", "-j", action="store_true")

    # copy / rate / delete
    p_copy = subparsers.add_parser("copy", help="Print a prompt and count the use")
    p_copy.add_argument("id", help="Prompt ID")

    p_rate = subparsers.add_parser("rate", help="Rate a prompt (0-5)")
    p_rate.add_argument("id", help="Prompt ID")
    p_rate.add_argument("rating", type=validate_rating)

    p_delete = subparsers.add_parser("delete", help="Delete prompts")
    p_delete.add_argument("ids", nargs="+", help="Prompt IDs")

    # category
    p_category = subparsers.add_parser("category", help="Manage categories")
    cat_sub = p_category.add_subparsers(dest="category_action", required=True)
    cat_list = cat_sub.add_parser("list", help="List categories")
    cat_list.add_argument("--json", "-j", action="store_true")
    cat_add = cat_sub.add_parser("add", help="Add a category")
    cat_add.add_argument("name")
    cat_add.add_argument("--slug")
    cat_add.add_argument("--icon")
    cat_add.add_argument("--color")
    cat_add.add_argument("--sort-order", dest="sort_order", type=int)
    cat_remove = cat_sub.add_parser("remove", help="Remove a category")
    cat_remove.add_argument("id")

    # group
    p_group = subparsers.add_parser("group", help="Manage subcategory groups")
    group_sub = p_group.add_subparsers(dest="group_action", required=True)
    group_list = group_sub.add_parser("list", help="List groups")
    group_list.add_argument("--category", "-c", help="Category (id or slug)")
    group_list.add_argument("--json", "-j", action="store_true")
    group_add = group_sub.add_parser("add", help="Add a group")
    group_add.add_argument("name")
    group_add.add_argument("--category", "-c", required=True, help="Category (id or slug)")
    group_add.add_argument("--slug")
    group_add.add_argument("--sort-order", dest="sort_order", type=int)
    group_remove = group_sub.add_parser("remove", help="Remove a group")
    group_remove.add_argument("id")

    # subcategories
    p_subcats = subparsers.add_parser("subcategories", help="Subcategories of a group")
    p_subcats.add_argument("group_id")
    p_subcats.add_argument("--by-name", dest="by_name", action="store_true", help="Sort by name")
    p_subcats.add_argument("--json", "-j", action="store_true")

    # favorite
    p_favorite = subparsers.add_parser("favorite", help="Manage favorites")
    fav_sub = p_favorite.add_subparsers(dest="favorite_action", required=True)
    fav_add = fav_sub.add_parser("add")
    fav_add.add_argument("id", help="Prompt ID")
    fav_remove = fav_sub.add_parser("remove")
    fav_remove.add_argument("id", help="Prompt ID")
    fav_sub.add_parser("list")

    # project
    p_project = subparsers.add_parser("project", help="Manage projects")
    proj_sub = p_project.add_subparsers(dest="project_action", required=True)
    proj_list = proj_sub.add_parser("list")
    proj_list.add_argument("--json", "-j", action="store_true")
    proj_create = proj_sub.add_parser("create")
    proj_create.add_argument("name")
    proj_create.add_argument("--description", "-d")
    proj_delete = proj_sub.add_parser("delete")
    proj_delete.add_argument("id")
    proj_show = proj_sub.add_parser("show")
    proj_show.add_argument("id")
    proj_add = proj_sub.add_parser("add", help="Add prompts to a project")
    proj_add.add_argument("id", help="Project ID")
    proj_add.add_argument("prompt_ids", nargs="+")
    proj_remove = proj_sub.add_parser("remove", help="Remove a prompt from a project")
    proj_remove.add_argument("id", help="Project ID")
    proj_remove.add_argument("prompt_id")

    # auth
    p_auth = subparsers.add_parser("auth", help="Sign in to the hosted backend")
    auth_sub = p_auth.add_subparsers(dest="auth_action", required=True)
    auth_login = auth_sub.add_parser("login", help="Sign in with email and password")
    auth_login.add_argument("--email", "-e")
    auth_login.add_argument("--url", help="Supabase project URL")
    auth_login.add_argument("--key", help="Supabase anon key")
    auth_status = auth_sub.add_parser("status", help="Show the stored session")
    auth_status.add_argument("--json", "-j", action="store_true")
    auth_sub.add_parser("logout", help="Forget the stored session")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "auth":
        cmd_auth(args)
        return

    try:
        user_id = validate_input(args.user, "user_id", 100) if args.user else None
        lib = get_library(user_id)
    except (ValueError, TypeError) as e:
        logger.error(f"Failed to initialize promptlib: {e}")
        sys.exit(1)

    setup_promptlib_logging(lib.user_id, os.environ.get("PROMPTLIB_LOG_LEVEL", "INFO"))

    # Dispatch with error handling
    try:
        if args.command == "import":
            cmd_import(args, lib)
        elif args.command == "export":
            cmd_export(args, lib)
        elif args.command == "list":
            cmd_list(args, lib)
        elif args.command == "copy":
            cmd_copy(args, lib)
        elif args.command == "rate":
            cmd_rate(args, lib)
        elif args.command == "delete":
            cmd_delete(args, lib)
        elif args.command == "category":
            cmd_category(args, lib)
        elif args.command == "group":
            cmd_group(args, lib)
        elif args.command == "subcategories":
            cmd_subcategories(args, lib)
        elif args.command == "favorite":
            cmd_favorite(args, lib)
        elif args.command == "project":
            cmd_project(args, lib)
    except (ValueError, TypeError) as e:
        logger.error(f"Input validation error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
