"""Project commands for the promptlib CLI."""

from dataclasses import asdict
from typing import TYPE_CHECKING

from promptlib.cli.commands.helpers import format_prompt_line, print_json, validate_input

if TYPE_CHECKING:
    import argparse

    from promptlib.library import PromptLibrary


def cmd_project(args: "argparse.Namespace", lib: "PromptLibrary"):
    """Handle project subcommands."""
    if args.project_action == "list":
        projects = lib.list_projects()
        if args.json:
            print_json([asdict(p) for p in projects])
            return
        if not projects:
            print("No projects yet. Create one with `promptlib project create NAME`.")
            return
        for p in projects:
            desc = f" - {p.description}" if p.description else ""
            print(f"  {p.id[:8]}  {p.name}{desc}")

    elif args.project_action == "create":
        name = validate_input(args.name, "name", 100)
        description = validate_input(args.description, "description", 500) if args.description else None
        project = lib.create_project(name, description)
        print(f"✓ Created project {project.name} (id={project.id})")

    elif args.project_action == "delete":
        lib.delete_project(args.id)
        print(f"✓ Deleted project {args.id}")

    elif args.project_action == "show":
        project = lib.get_project(args.id)
        entries = lib.project_prompts(args.id)
        print(f"{project.name}")
        if project.description:
            print(f"  {project.description}")
        print()
        if not entries:
            print("  (no prompts)")
        for entry in entries:
            if entry.prompt:
                print(format_prompt_line(entry.prompt))

    elif args.project_action == "add":
        if len(args.prompt_ids) == 1:
            lib.add_to_project(args.id, args.prompt_ids[0])
            print("✓ Added 1 prompt")
        else:
            added = lib.add_many_to_project(args.id, args.prompt_ids)
            print(f"✓ Added {added} prompt(s)")

    elif args.project_action == "remove":
        lib.remove_from_project(args.id, args.prompt_id)
        print(f"✓ Removed {args.prompt_id[:8]} from project")
