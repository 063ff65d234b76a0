"""Shared helper functions for CLI commands."""

import argparse
import json
import re
from typing import Any, Iterable

from promptlib.ranking import group_by_subcategory_group
from promptlib.types import Prompt


def validate_input(value: str, field_name: str, max_length: int = 1000) -> str:
    """Validate and sanitize CLI inputs."""
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")

    if len(value) > max_length:
        raise ValueError(f"{field_name} too long (max {max_length} characters)")

    # Remove null bytes and control characters except newlines
    sanitized = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", value)

    return sanitized


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def validate_rating(value: str) -> float:
    """argparse type for a 0-5 rating."""
    try:
        rating = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Rating must be a number, got '{value}'")
    if not 0 <= rating <= 5:
        raise argparse.ArgumentTypeError(f"Rating must be between 0 and 5, got {rating:g}")
    return rating


def validate_limit(value: str) -> int:
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Limit must be an integer, got '{value}'")
    if limit < 1:
        raise argparse.ArgumentTypeError(f"Limit must be at least 1, got {limit}")
    return limit


def format_prompt_line(prompt: Prompt) -> str:
    rating = f"{prompt.rating:.1f}" if prompt.rating is not None else " - "
    location = " > ".join(p for p in (prompt.group_name, prompt.subcategory) if p)
    suffix = f"  [{location}]" if location else ""
    return f"  {(prompt.id or '')[:8]}  ★{rating}  ×{prompt.usage_count:<3} {prompt.title}{suffix}"


def print_prompts(prompts: Iterable[Prompt]) -> None:
    prompts = list(prompts)
    if not prompts:
        print("No prompts found.")
        return
    for prompt in prompts:
        print(format_prompt_line(prompt))
    print()
    print(f"{len(prompts)} prompt(s)")


def print_prompts_grouped(prompts: Iterable[Prompt]) -> None:
    """Print prompts under a heading per subcategory group, ungrouped last."""
    prompts = list(prompts)
    if not prompts:
        print("No prompts found.")
        return
    for group_name, members in group_by_subcategory_group(prompts).items():
        print(f"{group_name or '(no group)'} ({len(members)})")
        for prompt in members:
            print(format_prompt_line(prompt))
    print()
    print(f"{len(prompts)} prompt(s)")


def print_progress(snapshot: dict) -> None:
    print(
        f"  {snapshot['current']}/{snapshot['total']} "
        f"(+{snapshot['inserted']} ~{snapshot['updated']} !{snapshot['errors']})"
    )
