"""Ordering, search sanitising and client-side filtering of prompts.

The "meritocratic" order is how every prompt listing is presented:
rating (highest first, unrated last), then usage count, then the raw
imported score, then most recently used (never-used prompts first).
"""

import logging
import re
from collections import OrderedDict
from datetime import timezone
from typing import Dict, Iterable, List, Optional, Set, Tuple

from dateutil import parser as date_parser

from promptlib.types import Prompt

logger = logging.getLogger(__name__)

MAX_SEARCH_LENGTH = 100

# Characters that would alter a PostgREST filter expression
_SEARCH_UNSAFE = re.compile(r"[*%,.()]")


def _timestamp(value: Optional[str]) -> float:
    parsed = date_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def meritocratic_key(prompt: Prompt) -> Tuple:
    """Sort key for :func:`sort_meritocratic` (ascending sort)."""
    rating_key = (1, 0.0) if prompt.rating is None else (0, -prompt.rating)
    legacy_key = (1, 0.0) if prompt.legacy_score is None else (0, -prompt.legacy_score)
    used_key = (0, 0.0) if not prompt.last_used_at else (1, -_timestamp(prompt.last_used_at))
    return (rating_key, -(prompt.usage_count or 0), legacy_key, used_key)


def sort_meritocratic(prompts: Iterable[Prompt]) -> List[Prompt]:
    return sorted(prompts, key=meritocratic_key)


def sanitize_search(term: Optional[str]) -> Optional[str]:
    """Make a free-text search term safe to embed in a filter expression.

    Terms over 100 characters are ignored outright. Returns None when
    nothing searchable remains.
    """
    if not term or len(term) > MAX_SEARCH_LENGTH:
        if term:
            logger.debug(f"Ignoring search term of length {len(term)}")
        return None
    cleaned = _SEARCH_UNSAFE.sub("", term).strip()
    return cleaned or None


def filter_prompts(
    prompts: Iterable[Prompt],
    group_id: Optional[str] = None,
    subcategory: Optional[str] = None,
    favorites: Optional[Set[str]] = None,
) -> List[Prompt]:
    """Narrow an already-fetched list without another database round trip."""
    result = []
    for prompt in prompts:
        if group_id and prompt.subcategory_group_id != group_id:
            continue
        if subcategory and prompt.subcategory != subcategory:
            continue
        if favorites is not None and prompt.id not in favorites:
            continue
        result.append(prompt)
    return result


def aggregate_subcategories(
    values: Iterable[Optional[str]], order: str = "count"
) -> List[Dict[str, object]]:
    """Count free-text subcategories.

    ``values`` are raw ``subcategory`` fields (or prompts). Empty values are
    ignored. ``order="count"`` sorts by count descending, keeping first-seen
    order on ties; ``order="name"`` sorts case-insensitively by name.
    """
    counts: "OrderedDict[str, int]" = OrderedDict()
    for value in values:
        name = value.subcategory if isinstance(value, Prompt) else value
        if not name:
            continue
        counts[name] = counts.get(name, 0) + 1

    if order == "count":
        items = sorted(counts.items(), key=lambda item: -item[1])
    elif order == "name":
        items = sorted(counts.items(), key=lambda item: item[0].casefold())
    else:
        raise ValueError(f"Unknown subcategory order: {order}")
    return [{"name": name, "count": count} for name, count in items]


def group_by_subcategory_group(prompts: Iterable[Prompt]) -> "OrderedDict[Optional[str], List[Prompt]]":
    """Bucket prompts by group name in first-seen order; ungrouped last under None."""
    grouped: "OrderedDict[Optional[str], List[Prompt]]" = OrderedDict()
    ungrouped: List[Prompt] = []
    for prompt in prompts:
        if not prompt.group_name:
            ungrouped.append(prompt)
            continue
        grouped.setdefault(prompt.group_name, []).append(prompt)
    if ungrouped:
        grouped[None] = ungrouped
    return grouped
