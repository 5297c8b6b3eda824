# backend/stockbook/domain/validation.py
from __future__ import annotations
from typing import List, Optional

from stockbook.domain.constants import MSG_INVALID_COLOR, MSG_INVALID_STORAGE


def validate_attributes(entry, config) -> Optional[str]:
    """
    Check color/storage of an entry against its model configuration.

    No configuration means nothing to check. An empty allowed list, or an
    empty value on the entry, also skips that attribute. Returns the combined
    error text (one line per problem) or None.
    """
    if config is None:
        return None

    errors: List[str] = []

    colors = list(config.available_colors or [])
    if colors and entry.color and entry.color not in colors:
        errors.append(MSG_INVALID_COLOR.format(", ".join(colors)))

    options = list(config.storage_options or [])
    if options and entry.storage and entry.storage not in options:
        errors.append(MSG_INVALID_STORAGE.format(", ".join(options)))

    return "\n".join(errors) if errors else None


def suggest_colors(config, query: str = "") -> List[str]:
    if config is None:
        return []
    q = (query or "").lower()
    return [c for c in (config.available_colors or []) if q in c.lower()]
