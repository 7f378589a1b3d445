"""URL slugs for shareable wheels: "Team Winners!" -> "team-winners-a1b2"."""

import re
import random
from typing import Optional

from config import (
    SLUG_SUFFIX_LENGTH, SLUG_BASE_MAX_LENGTH, SLUG_MIN_LENGTH, SLUG_MAX_LENGTH,
    DEFAULT_SLUG_BASE,
)

SLUG_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def generate_random_suffix(length: int = SLUG_SUFFIX_LENGTH,
                           rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return "".join(rng.choice(SLUG_ALPHABET) for _ in range(length))


def sanitize_slug(text: str) -> str:
    """Lowercase, hyphen-separated, [a-z0-9-] only, capped at 50 chars."""
    slug = text.lower().strip()
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    # Cutting can leave a trailing hyphen behind
    return slug[:SLUG_BASE_MAX_LENGTH].rstrip("-")


def generate_slug(team_name: Optional[str] = None,
                  rng: Optional[random.Random] = None) -> str:
    base = sanitize_slug(team_name) if team_name and team_name.strip() else ""
    return f"{base or DEFAULT_SLUG_BASE}-{generate_random_suffix(rng=rng)}"


def validate_slug(slug: str) -> bool:
    if not SLUG_MIN_LENGTH <= len(slug) <= SLUG_MAX_LENGTH:
        return False
    return bool(SLUG_PATTERN.match(slug))


def slug_to_title(slug: str) -> str:
    """Recover a display title: "team-winners-a1b2" -> "Team Winners"."""
    without_suffix = slug[:-(SLUG_SUFFIX_LENGTH + 1)]
    return " ".join(word[:1].upper() + word[1:] for word in without_suffix.split("-") if word)
