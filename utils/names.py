"""Name entry: parsing, de-duplication, validation, random names and numbers."""

import re
import random
import logging
from dataclasses import dataclass, field
from typing import Optional

from config import MIN_NAMES, MAX_NAME_LENGTH, DEFAULT_RANDOM_COUNT, MAX_RANDOM_COUNT
from utils.constants import NAME_POOL

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Collapse whitespace and drop special characters except - and ."""
    name = re.sub(r"\s+", " ", name.strip())
    # ASCII word characters only: accented letters are dropped
    return re.sub(r"[^\w\s\-.]", "", name, flags=re.ASCII)


def clean_name(name: str) -> str:
    return normalize_name(name)[:MAX_NAME_LENGTH]


def split_raw(text: str) -> list[str]:
    """Comma-separated when a comma is present, otherwise whitespace-separated."""
    parts = text.split(",") if "," in text else text.split()
    return [p for p in parts if p.strip()]


def dedupe_names(names: list[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping the first spelling."""
    seen = set()
    unique = []
    for name in names:
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(name)
    return unique


def process_names(text: str) -> list[str]:
    cleaned = [clean_name(p) for p in split_raw(text)]
    return dedupe_names([n for n in cleaned if n])


@dataclass
class NameValidation:
    names: list
    warnings: dict = field(default_factory=dict)  # warning type -> count

    @property
    def is_valid(self) -> bool:
        return "min_names" not in self.warnings

    def messages(self) -> list[str]:
        out = []
        removed = self.warnings.get("duplicates")
        if removed:
            noun = "name was" if removed == 1 else "names were"
            out.append(f"{removed} duplicate {noun} removed.")
        if "min_names" in self.warnings:
            out.append(f"Please enter at least {MIN_NAMES} names.")
        long_count = self.warnings.get("long_names")
        if long_count:
            out.append(
                f"{long_count} name(s) cut to {MAX_NAME_LENGTH} characters."
            )
        return out


def validate_names(text: str) -> NameValidation:
    """Parse raw input and report removed duplicates, too few names, and truncated names."""
    cleaned = [n for n in (clean_name(p) for p in split_raw(text)) if n]
    names = dedupe_names(cleaned)
    result = NameValidation(names=names)

    duplicates = len(cleaned) - len(names)
    if duplicates > 0:
        result.warnings["duplicates"] = duplicates
    if len(names) < MIN_NAMES:
        result.warnings["min_names"] = len(names)
    long_names = [p for p in split_raw(text) if len(normalize_name(p)) > MAX_NAME_LENGTH]
    if long_names:
        result.warnings["long_names"] = len(long_names)

    for kind, count in result.warnings.items():
        logger.info(f"Name validation warning: {kind} ({count})")
    return result


def clamp_count(count: Optional[int]) -> int:
    """Missing or zero counts fall back to the default; kept within 1..99."""
    return max(1, min(count or DEFAULT_RANDOM_COUNT, MAX_RANDOM_COUNT))


def name_pool(origin: Optional[str] = None) -> list[str]:
    if origin:
        return list(NAME_POOL.get(origin, []))
    return dedupe_names([name for group in NAME_POOL.values() for name in group])


def random_names(count: Optional[int] = None, rng: Optional[random.Random] = None,
                 origin: Optional[str] = None) -> list[str]:
    """Distinct names sampled from the pool (or one origin group of it)."""
    rng = rng or random.Random()
    pool = name_pool(origin) or name_pool()
    return rng.sample(pool, min(clamp_count(count), len(pool)))


def sequential_numbers(count: Optional[int] = None,
                       rng: Optional[random.Random] = None) -> list[str]:
    """"1".."n" shuffled so neighbours on the wheel are not consecutive."""
    rng = rng or random.Random()
    numbers = [str(i) for i in range(1, clamp_count(count) + 1)]
    rng.shuffle(numbers)
    return numbers
