"""Shareable wheel links: a slug that maps to a public configuration."""

import random
import logging
from typing import Optional, Sequence

from config import SLUG_MAX_ATTEMPTS
from session.models import ShareableWheelConfig
from session.remote import SupabaseAdapter, RemoteStoreError
from utils.constants import INPUT_METHODS
from utils.slug import generate_slug, validate_slug

logger = logging.getLogger(__name__)

TABLE = "wheel_configurations"


def slug_exists(adapter: SupabaseAdapter, slug: str) -> bool:
    """True if a configuration already uses this slug. Lookup failures read as False."""
    if not adapter.is_ready():
        return False
    try:
        rows = adapter.select(TABLE, "slug", match={"slug": slug}, limit=1)
    except RemoteStoreError as e:
        logger.error(f"Error checking slug existence: {e}")
        return False
    return bool(rows)


def _unique_slug(adapter: SupabaseAdapter, team_name: Optional[str],
                 rng: Optional[random.Random]) -> str:
    slug = generate_slug(team_name, rng)
    for _ in range(SLUG_MAX_ATTEMPTS - 1):
        if not slug_exists(adapter, slug):
            break
        logger.info(f"Slug {slug} taken, generating another")
        slug = generate_slug(team_name, rng)
    return slug


def create_shareable_config(adapter: SupabaseAdapter, session_id: str, names: Sequence[str],
                            team_name: Optional[str] = None, input_method: Optional[str] = None,
                            rng: Optional[random.Random] = None) -> Optional[ShareableWheelConfig]:
    """Publish a new configuration under a fresh slug. Returns None if the store is unavailable."""
    if not adapter.is_ready():
        logger.error("Supabase client not available")
        return None
    if input_method is not None and input_method not in INPUT_METHODS:
        raise ValueError(f"Unknown input method: {input_method}")
    names = list(names)
    if not names:
        raise ValueError("Cannot share a wheel with no names")

    slug = _unique_slug(adapter, team_name, rng)
    try:
        rows = adapter.insert(TABLE, {
            "session_id": session_id,
            "names": names,
            "segment_count": len(names),
            "team_name": team_name,
            "slug": slug,
            "is_public": True,
            "input_method": input_method,
        }, returning=True, allow_constraint_errors=False)
    except RemoteStoreError as e:
        logger.error(f"Error creating shareable config: {e}")
        return None
    if not rows:
        logger.error("Shareable config insert returned no row")
        return None
    config = ShareableWheelConfig.from_remote(rows[0])
    logger.info(f"Shared wheel at /{config.slug}")
    return config


def get_config_by_slug(adapter: SupabaseAdapter, slug: str) -> Optional[ShareableWheelConfig]:
    """Public configuration for a slug, or None."""
    if not validate_slug(slug):
        logger.warning(f"Invalid slug: {slug!r}")
        return None
    if not adapter.is_ready():
        logger.error("Supabase client not available")
        return None
    try:
        rows = adapter.select(TABLE, "*", match={"slug": slug, "is_public": True}, limit=1)
    except RemoteStoreError as e:
        logger.error(f"Failed to fetch config by slug {slug}: {e}")
        return None
    if not rows:
        logger.info(f"Config not found for slug: {slug}")
        return None
    return ShareableWheelConfig.from_remote(rows[0])


def make_config_shareable(adapter: SupabaseAdapter, config_id: str,
                          team_name: Optional[str] = None,
                          rng: Optional[random.Random] = None) -> Optional[str]:
    """Give an already-synced configuration a public slug. Returns the slug, or None."""
    if not adapter.is_ready():
        return None
    slug = _unique_slug(adapter, team_name, rng)
    try:
        rows = adapter.update(TABLE, {"id": config_id}, {
            "slug": slug,
            "is_public": True,
            "team_name": team_name,
        }, returning=True, allow_constraint_errors=False)
    except RemoteStoreError as e:
        logger.error(f"Error making config shareable: {e}")
        return None
    if not rows:
        logger.error(f"No configuration {config_id} to share")
        return None
    return rows[0].get("slug")
