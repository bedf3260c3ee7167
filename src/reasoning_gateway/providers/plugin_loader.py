"""Plugin loader for provider dialects - Entry point based discovery

Dialects are discovered from the ``reasoning_gateway.dialects`` entry point
group. Built-in dialects are always available, even when package metadata
is missing (e.g. running from a source checkout).

Usage:
    # Get all dialects
    dialects = get_dialects()  # {'openai_chat': OpenAIChatDialect, ...}

    # Get a specific dialect class
    dialect_class = get_dialect_class('openai_chat')

External plugins add dialects in their pyproject.toml:
    [project.entry-points."reasoning_gateway.dialects"]
    my_vendor = "my_package.dialect:MyVendorDialect"
"""

import importlib.metadata
import logging

from .base import ProviderDialect
from .dialects import OpenAIChatDialect

logger = logging.getLogger(__name__)

DIALECT_GROUP = "reasoning_gateway.dialects"

BUILTIN_DIALECTS: dict[str, type[ProviderDialect]] = {
    OpenAIChatDialect.name: OpenAIChatDialect,
}

# Cache for loaded dialects: {name: class}
_dialect_cache: dict[str, type[ProviderDialect]] | None = None


def discover_dialects(group: str = DIALECT_GROUP) -> dict[str, type[ProviderDialect]]:
    """Discover dialects for an entry point group

    Args:
        group: Entry point group name

    Returns:
        Dictionary mapping dialect names to dialect classes

    Note:
        Dialects with missing dependencies are skipped.
    """
    dialects = {}

    try:
        eps = importlib.metadata.entry_points(group=group)

        for ep in eps:
            try:
                dialects[ep.name] = ep.load()
                logger.debug(f"Discovered dialect: {group}.{ep.name}")
            except ImportError as e:
                # Missing optional dependency
                logger.debug(f"Skipping {group}.{ep.name}: missing dependency - {e}")
            except Exception as e:
                logger.warning(f"Failed to load dialect {group}.{ep.name}: {e}")

    except Exception as e:
        logger.warning(f"Failed to discover dialects for {group}: {e}")

    return dialects


def get_dialects() -> dict[str, type[ProviderDialect]]:
    """Get all available dialects, discovering them on first use"""
    global _dialect_cache
    if _dialect_cache is None:
        _dialect_cache = {**BUILTIN_DIALECTS, **discover_dialects()}
    return _dialect_cache


def get_dialect_class(name: str) -> type[ProviderDialect] | None:
    """Get a dialect class by name, or None if not found"""
    return get_dialects().get(name)


def get_available_dialects() -> list[str]:
    """Get list of available dialect names"""
    return sorted(get_dialects())


def create_dialect(name: str) -> ProviderDialect:
    """Instantiate a dialect by name

    Raises:
        ValueError: If no dialect with that name is available
    """
    dialect_class = get_dialect_class(name)
    if not dialect_class:
        raise ValueError(
            f"Unknown dialect: {name}. "
            f"Available: {', '.join(get_available_dialects())}"
        )
    return dialect_class()


def register_dialect(name: str, dialect_class: type[ProviderDialect]) -> None:
    """Manually register a dialect

    For testing and runtime registration. Takes precedence over entry
    point discovered dialects.
    """
    get_dialects()[name] = dialect_class
    logger.debug(f"Manually registered dialect: {name}")


def reset() -> None:
    """Reset plugin loader cache

    For testing purposes only.
    """
    global _dialect_cache
    _dialect_cache = None
    logger.debug("Dialect cache reset")
