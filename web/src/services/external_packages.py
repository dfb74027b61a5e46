"""
Checks for packages that server-side rendering imports at runtime.
"""

import importlib.util
import structlog
from typing import Dict, Iterable

logger = structlog.get_logger(__name__)


def is_importable(name: str) -> bool:
    """Return True if the top-level package ``name`` can be imported."""
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False


def check_external_packages(names: Iterable[str]) -> Dict[str, bool]:
    """
    Report whether each declared server package is importable.

    Args:
        names: Package import names

    Returns:
        Mapping of package name to availability, in declaration order
    """
    results = {name: is_importable(name) for name in names}

    missing = [name for name, available in results.items() if not available]
    if missing:
        logger.warning("external_packages_missing", packages=missing)
    else:
        logger.debug("external_packages_available", packages=list(results))

    return results
