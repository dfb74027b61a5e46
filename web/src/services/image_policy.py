"""
Image source allowlist.

Absolute image URLs may only point at configured hosts. Relative URLs are
served by the application itself and are always allowed.
"""

import structlog
from typing import Callable, Iterable, Optional
from urllib.parse import urlsplit

logger = structlog.get_logger(__name__)


class DisallowedImageHostError(ValueError):
    """Raised when an image source points at a host outside the allowlist."""

    def __init__(self, src: str, host: Optional[str]):
        self.src = src
        self.host = host
        super().__init__(
            f"Invalid src prop ({src}): hostname \"{host}\" is not configured under images.domains"
        )


class ImageDomainPolicy:
    """Checks image sources against the configured domain allowlist."""

    ALLOWED_SCHEMES = frozenset({"http", "https"})

    def __init__(
        self,
        domains: Iterable[str],
        on_reject: Optional[Callable[[Optional[str]], None]] = None
    ):
        """
        Initialize the policy.

        Args:
            domains: Allowed hostnames (compared case-insensitively)
            on_reject: Called with the offending host whenever a source is rejected
        """
        self.domains = frozenset(d.strip().lower() for d in domains if d.strip())
        self.on_reject = on_reject

    def is_allowed(self, src: str) -> bool:
        """
        Check whether an image source may be rendered.

        Args:
            src: Image URL, absolute or relative

        Returns:
            True for relative paths and allowlisted http(s) hosts
        """
        if not src:
            return False

        parts = urlsplit(src)

        # Relative path such as /images/bike.png
        if not parts.scheme and not parts.netloc:
            return True

        if parts.scheme and parts.scheme.lower() not in self.ALLOWED_SCHEMES:
            return False

        host = parts.hostname
        return host is not None and host.lower() in self.domains

    def ensure_allowed(self, src: str) -> str:
        """
        Return the source unchanged if allowed.

        Raises:
            DisallowedImageHostError: If the source is not allowed
        """
        if self.is_allowed(src):
            return src

        host = urlsplit(src).hostname if src else None
        logger.warning("image_host_rejected", src=src, host=host)
        if self.on_reject is not None:
            self.on_reject(host)
        raise DisallowedImageHostError(src, host)
