"""
Error boundary for page and component rendering.

Turns exceptions raised while rendering into an ErrorReport that the
fallback templates can show: a category-specific message, a short error
id the user can quote, a prefilled report link and, in development, the
exception details.
"""

import secrets
import time
import traceback as tb
import structlog
from typing import Optional
from urllib.parse import quote

from web.src.models.page import ErrorReport, ErrorType

logger = structlog.get_logger(__name__)

ERROR_KEYWORDS = (
    (ErrorType.NETWORK, ("NetworkError", "fetch")),
    (ErrorType.PRICING, ("pricing", "calculation")),
    (ErrorType.BOOKING, ("booking", "reservation")),
)

ERROR_MESSAGES = {
    ErrorType.NETWORK: "Unable to connect to server. Please check your internet connection.",
    ErrorType.PRICING: "Error calculating pricing. Using fallback rates.",
    ErrorType.BOOKING: "Booking operation failed. Your data is safe.",
    ErrorType.GENERAL: "An unexpected error occurred. Our team has been notified.",
}

ERROR_ICONS = {
    ErrorType.NETWORK: "🌐",
    ErrorType.PRICING: "💰",
    ErrorType.BOOKING: "📋",
    ErrorType.GENERAL: "⚠️",
}

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def new_error_id() -> str:
    """Millisecond timestamp in base 36 followed by a random base-36 suffix."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(8))
    return _to_base36(int(time.time() * 1000)) + suffix


def classify_error(exc: Optional[BaseException]) -> ErrorType:
    """
    Pick the error category from the exception message.

    Matching is case-sensitive and checked in order: network, pricing,
    booking. Anything else is general.
    """
    message = str(exc) if exc is not None else ""
    for error_type, keywords in ERROR_KEYWORDS:
        if any(keyword in message for keyword in keywords):
            return error_type
    return ErrorType.GENERAL


def build_report_link(support_email: str, error_id: str, message: str, timestamp: str) -> str:
    """mailto: link with the error id in the subject and a prefilled body."""
    subject = f"MR Travels Error Report - {error_id}"
    body = (
        f"Error ID: {error_id}\nMessage: {message}\nTime: {timestamp}\n\n"
        "Please describe what you were doing when this error occurred:\n\n"
    )
    return f"mailto:{support_email}?subject={quote(subject)}&body={quote(body)}"


def build_error_report(
    exc: BaseException,
    support_email: str,
    debug: bool = False,
    component: Optional[str] = None,
) -> ErrorReport:
    """
    Log an exception and describe it for the fallback views.

    Args:
        exc: The exception that interrupted rendering
        support_email: Address used in the report link
        debug: Include exception message and traceback
        component: Name of the failing component, if not the whole page

    Returns:
        ErrorReport
    """
    error_id = new_error_id()
    error_type = classify_error(exc)
    timestamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

    logger.error(
        "render_error_caught",
        error_id=error_id,
        error_type=error_type.value,
        component=component,
        error=str(exc),
        exc_info=exc,
    )

    return ErrorReport(
        error_id=error_id,
        error_type=error_type,
        message=ERROR_MESSAGES[error_type],
        icon=ERROR_ICONS[error_type],
        detail=str(exc) if debug else None,
        traceback="".join(tb.format_exception(type(exc), exc, exc.__traceback__)) if debug else None,
        report_link=build_report_link(support_email, error_id, str(exc), timestamp),
    )
