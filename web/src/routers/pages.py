"""
HTML page routes.

Every page renders inside the root layout. A failure while building or
rendering a page is caught here and replaced by the full error page (HTTP
500); a failure inside an admin tool only replaces that tool with the
inline fallback.
"""

import time
import structlog
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from web.src.components.tools import get_tool
from web.src.config import Settings
from web.src.dependencies import (
    get_correlation_id,
    get_settings_dependency,
    get_templates_dependency,
)
from web.src.models.page import PageMetadata
from web.src.services.error_boundary import build_error_report
from shared.metrics import get_web_metrics
from shared.tracing import traced

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Pages"])

ADMIN_TOOLS_TITLE = "🔧 Admin Tools"


def show_error_details(settings: Settings) -> bool:
    return settings.debug or settings.is_development


def default_metadata(settings: Settings) -> PageMetadata:
    return PageMetadata(title=settings.site_title, description=settings.site_description)


# ============================================================================
# Error Boundaries
# ============================================================================


def render_error_page(
    request: Request,
    templates: Jinja2Templates,
    settings: Settings,
    exc: BaseException,
    correlation_id: Optional[str] = None,
) -> HTMLResponse:
    """
    Render the full-page fallback for an exception.

    Args:
        request: Request that failed
        templates: Template environment
        settings: Application settings
        exc: The exception raised while rendering
        correlation_id: Request correlation ID, shown with the error details

    Returns:
        HTML response with status 500
    """
    report = build_error_report(
        exc,
        support_email=settings.support_email,
        debug=show_error_details(settings),
    )
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "metadata": default_metadata(settings),
            "report": report,
            "retry_url": request.url.path,
            "correlation_id": correlation_id,
        },
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@traced("admin_tool.render")
def render_tool_slot(name: str, templates: Jinja2Templates, settings: Settings) -> Markup:
    """
    Render an admin tool, falling back inline if it fails.

    Unknown tool names are treated like render failures so the surrounding
    page is never lost.
    """
    try:
        return get_tool(name).render(templates, settings)
    except Exception as e:
        report = build_error_report(
            e,
            support_email=settings.support_email,
            debug=show_error_details(settings),
            component=name,
        )
        get_web_metrics().tool_render_failures.labels(
            tool=name,
            error_type=report.error_type.value
        ).inc()
        fallback = templates.get_template("partials/error_fallback.html")
        return Markup(fallback.render(report=report))


def render_page(
    request: Request,
    templates: Jinja2Templates,
    settings: Settings,
    page: str,
    template: str,
    build_context: Callable[[], Dict[str, Any]],
    correlation_id: Optional[str] = None,
) -> HTMLResponse:
    """
    Render a page template with metrics and the page-level error boundary.

    Args:
        request: Current request
        templates: Template environment
        settings: Application settings
        page: Page name used as the metrics label
        template: Template path
        build_context: Returns page-specific template variables
        correlation_id: Request correlation ID

    Returns:
        The rendered page, or the error page with status 500
    """
    metrics = get_web_metrics()
    start_time = time.perf_counter()

    try:
        context = {"metadata": default_metadata(settings)}
        context.update(build_context())
        response = templates.TemplateResponse(request, template, context)
        outcome = "ok"
    except Exception as e:
        logger.error("page_render_failed", page=page, error=str(e))
        response = render_error_page(request, templates, settings, e, correlation_id)
        outcome = "error"

    metrics.page_renders.labels(page=page, outcome=outcome).inc()
    metrics.page_render_duration.labels(page=page).observe(time.perf_counter() - start_time)

    return response


# ============================================================================
# Pages
# ============================================================================


@router.get("/admin/tools", response_class=HTMLResponse)
async def admin_tools(
    request: Request,
    settings: Settings = Depends(get_settings_dependency),
    templates: Jinja2Templates = Depends(get_templates_dependency),
    correlation_id: Optional[str] = Depends(get_correlation_id),
) -> HTMLResponse:
    """
    Admin tools page.

    Renders the tool selected by the admin_tool setting inside the themed
    layout.
    """
    def build_context() -> Dict[str, Any]:
        return {
            "title": ADMIN_TOOLS_TITLE,
            "tool_html": render_tool_slot(settings.admin_tool, templates, settings),
        }

    return render_page(
        request,
        templates,
        settings,
        page="admin_tools",
        template="admin/tools.html",
        build_context=build_context,
        correlation_id=correlation_id,
    )
