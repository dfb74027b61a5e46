"""
Admin tool components.

A tool is a self-contained panel rendered into the /admin/tools page.
Tools register themselves by name; the page renders whichever tool the
``admin_tool`` setting selects.
"""

import structlog
from typing import Any, Dict, List, Type

from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from web.src.config import Settings

logger = structlog.get_logger(__name__)


class ToolNotFoundError(LookupError):
    """Raised when no tool is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Admin tool '{name}' is not registered")


class AdminTool:
    """Base class for admin tool components."""

    name: str = ""
    title: str = ""
    template: str = ""

    def context(self, settings: Settings) -> Dict[str, Any]:
        """Template variables for this tool."""
        return {"tool": self}

    def render(self, templates: Jinja2Templates, settings: Settings) -> Markup:
        """Render the tool's template to safe markup."""
        template = templates.get_template(self.template)
        return Markup(template.render(**self.context(settings)))


_registry: Dict[str, Type[AdminTool]] = {}


def register_tool(tool_cls: Type[AdminTool]) -> Type[AdminTool]:
    """Class decorator adding a tool to the registry under its ``name``."""
    if not tool_cls.name:
        raise ValueError(f"{tool_cls.__name__} must define a name")
    if tool_cls.name in _registry and _registry[tool_cls.name] is not tool_cls:
        raise ValueError(f"Admin tool '{tool_cls.name}' is already registered")

    _registry[tool_cls.name] = tool_cls
    logger.debug("admin_tool_registered", tool=tool_cls.name)
    return tool_cls


def unregister_tool(name: str) -> None:
    _registry.pop(name, None)


def get_tool(name: str) -> AdminTool:
    """
    Instantiate the tool registered under ``name``.

    Raises:
        ToolNotFoundError: If nothing is registered under that name
    """
    try:
        return _registry[name]()
    except KeyError:
        raise ToolNotFoundError(name) from None


def registered_tools() -> List[str]:
    return sorted(_registry)


@register_tool
class DailyOpsComprehensiveFix(AdminTool):
    """
    Daily operations repair tool.

    The tool itself ships as an externally built client bundle; the server
    renders its mount point and, when configured, the bundle's script tag.
    """

    name = "DailyOpsComprehensiveFix"
    title = "Daily Operations Fix"
    template = "tools/daily_ops_comprehensive_fix.html"

    def context(self, settings: Settings) -> Dict[str, Any]:
        return {
            "tool": self,
            "bundle_url": settings.admin_tool_bundle_url,
        }
