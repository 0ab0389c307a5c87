# backend/app/services/template_service.py
"""Jinja2 rendering for notification email bodies."""

from datetime import datetime
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..core.config import settings
from ..core.constants import BRAND_NAME
from .base import BaseService
from .template_registry import TemplateRegistry

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class TemplateService:
    """
    Renders templates under ``app/templates``.

    Callers' variables are layered over a shared base context holding the
    brand name, current year and support address.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now().year,
            "support_email": settings.from_email,
        }

    @BaseService.measure_operation("render_template")
    def render_template(
        self,
        template_name: str | TemplateRegistry,
        context: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> str:
        """Render a registry entry or relative path; ``TemplateNotFound`` propagates."""
        if isinstance(template_name, TemplateRegistry):
            template_name = template_name.value
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            self.logger.error("Missing email template %s", template_name)
            raise

        return template.render({**self.get_common_context(), **(context or {}), **kwargs})

    def template_exists(self, template_name: str) -> bool:
        return template_name in self.env.list_templates()
