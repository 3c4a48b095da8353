import logging
from typing import Any, Mapping, Optional

from templates.template_registry import TemplateRegistry, WATERFALL_TEMPLATE
from waterfall.assembler import RenderModel, assemble
from waterfall.resources import map_beacon
from waterfall.settings import SvgSettings, load_settings

logger = logging.getLogger(__name__)


class WaterfallMapper:
    """
    Turns beacons into rendered waterfall documents.

    Settings and the compiled template are loaded once and only read
    afterwards, so one instance can serve concurrent beacons.
    """

    def __init__(self, settings: SvgSettings, templates: Optional[TemplateRegistry] = None):
        self.settings = settings
        self.templates = templates or TemplateRegistry(settings.template_path)
        self.template = self.templates.get_template(WATERFALL_TEMPLATE)

    def model(self, data: Any, referer: str) -> Optional[RenderModel]:
        resources = map_beacon(referer, data)
        if not resources:
            return None

        logger.debug(f"Mapped {len(resources)} resources for {referer}")
        return assemble(self.settings, resources)

    def render(self, model: RenderModel) -> str:
        return self.template.render(svg=model.svg, details=model.details)

    def __call__(self, data: Any, referer: str) -> str:
        model = self.model(data, referer)
        if model is None:
            return ''

        return self.render(model)


def initialise(options: Optional[Mapping[str, Any]] = None) -> WaterfallMapper:
    """
    Build a mapper from `svgSettings` / `svgTemplate` options.

    Raises:
        ConfigurationError: if the settings are invalid.
    """
    return WaterfallMapper(load_settings(options))
