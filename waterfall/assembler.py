from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence

from waterfall.geometry import build_geometry
from waterfall.resources import NormalizedResource
from waterfall.settings import SvgSettings


@dataclass
class RenderModel:
    """Everything the template renderer needs: chart settings and resource details."""
    svg: Dict[str, Any]
    details: List[NormalizedResource]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "svg": self.svg,
            "details": [resource.to_dict() for resource in self.details],
        }


def customise_svg_settings(settings: SvgSettings, resources: Sequence[NormalizedResource]) -> Dict[str, Any]:
    geometry = build_geometry(settings, resources)
    svg = settings.as_template_dict()
    svg["height"] = geometry.height
    svg["ticks"] = [asdict(tick) for tick in geometry.ticks]
    svg["resources"] = [asdict(position) for position in geometry.resources]
    return svg


def assemble(settings: SvgSettings, resources: Sequence[NormalizedResource]) -> RenderModel:
    return RenderModel(
        svg=customise_svg_settings(settings, resources),
        details=list(resources),
    )
