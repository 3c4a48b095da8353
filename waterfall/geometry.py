import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from core.exceptions import GeometryError
from waterfall.resources import NormalizedResource, TimingSegment
from waterfall.settings import SvgSettings

TICK_COUNT = 5


@dataclass
class Tick:
    x: float
    height: float
    value: float


@dataclass
class Scale:
    minimum: float
    maximum: float
    step: int
    pixels_per_unit: float

    def to_x(self, value: float) -> float:
        return (value - self.minimum) * self.pixels_per_unit


@dataclass
class SegmentPosition:
    name: str
    x: float
    width: float
    colour: Dict[str, str]
    blocked: bool = False


@dataclass
class ResourcePosition:
    index: int
    name: str
    type: str
    x: float
    y: float
    width: float
    colour: Dict[str, str]
    segments: List[SegmentPosition] = field(default_factory=list)


@dataclass
class ChartGeometry:
    height: float
    ticks: List[Tick]
    resources: List[ResourcePosition]
    scale: Scale


def chart_height(settings: SvgSettings, count: int) -> float:
    return (count + 1) * (settings.bar_height + settings.padding) + settings.offset.y


def build_scale(settings: SvgSettings, resources: Sequence[NormalizedResource]) -> Scale:
    if not resources:
        raise GeometryError("Cannot lay out a chart without resources")

    for resource in resources:
        if not (math.isfinite(resource.start) and math.isfinite(resource.end)):
            raise GeometryError(f"Resource timings for '{resource.name}' are not finite numbers")

    minimum = min(resource.start for resource in resources)
    maximum = max(resource.end for resource in resources)
    if maximum <= minimum:
        raise GeometryError(f"Resource timings span no time (start {minimum}, end {maximum})")

    step = math.ceil((maximum - minimum) / TICK_COUNT)
    maximum = math.ceil(maximum / step) * step
    minimum = math.floor(minimum / step) * step

    return Scale(
        minimum=minimum,
        maximum=maximum,
        step=step,
        pixels_per_unit=(settings.width - settings.offset.x) / (maximum - minimum),
    )


def build_ticks(scale: Scale, height: float) -> List[Tick]:
    ticks = []
    for index in range(int((scale.maximum - scale.minimum) // scale.step)):
        value = index * scale.step
        ticks.append(Tick(x=0 if value == 0 else scale.to_x(value), height=height, value=value))
    return ticks


def _position_segment(scale: Scale, segment: TimingSegment, colour: Dict[str, str]) -> SegmentPosition:
    if not segment.blocked and segment.start == 0 and segment.duration == 0:
        x, width = 0, 0
    else:
        x, width = scale.to_x(segment.start), segment.duration * scale.pixels_per_unit
    return SegmentPosition(name=segment.name, x=x, width=width, colour=colour, blocked=segment.blocked)


def position_resource(settings: SvgSettings, scale: Scale,
                      resource: NormalizedResource, index: int) -> ResourcePosition:
    colours = [colour.model_dump() for colour in settings.colours]
    return ResourcePosition(
        index=index,
        name=resource.name,
        type=resource.type,
        x=scale.to_x(resource.start),
        y=index * settings.resource_height,
        width=resource.duration * scale.pixels_per_unit,
        colour=colours[index % len(colours)],
        segments=[
            _position_segment(scale, segment, colours[position % len(colours)])
            for position, segment in enumerate(resource.timings)
        ],
    )


def build_geometry(settings: SvgSettings, resources: Sequence[NormalizedResource]) -> ChartGeometry:
    """
    Lay out the waterfall chart for a non-empty list of resources.

    Raises:
        GeometryError: when there are no resources or their timings span
            no time or are not finite.
    """
    scale = build_scale(settings, resources)
    return ChartGeometry(
        height=chart_height(settings, len(resources)),
        ticks=build_ticks(scale, len(resources) * settings.resource_height),
        resources=[position_resource(settings, scale, resource, index)
                   for index, resource in enumerate(resources)],
        scale=scale,
    )
