import pytest

from core.exceptions import GeometryError
from tests.utils.beacon_factory import resource_event, settings_dict
from waterfall.geometry import build_geometry, build_scale, chart_height
from waterfall.resources import map_resource
from waterfall.settings import settings_from_dict


@pytest.fixture
def settings():
    return settings_from_dict(settings_dict())


def resources_for(*raws):
    return [map_resource("page", raw) for raw in raws]


def test_height_grows_by_one_row_per_resource(settings):
    row = settings.bar_height + settings.padding
    for count in range(1, 6):
        assert chart_height(settings, count + 1) - chart_height(settings, count) == row


def test_height_includes_header_row_and_offset(settings):
    resources = resources_for(resource_event(start=0, fetch_start=100))
    assert build_geometry(settings, resources).height == 2 * 22 + 40


def test_ticks_span_rounded_range(settings):
    resources = resources_for(
        resource_event(start=0, fetch_start=40),
        resource_event(start=20, fetch_start=50, response=(60, 97)),
    )

    geometry = build_geometry(settings, resources)
    scale = geometry.scale

    assert scale.step == 20
    assert (scale.minimum, scale.maximum) == (0, 100)
    assert len(geometry.ticks) == (scale.maximum - scale.minimum) / scale.step
    assert [tick.value for tick in geometry.ticks] == [0, 20, 40, 60, 80]
    assert scale.pixels_per_unit == pytest.approx((960 - 320) / 100)
    assert geometry.ticks[1].x == pytest.approx(20 * 6.4)


def test_tick_height_is_plotted_bar_height(settings):
    resources = resources_for(resource_event(start=0, fetch_start=10), resource_event(start=5, fetch_start=30))
    geometry = build_geometry(settings, resources)
    assert {tick.height for tick in geometry.ticks} == {2 * settings.resource_height}


def test_zero_tick_is_at_origin(settings):
    resources = resources_for(resource_event(start=130, fetch_start=190))

    geometry = build_geometry(settings, resources)

    assert geometry.ticks[0].value == 0
    assert geometry.ticks[0].x == 0
    assert geometry.scale.minimum == 120
    assert geometry.scale.maximum == 192
    assert len(geometry.ticks) == 6


def test_minimum_is_earliest_start_not_first_resource(settings):
    resources = resources_for(resource_event(start=50, fetch_start=60), resource_event(start=0, fetch_start=10))
    assert build_scale(settings, resources).minimum == 0


def test_resources_are_positioned_in_rows(settings):
    resources = resources_for(
        resource_event(start=0, fetch_start=50),
        resource_event(start=50, fetch_start=100, request_start=60, response=(70, 100)),
    )

    positions = build_geometry(settings, resources).resources

    assert [position.y for position in positions] == [0, settings.resource_height]
    assert positions[1].x == pytest.approx(50 * 6.4)
    assert positions[1].width == pytest.approx(50 * 6.4)
    assert positions[0].colour["name"] == "blocked"
    assert positions[1].colour["name"] == "redirect"


def test_resource_colours_cycle_through_palette(settings):
    raws = [resource_event(name=str(i), start=i, fetch_start=i + 10) for i in range(8)]
    positions = build_geometry(settings, resources_for(*raws)).resources
    assert positions[6].colour == positions[0].colour
    assert positions[7].colour["name"] == "redirect"


def test_segments_use_their_own_colour(settings):
    resources = resources_for(resource_event(start=0, fetch_start=10, request_start=20, response=(30, 100)))

    segments = build_geometry(settings, resources).resources[0].segments

    assert [segment.colour["name"] for segment in segments] == [
        "blocked", "redirect", "dns", "connect", "request", "response"]
    assert segments[0].blocked is True
    request = segments[4]
    assert request.x == pytest.approx(20 * 6.4)
    assert request.width == pytest.approx(10 * 6.4)
    assert (segments[1].x, segments[1].width) == (0, 0)


def test_empty_resources_rejected(settings):
    with pytest.raises(GeometryError):
        build_geometry(settings, [])


def test_zero_span_rejected(settings):
    with pytest.raises(GeometryError, match="span no time"):
        build_geometry(settings, resources_for(resource_event(start=100, fetch_start=100)))


def test_nan_timings_rejected(settings):
    raw = resource_event()
    del raw["timestamps"]["start"]
    with pytest.raises(GeometryError, match="not finite"):
        build_geometry(settings, resources_for(resource_event(), raw))
