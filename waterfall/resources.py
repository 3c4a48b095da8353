import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

NAN = float("nan")

TIMING_NAMES = ("blocked", "redirect", "dns", "connect", "request", "response")


@dataclass(frozen=True)
class EventSpan:
    start: float
    end: float

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "EventSpan":
        return cls(start=_number(raw, "start"), end=_number(raw, "end"))


@dataclass
class TimingSegment:
    name: str
    start: float
    duration: float
    blocked: bool = False


@dataclass
class NormalizedResource:
    page: str
    name: str
    type: str
    start: float
    duration: float
    timings: List[TimingSegment] = field(default_factory=list)

    @property
    def end(self) -> float:
        return self.start + self.duration

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _number(raw: Mapping[str, Any], key: str) -> float:
    # Missing values become NaN and propagate through the arithmetic.
    value = raw.get(key)
    return NAN if value is None else value


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _events(raw: Mapping[str, Any]) -> Dict[str, EventSpan]:
    return {name: EventSpan.from_raw(_mapping(span)) for name, span in _mapping(raw.get("events")).items()}


def lookup_event(events: Mapping[str, EventSpan], name: str) -> Optional[EventSpan]:
    return events.get(name)


def map_timing(name: str, span: Optional[EventSpan]) -> TimingSegment:
    """Segment for an event span, or a zero-length placeholder at 0 when the event did not occur."""
    if span is None:
        return TimingSegment(name=name, start=0, duration=0)
    return TimingSegment(name=name, start=span.start, duration=span.end - span.start)


def map_request_timing(timestamps: Mapping[str, Any], events: Mapping[str, EventSpan]) -> TimingSegment:
    response = lookup_event(events, "response")
    request_start = timestamps.get("requestStart")

    span = None
    if request_start and response is not None:
        # The request ends where the response begins.
        span = EventSpan(start=request_start, end=response.start)

    return map_timing("request", span)


def resource_duration(start: float, fetch_start: float, events: Mapping[str, EventSpan]) -> float:
    duration = fetch_start - start
    for span in events.values():
        event_duration = span.end - start
        if event_duration > duration:
            duration = event_duration
    return duration


def map_resource(referer: str, raw: Mapping[str, Any]) -> NormalizedResource:
    """
    Normalize one raw resource timing record.

    The blocked segment spans the whole resource; redirect, dns, connect and
    response come straight from the recorded events; request runs from
    `timestamps.requestStart` to the start of the response.
    """
    timestamps = _mapping(raw.get("timestamps"))
    events = _events(raw)
    start = _number(timestamps, "start")
    duration = resource_duration(start, _number(timestamps, "fetchStart"), events)

    return NormalizedResource(
        page=referer,
        name=raw.get("name"),
        type=raw.get("type"),
        start=start,
        duration=duration,
        timings=[
            TimingSegment(name="blocked", start=start, duration=duration, blocked=True),
            map_timing("redirect", lookup_event(events, "redirect")),
            map_timing("dns", lookup_event(events, "dns")),
            map_timing("connect", lookup_event(events, "connect")),
            map_request_timing(timestamps, events),
            map_timing("response", lookup_event(events, "response")),
        ],
    )


def map_beacon(referer: str, beacon: Any) -> List[NormalizedResource]:
    """
    Map every resource timing entry of a beacon.

    Returns an empty list when the beacon carries no `restiming` list. Entries
    that are not objects are skipped.
    """
    restiming = beacon.get("restiming") if isinstance(beacon, Mapping) else None
    if not isinstance(restiming, list):
        logger.debug(f"No resource timing data in beacon from {referer}")
        return []

    resources = []
    for index, entry in enumerate(restiming):
        if not isinstance(entry, Mapping):
            logger.warning(f"Skipping malformed resource timing entry {index} from {referer}")
            continue
        resources.append(map_resource(referer, entry))
    return resources
