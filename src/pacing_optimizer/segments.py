"""Turn ordered GPS track points into graded, directional route segments.

Raw segments are built between consecutive points, then coalesced into spans
of roughly uniform length so that GPS elevation jitter does not produce
spurious gradients.
"""

import logging
import math
from dataclasses import dataclass

from pacing_optimizer.distance import bearing_from_components, calculate_bearing, haversine_distance
from pacing_optimizer.errors import InputTooShortError
from pacing_optimizer.models import RouteSegment, RouteSummary, TrackPoint

logger = logging.getLogger(__name__)

# Point pairs closer than this (meters) are GPS jitter, not movement
MIN_SEGMENT_DISTANCE = 1.0

DEFAULT_SEGMENT_LENGTH = 100.0  # meters


def build_raw_segments(points: list[TrackPoint]) -> list[RouteSegment]:
    """Build one segment per consecutive point pair, skipping pairs under 1 m.

    Each raw segment carries the elevation of its end point.
    """
    segments: list[RouteSegment] = []
    cumulative = 0.0

    for i in range(1, len(points)):
        p1, p2 = points[i - 1], points[i]
        distance = haversine_distance(p1.lat, p1.lon, p2.lat, p2.lon)
        if distance < MIN_SEGMENT_DISTANCE:
            continue

        gradient = (p2.elevation - p1.elevation) / distance if distance > 0 else 0.0
        cumulative += distance
        segments.append(
            RouteSegment(
                start_lat=p1.lat,
                start_lon=p1.lon,
                end_lat=p2.lat,
                end_lon=p2.lon,
                distance=distance,
                cumulative_distance=cumulative,
                elevation=p2.elevation,
                gradient=gradient,
                bearing=calculate_bearing(p1.lat, p1.lon, p2.lat, p2.lon),
            )
        )

    return segments


@dataclass
class _Span:
    """Running totals for the segment currently being coalesced."""
    start_lat: float
    start_lon: float
    start_elevation: float
    distance: float = 0.0
    elevation_sum: float = 0.0  # elevation * distance
    north: float = 0.0  # distance-weighted heading vector
    east: float = 0.0
    end_lat: float = 0.0
    end_lon: float = 0.0
    cumulative_distance: float = 0.0

    def add(self, seg: RouteSegment) -> None:
        heading = math.radians(seg.bearing)
        self.distance += seg.distance
        self.elevation_sum += seg.elevation * seg.distance
        self.north += math.cos(heading) * seg.distance
        self.east += math.sin(heading) * seg.distance
        self.end_lat = seg.end_lat
        self.end_lon = seg.end_lon
        self.cumulative_distance = seg.cumulative_distance

    def to_segment(self) -> RouteSegment:
        avg_elevation = self.elevation_sum / self.distance
        return RouteSegment(
            start_lat=self.start_lat,
            start_lon=self.start_lon,
            end_lat=self.end_lat,
            end_lon=self.end_lon,
            distance=self.distance,
            cumulative_distance=self.cumulative_distance,
            elevation=avg_elevation,
            gradient=(avg_elevation - self.start_elevation) / self.distance,
            bearing=bearing_from_components(self.north, self.east),
        )


def coalesce_segments(
    segments: list[RouteSegment], target_length: float = DEFAULT_SEGMENT_LENGTH
) -> list[RouteSegment]:
    """Merge consecutive raw segments into spans of at least target_length meters.

    Elevation of a merged span is its distance-weighted average, and gradient
    is measured from the previous span's average elevation to this one's.
    Bearings are averaged as distance-weighted unit vectors so headings either
    side of north do not average to south. The final span is emitted even when
    shorter than target_length.
    """
    if not segments:
        return []

    first = segments[0]
    span = _Span(first.start_lat, first.start_lon, first.elevation)
    coalesced: list[RouteSegment] = []

    for i, seg in enumerate(segments):
        span.add(seg)
        if span.distance >= target_length or i == len(segments) - 1:
            merged = span.to_segment()
            coalesced.append(merged)
            span = _Span(merged.end_lat, merged.end_lon, merged.elevation)

    return coalesced


def build_route(
    points: list[TrackPoint], target_segment_length: float = DEFAULT_SEGMENT_LENGTH
) -> list[RouteSegment]:
    """Build the coalesced segment sequence used for preview and optimization.

    Raises:
        InputTooShortError: If fewer than 2 points are given, or no pair of
            points is far enough apart to form a segment.
        ValueError: If target_segment_length is not positive.
    """
    if len(points) < 2:
        raise InputTooShortError("Route contains fewer than 2 track points")
    if target_segment_length <= 0:
        raise ValueError(f"Segment length must be positive, got {target_segment_length}")

    raw = build_raw_segments(points)
    if not raw:
        raise InputTooShortError("Track points are too close together to form a route")

    route = coalesce_segments(raw, target_segment_length)
    logger.debug(
        "Built %d segments from %d raw segments (%d points)", len(route), len(raw), len(points)
    )
    return route


def summarize_route(segments: list[RouteSegment]) -> RouteSummary:
    """Total distance, elevation gain and steepest gradient of a segment sequence."""
    if not segments:
        raise InputTooShortError("Route has no segments")

    elevation_gain = 0.0
    for prev, seg in zip(segments, segments[1:]):
        delta = seg.elevation - prev.elevation
        if delta > 0:
            elevation_gain += delta

    return RouteSummary(
        total_distance=segments[-1].cumulative_distance,
        elevation_gain=elevation_gain,
        max_gradient=max(abs(seg.gradient) for seg in segments),
    )
