import os

import pytest

from pacing_optimizer.models import RiderParams, RouteSegment, TrackPoint

SAMPLE_GPX_PATH = os.path.join(
    os.path.dirname(__file__), "functional", "data", "sample_ride.gpx"
)


def make_segments(gradients: list[float], distance: float = 100.0, bearing: float = 0.0) -> list[RouteSegment]:
    """Equal-length segments heading due north with the given gradients."""
    segments = []
    cumulative = 0.0
    elevation = 100.0
    lat = 45.0
    step = distance / 111_195  # degrees of latitude per segment
    for gradient in gradients:
        cumulative += distance
        elevation += gradient * distance
        segments.append(
            RouteSegment(
                start_lat=lat,
                start_lon=13.6,
                end_lat=lat + step,
                end_lon=13.6,
                distance=distance,
                cumulative_distance=cumulative,
                elevation=elevation,
                gradient=gradient,
                bearing=bearing,
            )
        )
        lat += step
    return segments


@pytest.fixture
def rider_params():
    return RiderParams()


@pytest.fixture
def test_rider():
    """Rider used by the end-to-end pacing scenarios."""
    return RiderParams(
        ftp=250.0,
        total_mass=80.0,
        cda=0.3,
        crr=0.004,
        w_prime=20000.0,
        target_intensity=100.0,
    )


@pytest.fixture
def northbound_points():
    """Straight track heading north, ~55.6 m between points, gently climbing."""
    return [
        TrackPoint(lat=45.0 + i * 0.0005, lon=13.6, elevation=100.0 + i * 2.0)
        for i in range(10)
    ]


@pytest.fixture
def flat_route():
    """10 km of flat road in 100 m segments."""
    return make_segments([0.0] * 100)


@pytest.fixture
def segment_factory():
    return make_segments
