import gpxpy

from pacing_optimizer.models import TrackPoint


def parse_gpx(filepath: str) -> list[TrackPoint]:
    """Parse a GPX file into TrackPoints, in ride order.

    Points without an elevation are placed at 0 m rather than dropped, so
    every recorded position still contributes distance and bearing. A track
    with no elevation data at all then plans as flat.
    """
    with open(filepath, "r") as f:
        gpx = gpxpy.parse(f)

    points: list[TrackPoint] = []
    for track in gpx.tracks:
        for segment in track.segments:
            for pt in segment.points:
                points.append(
                    TrackPoint(
                        lat=pt.latitude,
                        lon=pt.longitude,
                        elevation=pt.elevation if pt.elevation is not None else 0.0,
                    )
                )
    return points
