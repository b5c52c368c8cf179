from dataclasses import dataclass

from pacing_optimizer.errors import NonPhysicalParameterError


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    elevation: float  # meters


@dataclass(frozen=True)
class RouteSegment:
    start_lat: float
    start_lon: float
    end_lat: float
    end_lon: float
    distance: float  # meters
    cumulative_distance: float  # meters from route start, including this segment
    elevation: float  # meters (distance-weighted average once coalesced)
    gradient: float  # rise / run
    bearing: float  # degrees, 0-360 (0=North, 90=East)


@dataclass(frozen=True)
class OptimizedSegment(RouteSegment):
    headwind: float = 0.0  # m/s (positive = riding into the wind, adds to air speed; negative = wind from behind)
    optimized_power: float = 0.0  # watts
    w_balance: float | None = None  # joules remaining after this segment
    speed: float | None = None  # m/s at optimized_power
    time: float | None = None  # seconds


@dataclass
class RiderParams:
    ftp: float = 250.0  # watts
    total_mass: float = 83.0  # kg (rider + bike)
    cda: float = 0.32  # m² (drag coefficient * frontal area)
    crr: float = 0.004  # rolling resistance coefficient
    w_prime: float = 20000.0  # joules of anaerobic capacity above FTP
    wind_speed: float = 0.0  # m/s
    wind_direction: float = 0.0  # degrees, direction the wind blows FROM
    target_intensity: float = 85.0  # percent of FTP
    air_density: float = 1.225  # kg/m³

    @property
    def base_power(self) -> float:
        """Baseline sustainable power for the ride in watts."""
        return self.ftp * self.target_intensity / 100

    def validate(self) -> None:
        """Reject parameter sets that would make the physics meaningless.

        Raises:
            NonPhysicalParameterError: naming the first offending field.
        """
        for name in ("ftp", "w_prime", "total_mass", "cda", "target_intensity", "air_density"):
            value = getattr(self, name)
            if not value > 0:
                raise NonPhysicalParameterError(f"{name} must be positive, got {value}")
        for name in ("crr", "wind_speed"):
            value = getattr(self, name)
            if not value >= 0:
                raise NonPhysicalParameterError(f"{name} must not be negative, got {value}")


@dataclass
class RideMetrics:
    total_time: float  # seconds
    avg_power: float  # watts, time-weighted
    normalized_power: float  # watts
    intensity_factor: float  # normalized_power / ftp
    training_stress_score: float
    avg_speed: float  # km/h
    min_w_balance: float  # joules
    w_prime_percent: float  # min_w_balance as percent of w_prime


@dataclass
class OptimizationResult:
    segments: list[OptimizedSegment]
    metrics: RideMetrics


@dataclass
class RouteSummary:
    total_distance: float  # meters
    elevation_gain: float  # meters
    max_gradient: float  # largest absolute rise / run
