"""Segment-by-segment power allocation under a W' balance constraint.

Three passes over the route, each consuming the previous one's output:

1. Terrain and wind target power, independently per segment.
2. W' balance feasibility, in route order: efforts above FTP drain the
   anaerobic reserve, efforts below FTP refill it more slowly, and any effort
   that would take the reserve under its floor reverts to base power.
3. Realized speed, time and ride-level load metrics at the final powers.

This is a greedy heuristic, not a global optimum.
"""

import logging
from dataclasses import dataclass, fields, replace

import numpy as np

from pacing_optimizer.errors import InputTooShortError, NonPhysicalParameterError
from pacing_optimizer.models import (
    OptimizationResult,
    OptimizedSegment,
    RideMetrics,
    RiderParams,
    RouteSegment,
)
from pacing_optimizer.physics import headwind_component, speed_at_power

logger = logging.getLogger(__name__)

MAX_POWER_FACTOR = 1.20  # ceiling as a multiple of FTP
MIN_POWER_FACTOR = 0.5  # floor as a multiple of base power

# Gradient bands, in percent
STEEP_CLIMB_GRADE = 2.0
MODERATE_CLIMB_GRADE = 0.5
STEEP_DESCENT_GRADE = -2.0

# Intensity (% FTP) below which climbs get no boost, and the span to full boost
AGGRESSIVENESS_START = 65.0
AGGRESSIVENESS_RANGE = 35.0

W_PRIME_FLOOR = 0.15  # fraction of W' that is never spent
W_PRIME_RECOVERY_RATE = 0.30  # recovery relative to depletion


def _aggressiveness(target_intensity: float) -> float:
    """How far above FTP climbs may go, 0 at 65% intensity up to 1 at 100%."""
    return max(0.0, min((target_intensity - AGGRESSIVENESS_START) / AGGRESSIVENESS_RANGE, 1.0))


def target_power(gradient: float, headwind: float, params: RiderParams) -> float:
    """Terrain- and wind-adjusted target power for one segment.

    Climbs ramp up toward (and on steep grades beyond) FTP in proportion to
    how ambitious the ride intensity is; descents back off for recovery. The
    result is clamped to [0.5 * base power, 1.2 * FTP].

    Band edges: above 2% is a steep climb, above 0.5% up to 2% moderate,
    below -2% a steep descent, -2% up to 0% a gentle descent, and 0% to 0.5%
    is flat.
    """
    ftp = params.ftp
    base_power = params.base_power
    aggressiveness = _aggressiveness(params.target_intensity)
    grade_pct = gradient * 100

    if grade_pct > STEEP_CLIMB_GRADE:
        max_boost = 0.10 + aggressiveness * 0.20
        boost = min((grade_pct - STEEP_CLIMB_GRADE) * 0.10, max_boost) * aggressiveness
        power = max(base_power, ftp * (1 + boost))
    elif grade_pct > MODERATE_CLIMB_GRADE:
        ramp = (grade_pct - MODERATE_CLIMB_GRADE) / (STEEP_CLIMB_GRADE - MODERATE_CLIMB_GRADE)
        power = base_power + ramp * (ftp - base_power) * aggressiveness
    elif grade_pct < STEEP_DESCENT_GRADE:
        power = base_power * (1 - min(abs(grade_pct) * 0.12, 0.40))
    elif grade_pct < 0:
        power = base_power * (1 - abs(grade_pct) * 0.05)
    else:
        power = base_power

    # Negative wind component raises the target, positive lowers it
    if headwind < 0:
        power *= 1 + min(abs(headwind) * 0.02, 0.10)
    elif headwind > 0:
        power *= 1 - min(headwind * 0.015, 0.08)

    return max(base_power * MIN_POWER_FACTOR, min(power, ftp * MAX_POWER_FACTOR))


def _augment(seg: RouteSegment, **extra) -> OptimizedSegment:
    """Copy a route segment into an OptimizedSegment with extra fields set."""
    base = {f.name: getattr(seg, f.name) for f in fields(RouteSegment)}
    return OptimizedSegment(**base, **extra)


def plan_target_powers(segments: list[RouteSegment], params: RiderParams) -> list[OptimizedSegment]:
    """Pass 1: attach wind component and target power to a copy of each segment."""
    planned = []
    for seg in segments:
        headwind = headwind_component(params.wind_speed, params.wind_direction, seg.bearing)
        planned.append(
            _augment(seg, headwind=headwind, optimized_power=target_power(seg.gradient, headwind, params))
        )
    return planned


@dataclass(frozen=True)
class WPrimeState:
    """Reserve carried from segment to segment in the balance pass."""
    w_balance: float  # joules
    min_w_balance: float  # joules


def w_prime_step(
    state: WPrimeState, seg: OptimizedSegment, params: RiderParams
) -> tuple[WPrimeState, OptimizedSegment]:
    """Advance the W' balance across one segment.

    Power above FTP spends (power - FTP) * time from the reserve. If that
    would leave less than 15% of W', the segment is ridden at base power
    instead and the reserve is left untouched. Power at or below FTP refills
    the reserve at 30% of the (FTP - power) * time deficit, up to W'.
    """
    power = seg.optimized_power
    speed = speed_at_power(power, seg.gradient, seg.headwind, params)
    segment_time = seg.distance / speed
    w_balance = state.w_balance

    if power > params.ftp:
        cost = (power - params.ftp) * segment_time
        if w_balance - cost < params.w_prime * W_PRIME_FLOOR:
            logger.debug(
                "W' floor: segment at %.0f m reverted from %.0f W to %.0f W (balance %.0f J, cost %.0f J)",
                seg.cumulative_distance, power, params.base_power, w_balance, cost,
            )
            power = params.base_power
        else:
            w_balance -= cost
    else:
        recovery = (params.ftp - power) * segment_time * W_PRIME_RECOVERY_RATE
        w_balance = min(params.w_prime, w_balance + recovery)

    next_state = WPrimeState(w_balance=w_balance, min_w_balance=min(state.min_w_balance, w_balance))
    return next_state, replace(seg, optimized_power=power, w_balance=w_balance)


def apply_w_prime_balance(
    segments: list[OptimizedSegment], params: RiderParams
) -> tuple[list[OptimizedSegment], WPrimeState]:
    """Pass 2: fold w_prime_step over the route in order.

    Returns the segments with final powers and post-segment balances, and the
    state after the last segment.
    """
    state = WPrimeState(w_balance=params.w_prime, min_w_balance=params.w_prime)
    balanced = []
    for seg in segments:
        state, seg = w_prime_step(state, seg, params)
        balanced.append(seg)
    return balanced, state


def calculate_ride_metrics(
    segments: list[OptimizedSegment], params: RiderParams, min_w_balance: float
) -> tuple[list[OptimizedSegment], RideMetrics]:
    """Pass 3: realized speed and time per segment, and ride-level metrics.

    Averages are time-weighted. Normalized power is the fourth root of the
    time-weighted mean fourth power; TSS = hours * IF^2 * 100.
    """
    speeds = np.array([
        speed_at_power(seg.optimized_power, seg.gradient, seg.headwind, params) for seg in segments
    ])
    distances = np.array([seg.distance for seg in segments])
    powers = np.array([seg.optimized_power for seg in segments])
    times = distances / speeds

    total_time = float(times.sum())
    avg_power = float((powers * times).sum() / total_time)
    normalized_power = float(((powers**4 * times).sum() / total_time) ** 0.25)
    intensity_factor = normalized_power / params.ftp

    metrics = RideMetrics(
        total_time=total_time,
        avg_power=avg_power,
        normalized_power=normalized_power,
        intensity_factor=intensity_factor,
        training_stress_score=(total_time / 3600) * intensity_factor**2 * 100,
        avg_speed=(float(distances.sum()) / 1000) / (total_time / 3600),
        min_w_balance=min_w_balance,
        w_prime_percent=min_w_balance / params.w_prime * 100,
    )
    realized = [
        replace(seg, speed=float(speed), time=float(t)) for seg, speed, t in zip(segments, speeds, times)
    ]
    return realized, metrics


def optimize(segments: list[RouteSegment], params: RiderParams) -> OptimizationResult:
    """Allocate power across a route and report the resulting ride.

    The input segments are not modified; the result holds augmented copies.

    Raises:
        InputTooShortError: If segments is empty.
        NonPhysicalParameterError: If params fail validation or a segment has
            non-positive distance.
    """
    if not segments:
        raise InputTooShortError("Route has no segments")
    params.validate()
    for i, seg in enumerate(segments):
        if not seg.distance > 0:
            raise NonPhysicalParameterError(f"Segment {i} has non-positive distance {seg.distance}")

    planned = plan_target_powers(segments, params)
    balanced, state = apply_w_prime_balance(planned, params)
    realized, metrics = calculate_ride_metrics(balanced, params, state.min_w_balance)

    logger.info(
        "Optimized %d segments: %.0f s, NP %.0f W, min W' %.0f J (%.0f%%)",
        len(realized), metrics.total_time, metrics.normalized_power,
        metrics.min_w_balance, metrics.w_prime_percent,
    )
    return OptimizationResult(segments=realized, metrics=metrics)
