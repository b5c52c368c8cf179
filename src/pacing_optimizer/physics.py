import logging
import math

from pacing_optimizer.models import RiderParams

logger = logging.getLogger(__name__)

G = 9.81  # m/s²
DRIVETRAIN_LOSS = 0.03  # fraction of pedal power lost before the wheel
MIN_POWER = 50.0  # watts; floor representing soft pedaling while coasting

MIN_SPEED = 1.0  # m/s
MAX_SPEED = 30.0  # m/s
_MAX_ITERATIONS = 20
_POWER_TOLERANCE = 0.1  # watts
_SPEED_STEP = 0.1  # m/s, for the numerical derivative
_MIN_DERIVATIVE = 0.001  # W per m/s


def power_required(speed: float, gradient: float, headwind: float, params: RiderParams) -> float:
    """Pedal power needed to hold a ground speed on a graded segment.

    P = (P_aero + P_gravity + P_rolling) / (1 - drivetrain_loss), where
    P_aero = 0.5 * rho * CdA * (v + headwind)^2 * v uses the air-relative
    speed, P_gravity = m * g * gradient * v and
    P_rolling = Crr * m * g * cos(atan(gradient)) * v.

    The result never drops below MIN_POWER, even on descents where gravity
    alone would carry the rider.
    """
    air_speed = speed + headwind
    p_aero = 0.5 * params.air_density * params.cda * air_speed**2 * speed
    p_gravity = params.total_mass * G * gradient * speed
    p_rolling = params.crr * params.total_mass * G * math.cos(math.atan(gradient)) * speed

    total = (p_aero + p_gravity + p_rolling) / (1 - DRIVETRAIN_LOSS)
    return max(MIN_POWER, total)


def speed_at_power(power: float, gradient: float, headwind: float, params: RiderParams) -> float:
    """Ground speed achievable at a given pedal power.

    Inverts power_required with Newton's method using a forward-difference
    derivative, starting from the flat still-air aerodynamic solution. The
    estimate is clamped to [MIN_SPEED, MAX_SPEED] after each step, so powers
    that cannot be matched inside that band saturate at a bound. Where the
    power curve is flat (e.g. held at MIN_POWER on a descent) the current
    estimate is returned as is.
    """
    speed = (power / (0.5 * params.air_density * params.cda)) ** (1 / 3)
    speed = max(MIN_SPEED, min(speed, MAX_SPEED))

    for _ in range(_MAX_ITERATIONS):
        current = power_required(speed, gradient, headwind, params)
        error = current - power
        if abs(error) < _POWER_TOLERANCE:
            break

        derivative = (power_required(speed + _SPEED_STEP, gradient, headwind, params) - current) / _SPEED_STEP
        if abs(derivative) < _MIN_DERIVATIVE:
            logger.debug(
                "Speed solver stalled at %.2f m/s (power %.1f W, gradient %.3f)", speed, power, gradient
            )
            break

        speed -= error / derivative
        speed = max(MIN_SPEED, min(speed, MAX_SPEED))

    return speed


def headwind_component(wind_speed: float, wind_direction: float, bearing: float) -> float:
    """Signed wind component along the direction of travel, in m/s.

    The value is added to ground speed to get air speed in power_required.
    Riding straight into the wind gives +wind_speed and wind from directly
    behind gives -wind_speed; a pure crosswind gives 0.

    Args:
        wind_speed: Wind speed in m/s
        wind_direction: Compass direction the wind blows from, in degrees
        bearing: Direction of travel in degrees
    """
    wind_to = (wind_direction + 180) % 360
    angle = math.radians(wind_to - bearing)
    return -wind_speed * math.cos(angle)
