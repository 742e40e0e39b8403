"""
Angle Quantizer

Snaps radian values to common fractions of pi for readable export text.
"""

import math
from decimal import ROUND_HALF_UP, Decimal

from ..config.settings import (
    ANGLE_FRACTIONS,
    ANGLE_MATCH_TOLERANCE,
    DECIMAL_PLACES,
    ZERO_ROTATION_EPSILON,
    ZERO_TOKEN,
)


class NonFiniteAngleError(ValueError):
    """Raised when an angle is NaN or infinite."""


def is_zero(radian: float) -> bool:
    """True when the angle is small enough to count as no rotation."""
    return abs(radian) < ZERO_ROTATION_EPSILON


def quantize(radian: float) -> str:
    """
    Format an angle for the exported script.

    Returns the zero token inside the zero band, the label of the first
    matching fraction of pi (e.g. ``-Math.PI/4``), or else the value with
    exactly four decimals.

    Raises:
        NonFiniteAngleError: If the angle is NaN or infinite
    """
    radian = float(radian)
    if not math.isfinite(radian):
        raise NonFiniteAngleError(f"Cannot quantize non-finite angle {radian!r}")

    if is_zero(radian):
        return ZERO_TOKEN

    sign = "-" if radian < 0 else ""
    magnitude = abs(radian)

    for label, value in ANGLE_FRACTIONS:
        if abs(magnitude - value) < ANGLE_MATCH_TOLERANCE:
            return sign + label

    # Ties round away from zero, matching JS Number.toFixed
    rounded = Decimal(radian).quantize(Decimal(1).scaleb(-DECIMAL_PLACES), rounding=ROUND_HALF_UP)
    return format(rounded, "f")
