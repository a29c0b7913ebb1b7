"""
Frequency Grid Generator

Logarithmically spaced sample frequencies for response curves.
"""

from __future__ import annotations

import math
import numbers
from typing import List, Sequence

from core.dsp.errors import InvalidArgumentError


DEFAULT_MIN_FREQ = 20.0
DEFAULT_MAX_FREQ = 20000.0


def generate_frequencies(
    num_points: int,
    min_freq: float = DEFAULT_MIN_FREQ,
    max_freq: float = DEFAULT_MAX_FREQ,
) -> List[float]:
    """
    Generate log-uniform frequencies from min_freq to max_freq.

    Args:
        num_points: Number of points (>= 1).
        min_freq: Lowest frequency (Hz), > 0.
        max_freq: Highest frequency (Hz), > min_freq when num_points > 1.

    Returns:
        Strictly ascending frequencies; [min_freq] for a single point.

    Raises:
        InvalidArgumentError: On a non-positive or non-integer point count
            or invalid bounds.
    """
    if isinstance(num_points, bool) or not isinstance(num_points, numbers.Integral):
        raise InvalidArgumentError(f"num_points must be an integer, got {num_points!r}")
    num_points = int(num_points)
    if num_points <= 0:
        raise InvalidArgumentError(f"num_points must be positive, got {num_points}")

    try:
        min_freq = float(min_freq)
        max_freq = float(max_freq)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Frequency bounds must be numbers: {e}") from e

    if not math.isfinite(min_freq) or min_freq <= 0:
        raise InvalidArgumentError(f"min_freq must be finite and positive, got {min_freq}")
    if not math.isfinite(max_freq):
        raise InvalidArgumentError(f"max_freq must be finite, got {max_freq}")

    if num_points == 1:
        return [min_freq]

    if max_freq <= min_freq:
        raise InvalidArgumentError(
            f"max_freq ({max_freq}) must be greater than min_freq ({min_freq})"
        )

    ratio = max_freq / min_freq
    last = num_points - 1
    frequencies = [min_freq * ratio ** (i / last) for i in range(num_points)]
    frequencies[-1] = max_freq
    return frequencies


def nearest_index(frequencies: Sequence[float], target: float) -> int:
    """
    Index of the grid frequency closest to target in log-frequency.

    Raises:
        InvalidArgumentError: If frequencies is empty or target is not positive.
    """
    if not frequencies:
        raise InvalidArgumentError("frequencies must not be empty")
    if not target > 0:
        raise InvalidArgumentError(f"target must be positive, got {target}")

    log_target = math.log(target)
    return min(
        range(len(frequencies)),
        key=lambda i: abs(math.log(frequencies[i]) - log_target),
    )
