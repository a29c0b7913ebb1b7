"""
Biquad Filter Implementation

RBJ Audio EQ Cookbook biquad design for a single EQ band and evaluation
of its magnitude response on the unit circle.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

from models.eq_band import Band, DEFAULT_Q, FilterType

logger = logging.getLogger(__name__)


MIN_GAIN_DB = -48.0
MAX_GAIN_DB = 48.0

# Gains below this (dB) make gain-type filters a pass-through.
GAIN_EPSILON_DB = 1e-3

# Frequencies are kept strictly below Nyquist.
NYQUIST_GUARD = 0.999999


def clamp_db(value: float) -> float:
    """Clamp a dB value to [MIN_GAIN_DB, MAX_GAIN_DB]."""
    return max(MIN_GAIN_DB, min(MAX_GAIN_DB, value))


def clamp_to_nyquist(frequency: float, sample_rate: float) -> float:
    """Clamp a frequency to just below half the sample rate."""
    return min(frequency, sample_rate * 0.5 * NYQUIST_GUARD)


def _is_positive(value: Optional[float]) -> bool:
    return isinstance(value, numbers.Real) and math.isfinite(value) and value > 0


@dataclass(frozen=True)
class BiquadCoefficients:
    """
    Normalized biquad coefficients (a0 == 1).

    H(z) = (b0 + b1 z^-1 + b2 z^-2) / (1 + a1 z^-1 + a2 z^-2)
    """
    b0: float
    b1: float
    b2: float
    a1: float
    a2: float

    def as_tuple(self) -> Tuple[float, float, float, float, float]:
        return (self.b0, self.b1, self.b2, self.a1, self.a2)

    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in self.as_tuple())

    def magnitude_db(self, frequency: float, sample_rate: float) -> float:
        """
        Magnitude response (dB) at a frequency.

        Evaluates numerator and denominator at z = e^{jw}, w = 2*pi*f/fs.
        Returns 0.0 when the denominator vanishes or anything is non-finite.
        """
        w = 2.0 * math.pi * frequency / sample_rate
        cos_w = math.cos(w)
        sin_w = math.sin(w)
        cos_2w = math.cos(2.0 * w)
        sin_2w = math.sin(2.0 * w)

        num_re = self.b0 + self.b1 * cos_w + self.b2 * cos_2w
        num_im = -(self.b1 * sin_w + self.b2 * sin_2w)
        den_re = 1.0 + self.a1 * cos_w + self.a2 * cos_2w
        den_im = -(self.a1 * sin_w + self.a2 * sin_2w)

        num_sq = num_re * num_re + num_im * num_im
        den_sq = den_re * den_re + den_im * den_im
        if den_sq == 0.0 or not (math.isfinite(num_sq) and math.isfinite(den_sq)):
            return 0.0
        if num_sq <= 0.0:
            # log of zero magnitude is -inf
            return 0.0

        db = 10.0 * math.log10(num_sq / den_sq)
        return db if math.isfinite(db) else 0.0


# Raw designer output: (b0, b1, b2, a0, a1, a2)
RawCoefficients = Tuple[float, float, float, float, float, float]


def _design_peaking(w0: float, A: float, q: float, slope: float) -> RawCoefficients:
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / (2.0 * q)
    return (
        1.0 + alpha * A,
        -2.0 * cos_w0,
        1.0 - alpha * A,
        1.0 + alpha / A,
        -2.0 * cos_w0,
        1.0 - alpha / A,
    )


def _shelf_alpha(w0: float, A: float, slope: float) -> float:
    return math.sin(w0) / 2.0 * math.sqrt(max(0.0, (A + 1.0 / A) * (1.0 / slope - 1.0) + 2.0))


def _design_lowshelf(w0: float, A: float, q: float, slope: float) -> RawCoefficients:
    cos_w0 = math.cos(w0)
    beta = 2.0 * math.sqrt(A) * _shelf_alpha(w0, A, slope)
    return (
        A * ((A + 1.0) - (A - 1.0) * cos_w0 + beta),
        2.0 * A * ((A - 1.0) - (A + 1.0) * cos_w0),
        A * ((A + 1.0) - (A - 1.0) * cos_w0 - beta),
        (A + 1.0) + (A - 1.0) * cos_w0 + beta,
        -2.0 * ((A - 1.0) + (A + 1.0) * cos_w0),
        (A + 1.0) + (A - 1.0) * cos_w0 - beta,
    )


def _design_highshelf(w0: float, A: float, q: float, slope: float) -> RawCoefficients:
    cos_w0 = math.cos(w0)
    beta = 2.0 * math.sqrt(A) * _shelf_alpha(w0, A, slope)
    return (
        A * ((A + 1.0) + (A - 1.0) * cos_w0 + beta),
        -2.0 * A * ((A - 1.0) + (A + 1.0) * cos_w0),
        A * ((A + 1.0) + (A - 1.0) * cos_w0 - beta),
        (A + 1.0) - (A - 1.0) * cos_w0 + beta,
        2.0 * ((A - 1.0) - (A + 1.0) * cos_w0),
        (A + 1.0) - (A - 1.0) * cos_w0 - beta,
    )


def _design_lowpass(w0: float, A: float, q: float, slope: float) -> RawCoefficients:
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / (2.0 * q)
    return (
        (1.0 - cos_w0) * 0.5,
        1.0 - cos_w0,
        (1.0 - cos_w0) * 0.5,
        1.0 + alpha,
        -2.0 * cos_w0,
        1.0 - alpha,
    )


def _design_highpass(w0: float, A: float, q: float, slope: float) -> RawCoefficients:
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / (2.0 * q)
    return (
        (1.0 + cos_w0) * 0.5,
        -(1.0 + cos_w0),
        (1.0 + cos_w0) * 0.5,
        1.0 + alpha,
        -2.0 * cos_w0,
        1.0 - alpha,
    )


_DESIGNERS: Dict[FilterType, Callable[[float, float, float, float], RawCoefficients]] = {
    FilterType.PEAKING: _design_peaking,
    FilterType.LOWSHELF: _design_lowshelf,
    FilterType.HIGHSHELF: _design_highshelf,
    FilterType.LOWPASS: _design_lowpass,
    FilterType.HIGHPASS: _design_highpass,
}

_SHELVES = (FilterType.LOWSHELF, FilterType.HIGHSHELF)


def design_biquad(
    filter_type: Union[FilterType, str],
    frequency: float,
    gain_db: float,
    q: float,
    sample_rate: float,
    slope: Optional[float] = None,
) -> Optional[BiquadCoefficients]:
    """
    Derive normalized biquad coefficients for one band.

    Args:
        filter_type: Filter type (member or name).
        frequency: Center/cutoff frequency (Hz).
        gain_db: Gain (dB); ignored by lowpass/highpass.
        q: Quality factor.
        sample_rate: Sample rate (Hz).
        slope: Shelf slope S; shelves use q when None.

    Returns:
        Coefficients, or None when the band has no effect or cannot be designed.
    """
    ftype = FilterType.parse(filter_type)
    if ftype is None:
        return None
    if not (_is_positive(sample_rate) and _is_positive(frequency)):
        return None

    if ftype.uses_gain:
        if not isinstance(gain_db, numbers.Real) or not math.isfinite(gain_db):
            return None
        if abs(gain_db) < GAIN_EPSILON_DB:
            return None
        try:
            A = 10.0 ** (gain_db / 40.0)
        except OverflowError:
            return None
        if A == 0.0 or not math.isfinite(A):
            return None
    else:
        A = 1.0

    if ftype in _SHELVES:
        slope = q if slope is None else slope
        if not _is_positive(slope):
            return None
    elif not _is_positive(q):
        return None

    w0 = 2.0 * math.pi * clamp_to_nyquist(frequency, sample_rate) / sample_rate
    b0, b1, b2, a0, a1, a2 = _DESIGNERS[ftype](w0, A, q, slope)

    if a0 == 0.0 or not math.isfinite(a0):
        logger.debug("Degenerate %s biquad at %s Hz (a0=%s)", ftype.value, frequency, a0)
        return None

    coefficients = BiquadCoefficients(b0 / a0, b1 / a0, b2 / a0, a1 / a0, a2 / a0)
    if not coefficients.is_finite():
        logger.debug("Non-finite %s biquad at %s Hz", ftype.value, frequency)
        return None
    return coefficients


class BiquadFilter:
    """
    Biquad Filter - One EQ band at one sample rate

    Holds the band parameters and the designed coefficients. An inactive
    filter (no coefficients) contributes 0 dB.
    """

    def __init__(
        self,
        sample_rate: float,
        frequency: float,
        gain_db: float = 0.0,
        q: float = DEFAULT_Q,
        filter_type: Union[FilterType, str] = FilterType.PEAKING,
        slope: Optional[float] = None,
    ):
        """
        Initialize Biquad filter

        Args:
            sample_rate: Sample rate
            frequency: Center/cutoff frequency (Hz)
            gain_db: Gain (dB)
            q: Q factor, controls bandwidth
            filter_type: One of the FilterType values
            slope: Shelf slope (S), falls back to q
        """
        self.sample_rate = sample_rate
        self.frequency = frequency
        self.gain_db = gain_db
        self.q = q
        self.filter_type = filter_type
        self.slope = slope

        self.coefficients: Optional[BiquadCoefficients] = None

        self._calculate_coefficients()

    @classmethod
    def from_band(cls, band: Band, sample_rate: float) -> "BiquadFilter":
        """Create a filter for a band at the given sample rate."""
        return cls(
            sample_rate,
            band.frequency,
            gain_db=band.gain,
            q=band.q,
            filter_type=band.type,
            slope=band.slope,
        )

    def _calculate_coefficients(self) -> None:
        """Calculate Biquad filter coefficients"""
        self.coefficients = design_biquad(
            self.filter_type,
            self.frequency,
            self.gain_db,
            self.q,
            self.sample_rate,
            slope=self.slope,
        )

    @property
    def is_active(self) -> bool:
        """Whether the filter changes the signal at all."""
        return self.coefficients is not None

    def set_gain(self, gain_db: float) -> None:
        """Update gain and recalculate coefficients"""
        if self.gain_db != gain_db:
            self.gain_db = gain_db
            self._calculate_coefficients()

    def set_q(self, q: float) -> None:
        """Update Q and recalculate coefficients"""
        if self.q != q:
            self.q = q
            self._calculate_coefficients()

    def set_frequency(self, frequency: float) -> None:
        """Update center frequency and recalculate coefficients"""
        if self.frequency != frequency:
            self.frequency = frequency
            self._calculate_coefficients()

    def set_sample_rate(self, sample_rate: float) -> None:
        """Update sample rate and recalculate coefficients"""
        if self.sample_rate != sample_rate:
            self.sample_rate = sample_rate
            self._calculate_coefficients()

    def response_db(self, frequency: float) -> float:
        """
        Magnitude response of this band (dB) at a frequency.

        Never raises: invalid frequencies and inactive filters give 0.0.
        """
        if self.coefficients is None:
            return 0.0
        if not _is_positive(frequency):
            return 0.0
        clamped = clamp_to_nyquist(frequency, self.sample_rate)
        return clamp_db(self.coefficients.magnitude_db(clamped, self.sample_rate))
