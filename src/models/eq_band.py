"""
EQ Band Model

Value record for a single parametric EQ band.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class FilterType(str, Enum):
    """Biquad filter type"""
    PEAKING = "peaking"
    LOWSHELF = "lowshelf"
    HIGHSHELF = "highshelf"
    LOWPASS = "lowpass"
    HIGHPASS = "highpass"

    @classmethod
    def parse(cls, value: Any) -> Optional["FilterType"]:
        """
        Resolve a filter type from a member or a string.

        Args:
            value: FilterType member or type name (case-insensitive).

        Returns:
            FilterType, or None for unrecognized values.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def uses_gain(self) -> bool:
        """Whether the band's gain parameter shapes this filter."""
        return self not in (FilterType.LOWPASS, FilterType.HIGHPASS)


DEFAULT_Q = 1.0


@dataclass(frozen=True)
class Band:
    """
    Parametric EQ band.

    Attributes:
        frequency: Center/cutoff frequency (Hz).
        gain: Gain (dB). Ignored by lowpass/highpass.
        q: Quality factor.
        type: Filter type name. Unknown names are kept as-is and contribute nothing.
        slope: Shelf slope (S). Shelves fall back to q when absent.
        sample_rate: Optional sample rate the band was designed for.
    """
    frequency: float
    gain: float = 0.0
    q: float = DEFAULT_Q
    type: Union[FilterType, str] = FilterType.PEAKING.value
    slope: Optional[float] = None
    sample_rate: Optional[float] = None

    @property
    def filter_type(self) -> Optional[FilterType]:
        return FilterType.parse(self.type)

    @property
    def shelf_slope(self) -> float:
        return self.q if self.slope is None else self.slope

    def replace(self, **changes: Any) -> "Band":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape {frequency, gain, Q, type, S?, sampleRate?}."""
        filter_type = self.filter_type
        data: Dict[str, Any] = {
            "frequency": self.frequency,
            "gain": self.gain,
            "Q": self.q,
            "type": filter_type.value if filter_type else str(self.type),
        }
        if self.slope is not None:
            data["S"] = self.slope
        if self.sample_rate is not None:
            data["sampleRate"] = self.sample_rate
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Band":
        """
        Build a band from the wire shape.

        Snake-case aliases (q, slope, sample_rate) are accepted.

        Raises:
            KeyError: If frequency is missing.
            TypeError, ValueError: If a numeric field is not a number.
        """
        q = _first(data, "Q", "q")
        slope = _first(data, "S", "slope")
        sample_rate = _first(data, "sampleRate", "sample_rate")
        gain = data.get("gain")
        band_type = data.get("type") or FilterType.PEAKING.value
        parsed = FilterType.parse(band_type)
        return cls(
            frequency=float(data["frequency"]),
            gain=0.0 if gain is None else float(gain),
            q=DEFAULT_Q if q is None else float(q),
            type=parsed.value if parsed else str(band_type),
            slope=None if slope is None else float(slope),
            sample_rate=None if sample_rate is None else float(sample_rate),
        )


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def coerce_band(value: Any) -> Optional[Band]:
    """
    Convert a band-like value to a Band.

    Returns:
        The Band, or None for None and malformed records.
    """
    if value is None or isinstance(value, Band):
        return value
    if isinstance(value, Mapping):
        try:
            return Band.from_dict(value)
        except (KeyError, TypeError, ValueError):
            return None
    return None
