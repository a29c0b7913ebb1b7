"""
Frequency Response Calculation

Theoretical magnitude response of a cascade of EQ bands, independent of
any audio playback backend. Used for visualization and as a reference for
the real-time filter chain.
"""

from __future__ import annotations

import dataclasses
import logging
import numbers
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.dsp.biquad_filter import BiquadFilter, clamp_db
from core.dsp.errors import InvalidArgumentError
from core.dsp.frequency_grid import (
    DEFAULT_MAX_FREQ,
    DEFAULT_MIN_FREQ,
    generate_frequencies,
    nearest_index,
)
from models.eq_band import Band, coerce_band

logger = logging.getLogger(__name__)


DEFAULT_NUM_POINTS = 512
DEFAULT_SAMPLE_RATE = 48000.0

# Accepted option keys -> ResponseOptions field
_OPTION_KEYS = {
    "numPoints": "num_points",
    "num_points": "num_points",
    "minFreq": "min_freq",
    "min_freq": "min_freq",
    "maxFreq": "max_freq",
    "max_freq": "max_freq",
    "sampleRate": "sample_rate",
    "sample_rate": "sample_rate",
}


def _option_fields(values: Mapping[str, Any]) -> dict:
    fields = {}
    for key, value in values.items():
        name = _OPTION_KEYS.get(key)
        if name is not None and value is not None:
            fields[name] = value
    return fields


@dataclass(frozen=True)
class ResponseOptions:
    """
    Response calculation options

    Attributes:
        num_points: Number of grid points for generated curves.
        min_freq: Lowest grid frequency (Hz).
        max_freq: Highest grid frequency (Hz).
        sample_rate: Sample rate (Hz). None uses each band's own sample
            rate, then DEFAULT_SAMPLE_RATE.
    """
    num_points: int = DEFAULT_NUM_POINTS
    min_freq: float = DEFAULT_MIN_FREQ
    max_freq: float = DEFAULT_MAX_FREQ
    sample_rate: Optional[float] = None

    @classmethod
    def resolve(cls, options: Any = None, **overrides: Any) -> "ResponseOptions":
        """
        Resolve caller options once at the call boundary.

        Args:
            options: None, a ResponseOptions, or a mapping with camelCase
                (numPoints, minFreq, maxFreq, sampleRate) or snake_case keys.
            **overrides: Field overrides applied on top.

        Raises:
            InvalidArgumentError: If options is of an unsupported type.
        """
        if options is None:
            resolved = cls()
        elif isinstance(options, cls):
            resolved = options
        elif isinstance(options, Mapping):
            resolved = cls(**_option_fields(options))
        else:
            raise InvalidArgumentError(f"Unsupported options type: {type(options).__name__}")

        if overrides:
            resolved = dataclasses.replace(resolved, **_option_fields(overrides))
        return resolved

    @classmethod
    def from_config(cls, config: Any) -> "ResponseOptions":
        """
        Build options from the `response` section of a ConfigService.

        Args:
            config: Object with a dot-key `get(key, default)` method.
        """
        sample_rate = config.get("response.sample_rate", None)
        return cls(
            num_points=int(config.get("response.num_points", DEFAULT_NUM_POINTS)),
            min_freq=float(config.get("response.min_freq", DEFAULT_MIN_FREQ)),
            max_freq=float(config.get("response.max_freq", DEFAULT_MAX_FREQ)),
            sample_rate=None if sample_rate is None else float(sample_rate),
        )


@dataclass(frozen=True)
class FrequencyResponse:
    """
    Response curve

    Attributes:
        frequencies: Ascending frequencies (Hz).
        magnitude_db: Magnitude (dB) at each frequency.
    """
    frequencies: List[float] = field(default_factory=list)
    magnitude_db: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.frequencies)

    def points(self) -> List[Tuple[float, float]]:
        """(frequency, dB) pairs."""
        return list(zip(self.frequencies, self.magnitude_db))

    def value_at(self, frequency: float) -> float:
        """Magnitude at the grid point nearest to frequency."""
        return self.magnitude_db[nearest_index(self.frequencies, frequency)]

    def to_dict(self) -> dict:
        return {
            "frequencies": list(self.frequencies),
            "magnitudeDb": list(self.magnitude_db),
        }


def _sample_rate_option(options: Any) -> Any:
    """Extract an explicit sample rate without validating anything."""
    if options is None or isinstance(options, bool):
        return None
    if isinstance(options, ResponseOptions):
        return options.sample_rate
    if isinstance(options, numbers.Real):
        return options
    if isinstance(options, Mapping):
        value = options.get("sampleRate")
        return options.get("sample_rate") if value is None else value
    return None


def _band_sample_rate(sample_rate: Any, band: Band) -> Any:
    if sample_rate is not None:
        return sample_rate
    if band.sample_rate is not None:
        return band.sample_rate
    return DEFAULT_SAMPLE_RATE


def band_response_db(frequency: float, band: Any, options: Any = None) -> float:
    """
    Response of a single band at one frequency.

    Never raises: malformed bands, non-positive or non-finite inputs and
    unknown filter types all give 0.0.

    Args:
        frequency: Evaluation frequency (Hz).
        band: Band or mapping {frequency, gain, Q, type, S?, sampleRate?}.
        options: None, a sample rate, a mapping with sampleRate, or ResponseOptions.

    Returns:
        Response in dB, within [MIN_GAIN_DB, MAX_GAIN_DB].
    """
    resolved = coerce_band(band)
    if resolved is None:
        return 0.0
    sample_rate = _band_sample_rate(_sample_rate_option(options), resolved)
    return BiquadFilter.from_band(resolved, sample_rate).response_db(frequency)


def _check_bands(bands: Any) -> None:
    if bands is None:
        raise InvalidArgumentError("bands is required")
    if isinstance(bands, (str, bytes, Mapping)) or not isinstance(bands, Iterable):
        raise InvalidArgumentError(f"bands must be a sequence, got {type(bands).__name__}")


def design_filters(bands: Iterable[Any], sample_rate: Optional[float] = None) -> List[BiquadFilter]:
    """
    Design one filter per band, skipping absent bands.

    Args:
        bands: Bands or band mappings; None entries are skipped.
        sample_rate: Explicit sample rate, or None for per-band/default.

    Returns:
        Active filters only.
    """
    filters: List[BiquadFilter] = []
    for value in bands:
        if value is None:
            continue
        band = coerce_band(value)
        if band is None:
            logger.debug("Skipping malformed band record: %r", value)
            continue
        if band.filter_type is None:
            logger.debug("Ignoring band with unknown filter type %r", band.type)
            continue
        filt = BiquadFilter.from_band(band, _band_sample_rate(sample_rate, band))
        if filt.is_active:
            filters.append(filt)
    return filters


def _summed_db(filters: Sequence[BiquadFilter], frequency: float) -> float:
    return clamp_db(sum((filt.response_db(frequency) for filt in filters), 0.0))


def aggregate_response(bands: Any, options: Any = None, **overrides: Any) -> FrequencyResponse:
    """
    Combined response of all bands on a log-spaced grid.

    Per-band dB values are summed and clamped to [MIN_GAIN_DB, MAX_GAIN_DB].

    Args:
        bands: Sequence of bands or band mappings (None entries skipped).
        options: ResponseOptions or mapping (numPoints, minFreq, maxFreq, sampleRate).
        **overrides: Option overrides (snake_case or camelCase).

    Returns:
        FrequencyResponse with num_points entries.

    Raises:
        InvalidArgumentError: If bands is None or grid options are invalid.
    """
    _check_bands(bands)
    opts = ResponseOptions.resolve(options, **overrides)
    frequencies = generate_frequencies(opts.num_points, opts.min_freq, opts.max_freq)
    filters = design_filters(bands, opts.sample_rate)
    magnitude_db = [_summed_db(filters, freq) for freq in frequencies]
    logger.debug(
        "Computed %d-point response for %d active bands (%.1f-%.1f Hz)",
        len(frequencies), len(filters), opts.min_freq, opts.max_freq,
    )
    return FrequencyResponse(frequencies=frequencies, magnitude_db=magnitude_db)


def response_at_frequencies(
    bands: Any,
    target_frequencies: Iterable[float],
    options: Any = None,
) -> List[float]:
    """
    Combined response at caller-supplied frequencies.

    Args:
        bands: Sequence of bands or band mappings (None entries skipped).
        target_frequencies: Frequencies (Hz) to evaluate, any order.
        options: Sample rate source, as for band_response_db.

    Returns:
        Response in dB for each frequency, same order as the input.

    Raises:
        InvalidArgumentError: If bands or target_frequencies is None.
    """
    _check_bands(bands)
    if target_frequencies is None:
        raise InvalidArgumentError("target_frequencies is required")
    filters = design_filters(bands, _sample_rate_option(options))
    return [_summed_db(filters, freq) for freq in target_frequencies]


def processor_response(state: Any, options: Any = None, **overrides: Any) -> FrequencyResponse:
    """
    Combined response for a processor state.

    Args:
        state: EQState, or a mapping shaped like {"bands": [...]}.
        options: As for aggregate_response.

    Raises:
        InvalidArgumentError: If the state or its bands is missing.
    """
    if isinstance(state, Mapping):
        bands = state.get("bands")
    else:
        bands = getattr(state, "bands", None)
    if bands is None:
        raise InvalidArgumentError("processor_response requires a valid EQ state with bands")
    return aggregate_response(bands, options, **overrides)
