"""
DSP (Digital Signal Processing) Module

Provides frequency response related functions:
- generate_frequencies: Log-spaced frequency grid
- BiquadFilter: Biquad design and magnitude evaluation for one band
- band_response_db / aggregate_response / response_at_frequencies: Response curves
- EqualizerProcessor: 10-band parametric EQ state
"""

from core.dsp.errors import InvalidArgumentError
from core.dsp.frequency_grid import generate_frequencies, nearest_index
from core.dsp.biquad_filter import (
    BiquadCoefficients,
    BiquadFilter,
    GAIN_EPSILON_DB,
    MAX_GAIN_DB,
    MIN_GAIN_DB,
    design_biquad,
)
from core.dsp.frequency_response import (
    FrequencyResponse,
    ResponseOptions,
    aggregate_response,
    band_response_db,
    processor_response,
    response_at_frequencies,
)
from core.dsp.equalizer import EqualizerProcessor

__all__ = [
    "InvalidArgumentError",
    "generate_frequencies",
    "nearest_index",
    "BiquadCoefficients",
    "BiquadFilter",
    "GAIN_EPSILON_DB",
    "MAX_GAIN_DB",
    "MIN_GAIN_DB",
    "design_biquad",
    "FrequencyResponse",
    "ResponseOptions",
    "aggregate_response",
    "band_response_db",
    "processor_response",
    "response_at_frequencies",
    "EqualizerProcessor",
]
