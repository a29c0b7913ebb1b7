"""
Parametric EQ Core Module
"""

from .dsp import (
    BiquadFilter,
    EqualizerProcessor,
    FrequencyResponse,
    InvalidArgumentError,
    ResponseOptions,
    aggregate_response,
    band_response_db,
    generate_frequencies,
    processor_response,
    response_at_frequencies,
)

__all__ = [
    'BiquadFilter',
    'EqualizerProcessor',
    'FrequencyResponse',
    'InvalidArgumentError',
    'ResponseOptions',
    'aggregate_response',
    'band_response_db',
    'generate_frequencies',
    'processor_response',
    'response_at_frequencies',
]
