"""
EQ Preset Module

Provides the default band layout and bundled presets for the 10-band parametric equalizer.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple
from enum import Enum

from models.eq_band import Band, FilterType


DEFAULT_PEAKING_Q = 1.0
DEFAULT_SHELF_Q = math.sqrt(0.5)  # ~0.707, Butterworth-style shelves

PRESET_VERSION = "1.0"


class EQPreset(Enum):
    """EQ Preset Type"""
    FLAT = "flat"
    BASS_BOOST = "bass_boost"
    VOCAL_CLARITY = "vocal_clarity"


# Default band layout: (center frequency Hz, filter type)
BAND_LAYOUT: Tuple[Tuple[float, FilterType], ...] = (
    (60.0, FilterType.LOWSHELF),
    (150.0, FilterType.PEAKING),
    (400.0, FilterType.PEAKING),
    (1000.0, FilterType.PEAKING),
    (2400.0, FilterType.PEAKING),
    (4800.0, FilterType.PEAKING),
    (9600.0, FilterType.PEAKING),
    (12000.0, FilterType.PEAKING),
    (14000.0, FilterType.PEAKING),
    (16000.0, FilterType.HIGHSHELF),
)

# Band center frequency labels
EQ_BAND_LABELS: tuple = (
    "60Hz", "150Hz", "400Hz", "1kHz", "2.4kHz",
    "4.8kHz", "9.6kHz", "12kHz", "14kHz", "16kHz"
)


def default_q(filter_type: FilterType) -> float:
    """Default Q for a filter type in the band layout."""
    return DEFAULT_PEAKING_Q if filter_type == FilterType.PEAKING else DEFAULT_SHELF_Q


def default_bands() -> Tuple[Band, ...]:
    """Flat bands following BAND_LAYOUT."""
    return tuple(
        Band(frequency=freq, gain=0.0, q=default_q(ftype), type=ftype.value)
        for freq, ftype in BAND_LAYOUT
    )


@dataclass(frozen=True)
class EQState:
    """
    Parametric EQ state

    Attributes:
        name: Preset/state name.
        description: Human readable description.
        preamp: Preamp gain (dB).
        bands: Ordered bands of the cascade.
        bypass: Whether the EQ is bypassed.
        version: State format version.
    """
    name: str = "Custom Preset"
    description: str = ""
    preamp: float = 0.0
    bands: Tuple[Band, ...] = field(default_factory=default_bands)
    bypass: bool = False
    version: str = PRESET_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "preamp": self.preamp,
            "bands": [band.to_dict() for band in self.bands],
            "bypass": self.bypass,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EQState":
        """
        Build a state from a plain dictionary.

        Raises:
            KeyError: If bands is missing.
        """
        bands = tuple(
            band if isinstance(band, Band) else Band.from_dict(band)
            for band in data["bands"]
        )
        preamp = data.get("preamp")
        return cls(
            name=data.get("name") or "Custom Preset",
            description=data.get("description") or "",
            preamp=calculate_recommended_preamp(bands) if preamp is None else float(preamp),
            bands=bands,
            bypass=bool(data.get("bypass", False)),
            version=data.get("version") or PRESET_VERSION,
        )


def _preset_bands(gains_q: Sequence[Tuple[float, float]]) -> Tuple[Band, ...]:
    return tuple(
        Band(frequency=freq, gain=gain, q=q, type=ftype.value)
        for (freq, ftype), (gain, q) in zip(BAND_LAYOUT, gains_q)
    )


# Bundled presets
# Bands: [60Hz LS, 150Hz, 400Hz, 1kHz, 2.4kHz, 4.8kHz, 9.6kHz, 12kHz, 14kHz, 16kHz HS]
EQ_PRESETS: Dict[EQPreset, EQState] = {
    # Flat - No adjustment
    EQPreset.FLAT: EQState(
        name="Flat",
        description="No equalization, natural sound",
        preamp=0.0,
        bands=default_bands(),
    ),

    # Bass Boost - Enhanced low end for EDM and hip-hop
    EQPreset.BASS_BOOST: EQState(
        name="Bass Boost",
        description="Enhanced low-end for EDM and hip-hop",
        preamp=-6.0,
        bands=_preset_bands((
            (6.0, DEFAULT_SHELF_Q), (4.0, DEFAULT_PEAKING_Q), (0.0, DEFAULT_PEAKING_Q),
            (0.0, DEFAULT_PEAKING_Q), (-1.0, 1.2), (-1.5, 1.1), (-1.5, 1.0),
            (0.0, 1.0), (0.0, 1.0), (0.0, DEFAULT_SHELF_Q),
        )),
    ),

    # Vocal Clarity - Presence boost for podcasts and vocal mixes
    EQPreset.VOCAL_CLARITY: EQState(
        name="Vocal Clarity",
        description="Presence boost for podcasts and vocal mixes",
        preamp=-4.0,
        bands=_preset_bands((
            (-2.0, DEFAULT_SHELF_Q), (-1.0, DEFAULT_PEAKING_Q), (1.0, 1.2),
            (2.5, 1.4), (3.5, 1.2), (2.0, 1.0), (1.0, 0.9),
            (0.5, 0.9), (0.0, 1.0), (1.5, DEFAULT_SHELF_Q),
        )),
    ),
}


def get_preset(preset: EQPreset) -> EQState:
    """
    Get the state for a preset.

    Args:
        preset: EQ preset type.

    Returns:
        EQState of the preset, FLAT for unknown presets.
    """
    return EQ_PRESETS.get(preset, EQ_PRESETS[EQPreset.FLAT])


def get_preset_by_name(name: str) -> EQPreset:
    """
    Get preset type by name.

    Args:
        name: Preset name (e.g., "bass_boost", "Vocal Clarity").

    Returns:
        EQPreset type, returns FLAT for invalid names.
    """
    key = (name or "").strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return EQPreset(key)
    except ValueError:
        return EQPreset.FLAT


def ensure_band_count(bands: Sequence[Band], target: int = len(BAND_LAYOUT)) -> List[Band]:
    """Pad bands with flat layout bands up to target; longer sequences are kept whole."""
    result = list(bands)
    if len(result) >= target:
        return result
    layout = default_bands()
    result.extend(layout[len(result):target])
    return result


def calculate_recommended_preamp(bands: Sequence[Band]) -> float:
    """Preamp (dB) that offsets the largest boost, 0 when nothing is boosted."""
    max_gain = max((band.gain for band in bands), default=0.0)
    return -max_gain if max_gain > 0 else 0.0
