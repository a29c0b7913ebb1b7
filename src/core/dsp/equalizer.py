"""
10-Band Parametric EQ Processor

Holds the editable state of a cascade of Biquad bands and exposes its
theoretical response and per-band coefficients for a playback backend.
"""

from __future__ import annotations

import dataclasses
import logging
import numbers
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from core.dsp.biquad_filter import BiquadFilter
from core.dsp.frequency_response import (
    DEFAULT_SAMPLE_RATE,
    FrequencyResponse,
    ResponseOptions,
    aggregate_response,
    response_at_frequencies,
)
from core.dsp.frequency_grid import generate_frequencies
from models.eq_band import Band, FilterType, coerce_band
from models.eq_preset import (
    EQ_PRESETS,
    EQPreset,
    EQState,
    calculate_recommended_preamp,
    ensure_band_count,
    get_preset,
    get_preset_by_name,
)

logger = logging.getLogger(__name__)


GAIN_MIN_DB = -24.0
GAIN_MAX_DB = 24.0
MAX_Q = 10.0

# Fields that update_band accepts, wire name -> Band field
_BAND_FIELDS = {
    "frequency": "frequency",
    "gain": "gain",
    "Q": "q",
    "q": "q",
    "type": "type",
    "S": "slope",
    "slope": "slope",
    "sampleRate": "sample_rate",
    "sample_rate": "sample_rate",
}


def _to_band(value: Any) -> Band:
    band = coerce_band(value)
    if band is None:
        raise TypeError(f"Invalid band record: {value!r}")
    return band


class EqualizerProcessor:
    """
    10-Band Parametric EQ Processor

    Keeps name, preamp, bypass and the ordered bands of the cascade.
    Gains written through the processor are clamped to [gain_min_db, gain_max_db].
    """

    def __init__(
        self,
        sample_rate: float = DEFAULT_SAMPLE_RATE,
        bands: Optional[Iterable[Any]] = None,
        preamp: Optional[float] = None,
        name: str = "Custom Preset",
        description: str = "",
        bypass: bool = False,
        gain_min_db: float = GAIN_MIN_DB,
        gain_max_db: float = GAIN_MAX_DB,
        max_q: float = MAX_Q,
    ):
        self.sample_rate = sample_rate
        self.gain_min_db = gain_min_db
        self.gain_max_db = gain_max_db
        self.max_q = max_q

        source = EQ_PRESETS[EQPreset.FLAT].bands if bands is None else bands
        band_list = ensure_band_count([self._limit(_to_band(b)) for b in source])

        self._state = EQState(
            name=name,
            description=description,
            preamp=calculate_recommended_preamp(band_list) if preamp is None else float(preamp),
            bands=tuple(band_list),
            bypass=bool(bypass),
        )

    @classmethod
    def from_preset(cls, preset: EQState, sample_rate: float = DEFAULT_SAMPLE_RATE) -> "EqualizerProcessor":
        """Create a processor initialized from a preset state."""
        processor = cls(sample_rate=sample_rate)
        processor.load_preset(preset)
        return processor

    @classmethod
    def from_config(cls, config: Any) -> "EqualizerProcessor":
        """
        Create a processor from the `equalizer`/`response` sections of a ConfigService.
        """
        processor = cls(
            sample_rate=float(config.get("response.sample_rate", DEFAULT_SAMPLE_RATE)),
            gain_min_db=float(config.get("equalizer.gain_min_db", GAIN_MIN_DB)),
            gain_max_db=float(config.get("equalizer.gain_max_db", GAIN_MAX_DB)),
            max_q=float(config.get("equalizer.max_q", MAX_Q)),
        )
        preset_name = config.get("equalizer.default_preset", EQPreset.FLAT.value)
        processor.load_preset(get_preset(get_preset_by_name(preset_name)))
        return processor

    # ---- State access ----

    @property
    def bands(self) -> tuple:
        return self._state.bands

    @property
    def preamp(self) -> float:
        return self._state.preamp

    @property
    def bypass(self) -> bool:
        return self._state.bypass

    @property
    def preamp_gain(self) -> float:
        """Linear preamp factor."""
        return 10 ** (self._state.preamp / 20)

    def get_state(self) -> EQState:
        """Snapshot of the current state."""
        return self._state

    # ---- Editing ----

    def _limit(self, band: Band) -> Band:
        """Clamp gain and Q into the processor's editable range."""
        changes = {}
        if isinstance(band.gain, numbers.Real):
            gain = max(self.gain_min_db, min(self.gain_max_db, band.gain))
            if gain != band.gain:
                logger.debug("Clamped band gain %s dB to %s dB", band.gain, gain)
                changes["gain"] = gain
        if isinstance(band.q, numbers.Real) and band.q > self.max_q:
            logger.debug("Clamped band Q %s to %s", band.q, self.max_q)
            changes["q"] = self.max_q
        return band.replace(**changes) if changes else band

    def _apply_changes(self, band: Band, changes: Mapping[str, Any]) -> Band:
        fields = {}
        for key, value in changes.items():
            name = _BAND_FIELDS.get(key)
            if name is None:
                continue
            if name == "type":
                parsed = FilterType.parse(value)
                fields[name] = parsed.value if parsed else str(value)
            elif value is None:
                if name in ("slope", "sample_rate"):
                    fields[name] = None
            else:
                fields[name] = float(value)
        return self._limit(band.replace(**fields))

    def update_band(self, index: int, changes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        """
        Update one band.

        Args:
            index: Band index.
            changes: Field changes (frequency, gain, Q, type, S, sampleRate).
            **kwargs: Field changes as keyword arguments.

        Raises:
            IndexError: If index is out of range.
        """
        bands = list(self._state.bands)
        if not isinstance(index, int) or index < 0 or index >= len(bands):
            raise IndexError(f"Band index {index} is out of range")
        merged = dict(changes or {})
        merged.update(kwargs)
        if not merged:
            return
        bands[index] = self._apply_changes(bands[index], merged)
        self._state = self._replace_state(bands=tuple(bands))

    def update_bands(self, updates: Sequence[Mapping[str, Any]]) -> None:
        """
        Update several bands; each update carries its own "index".

        Entries without a valid index are skipped.

        Raises:
            TypeError: If updates is not a list or tuple.
        """
        if not isinstance(updates, (list, tuple)):
            raise TypeError("update_bands expects a list of updates")

        bands = list(self._state.bands)
        for update in updates:
            if not isinstance(update, Mapping):
                continue
            index = update.get("index")
            if not isinstance(index, int) or index < 0 or index >= len(bands):
                logger.debug("Skipping band update with invalid index: %r", index)
                continue
            bands[index] = self._apply_changes(bands[index], update)
        self._state = self._replace_state(bands=tuple(bands))

    def set_bands(self, bands: Iterable[Any]) -> None:
        """Replace all bands."""
        band_list = ensure_band_count([self._limit(_to_band(b)) for b in bands])
        self._state = self._replace_state(bands=tuple(band_list))

    def set_preamp(self, preamp_db: float) -> None:
        """
        Set preamp gain (dB).

        Raises:
            TypeError: If preamp_db is not a number.
        """
        if isinstance(preamp_db, bool) or not isinstance(preamp_db, numbers.Real):
            raise TypeError("set_preamp expects a numeric gain value")
        self._state = self._replace_state(preamp=float(preamp_db))

    def set_bypass(self, enabled: bool) -> None:
        """Enable/disable bypass."""
        self._state = self._replace_state(bypass=bool(enabled))

    def set_sample_rate(self, sample_rate: float) -> None:
        """Update sample rate."""
        self.sample_rate = sample_rate

    def load_preset(self, preset: Any) -> None:
        """
        Load a preset (EQState or mapping); bypass is kept.

        Raises:
            TypeError: If preset is not a state or mapping.
        """
        if isinstance(preset, Mapping):
            preset = EQState.from_dict(preset)
        if not isinstance(preset, EQState):
            raise TypeError("load_preset expects an EQState or mapping")
        band_list = ensure_band_count([self._limit(b) for b in preset.bands])
        self._state = EQState(
            name=preset.name,
            description=preset.description,
            preamp=preset.preamp,
            bands=tuple(band_list),
            bypass=self._state.bypass,
            version=preset.version,
        )
        logger.debug("Loaded EQ preset: %s", preset.name)

    def set_state(self, state: Any) -> None:
        """
        Apply a partial state: bands, preamp, bypass, name, description.

        Raises:
            TypeError: If state is not an EQState or mapping.
        """
        if isinstance(state, EQState):
            state = state.to_dict()
        if not isinstance(state, Mapping):
            raise TypeError("set_state expects a state object")

        changes = {}
        if state.get("bands"):
            band_list = ensure_band_count([self._limit(_to_band(b)) for b in state["bands"]])
            changes["bands"] = tuple(band_list)
        preamp = state.get("preamp")
        if isinstance(preamp, numbers.Real) and not isinstance(preamp, bool):
            changes["preamp"] = float(preamp)
        if isinstance(state.get("bypass"), bool):
            changes["bypass"] = state["bypass"]
        if state.get("name"):
            changes["name"] = state["name"]
        if state.get("description"):
            changes["description"] = state["description"]
        self._state = self._replace_state(**changes)

    def reset(self) -> None:
        """Reset all band gains to 0 dB."""
        self._state = self._replace_state(
            bands=tuple(band.replace(gain=0.0) for band in self._state.bands)
        )

    def _replace_state(self, **changes: Any) -> EQState:
        return dataclasses.replace(self._state, **changes)

    # ---- Filters & response ----

    def design_filters(self) -> List[BiquadFilter]:
        """
        One filter per band for a playback backend.

        Returns an empty list while bypassed.
        """
        if self._state.bypass:
            return []
        return [BiquadFilter.from_band(band, self.sample_rate) for band in self._state.bands]

    def frequency_response(self, options: Any = None, **overrides: Any) -> FrequencyResponse:
        """
        Theoretical response of the current bands.

        A bypassed processor has a flat response.
        """
        opts = ResponseOptions.resolve(options, **overrides)
        if opts.sample_rate is None:
            opts = ResponseOptions.resolve(opts, sample_rate=self.sample_rate)
        if self._state.bypass:
            frequencies = generate_frequencies(opts.num_points, opts.min_freq, opts.max_freq)
            return FrequencyResponse(frequencies=frequencies, magnitude_db=[0.0] * len(frequencies))
        return aggregate_response(self._state.bands, opts)

    def response_at(self, frequencies: Iterable[float], sample_rate: Optional[float] = None) -> List[float]:
        """Theoretical response at specific frequencies."""
        frequencies = list(frequencies)
        if self._state.bypass:
            return [0.0] * len(frequencies)
        return response_at_frequencies(
            self._state.bands,
            frequencies,
            self.sample_rate if sample_rate is None else sample_rate,
        )
