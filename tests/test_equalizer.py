"""
Equalizer Processor Tests
"""

import pytest

from core.dsp.equalizer import GAIN_MAX_DB, GAIN_MIN_DB, MAX_Q, EqualizerProcessor
from core.dsp.frequency_response import aggregate_response
from models.eq_band import Band
from models.eq_preset import EQPreset, EQ_PRESETS, EQState


class TestEqualizerProcessor:
    """10-band processor state"""

    def test_default_is_flat(self):
        eq = EqualizerProcessor()
        assert len(eq.bands) == 10
        assert all(band.gain == 0.0 for band in eq.bands)
        assert eq.preamp == 0.0
        assert eq.bypass is False
        assert eq.preamp_gain == pytest.approx(1.0)

    def test_short_band_list_is_padded(self):
        eq = EqualizerProcessor(bands=[{"frequency": 80, "gain": 3, "Q": 1}])
        assert len(eq.bands) == 10
        assert eq.bands[0].frequency == 80
        assert eq.bands[1] == EQ_PRESETS[EQPreset.FLAT].bands[1]

    def test_recommended_preamp(self):
        eq = EqualizerProcessor(bands=[{"frequency": 80, "gain": 5, "Q": 1}])
        assert eq.preamp == -5.0

        eq = EqualizerProcessor(bands=[{"frequency": 80, "gain": 5, "Q": 1}], preamp=-2)
        assert eq.preamp == -2.0

    def test_invalid_band_rejected(self):
        with pytest.raises(TypeError):
            EqualizerProcessor(bands=[{"gain": 3}])
        with pytest.raises(TypeError):
            EqualizerProcessor(bands=["peaking"])

    def test_gain_and_q_limits(self):
        eq = EqualizerProcessor(bands=[
            {"frequency": 100, "gain": 40, "Q": 1},
            {"frequency": 200, "gain": -40, "Q": 25},
        ])
        assert eq.bands[0].gain == GAIN_MAX_DB
        assert eq.bands[1].gain == GAIN_MIN_DB
        assert eq.bands[1].q == MAX_Q

    def test_update_band(self):
        eq = EqualizerProcessor()
        eq.update_band(3, {"gain": 4.5, "Q": 2})
        assert eq.bands[3].gain == 4.5
        assert eq.bands[3].q == 2.0

        eq.update_band(0, type="HIGHPASS", frequency=30)
        assert eq.bands[0].type == "highpass"
        assert eq.bands[0].frequency == 30.0

        eq.update_band(9, gain=50)
        assert eq.bands[9].gain == GAIN_MAX_DB

    def test_update_band_ignores_unknown_fields(self):
        eq = EqualizerProcessor()
        before = eq.bands[2]
        eq.update_band(2, {"color": "red"})
        assert eq.bands[2] == before

    @pytest.mark.parametrize("index", [-1, 10, "1", None])
    def test_update_band_out_of_range(self, index):
        eq = EqualizerProcessor()
        with pytest.raises(IndexError):
            eq.update_band(index, gain=1)

    def test_update_bands(self):
        eq = EqualizerProcessor()
        eq.update_bands([
            {"index": 1, "gain": 2},
            {"index": 42, "gain": 9},
            {"gain": 9},
            "junk",
            {"index": 8, "gain": -3, "Q": 3},
        ])
        assert eq.bands[1].gain == 2.0
        assert eq.bands[8].gain == -3.0
        assert eq.bands[8].q == 3.0
        assert sum(1 for band in eq.bands if band.gain != 0.0) == 2

    def test_update_bands_requires_list(self):
        eq = EqualizerProcessor()
        with pytest.raises(TypeError):
            eq.update_bands({"index": 1, "gain": 2})

    def test_set_bands(self):
        eq = EqualizerProcessor()
        eq.set_bands([Band(frequency=1000.0, gain=2.0)] * 12)
        assert len(eq.bands) == 12
        assert all(band.gain == 2.0 for band in eq.bands)

    def test_set_preamp(self):
        eq = EqualizerProcessor()
        eq.set_preamp(-6)
        assert eq.preamp == -6.0
        assert eq.preamp_gain == pytest.approx(10 ** (-6 / 20))
        with pytest.raises(TypeError):
            eq.set_preamp("loud")
        with pytest.raises(TypeError):
            eq.set_preamp(True)

    def test_load_preset_keeps_bypass(self):
        eq = EqualizerProcessor()
        eq.set_bypass(True)
        eq.load_preset(EQ_PRESETS[EQPreset.BASS_BOOST])
        state = eq.get_state()
        assert state.name == "Bass Boost"
        assert state.preamp == -6.0
        assert state.bypass is True
        assert state.bands == EQ_PRESETS[EQPreset.BASS_BOOST].bands

    def test_load_preset_from_mapping(self):
        eq = EqualizerProcessor()
        eq.load_preset(EQ_PRESETS[EQPreset.VOCAL_CLARITY].to_dict())
        assert eq.get_state().name == "Vocal Clarity"
        with pytest.raises(TypeError):
            eq.load_preset("vocal_clarity")

    def test_set_state_partial(self):
        eq = EqualizerProcessor.from_preset(EQ_PRESETS[EQPreset.BASS_BOOST])
        eq.set_state({"preamp": -1.5, "bypass": True})
        state = eq.get_state()
        assert state.preamp == -1.5
        assert state.bypass is True
        assert state.name == "Bass Boost"
        assert state.bands == EQ_PRESETS[EQPreset.BASS_BOOST].bands

        eq.set_state(EQState(name="Mine", bands=(Band(frequency=500.0, gain=1.0),)))
        assert eq.get_state().name == "Mine"
        assert eq.bands[0].gain == 1.0
        assert len(eq.bands) == 10

        with pytest.raises(TypeError):
            eq.set_state(None)

    def test_reset(self):
        eq = EqualizerProcessor.from_preset(EQ_PRESETS[EQPreset.VOCAL_CLARITY])
        eq.reset()
        assert all(band.gain == 0.0 for band in eq.bands)
        assert eq.bands[3].q == EQ_PRESETS[EQPreset.VOCAL_CLARITY].bands[3].q

    def test_state_is_immutable_snapshot(self):
        eq = EqualizerProcessor()
        snapshot = eq.get_state()
        eq.update_band(0, gain=3)
        assert snapshot.bands[0].gain == 0.0


class TestEqualizerResponse:
    """Filters and theoretical response"""

    def test_frequency_response_matches_aggregate(self):
        eq = EqualizerProcessor.from_preset(EQ_PRESETS[EQPreset.BASS_BOOST], sample_rate=44100)
        expected = aggregate_response(eq.bands, numPoints=32, sampleRate=44100)
        assert eq.frequency_response(numPoints=32) == expected

    def test_explicit_sample_rate_wins(self):
        eq = EqualizerProcessor.from_preset(EQ_PRESETS[EQPreset.BASS_BOOST], sample_rate=44100)
        expected = aggregate_response(eq.bands, numPoints=32, sampleRate=96000)
        assert eq.frequency_response({"numPoints": 32, "sampleRate": 96000}) == expected

    def test_bypass_is_flat(self):
        eq = EqualizerProcessor.from_preset(EQ_PRESETS[EQPreset.BASS_BOOST])
        eq.set_bypass(True)
        result = eq.frequency_response(numPoints=16)
        assert len(result) == 16
        assert result.magnitude_db == [0.0] * 16
        assert eq.response_at([100, 1000]) == [0.0, 0.0]
        assert eq.design_filters() == []

    def test_response_at(self):
        eq = EqualizerProcessor()
        eq.update_band(3, gain=6, Q=1)
        assert eq.response_at([1000])[0] == pytest.approx(6.0, abs=0.01)

    def test_design_filters(self):
        eq = EqualizerProcessor(sample_rate=96000)
        eq.update_band(5, gain=3)
        filters = eq.design_filters()
        assert len(filters) == 10
        assert sum(1 for filt in filters if filt.is_active) == 1
        assert all(filt.sample_rate == 96000 for filt in filters)

    def test_set_sample_rate(self):
        eq = EqualizerProcessor()
        eq.update_band(8, gain=6)
        before = eq.response_at([18000])
        eq.set_sample_rate(44100)
        assert eq.response_at([18000]) != before


class TestEqualizerFromConfig:
    """Processor built from configuration"""

    class _Config:
        def __init__(self, values):
            self._values = values

        def get(self, key, default=None):
            return self._values.get(key, default)

    def test_from_config(self):
        config = self._Config({
            "response.sample_rate": 44100,
            "equalizer.gain_max_db": 12,
            "equalizer.default_preset": "Bass Boost",
        })
        eq = EqualizerProcessor.from_config(config)
        assert eq.sample_rate == 44100.0
        assert eq.gain_max_db == 12.0
        assert eq.get_state().name == "Bass Boost"

        eq.update_band(0, gain=20)
        assert eq.bands[0].gain == 12.0

    def test_unknown_default_preset_is_flat(self):
        eq = EqualizerProcessor.from_config(self._Config({"equalizer.default_preset": "nope"}))
        assert eq.get_state().name == "Flat"
