"""
Data Models Module
"""

from .eq_band import Band, FilterType
from .eq_preset import EQPreset, EQState

__all__ = ['Band', 'FilterType', 'EQPreset', 'EQState']
