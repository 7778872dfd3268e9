"""
Integer money and patience helpers.

This module provides the small numeric rules shared by agents and the engine:
- clamp, floor_scale: Integer clamping and scaling
- capped_raise: Raise amount limited by a ceiling
- patience_band: Display band for a patience value
- ratio_features: Normalized feature vector for learning environments

Prices and patience are integers everywhere; floats only appear in ratios.
"""
import math
import numpy as np
from .constants import PatienceBand

EPS = 1e-8  # small constant to avoid division by zero

def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))

def floor_scale(x: int | float, factor: float) -> int:
    return int(math.floor(x * factor))

def capped_raise(current: int, amount: int, ceiling: int | float) -> int:
    """Largest raise <= amount that keeps current + raise <= ceiling (may be <= 0)"""
    return int(min(amount, ceiling - current))

def patience_band(patience: int, critical: int = 20, low: int = 30, medium: int = 50) -> PatienceBand:
    if patience < critical: return PatienceBand.CRITICAL
    if patience < low: return PatienceBand.LOW
    if patience < medium: return PatienceBand.MEDIUM
    return PatienceBand.HIGH

def ratio_features(values: list[float], scale: float) -> np.ndarray:
    """Values divided by scale as float32, safe for scale == 0"""
    return np.asarray(values, dtype=np.float32) / np.float32(scale + EPS)
