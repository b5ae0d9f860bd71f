"""Per-item calibration and candidate generation."""

from .calibrator import Calibration, ItemCalibrator
from .generator import CandidateGenerator

__all__ = ["Calibration", "CandidateGenerator", "ItemCalibrator"]
