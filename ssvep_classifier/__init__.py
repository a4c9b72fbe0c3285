"""
Real-time SSVEP stimulus classifier.
"""

from .classifier import SsvepClassifier
from .config import BandpassFilter, ClassifierConfig, SubBandMixingParams, create_config
from .result import MISSED, TIMEOUT, ClassificationResult, IdentificationState

__all__ = [
    "SsvepClassifier",
    "ClassifierConfig",
    "BandpassFilter",
    "SubBandMixingParams",
    "create_config",
    "ClassificationResult",
    "IdentificationState",
    "MISSED",
    "TIMEOUT",
]
