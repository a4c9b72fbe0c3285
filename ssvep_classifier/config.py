"""
SSVEP Classifier Configuration

Contains all configurable parameters for the SSVEP classifier:
- Sampling and trial window parameters
- SSVEP stimulation patterns (one per selectable target)
- Filter bank and sub-band mixing settings
- Decision threshold and score weighting
- Channel selection and parallelism
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np

from .patterns import CompositeTemporalPattern, PatternLike, to_patterns


@dataclass(frozen=True)
class BandpassFilter:
    """One sub-band of the filter bank, cutoffs in Hz."""
    low_cutoff: float
    high_cutoff: float

    def __post_init__(self):
        if not self.low_cutoff < self.high_cutoff:
            raise ValueError(
                f"low cutoff must be below high cutoff, got "
                f"{self.low_cutoff}-{self.high_cutoff} Hz"
            )

    @classmethod
    def parse(cls, expression: str) -> 'BandpassFilter':
        """Parse 'low-high' or 'low,high'."""
        for sep in ('-', ',', ':'):
            if sep in expression:
                low, high = expression.split(sep, 1)
                return cls(float(low), float(high))
        raise ValueError(f"Invalid band-pass filter: {expression!r}")


@dataclass(frozen=True)
class SubBandMixingParams:
    """Sub-band weighting w(n) = n^-a + b, n being the 1-based sub-band rank."""
    a: float = 1.25
    b: float = 0.25

    def weight(self, rank: int) -> float:
        return float(np.power(float(rank), -self.a) + self.b)

    def weights(self, n_bands: int) -> np.ndarray:
        indices = np.arange(1, n_bands + 1, dtype=float)
        return np.power(indices, -self.a) + self.b


def to_bandpass_filter(value) -> BandpassFilter:
    """Coerce a filter, a 'low-high' expression or a (low, high) pair."""
    if isinstance(value, BandpassFilter):
        return value
    if isinstance(value, str):
        return BandpassFilter.parse(value)
    try:
        low, high = value
    except (TypeError, ValueError):
        raise ValueError(f"Invalid band-pass filter: {value!r}") from None
    return BandpassFilter(float(low), float(high))


def to_mixing_params(value) -> SubBandMixingParams:
    """Coerce mixing parameters, a {a, b} mapping or an (a, b) pair."""
    if isinstance(value, SubBandMixingParams):
        return value
    try:
        if isinstance(value, dict):
            return SubBandMixingParams(**value)
        a, b = value
    except (TypeError, ValueError):
        raise ValueError(f"Invalid sub-band mixing parameters: {value!r}") from None
    return SubBandMixingParams(float(a), float(b))


@dataclass
class ClassifierConfig:
    """Configuration for the SSVEP classifier."""

    # ==========================================================================
    # Sampling Parameters
    # ==========================================================================
    sampling_rate: float = 250.0  # Hz

    # Trial window: the whole trial is classified as one window
    trial_duration_ms: float = 4000.0

    # Visual onset latency, samples within it are dropped after activation
    ssvep_delay_ms: float = 0.0

    # ==========================================================================
    # SSVEP Stimulation Patterns
    # ==========================================================================
    # One pattern per target; order defines the class index.
    # Numbers, "freq@phase" expressions or pattern objects are accepted.
    patterns: Tuple[PatternLike, ...] = (14.0, 15.0, 16.0, 17.0)

    # Harmonics in each reference matrix (1 = fundamental only)
    harmonics_count: int = 2

    # ==========================================================================
    # Filter Bank
    # ==========================================================================
    # Empty = score raw samples directly
    filter_bank: Tuple[BandpassFilter, ...] = ()
    sub_band_mixing: SubBandMixingParams = field(default_factory=SubBandMixingParams)

    # ==========================================================================
    # Decision
    # ==========================================================================
    threshold: float = 0.5

    # Weights of the normalized CCA and MEC score families
    cca_weight: float = 1.0
    mec_weight: float = 1.0

    # ==========================================================================
    # Channel Configuration
    # ==========================================================================
    channels: List[int] = field(default_factory=lambda: [0, 1, 2, 3, 4, 5, 6, 7])

    # ==========================================================================
    # Runtime
    # ==========================================================================
    parallelism: int = 2           # worker count, 0 = CPU count
    poll_interval_ms: float = 1.0  # window polling granularity
    baseline_enabled: bool = False

    def __post_init__(self):
        self.filter_bank = tuple(to_bandpass_filter(f) for f in self.filter_bank)
        self.sub_band_mixing = to_mixing_params(self.sub_band_mixing)

    # ==========================================================================
    # Derived Properties
    # ==========================================================================
    @property
    def window_size(self) -> int:
        """Samples per trial window."""
        return int(round(self.sampling_rate * self.trial_duration_ms / 1000.0))

    @property
    def discard_count(self) -> int:
        """Samples dropped after activation to skip the visual onset transient."""
        return int(round(self.ssvep_delay_ms / 1000.0 * self.sampling_rate))

    @property
    def n_channels(self) -> int:
        return len(self.channels)

    @property
    def stimulation_patterns(self) -> Tuple[CompositeTemporalPattern, ...]:
        return to_patterns(self.patterns)

    @property
    def class_count(self) -> int:
        return len(self.patterns)

    @property
    def frequencies(self) -> Tuple[float, ...]:
        return tuple(p.fundamental_frequency for p in self.stimulation_patterns)

    def get_frequency_label(self, class_index: int) -> str:
        """Get human-readable label for class index."""
        if 0 <= class_index < self.class_count:
            return str(self.stimulation_patterns[class_index])
        return "Unknown"

    def validate(self) -> None:
        """Check construction-time invariants.

        Raises:
            ValueError: on the first violated invariant
        """
        if len(self.patterns) == 0:
            raise ValueError("at least one stimulation pattern is required")
        if self.harmonics_count <= 0:
            raise ValueError("at least one harmonic is required")
        if len(self.channels) == 0:
            raise ValueError("at least one channel is required")
        if any(ch < 0 for ch in self.channels):
            raise ValueError(f"channel indices must be non-negative: {self.channels}")
        if self.trial_duration_ms <= 0:
            raise ValueError("trial duration must be positive")
        if self.sampling_rate <= 0:
            raise ValueError("sampling rate must be positive")
        if self.ssvep_delay_ms < 0:
            raise ValueError("SSVEP delay must not be negative")
        if self.window_size <= 0:
            raise ValueError("trial window holds no samples")
        if self.parallelism < 0:
            raise ValueError("parallelism must not be negative")
        for band in self.filter_bank:
            if not isinstance(band, BandpassFilter):
                raise ValueError(f"filter bank entries must be BandpassFilter, got {band!r}")
        if not isinstance(self.sub_band_mixing, SubBandMixingParams):
            raise ValueError(
                f"sub-band mixing must be SubBandMixingParams, got {self.sub_band_mixing!r}"
            )

    # ==========================================================================
    # Loading
    # ==========================================================================
    @classmethod
    def from_dict(cls, values: dict) -> 'ClassifierConfig':
        """Build a configuration from plain (JSON-like) values."""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        kwargs = dict(values)
        if 'patterns' in kwargs:
            kwargs['patterns'] = tuple(kwargs['patterns'])
        if 'channels' in kwargs:
            kwargs['channels'] = [int(ch) for ch in kwargs['channels']]
        return cls(**kwargs)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ClassifierConfig':
        """Load a configuration from a JSON file."""
        with open(path, 'r') as f:
            return cls.from_dict(json.load(f))


# Global default configuration instance
DEFAULT_CONFIG = ClassifierConfig()


def create_config(**kwargs) -> ClassifierConfig:
    """Create a configuration with custom parameters.

    Args:
        **kwargs: Any ClassifierConfig parameter to override

    Returns:
        ClassifierConfig instance with specified overrides
    """
    return ClassifierConfig(**kwargs)
