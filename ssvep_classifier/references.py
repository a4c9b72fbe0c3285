"""
Harmonic Reference Bank

Precomputes one sine/cosine design matrix per stimulation pattern over the
trial window and decomposes it once, so every trial only has to decompose
the live window.

For a stimulus at frequency f and harmonics k = 1..K the reference matrix
has shape (window_size, 2K) with columns [sin(2πkft), cos(2πkft), ...].
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .linalg import canonical_correlation, cca_basis, minimum_energy_combination
from .patterns import PatternLike, to_pattern

logger = logging.getLogger(__name__)


def harmonic_matrix(frequency: float, harmonics_count: int,
                    window_size: int, sampling_rate: float) -> np.ndarray:
    """Sine/cosine reference signals for one frequency.

    Returns:
        Array of shape (window_size, 2 * harmonics_count)
    """
    t = np.arange(window_size) / sampling_rate
    refs = []
    for h in range(1, harmonics_count + 1):
        angle = 2 * np.pi * h * frequency * t
        refs.append(np.sin(angle))
        refs.append(np.cos(angle))
    return np.column_stack(refs)


@dataclass
class HarmonicReference:
    """Reference matrix of one class and its orthonormal basis."""
    frequency: float
    matrix: np.ndarray
    basis: np.ndarray


class ReferenceBank:
    """Decomposed harmonic references, one per class.

    The bank owns its matrices: close() releases them, after which the bank
    can no longer score. Use it as a context manager or close it explicitly.

    Attributes:
        harmonics_count: Harmonics per reference
        window_size: Samples per reference
        sampling_rate: Sampling frequency in Hz
    """

    def __init__(self, patterns: Sequence[PatternLike], harmonics_count: int,
                 window_size: int, sampling_rate: float):
        """Build and decompose the reference matrices.

        Raises:
            ValueError: no patterns, no harmonics, a multi-sinusoid pattern
                        or a non-positive stimulation frequency
        """
        if len(patterns) == 0:
            raise ValueError("at least one stimulation pattern is required")
        if harmonics_count <= 0:
            raise ValueError("at least one harmonic is required")
        if window_size <= 0:
            raise ValueError("window size must be positive")

        self.harmonics_count = int(harmonics_count)
        self.window_size = int(window_size)
        self.sampling_rate = float(sampling_rate)

        references = []
        for pattern in patterns:
            frequency = to_pattern(pattern).fundamental_frequency
            if frequency <= 0:
                raise ValueError(f"stimulation frequency must be positive: {pattern}")
            matrix = harmonic_matrix(frequency, self.harmonics_count,
                                     self.window_size, self.sampling_rate)
            references.append(HarmonicReference(frequency, matrix, cca_basis(matrix)))
        self._references: Optional[List[HarmonicReference]] = references

        logger.debug(
            f"Reference bank: {len(references)} classes, "
            f"{self.harmonics_count} harmonics, {self.window_size} samples"
        )

    def _require_open(self) -> List[HarmonicReference]:
        references = self._references
        if references is None:
            raise RuntimeError("reference bank has been released")
        return references

    def __len__(self) -> int:
        return len(self._require_open())

    def __getitem__(self, class_index: int) -> HarmonicReference:
        return self._require_open()[class_index]

    @property
    def frequencies(self) -> Tuple[float, ...]:
        return tuple(ref.frequency for ref in self._require_open())

    @property
    def closed(self) -> bool:
        return self._references is None

    def canonical_correlation(self, window_basis: np.ndarray, class_index: int) -> float:
        """CCA between a decomposed window and one class reference."""
        return canonical_correlation(window_basis, self[class_index].basis)

    def minimum_energy_combination(self, window: np.ndarray, class_index: int) -> float:
        """MEC between a raw window and one class reference."""
        return minimum_energy_combination(window, self[class_index].matrix)

    def score(self, window: np.ndarray, class_index: int,
              window_basis: np.ndarray = None) -> Tuple[float, float]:
        """Score one window against one class.

        Args:
            window: (window_size, n_channels)
            class_index: Class to score against
            window_basis: cca_basis(window), computed here if None

        Returns:
            (cca, mec)
        """
        if window_basis is None:
            window_basis = cca_basis(window)
        return (self.canonical_correlation(window_basis, class_index),
                self.minimum_energy_combination(window, class_index))

    def close(self) -> None:
        """Release the reference matrices. Safe to call more than once."""
        references, self._references = self._references, None
        if references is None:
            return
        for ref in references:
            ref.matrix = None
            ref.basis = None
        references.clear()
        logger.debug("Reference matrices released")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
