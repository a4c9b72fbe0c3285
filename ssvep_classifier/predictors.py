"""
Decision rules mapping a feature vector to a class index.

Two strategies share the Predictor interface:
- ThresholdPredictor: arg-max among scores clearing a fixed threshold
- StatisticalPredictor: per-class Normal distributions fitted on a baseline

A predictor is never mutated after construction; the classifier replaces the
whole instance when calibration completes.
"""

import math
from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np
from scipy.stats import norm

NO_MATCH = -1


class Predictor(ABC):
    """Maps a feature vector to a class index or NO_MATCH."""

    kind: str = ""

    @abstractmethod
    def predict(self, features: np.ndarray) -> int:
        ...


class ThresholdPredictor(Predictor):
    """Highest score that is at least `threshold`."""

    kind = "threshold"

    def __init__(self, threshold: float):
        self.threshold = float(threshold)

    def predict(self, features: np.ndarray) -> int:
        max_score = -math.inf
        max_index = NO_MATCH
        for i, score in enumerate(features):
            if score >= self.threshold and score > max_score:
                max_score = score
                max_index = i
        return max_index

    def __repr__(self) -> str:
        return f"ThresholdPredictor(threshold={self.threshold})"


class StatisticalPredictor(Predictor):
    """Least likely class among those scoring above their baseline mean.

    For every class whose score is at least the mean of its fitted Normal
    distribution, the density at that score is computed; the class with the
    lowest density (the score furthest into the upper tail) wins.
    """

    kind = "statistical"

    # Floor for fitted standard deviations, a zero-width Normal has no density
    MIN_STD = 1e-12

    def __init__(self, means: Sequence[float], stds: Sequence[float]):
        if len(means) != len(stds):
            raise ValueError("means and stds must have the same length")
        self.means = np.asarray(means, dtype=np.float64)
        self.stds = np.maximum(np.nan_to_num(np.asarray(stds, dtype=np.float64)), self.MIN_STD)
        self.distributions = [norm(loc=m, scale=s) for m, s in zip(self.means, self.stds)]

    @classmethod
    def from_statistics(cls, statistics: Sequence['RunningStatistics']) -> 'StatisticalPredictor':
        return cls([s.mean for s in statistics], [s.std for s in statistics])

    def predict(self, features: np.ndarray) -> int:
        min_density = math.inf
        min_index = NO_MATCH
        for i, score in enumerate(features[:len(self.distributions)]):
            distribution = self.distributions[i]
            if score < self.means[i]:
                continue
            density = distribution.pdf(score)
            if density < min_density:
                min_density = density
                min_index = i
        return min_index

    def __repr__(self) -> str:
        pairs = ", ".join(f"{m:.3f}({s:.2f})" for m, s in zip(self.means, self.stds))
        return f"StatisticalPredictor([{pairs}])"


class RunningStatistics:
    """Running mean and sample variance (Welford)."""

    def __init__(self):
        self.count = 0
        self._mean = 0.0
        self._m2 = 0.0

    def push(self, value: float) -> None:
        self.count += 1
        delta = value - self._mean
        self._mean += delta / self.count
        self._m2 += delta * (value - self._mean)

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def variance(self) -> float:
        if self.count < 2:
            return 0.0
        return self._m2 / (self.count - 1)

    @property
    def std(self) -> float:
        return math.sqrt(self.variance)
