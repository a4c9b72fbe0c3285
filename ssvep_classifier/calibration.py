"""
Baseline Calibration

During a baseline phase the calibration sink receives the same sample stream
as the classifier. Feature vectors are computed over half-overlapping windows
of the collected samples, and per-class running statistics are fitted.
Initializing the sink installs a StatisticalPredictor built from them.
"""

import logging
import time
from abc import abstractmethod
from threading import Lock
from typing import List

import numpy as np

from .predictors import RunningStatistics, StatisticalPredictor
from .stream import StreamConsumer, Timestamped

logger = logging.getLogger(__name__)


class Calibrator(StreamConsumer):
    """Calibration sink interface."""

    @abstractmethod
    def compute(self) -> None:
        ...

    @abstractmethod
    def initialize(self) -> None:
        ...


class NoOpCalibrator(Calibrator):
    """Calibration sink that ignores everything (baseline disabled)."""

    def accept(self, sample: Timestamped) -> None:
        pass

    def compute(self) -> None:
        pass

    def initialize(self) -> None:
        pass


def moving_windows(samples: np.ndarray, window_size: int, overlap: float = 0.5):
    """Yield full windows of `window_size` rows with the given overlap."""
    stride = max(int(window_size * (1 - overlap)), 1)
    for start in range(0, samples.shape[0] - window_size + 1, stride):
        yield samples[start:start + window_size]


class BaselineCalibrator(Calibrator):
    """Fits per-class score distributions on baseline data.

    Attributes:
        classifier: Owning SsvepClassifier (provides channels, window size,
                    feature extraction and the predictor slot)
        statistics: One RunningStatistics per class
    """

    def __init__(self, classifier, overlap: float = 0.5):
        self.classifier = classifier
        self.overlap = overlap
        self.statistics = [RunningStatistics() for _ in range(classifier.class_count)]
        self._samples: List[np.ndarray] = []
        self._lock = Lock()

    def accept(self, sample: Timestamped) -> None:
        values = sample.select(self.classifier.channel_indices)
        with self._lock:
            self._samples.append(values)

    @property
    def pending_samples(self) -> int:
        with self._lock:
            return len(self._samples)

    @property
    def observed(self) -> int:
        """Feature vectors folded into the statistics so far."""
        return self.statistics[0].count if self.statistics else 0

    def compute(self) -> None:
        """Fold the buffered samples into the running statistics."""
        with self._lock:
            samples, self._samples = self._samples, []
        if not samples:
            return

        start_time = time.perf_counter()
        data = np.array(samples, dtype=np.float64)
        n_windows = 0
        for window in moving_windows(data, self.classifier.window_size, self.overlap):
            features = self.classifier.compute_features(window)
            for stats, value in zip(self.statistics, features):
                stats.push(float(value))
            n_windows += 1

        processing_time = (time.perf_counter() - start_time) * 1000
        means = ", ".join(f"{s.mean:.3f}({s.std:.2f})" for s in self.statistics)
        logger.info(
            f"Baseline computed: {n_windows} windows from {len(samples)} samples, "
            f"means [{means}] ({processing_time:.0f} ms)"
        )

    def initialize(self) -> None:
        """Compute pending windows and install the fitted predictor.

        Leaves the classifier untouched when no window was observed.
        """
        self.compute()
        if self.observed == 0:
            logger.info("Baseline skipped: no complete window observed")
            return
        predictor = StatisticalPredictor.from_statistics(self.statistics)
        self.classifier.predictor = predictor
        logger.info(f"Predictor replaced: {predictor!r}")
