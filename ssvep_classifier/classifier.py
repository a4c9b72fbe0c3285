"""
Real-Time SSVEP Classifier

Hybrid CCA + MEC classification of one trial window at a time:

    streamer thread  --accept()-->  WindowBuffer
    sequencer thread --activate()-> (clear + re-arm)
                     --classify()-> wait for window -> features -> predictor

classify() returns the winning class index, MISSED when no class qualifies,
or TIMEOUT when the window did not fill within the trial duration.
"""

import logging
from threading import Event
from typing import Optional

import numpy as np

from .buffer import WindowBuffer
from .calibration import BaselineCalibrator, Calibrator, NoOpCalibrator
from .clock import Clock, MonotonicClock
from .config import ClassifierConfig, DEFAULT_CONFIG
from .features import FeatureExtractor
from .filterbank import FilterBank
from .pool import ParallelPool
from .predictors import NO_MATCH, Predictor, ThresholdPredictor
from .references import ReferenceBank
from .result import MISSED, TIMEOUT, ClassificationResult
from .stream import StreamConsumer, Timestamped

logger = logging.getLogger(__name__)


class SsvepClassifier(StreamConsumer):
    """SSVEP stimulus classifier fed by a live sample stream.

    Attributes:
        config: ClassifierConfig instance
        clock: Clock used for trial timeouts
        buffer: Trial window buffer
        references: Decomposed harmonic references, one per class
        extractor: CCA/MEC feature extraction
    """

    def __init__(self, config: ClassifierConfig = None, clock: Clock = None,
                 pool: ParallelPool = None):
        """Initialize the classifier.

        Args:
            config: ClassifierConfig instance. Uses DEFAULT_CONFIG if None.
            clock: Clock for timeouts. Uses MonotonicClock if None.
            pool: Worker pool. A pool of config.parallelism workers is
                  created (and owned) if None.

        Raises:
            ValueError: invalid configuration
        """
        self.config = config or DEFAULT_CONFIG
        self.config.validate()
        self.clock = clock or MonotonicClock()

        self.channel_indices = np.asarray(self.config.channels, dtype=int)

        self.buffer = WindowBuffer(
            self.config.channels,
            self.config.window_size,
            self.config.trial_duration_ms,
            delay_samples=self.config.discard_count,
            clock=self.clock,
            poll_interval_ms=self.config.poll_interval_ms,
        )

        self.references = ReferenceBank(
            self.config.stimulation_patterns,
            self.config.harmonics_count,
            self.config.window_size,
            self.config.sampling_rate,
        )

        self.filter_bank = None
        if self.config.filter_bank:
            self.filter_bank = FilterBank(
                self.config.filter_bank,
                self.config.sampling_rate,
                self.config.sub_band_mixing,
            )

        self._owns_pool = pool is None
        self.pool = pool or ParallelPool(self.config.parallelism)

        self.extractor = FeatureExtractor(
            self.references,
            self.pool,
            filter_bank=self.filter_bank,
            cca_weight=self.config.cca_weight,
            mec_weight=self.config.mec_weight,
        )

        self._predictor: Predictor = ThresholdPredictor(self.config.threshold)
        self._closed = False

        logger.info(
            f"SSVEP classifier ready: {self.class_count} classes "
            f"{list(self.config.frequencies)} Hz, window {self.window_size} samples, "
            f"{self.config.n_channels} channels, "
            f"{self.filter_bank.num_bands if self.filter_bank else 0} sub-bands"
        )

    # ==========================================================================
    # Properties
    # ==========================================================================
    @property
    def window_size(self) -> int:
        return self.buffer.window_size

    @property
    def class_count(self) -> int:
        return self.config.class_count

    @property
    def predictor(self) -> Predictor:
        return self._predictor

    @predictor.setter
    def predictor(self, predictor: Predictor) -> None:
        # Whole-instance swap, a concurrent classify() keeps the one it read
        self._predictor = predictor

    @property
    def active(self) -> bool:
        return self.buffer.active

    @active.setter
    def active(self, value: bool) -> None:
        self.activate(value)

    # ==========================================================================
    # Stream / sequencer interface
    # ==========================================================================
    def accept(self, sample: Timestamped) -> None:
        """Feed one streamed sample."""
        self.buffer.accept(sample)

    def activate(self, active: bool = True) -> None:
        """Arm (clear + restart the discard period) or disarm windowing."""
        self.buffer.activate(active)

    def classify(self, cancel_event: Optional[Event] = None) -> ClassificationResult:
        """Classify the current trial.

        Blocks until the window is full or the trial duration elapses.

        Args:
            cancel_event: Optional event that aborts the wait

        Returns:
            ClassificationResult (success, MISSED or TIMEOUT)
        """
        window = self.buffer.try_get_window(cancel_event)
        if window is None:
            logger.warning(
                f"Trial window not filled within {self.config.trial_duration_ms:.0f} ms "
                f"({len(self.buffer)}/{self.window_size} samples)"
            )
            return TIMEOUT
        features = self.compute_features(window)
        index = self.predict(features)
        if index == NO_MATCH:
            return MISSED
        return ClassificationResult.success(index)

    def compute_features(self, window: np.ndarray) -> np.ndarray:
        """Feature vector of one (window_size, n_channels) window."""
        return self.extractor.compute_features(window)

    def predict(self, features: np.ndarray) -> int:
        predictor = self._predictor
        return predictor.predict(features)

    def create_calibration_sink(self) -> Calibrator:
        """Sink for baseline samples; call initialize() on it afterwards."""
        if self.config.baseline_enabled:
            return BaselineCalibrator(self)
        return NoOpCalibrator()

    # ==========================================================================
    # Teardown
    # ==========================================================================
    def close(self) -> None:
        """Release reference matrices and the owned worker pool."""
        if self._closed:
            return
        self._closed = True
        self.buffer.reset()
        try:
            self.references.close()
        except Exception as e:
            logger.error(f"Error releasing reference bank: {e}")
        if self._owns_pool:
            try:
                self.pool.close()
            except Exception as e:
                logger.error(f"Error shutting down worker pool: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
