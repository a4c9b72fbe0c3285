"""
SSVEP Feature Extraction

Scores a trial window against every class reference with two independent
methods and merges them into one feature vector:

1. Canonical correlation (CCA), optionally per filter-bank sub-band and mixed
   with the sub-band weights
2. Minimum energy combination (MEC)

Each score family is divided by its sum, z-scored across classes and the two
families are added with configurable weights (1:1 by default).
"""

import logging
import time
from typing import Optional

import numpy as np

from .filterbank import FilterBank
from .linalg import cca_basis
from .pool import ParallelPool, Task
from .references import ReferenceBank

logger = logging.getLogger(__name__)


def nan_to_zero(values: np.ndarray) -> np.ndarray:
    """Replace NaN and infinite scores with zero."""
    values = np.asarray(values, dtype=np.float64)
    return np.where(np.isfinite(values), values, 0.0)


def normalize_by_sum(values: np.ndarray) -> np.ndarray:
    """Divide scores by their sum; a zero sum yields zeros."""
    with np.errstate(divide='ignore', invalid='ignore'):
        return nan_to_zero(values / np.sum(values))


def zscore(values: np.ndarray) -> np.ndarray:
    """Standardize scores across classes (sample standard deviation).

    Constant or single-element vectors yield all zeros.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size < 2:
        return np.zeros_like(values)
    std = np.std(values, ddof=1)
    if not np.isfinite(std) or std == 0:
        return np.zeros_like(values)
    return (values - np.mean(values)) / std


class FeatureExtractor:
    """Computes CCA + MEC feature vectors for trial windows.

    Attributes:
        references: Decomposed class references
        filter_bank: Optional sub-band filter bank (None = raw scoring)
        pool: Worker pool used to spread classes / sub-bands
        cca_weight: Weight of the normalized CCA scores
        mec_weight: Weight of the normalized MEC scores
    """

    def __init__(self, references: ReferenceBank, pool: ParallelPool,
                 filter_bank: Optional[FilterBank] = None,
                 cca_weight: float = 1.0, mec_weight: float = 1.0):
        self.references = references
        self.pool = pool
        self.filter_bank = filter_bank
        self.cca_weight = cca_weight
        self.mec_weight = mec_weight

    @property
    def class_count(self) -> int:
        return len(self.references)

    def compute_canonical_correlations(self, window: np.ndarray) -> np.ndarray:
        """CCA score per class, sub-band mixed if a filter bank is set.

        Args:
            window: (window_size, n_channels)

        Returns:
            (n_classes,) scores divided by their sum
        """
        n_classes = self.class_count
        values = np.zeros(n_classes)

        if self.filter_bank is None:
            basis = cca_basis(window)

            def work(task: Task):
                for h in task.indices(n_classes):
                    values[h] = self.references.canonical_correlation(basis, h)

            self.pool.batch(work)
        else:
            bank = self.filter_bank
            sub_band_scores = np.zeros((bank.num_bands, n_classes))

            def work(task: Task):
                for f in task.indices(bank.num_bands):
                    basis = cca_basis(bank.apply(window, f))
                    for h in range(n_classes):
                        sub_band_scores[f, h] = self.references.canonical_correlation(basis, h)

            self.pool.batch(work)
            # NaN bands (flat after filtering) contribute nothing
            values = bank.mix(nan_to_zero(sub_band_scores))

        return normalize_by_sum(values)

    def compute_minimum_energy_combinations(self, window: np.ndarray) -> np.ndarray:
        """MEC score per class.

        Args:
            window: (window_size, n_channels)

        Returns:
            (n_classes,) scores divided by their sum
        """
        n_classes = self.class_count
        values = np.zeros(n_classes)

        def work(task: Task):
            for h in task.indices(n_classes):
                values[h] = self.references.minimum_energy_combination(window, h)

        self.pool.batch(work)
        return normalize_by_sum(values)

    def compute_features(self, window: np.ndarray) -> np.ndarray:
        """Feature vector for one window.

        Args:
            window: (window_size, n_channels)

        Returns:
            (n_classes,) weighted sum of z-scored CCA and MEC scores, all
            zeros when the window holds a non-finite sample
        """
        start_time = time.perf_counter()
        window = np.asarray(window, dtype=np.float64)
        if not np.all(np.isfinite(window)):
            # Dropped packets (NaN/inf) score no class
            logger.debug("Window holds non-finite samples, features zeroed")
            return np.zeros(self.class_count)

        ccas = nan_to_zero(self.compute_canonical_correlations(window))
        logger.debug(f"CCA values: [{', '.join(f'{v:.2f}' for v in ccas)}]")

        mecs = nan_to_zero(self.compute_minimum_energy_combinations(window))
        logger.debug(f"MEC values: [{', '.join(f'{v:.2f}' for v in mecs)}]")

        features = nan_to_zero(
            self.cca_weight * zscore(ccas) + self.mec_weight * zscore(mecs)
        )

        processing_time = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Features: [{', '.join(f'{v:.3f}' for v in features)}] "
            f"({processing_time:.1f} ms)"
        )
        return features
