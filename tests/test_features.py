import numpy as np
import pytest

from conftest import sine_samples
from ssvep_classifier.config import BandpassFilter
from ssvep_classifier.features import FeatureExtractor, nan_to_zero, normalize_by_sum, zscore
from ssvep_classifier.filterbank import FilterBank
from ssvep_classifier.pool import ParallelPool
from ssvep_classifier.references import ReferenceBank

FREQS = (14.0, 15.0, 16.0, 17.0)


@pytest.fixture
def pool():
    with ParallelPool(2) as pool:
        yield pool


@pytest.fixture
def references():
    with ReferenceBank(FREQS, 2, 1000, 250.0) as bank:
        yield bank


def test_zscore():
    np.testing.assert_array_equal(zscore([3.0, 3.0, 3.0]), [0.0, 0.0, 0.0])
    np.testing.assert_array_equal(zscore([5.0]), [0.0])
    np.testing.assert_allclose(zscore([0.0, 1.0, 0.0, 0.0]), [-0.5, 1.5, -0.5, -0.5])
    values = np.array([0.2, 0.9, 0.4, 0.1])
    np.testing.assert_allclose(zscore(values), (values - values.mean()) / values.std(ddof=1))


def test_nan_to_zero():
    np.testing.assert_array_equal(nan_to_zero([np.nan, np.inf, -np.inf, 2.0]), [0, 0, 0, 2.0])


def test_normalize_by_sum():
    np.testing.assert_allclose(normalize_by_sum(np.array([1.0, 3.0])), [0.25, 0.75])
    np.testing.assert_array_equal(normalize_by_sum(np.zeros(3)), np.zeros(3))
    np.testing.assert_array_equal(normalize_by_sum(np.array([np.nan, 1.0])), [0.0, 0.0])


def test_pure_tone_features_pick_stimulus(references, pool):
    extractor = FeatureExtractor(references, pool)
    features = extractor.compute_features(sine_samples(15.0, 1000))
    assert features.shape == (4,)
    assert np.argmax(features) == 1
    assert features[1] >= 0.5
    assert np.all(np.delete(features, 1) < 0.5)


def test_flat_window_gives_zero_features(references, pool):
    extractor = FeatureExtractor(references, pool)
    features = extractor.compute_features(np.zeros((1000, 8)))
    np.testing.assert_array_equal(features, np.zeros(4))


def test_cca_and_mec_families(references, pool):
    extractor = FeatureExtractor(references, pool)
    window = sine_samples(16.0, 1000)
    ccas = extractor.compute_canonical_correlations(window)
    mecs = extractor.compute_minimum_energy_combinations(window)
    assert ccas.sum() == pytest.approx(1.0)
    assert mecs.sum() == pytest.approx(1.0)
    assert np.argmax(ccas) == 2
    assert np.argmax(mecs) == 2


def test_weights_scale_families(references, pool):
    window = sine_samples(14.0, 1000)
    base = FeatureExtractor(references, pool).compute_features(window)
    cca_only = FeatureExtractor(references, pool, mec_weight=0.0).compute_features(window)
    np.testing.assert_allclose(cca_only * 2, base, atol=1e-6)


def test_filter_bank_path(references, pool):
    bank = FilterBank([BandpassFilter(6, 90), BandpassFilter(14, 90), BandpassFilter(22, 90)], 250.0)
    extractor = FeatureExtractor(references, pool, filter_bank=bank)
    window = sine_samples(15.0, 1000)

    ccas = extractor.compute_canonical_correlations(window)
    assert np.all(np.isfinite(ccas))
    assert np.argmax(ccas) == 1
    assert np.argmax(extractor.compute_features(window)) == 1


@pytest.mark.parametrize("parallelism", [1, 3, 8])
def test_result_independent_of_parallelism(references, parallelism):
    window = sine_samples(17.0, 1000) + np.random.default_rng(3).standard_normal((1000, 8))
    with ParallelPool(1) as serial, ParallelPool(parallelism) as parallel:
        expected = FeatureExtractor(references, serial).compute_features(window)
        actual = FeatureExtractor(references, parallel).compute_features(window)
    np.testing.assert_allclose(actual, expected)


def test_non_finite_window_gives_zero_features(references, pool):
    window = sine_samples(15.0, 1000)
    window[10, 0] = np.nan
    features = FeatureExtractor(references, pool).compute_features(window)
    np.testing.assert_array_equal(features, np.zeros(4))
