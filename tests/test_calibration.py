import numpy as np
import pytest

from conftest import feed
from ssvep_classifier.calibration import BaselineCalibrator, NoOpCalibrator, moving_windows
from ssvep_classifier.classifier import SsvepClassifier
from ssvep_classifier.predictors import StatisticalPredictor, ThresholdPredictor


@pytest.fixture
def classifier(short_config):
    short_config.baseline_enabled = True
    with SsvepClassifier(short_config) as classifier:
        yield classifier


def noise_rows(n, n_channels=6, seed=0):
    return np.random.default_rng(seed).standard_normal((n, n_channels))


@pytest.mark.parametrize("n,size,expected", [
    (1000, 250, 7),
    (250, 250, 1),
    (249, 250, 0),
    (500, 100, 9),
])
def test_moving_windows_half_overlap(n, size, expected):
    windows = list(moving_windows(np.zeros((n, 2)), size))
    assert len(windows) == expected
    assert all(w.shape == (size, 2) for w in windows)


def test_sink_disabled_is_noop(short_config):
    with SsvepClassifier(short_config) as classifier:
        sink = classifier.create_calibration_sink()
        assert isinstance(sink, NoOpCalibrator)
        feed(sink, noise_rows(500))
        sink.initialize()
        assert isinstance(classifier.predictor, ThresholdPredictor)


def test_initialize_without_windows_keeps_predictor(classifier):
    sink = classifier.create_calibration_sink()
    assert isinstance(sink, BaselineCalibrator)
    feed(sink, noise_rows(100))
    sink.initialize()
    assert sink.observed == 0
    assert isinstance(classifier.predictor, ThresholdPredictor)


def test_initialize_installs_statistical_predictor(classifier):
    sink = classifier.create_calibration_sink()
    feed(sink, noise_rows(1000))
    assert sink.pending_samples == 1000

    sink.initialize()
    assert sink.pending_samples == 0
    assert sink.observed == 7
    predictor = classifier.predictor
    assert isinstance(predictor, StatisticalPredictor)
    assert len(predictor.means) == classifier.class_count
    # z-scored features average to zero across classes
    assert predictor.means.sum() == pytest.approx(0.0, abs=1e-9)


def test_compute_accumulates_across_calls(classifier):
    sink = BaselineCalibrator(classifier)
    feed(sink, noise_rows(500, seed=1))
    sink.compute()
    feed(sink, noise_rows(500, seed=2))
    sink.compute()
    assert sink.observed == 6
    assert all(s.count == 6 for s in sink.statistics)


def test_baseline_uses_configured_channels(classifier):
    sink = BaselineCalibrator(classifier)
    rows = noise_rows(250)
    feed(sink, rows)
    sink.compute()
    expected = classifier.compute_features(rows[:, classifier.config.channels])
    np.testing.assert_allclose([s.mean for s in sink.statistics], expected)
