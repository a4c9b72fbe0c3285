import numpy as np
import pytest

from ssvep_classifier.clock import TimeUnit
from ssvep_classifier.config import ClassifierConfig
from ssvep_classifier.stream import Timestamped


class FakeClock:
    """Clock that advances by `step` milliseconds on every read."""

    def __init__(self, step: float = 1.0):
        self.step = step
        self.now = 0.0

    @property
    def time(self) -> float:
        current = self.now
        self.now += self.step
        return current

    @property
    def unit(self) -> TimeUnit:
        return TimeUnit.MILLISECOND


class CollectingConsumer:

    def __init__(self):
        self.samples = []

    def accept(self, sample):
        self.samples.append(sample)


def sine_samples(frequency, n_samples, n_channels=8, sampling_rate=250.0,
                 amplitude=20.0, offset=0):
    """(n_samples, n_channels) pure sinusoid on every channel."""
    t = (offset + np.arange(n_samples)) / sampling_rate
    return np.tile(amplitude * np.sin(2 * np.pi * frequency * t)[:, np.newaxis], (1, n_channels))


def feed(consumer, rows, start_time=0.0):
    for i, row in enumerate(rows):
        consumer.accept(Timestamped.of(start_time + i, row))


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def config():
    """Four targets 14-17 Hz, 8 channels, 250 Hz, 4 s trials."""
    return ClassifierConfig(
        sampling_rate=250.0,
        trial_duration_ms=4000.0,
        patterns=(14.0, 15.0, 16.0, 17.0),
        harmonics_count=2,
        channels=list(range(8)),
        threshold=0.5,
        parallelism=2,
    )


@pytest.fixture
def short_config():
    """Short trials (1 s) for fast tests."""
    return ClassifierConfig(
        sampling_rate=250.0,
        trial_duration_ms=1000.0,
        patterns=(8.0, 10.0, 12.0, 15.0),
        harmonics_count=2,
        channels=[0, 1, 2, 3],
        threshold=0.5,
        parallelism=2,
    )
