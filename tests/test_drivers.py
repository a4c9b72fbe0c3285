import logging
import time

import numpy as np
import pytest

from conftest import CollectingConsumer
from ssvep_classifier.drivers import BiosignalStreamer, SyntheticSsvepStreamer


class IdleStreamer(BiosignalStreamer):

    def read(self):
        return None


class FailingConsumer:

    def accept(self, sample):
        raise RuntimeError("consumer broke")


def test_generate_shape_and_continuity():
    streamer = SyntheticSsvepStreamer(n_channels=3, sampling_rate=250.0,
                                      target_frequency=10.0, amplitude=2.0)
    first, t1 = streamer.generate(5)
    second, t2 = streamer.generate(5)
    assert first.shape == (3, 5)
    np.testing.assert_allclose(np.concatenate([t1, t2]), np.arange(10) / 250.0)
    expected = 2.0 * np.sin(2 * np.pi * 10.0 * t2)
    np.testing.assert_allclose(second[1], expected)
    assert streamer.sample_count == 10


def test_noise_only_stream():
    streamer = SyntheticSsvepStreamer(n_channels=2, target_frequency=None, noise=1.0, seed=4)
    data, _ = streamer.generate(2000)
    assert abs(data.mean()) < 0.1
    assert 0.9 < data.std() < 1.1


def test_dispatch_to_every_consumer():
    streamer = IdleStreamer()
    a, b = CollectingConsumer(), CollectingConsumer()
    streamer.attach(a)
    streamer.attach(b)
    streamer.attach(a)

    data = np.arange(6, dtype=float).reshape(2, 3)
    streamer.dispatch(data, np.array([0.1, 0.2, 0.3]))
    assert len(a.samples) == 3
    assert len(b.samples) == 3
    np.testing.assert_array_equal(a.samples[2].value, [2.0, 5.0])
    assert a.samples[0].timestamp == 0.1

    streamer.detach(b)
    streamer.dispatch(data, np.zeros(3))
    assert len(a.samples) == 6
    assert len(b.samples) == 3


def test_consumer_failure_is_logged_not_raised(caplog):
    streamer = IdleStreamer()
    good = CollectingConsumer()
    streamer.attach(FailingConsumer())
    streamer.attach(good)

    with caplog.at_level(logging.ERROR, logger="ssvep_classifier.drivers"):
        streamer.dispatch(np.ones((2, 2)), np.zeros(2))
    assert len(good.samples) == 2
    assert "consumer broke" in caplog.text


def test_streaming_thread_delivers_samples():
    streamer = SyntheticSsvepStreamer(n_channels=2, realtime=False, chunk_size=20,
                                      poll_interval=0.001)
    consumer = CollectingConsumer()
    streamer.attach(consumer)
    with streamer:
        assert streamer.is_streaming
        deadline = time.perf_counter() + 5.0
        while len(consumer.samples) < 100 and time.perf_counter() < deadline:
            time.sleep(0.01)
    assert not streamer.is_streaming
    assert len(consumer.samples) >= 100
    assert consumer.samples[0].value.shape == (2,)


def test_streamer_requires_a_source():
    with pytest.raises(TypeError):
        BiosignalStreamer()
