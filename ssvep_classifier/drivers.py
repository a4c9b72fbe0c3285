"""
Acquisition Streamers - BrainFlow (EEG) and Synthetic SSVEP

Background threads that pull samples from a source and push them, one
Timestamped sample at a time, to every attached consumer (classifier,
calibration sink, ...).
"""

import logging
import time
from abc import ABC, abstractmethod
from threading import Event, Lock, Thread
from typing import List, Optional, Tuple

import numpy as np
from brainflow.board_shim import BoardIds, BoardShim, BrainFlowInputParams

from .stream import StreamConsumer, Timestamped

logger = logging.getLogger(__name__)


# =============================================================================
# STREAMER BASE
# =============================================================================

class BiosignalStreamer(ABC):
    """Polls a sample source on a background thread and fans samples out."""

    def __init__(self, poll_interval: float = 0.01):
        self.poll_interval = poll_interval
        self.is_streaming = False
        self._consumers: List[StreamConsumer] = []
        self._consumers_lock = Lock()
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    def attach(self, consumer: StreamConsumer) -> None:
        with self._consumers_lock:
            if consumer not in self._consumers:
                self._consumers.append(consumer)

    def detach(self, consumer: StreamConsumer) -> None:
        with self._consumers_lock:
            if consumer in self._consumers:
                self._consumers.remove(consumer)

    @abstractmethod
    def read(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """Fetch pending samples.

        Returns:
            (data, timestamps) with data shaped (n_channels, n_samples),
            or None when nothing is available
        """

    def dispatch(self, data: np.ndarray, timestamps: np.ndarray) -> None:
        """Push a block of samples to every consumer."""
        with self._consumers_lock:
            consumers = list(self._consumers)
        for i in range(data.shape[1]):
            sample = Timestamped.of(float(timestamps[i]), data[:, i])
            for consumer in consumers:
                try:
                    consumer.accept(sample)
                except Exception as e:
                    logger.error(f"Consumer {consumer!r} failed: {e}")

    def start(self) -> bool:
        """Start the streaming thread."""
        if self.is_streaming:
            logger.warning("Already streaming")
            return True
        self._stop_event.clear()
        self._thread = Thread(target=self._stream_loop, daemon=True)
        self.is_streaming = True
        self._thread.start()
        logger.info(f"{type(self).__name__} started")
        return True

    def stop(self) -> None:
        """Stop the streaming thread."""
        if not self.is_streaming:
            return
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        self.is_streaming = False
        logger.info(f"{type(self).__name__} stopped")

    def _stream_loop(self) -> None:
        """Background thread for continuous data streaming."""
        while not self._stop_event.is_set():
            try:
                block = self.read()
                if block is not None:
                    self.dispatch(*block)
            except Exception as e:
                logger.error(f"Error in stream loop: {e}")

            self._stop_event.wait(self.poll_interval)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False


# =============================================================================
# BRAINFLOW STREAMER (OpenBCI Cyton or BrainFlow synthetic board)
# =============================================================================

class BrainFlowStreamer(BiosignalStreamer):
    """Streams EEG rows of a BrainFlow board.

    Samples carry only the board's EEG channels, so classifier channel
    indices refer to positions within BoardShim.get_eeg_channels().
    """

    def __init__(self, board_id: int = BoardIds.SYNTHETIC_BOARD.value,
                 serial_port: str = None, poll_interval: float = 0.01):
        super().__init__(poll_interval)
        self.board_id = board_id
        self.serial_port = serial_port
        self.board: Optional[BoardShim] = None
        self.is_connected = False
        self.eeg_channels: List[int] = []
        self.timestamp_channel: int = -1
        self.sampling_rate = 0

        BoardShim.enable_dev_board_logger()

    def connect(self) -> bool:
        """Prepare the board session."""
        if self.is_connected:
            return True

        try:
            params = BrainFlowInputParams()
            if self.serial_port:
                params.serial_port = self.serial_port

            self.board = BoardShim(self.board_id, params)
            self.board.prepare_session()

            self.eeg_channels = BoardShim.get_eeg_channels(self.board_id)
            self.timestamp_channel = BoardShim.get_timestamp_channel(self.board_id)
            self.sampling_rate = BoardShim.get_sampling_rate(self.board_id)

            self.is_connected = True
            logger.info(
                f"Connected to board {self.board_id}! "
                f"Sampling rate: {self.sampling_rate} Hz, EEG channels: {len(self.eeg_channels)}"
            )
            return True

        except Exception as e:
            logger.error(f"Connection failed: {e}")
            return False

    def start(self) -> bool:
        if not self.is_connected:
            logger.error("Not connected to board")
            return False
        try:
            self.board.start_stream()
        except Exception as e:
            logger.error(f"Failed to start stream: {e}")
            return False
        return super().start()

    def stop(self) -> None:
        was_streaming = self.is_streaming
        super().stop()
        if was_streaming and self.board is not None:
            try:
                self.board.stop_stream()
            except Exception as e:
                logger.error(f"Error stopping stream: {e}")

    def read(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        data = self.board.get_board_data()
        if data.shape[1] == 0:
            return None
        return data[self.eeg_channels, :], data[self.timestamp_channel, :]

    def disconnect(self) -> None:
        """Stop streaming and release the board session."""
        self.stop()
        if self.is_connected:
            try:
                self.board.release_session()
                logger.info("Session released")
            except Exception as e:
                logger.error(f"Error releasing session: {e}")
            self.is_connected = False


# =============================================================================
# SYNTHETIC SSVEP STREAMER
# =============================================================================

class SyntheticSsvepStreamer(BiosignalStreamer):
    """Synthetic SSVEP generator for testing without hardware.

    Produces `amplitude * sin(2πft)` on every channel plus Gaussian noise,
    paced at the sampling rate (or as fast as possible when realtime is
    False).
    """

    def __init__(self, n_channels: int = 8, sampling_rate: float = 250.0,
                 target_frequency: Optional[float] = 10.0, amplitude: float = 20.0,
                 noise: float = 0.0, realtime: bool = True, chunk_size: int = 10,
                 seed: Optional[int] = None, poll_interval: float = 0.01):
        super().__init__(poll_interval)
        self.n_channels = n_channels
        self.sampling_rate = sampling_rate
        self.target_frequency = target_frequency
        self.amplitude = amplitude
        self.noise = noise
        self.realtime = realtime
        self.chunk_size = chunk_size
        self.sample_count = 0
        self._rng = np.random.default_rng(seed)
        self._start_time: Optional[float] = None

    def start(self) -> bool:
        self._start_time = time.perf_counter() - self.sample_count / self.sampling_rate
        return super().start()

    def _pending(self) -> int:
        if not self.realtime:
            return self.chunk_size
        elapsed = time.perf_counter() - self._start_time
        return max(int(elapsed * self.sampling_rate) - self.sample_count, 0)

    def generate(self, n_samples: int) -> Tuple[np.ndarray, np.ndarray]:
        """Generate the next `n_samples` samples."""
        t = (self.sample_count + np.arange(n_samples)) / self.sampling_rate
        self.sample_count += n_samples

        data = np.zeros((self.n_channels, n_samples))
        if self.target_frequency:
            data += self.amplitude * np.sin(2 * np.pi * self.target_frequency * t)
        if self.noise > 0:
            data += self.noise * self._rng.standard_normal((self.n_channels, n_samples))
        return data, t

    def read(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        n_samples = self._pending()
        if n_samples == 0:
            return None
        return self.generate(n_samples)
