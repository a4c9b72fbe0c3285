"""
Trial Window Buffer for SSVEP Classification

Collects the channel-selected samples of one trial. The buffer is armed on
activation, drops the samples that fall within the visual onset latency, and
stops growing once a full window has been collected.
Thread-safe for use with streaming acquisition.
"""

import logging
from threading import Event, Lock
from typing import List, Optional, Sequence

import numpy as np

from .clock import Clock, MonotonicClock, elapsed_ms
from .stream import StreamConsumer, Timestamped

logger = logging.getLogger(__name__)


class WindowBuffer(StreamConsumer):
    """Bounded buffer holding the most recent trial window.

    A producer thread calls accept() for every streamed sample while the
    consumer thread arms the buffer with activate() and waits for a full
    window with try_get_window().

    Attributes:
        channel_indices: Selected acquisition channels (0-based)
        window_size: Number of samples per window (e.g., 1000 for 4 s at 250 Hz)
        delay_samples: Samples discarded after each activation
        trial_duration_ms: Maximum time try_get_window() waits for a window
    """

    def __init__(self, channel_indices: Sequence[int], window_size: int,
                 trial_duration_ms: float, delay_samples: int = 0,
                 clock: Clock = None, poll_interval_ms: float = 1.0):
        """Initialize the window buffer.

        Args:
            channel_indices: Acquisition channels to keep from each sample
            window_size: Target number of samples
            trial_duration_ms: Timeout for try_get_window()
            delay_samples: Samples to drop after activation
            clock: Clock for timeout measurement. Uses MonotonicClock if None.
            poll_interval_ms: Wait between two window checks
        """
        if len(channel_indices) == 0:
            raise ValueError("at least one channel is required")
        if window_size <= 0:
            raise ValueError("window size must be positive")
        if trial_duration_ms <= 0:
            raise ValueError("trial duration must be positive")

        self.channel_indices = np.asarray(channel_indices, dtype=int)
        self.window_size = int(window_size)
        self.trial_duration_ms = float(trial_duration_ms)
        self.delay_samples = max(int(delay_samples), 0)
        self.clock = clock or MonotonicClock()
        self.poll_interval_s = max(poll_interval_ms, 0.0) / 1000.0

        self._samples: List[np.ndarray] = []
        self._discard_count = 0
        self._active = False

        # Thread safety
        self._lock = Lock()

    @property
    def n_channels(self) -> int:
        return len(self.channel_indices)

    @property
    def active(self) -> bool:
        return self._active

    @active.setter
    def active(self, value: bool) -> None:
        self.activate(value)

    def activate(self, active: bool = True) -> None:
        """Arm or disarm the buffer.

        Arming always clears the collected samples and restarts the discard
        period, even if the buffer is already armed. Disarming keeps the
        samples as they are.
        """
        with self._lock:
            if active:
                self._samples.clear()
                self._discard_count = self.delay_samples
            self._active = bool(active)
        logger.debug(f"Window buffer {'armed' if active else 'disarmed'}")

    def accept(self, sample: Timestamped) -> None:
        """Append the channel-selected values of one sample.

        Ignored once the window is full or while the discard period lasts.
        """
        values = sample.select(self.channel_indices)
        with self._lock:
            if len(self._samples) >= self.window_size:
                return
            if self._discard_count > 0:
                self._discard_count -= 1
                return
            self._samples.append(values)

    def accept_chunk(self, data: np.ndarray, timestamps: Optional[np.ndarray] = None) -> None:
        """Append a block of samples.

        Args:
            data: Samples with shape (n_total_channels, n_samples), e.g. a
                  BrainFlow board data block
            timestamps: Optional per-sample timestamps
        """
        if data.ndim == 1:
            data = data.reshape(-1, 1)
        n_samples = data.shape[1]
        if timestamps is None:
            timestamps = np.zeros(n_samples)
        for i in range(n_samples):
            self.accept(Timestamped(float(timestamps[i]), data[:, i]))

    def try_get_window(self, cancel_event: Optional[Event] = None) -> Optional[np.ndarray]:
        """Wait until a full window has been collected.

        Polls the buffer, sleeping poll_interval_ms on the cancellation event
        between checks, for at most trial_duration_ms.

        Args:
            cancel_event: Optional event that aborts the wait when set

        Returns:
            Window array with shape (window_size, n_channels) in chronological
            order, or None on timeout or cancellation.
        """
        cancel_event = cancel_event or Event()
        start_time = self.clock.time
        while True:
            with self._lock:
                if len(self._samples) >= self.window_size:
                    return np.array(self._samples[:self.window_size], dtype=np.float64)

            if elapsed_ms(self.clock, start_time) > self.trial_duration_ms:
                return None

            if cancel_event.wait(self.poll_interval_s):
                logger.info("Waiting for trial window cancelled")
                return None

    def reset(self) -> None:
        """Drop all samples and disarm the buffer."""
        with self._lock:
            self._samples.clear()
            self._discard_count = 0
            self._active = False

    @property
    def discard_count(self) -> int:
        """Samples still to be discarded in the current activation."""
        with self._lock:
            return self._discard_count

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._samples) >= self.window_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
