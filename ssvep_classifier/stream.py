"""
Sample Stream Contract

Samples arrive from an acquisition streamer as timestamped vectors holding one
value per acquisition channel. Anything that wants them implements
StreamConsumer.accept().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Timestamped:
    """One acquisition sample with its timestamp.

    Attributes:
        timestamp: Acquisition time (clock units of the producer)
        value: Sample vector with shape (n_total_channels,)
    """
    timestamp: float
    value: np.ndarray

    @classmethod
    def of(cls, timestamp: float, values) -> 'Timestamped':
        value = np.array(values, dtype=np.float64)
        value.setflags(write=False)
        return cls(timestamp, value)

    def select(self, channel_indices) -> np.ndarray:
        return self.value[channel_indices]


class StreamConsumer(ABC):
    """Receiver of streamed samples."""

    @abstractmethod
    def accept(self, sample: Timestamped) -> None:
        ...
