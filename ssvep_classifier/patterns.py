"""
Stimulation Patterns

Temporal waveforms driving the flickering stimuli. The classifier only needs
the fundamental frequency of each stimulus, but patterns keep their phase so
that the same configuration can drive both the stimulus renderer and the
classifier.

Expressions:
    "15"       -> Sin(15.0Hz)
    "15@0.5"   -> Sin(15.0Hz@0.5π)
    "8.57,17"  -> composite of two sinusoids
"""

import math
from dataclasses import dataclass
from typing import Iterable, Tuple, Union


@dataclass(frozen=True)
class SinusoidalPattern:
    """Sinusoidal flicker at a fixed frequency and phase (in multiples of π)."""
    frequency: float
    phase: float = 0.0

    @classmethod
    def parse(cls, expression: str) -> 'SinusoidalPattern':
        expression = expression.strip()
        at = expression.find('@')
        if at < 0:
            return cls(float(expression))
        return cls(float(expression[:at]), float(expression[at + 1:]))

    def sample(self, t: float) -> float:
        return math.sin((self.phase + self.frequency * t * 2) * math.pi)

    def __str__(self) -> str:
        if self.phase != 0:
            return f"Sin({self.frequency:.1f}Hz@{self.phase:.1f}π)"
        return f"Sin({self.frequency:.1f}Hz)"


@dataclass(frozen=True)
class CompositeTemporalPattern:
    """Sum of one or more sinusoidal patterns."""
    patterns: Tuple[SinusoidalPattern, ...]

    def __post_init__(self):
        if len(self.patterns) == 0:
            raise ValueError("no patterns")
        if any(p is None for p in self.patterns):
            raise ValueError("pattern cannot be null")

    @classmethod
    def of(cls, *patterns: SinusoidalPattern) -> 'CompositeTemporalPattern':
        return cls(tuple(patterns))

    @classmethod
    def parse(cls, expression: str) -> 'CompositeTemporalPattern':
        parts = [p for p in expression.split(',') if p.strip()]
        return cls(tuple(SinusoidalPattern.parse(p) for p in parts))

    @property
    def fundamental_frequency(self) -> float:
        """Frequency of a single-sinusoid pattern.

        Raises:
            ValueError: if the composite holds more than one sinusoid
        """
        if len(self.patterns) != 1:
            raise ValueError("can not support multi-pattern scheme")
        return self.patterns[0].frequency

    def sample(self, t: float) -> float:
        return sum(p.sample(t) for p in self.patterns)

    def __str__(self) -> str:
        return ",".join(str(p) for p in self.patterns)


PatternLike = Union[CompositeTemporalPattern, SinusoidalPattern, float, int, str]


def to_pattern(value: PatternLike) -> CompositeTemporalPattern:
    """Coerce a number, expression or pattern into a composite pattern."""
    if isinstance(value, CompositeTemporalPattern):
        return value
    if isinstance(value, SinusoidalPattern):
        return CompositeTemporalPattern.of(value)
    if isinstance(value, str):
        return CompositeTemporalPattern.parse(value)
    if isinstance(value, (int, float)):
        return CompositeTemporalPattern.of(SinusoidalPattern(float(value)))
    raise TypeError(f"Unsupported pattern: {value!r}")


def to_patterns(values: Iterable[PatternLike]) -> Tuple[CompositeTemporalPattern, ...]:
    return tuple(to_pattern(v) for v in values)
