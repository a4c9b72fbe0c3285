"""
Classification result of one trial.
"""

from dataclasses import dataclass
from enum import Enum


class IdentificationState(Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    MISSED = "missed"


@dataclass(frozen=True)
class ClassificationResult:
    """Winning class index, or the MISSED / TIMEOUT sentinels.

    Legacy integer codes: class index on success, -1 missed, -2 timeout.
    """
    state: IdentificationState
    class_index: int

    @classmethod
    def success(cls, class_index: int) -> 'ClassificationResult':
        return cls(IdentificationState.SUCCESS, class_index)

    @classmethod
    def from_code(cls, code: int) -> 'ClassificationResult':
        if code == -2:
            return TIMEOUT
        if code < 0:
            return MISSED
        return cls.success(code)

    @property
    def code(self) -> int:
        return self.class_index

    @property
    def is_success(self) -> bool:
        return self.state is IdentificationState.SUCCESS

    @property
    def is_timeout(self) -> bool:
        return self.state is IdentificationState.TIMEOUT

    @property
    def is_missed(self) -> bool:
        return self.state is IdentificationState.MISSED

    def is_valid(self, option_count: int) -> bool:
        return self.is_success and 0 <= self.class_index < option_count

    def __str__(self) -> str:
        if self.is_success:
            return f"class {self.class_index}"
        return self.state.value


TIMEOUT = ClassificationResult(IdentificationState.TIMEOUT, -2)
MISSED = ClassificationResult(IdentificationState.MISSED, -1)
