"""작업 실행 결과

TaskOutcome 클래스 정의입니다.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class TaskOutcome:
    """작업 실행 결과"""
    success: bool
    data: Any
    index: int
    error: Optional[BaseException] = None
    execution_time: float = 0.0

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return f"{type(self.error).__name__}: {self.error}"
