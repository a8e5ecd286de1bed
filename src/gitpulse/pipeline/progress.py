from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Any, Optional


class AnalysisPhase(Enum):
    """분석 단계"""
    EXTRACTING = "extracting"
    SCORING = "scoring"
    AGGREGATING = "aggregating"


@dataclass(frozen=True)
class AnalysisProgress:
    """진행 상황 이벤트"""
    phase: AnalysisPhase
    current: int
    total: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'phase': self.phase.value,
            'current': self.current,
            'total': self.total,
            'message': self.message,
        }


ProgressCallback = Optional[Callable[[AnalysisProgress], None]]
