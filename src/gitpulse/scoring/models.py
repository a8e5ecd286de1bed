"""채점 결과 데이터 모델

커밋 단위 점수(CommitScore)와 작성자 단위 점수(AuthorScore) 및 관련 값 객체를 정의합니다.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional

from gitpulse.constants import DIMENSION_KEYS
from .dimensions import DimensionWeight, get_default_weights, weighted_combine


class ScoreFlagType(Enum):
    """점수 플래그 종류"""
    OUTLIER_HIGH = "outlier-high"
    OUTLIER_LOW = "outlier-low"
    SKIPPED = "skipped"
    BATCHED = "batched"
    TRUNCATED = "truncated"


class TrendDirection(Enum):
    """품질 추세 방향"""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


@dataclass
class SubScore:
    """차원 내 세부 점수"""
    name: str
    score: float
    weight: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'score': self.score, 'weight': self.weight}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SubScore':
        return cls(name=data['name'], score=float(data['score']), weight=float(data.get('weight', 0.0)))


@dataclass
class DimensionScore:
    """단일 차원 점수 (0-100)"""
    score: float
    sub_scores: List[SubScore] = field(default_factory=list)
    reasoning: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'sub_scores': [s.to_dict() for s in self.sub_scores],
            'reasoning': self.reasoning,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DimensionScore':
        return cls(
            score=float(data['score']),
            sub_scores=[SubScore.from_dict(s) for s in data.get('sub_scores', [])],
            reasoning=data.get('reasoning', ''),
        )

    @classmethod
    def zero(cls, reasoning: str) -> 'DimensionScore':
        """0점 차원 점수 생성"""
        return cls(score=0.0, sub_scores=[], reasoning=reasoning)


@dataclass
class ScoreFlag:
    """점수에 부착되는 플래그

    이상치 플래그는 커밋 축약 해시, 점수, 위반한 경계값을 함께 가집니다.
    """
    type: ScoreFlagType
    message: str
    commit_hash: Optional[str] = None
    score: Optional[float] = None
    bound: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'type': self.type.value, 'message': self.message}
        if self.commit_hash is not None:
            data['commit_hash'] = self.commit_hash
        if self.score is not None:
            data['score'] = self.score
        if self.bound is not None:
            data['bound'] = self.bound
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoreFlag':
        return cls(
            type=ScoreFlagType(data['type']),
            message=data['message'],
            commit_hash=data.get('commit_hash'),
            score=data.get('score'),
            bound=data.get('bound'),
        )


@dataclass
class ScoreMetadata:
    """채점 메타데이터 (오라클 정보, 토큰 비용, 루브릭 해시)"""
    model: str
    provider: str
    tokens_used: int
    timestamp: datetime
    rubric_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'model': self.model,
            'provider': self.provider,
            'tokens_used': self.tokens_used,
            'timestamp': self.timestamp.isoformat(),
            'rubric_hash': self.rubric_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoreMetadata':
        return cls(
            model=data['model'],
            provider=data['provider'],
            tokens_used=int(data['tokens_used']),
            timestamp=datetime.fromisoformat(data['timestamp']),
            rubric_hash=data['rubric_hash'],
        )


@dataclass
class CommitScore:
    """커밋 단위 채점 결과

    overall_score는 저장하지 않고 항상 자신의 네 차원 점수와 가중치로부터 계산합니다.
    """
    commit_hash: str
    dimensions: Dict[str, DimensionScore]
    flags: List[ScoreFlag] = field(default_factory=list)
    reasoning: str = ''
    metadata: Optional[ScoreMetadata] = None
    weights: DimensionWeight = field(default_factory=get_default_weights)

    def __post_init__(self):
        """차원 구성 검증"""
        missing = [key for key in DIMENSION_KEYS if key not in self.dimensions]
        if missing:
            raise ValueError(f"CommitScore {self.commit_hash} is missing dimensions: {missing}")

    @property
    def overall_score(self) -> float:
        return weighted_combine(
            {key: self.dimensions[key].score for key in DIMENSION_KEYS},
            self.weights,
        )

    @property
    def short_hash(self) -> str:
        return self.commit_hash[:7]

    def has_flag(self, flag_type: ScoreFlagType) -> bool:
        return any(f.type == flag_type for f in self.flags)

    @property
    def is_skipped(self) -> bool:
        return self.has_flag(ScoreFlagType.SKIPPED)

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'commit_hash': self.commit_hash,
            'dimensions': {key: self.dimensions[key].to_dict() for key in DIMENSION_KEYS},
            'overall_score': self.overall_score,
            'flags': [f.to_dict() for f in self.flags],
            'reasoning': self.reasoning,
            'metadata': self.metadata.to_dict() if self.metadata else None,
            'weights': self.weights.model_dump(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommitScore':
        """딕셔너리에서 CommitScore 객체 생성 (overall_score는 재계산)"""
        metadata = data.get('metadata')
        weights = data.get('weights')
        return cls(
            commit_hash=data['commit_hash'],
            dimensions={
                key: DimensionScore.from_dict(data['dimensions'][key])
                for key in DIMENSION_KEYS
            },
            flags=[ScoreFlag.from_dict(f) for f in data.get('flags', [])],
            reasoning=data.get('reasoning', ''),
            metadata=ScoreMetadata.from_dict(metadata) if metadata else None,
            weights=DimensionWeight(**weights) if weights else get_default_weights(),
        )


@dataclass
class Trend:
    """품질 추세 (방향 + 최대 4개 구간 평균)"""
    direction: TrendDirection
    sparkline: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'direction': self.direction.value, 'sparkline': list(self.sparkline)}


@dataclass
class PeriodScore:
    """달력 기간 구간별 점수"""
    period_index: int
    start_date: datetime
    end_date: datetime
    average_score: float
    commit_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'period_index': self.period_index,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'average_score': self.average_score,
            'commit_count': self.commit_count,
        }


@dataclass
class AuthorScore:
    """작성자 단위 집계 점수"""
    author_name: str
    author_email: str
    overall_score: float
    dimension_scores: Dict[str, DimensionScore]
    commit_count: int
    scored_commit_count: int
    skipped_commit_count: int
    trend: Trend
    period_scores: List[PeriodScore] = field(default_factory=list)
    flags: List[ScoreFlag] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'author_name': self.author_name,
            'author_email': self.author_email,
            'overall_score': self.overall_score,
            'dimension_scores': {key: self.dimension_scores[key].to_dict() for key in DIMENSION_KEYS},
            'commit_count': self.commit_count,
            'scored_commit_count': self.scored_commit_count,
            'skipped_commit_count': self.skipped_commit_count,
            'trend': self.trend.to_dict(),
            'period_scores': [p.to_dict() for p in self.period_scores],
            'flags': [f.to_dict() for f in self.flags],
        }
