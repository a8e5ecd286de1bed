"""평가 차원 정의

네 가지 고정 평가 축과 가중 결합 공식을 제공합니다.
가중치 합이 1일 필요는 없으며, 결합 시 항상 사용된 가중치 합으로 나눕니다.
"""

from dataclasses import dataclass
from typing import List, Mapping

from pydantic import BaseModel, Field

from gitpulse.constants import DEFAULT_DIMENSION_WEIGHTS, DIMENSION_KEYS


class DimensionWeight(BaseModel):
    """차원별 가중치 (음수 불가)"""
    code_quality: float = Field(default=DEFAULT_DIMENSION_WEIGHTS['code_quality'], ge=0.0)
    complexity_impact: float = Field(default=DEFAULT_DIMENSION_WEIGHTS['complexity_impact'], ge=0.0)
    commit_discipline: float = Field(default=DEFAULT_DIMENSION_WEIGHTS['commit_discipline'], ge=0.0)
    collaboration: float = Field(default=DEFAULT_DIMENSION_WEIGHTS['collaboration'], ge=0.0)

    @property
    def total(self) -> float:
        return sum(getattr(self, key) for key in DIMENSION_KEYS)


@dataclass(frozen=True)
class DimensionDefinition:
    """평가 차원 메타데이터"""
    key: str
    name: str
    description: str
    default_weight: float


DIMENSIONS: List[DimensionDefinition] = [
    DimensionDefinition(
        key='code_quality',
        name='Code Quality',
        description='Readability, maintainability, best practices, and consistency',
        default_weight=DEFAULT_DIMENSION_WEIGHTS['code_quality'],
    ),
    DimensionDefinition(
        key='complexity_impact',
        name='Complexity & Impact',
        description='Scope, technical complexity, business impact, and test coverage',
        default_weight=DEFAULT_DIMENSION_WEIGHTS['complexity_impact'],
    ),
    DimensionDefinition(
        key='commit_discipline',
        name='Commit Discipline',
        description='Message quality, commit size, atomicity, and frequency',
        default_weight=DEFAULT_DIMENSION_WEIGHTS['commit_discipline'],
    ),
    DimensionDefinition(
        key='collaboration',
        name='Collaboration',
        description='Cross-module contributions, documentation, and mentoring',
        default_weight=DEFAULT_DIMENSION_WEIGHTS['collaboration'],
    ),
]


def get_default_weights() -> DimensionWeight:
    """기본 차원 가중치 반환"""
    return DimensionWeight(**DEFAULT_DIMENSION_WEIGHTS)


def weighted_combine(scores: Mapping[str, float], weights: DimensionWeight) -> float:
    """차원별 점수를 가중 평균으로 결합

    Args:
        scores: 차원 키 → 점수 (0-100)
        weights: 차원 가중치

    Returns:
        float: Σ(score·weight) / Σweight, 가중치 합이 0이면 0.0
    """
    total_weight = 0.0
    weighted_sum = 0.0
    for key in DIMENSION_KEYS:
        weight = getattr(weights, key)
        total_weight += weight
        weighted_sum += scores[key] * weight

    if total_weight <= 0:
        return 0.0
    return weighted_sum / total_weight
