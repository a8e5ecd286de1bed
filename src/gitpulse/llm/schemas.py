"""채점 응답 스키마

LLM 구조화 출력에 사용하는 Pydantic 모델입니다.
"""

from typing import List

from pydantic import BaseModel, Field


class SubScoreResponse(BaseModel):
    """세부 항목 점수"""
    name: str = Field(description="Name of the sub-dimension")
    score: float = Field(ge=0, le=100, description="Score from 0-100")
    weight: float = Field(ge=0, le=1, description="Weight of this sub-dimension")


class DimensionScoreResponse(BaseModel):
    """차원 점수"""
    score: float = Field(ge=0, le=100, description="Overall dimension score from 0-100")
    sub_scores: List[SubScoreResponse] = Field(
        default_factory=list, description="Individual sub-dimension scores"
    )
    reasoning: str = Field(description="Brief explanation for this dimension score")


class CommitScoringResponse(BaseModel):
    """단일 커밋 채점 응답"""
    code_quality: DimensionScoreResponse = Field(description="Code quality assessment")
    complexity_impact: DimensionScoreResponse = Field(description="Complexity and impact assessment")
    commit_discipline: DimensionScoreResponse = Field(description="Commit discipline assessment")
    collaboration: DimensionScoreResponse = Field(description="Collaboration signals assessment")
    overall_reasoning: str = Field(description="Overall summary of the commit quality")


class BatchCommitScoringResponse(CommitScoringResponse):
    """배치 내 개별 커밋 채점 응답"""
    commit_hash: str = Field(description="The commit hash being scored")


class BatchScoringResponse(BaseModel):
    """배치 채점 응답"""
    scores: List[BatchCommitScoringResponse] = Field(description="Scores for each commit in the batch")
