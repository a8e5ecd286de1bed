"""분석 리포트 데이터 모델"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from gitpulse.commit_collection.analysis_scope import AnalysisScope
from gitpulse.commit_collection.author_contribution import AuthorContribution
from gitpulse.scoring.dimensions import DimensionWeight
from gitpulse.scoring.models import AuthorScore, CommitScore, TrendDirection
from gitpulse.scoring.normalizer import round_score


@dataclass
class CostEstimate:
    """분석 비용 추정치"""
    total_commits: int
    cached_commits: int
    to_analyze: int
    estimated_llm_calls: int
    estimated_tokens: int
    estimated_cost: float

    @property
    def cost_per_commit(self) -> float:
        return self.estimated_cost / self.to_analyze if self.to_analyze > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_commits': self.total_commits,
            'cached_commits': self.cached_commits,
            'to_analyze': self.to_analyze,
            'estimated_llm_calls': self.estimated_llm_calls,
            'estimated_tokens': self.estimated_tokens,
            'estimated_cost': self.estimated_cost,
            'cost_per_commit': self.cost_per_commit,
        }


@dataclass
class ReportMetadata:
    """리포트 메타데이터"""
    generated_at: datetime
    repository_path: str
    scope: AnalysisScope
    dimension_weights: DimensionWeight
    total_commits: int
    analyzed_commits: int
    cached_commits: int
    skipped_commits: int
    llm_provider: str
    llm_model: str
    rubric_hash: str = ''
    oracle_calls: int = 0
    cache_write_failures: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'generated_at': self.generated_at.isoformat(),
            'repository_path': self.repository_path,
            'scope': self.scope.to_dict(),
            'dimension_weights': self.dimension_weights.model_dump(),
            'total_commits': self.total_commits,
            'analyzed_commits': self.analyzed_commits,
            'cached_commits': self.cached_commits,
            'skipped_commits': self.skipped_commits,
            'llm_provider': self.llm_provider,
            'llm_model': self.llm_model,
            'rubric_hash': self.rubric_hash,
            'oracle_calls': self.oracle_calls,
            'cache_write_failures': self.cache_write_failures,
        }


@dataclass
class ReportSummary:
    """작성자 전체 요약"""
    average_score: float
    median_score: float
    top_performer: str
    total_authors: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'average_score': self.average_score,
            'median_score': self.median_score,
            'top_performer': self.top_performer,
            'total_authors': self.total_authors,
            'date_range': {
                'start': self.start_date.isoformat() if self.start_date else None,
                'end': self.end_date.isoformat() if self.end_date else None,
            },
        }


@dataclass
class AuthorReport:
    """작성자별 리포트 항목"""
    score: AuthorScore
    contribution: AuthorContribution
    highlights: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score.to_dict(),
            'contribution': self.contribution.to_dict(),
            'highlights': list(self.highlights),
            'recommendations': list(self.recommendations),
        }


@dataclass
class AnalysisReport:
    """전체 분석 리포트"""
    metadata: ReportMetadata
    summary: ReportSummary
    authors: List[AuthorReport]
    commit_scores: List[CommitScore]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metadata': self.metadata.to_dict(),
            'summary': self.summary.to_dict(),
            'authors': [a.to_dict() for a in self.authors],
            'commit_scores': [s.to_dict() for s in self.commit_scores],
        }

    def save_to_json(self, filepath: Union[str, Path]) -> None:
        """JSON 파일로 저장"""
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)


def generate_highlights(score: AuthorScore) -> List[str]:
    """작성자 점수에서 강점 문구 생성"""
    highlights = []

    if score.overall_score >= 80:
        highlights.append('Consistently high-quality contributions')
    if score.dimension_scores['code_quality'].score >= 85:
        highlights.append('Excellent code quality')
    if score.dimension_scores['commit_discipline'].score >= 85:
        highlights.append('Strong commit discipline')
    if score.trend.direction == TrendDirection.IMPROVING:
        highlights.append('Showing improvement over time')
    if score.scored_commit_count >= 20:
        highlights.append('High commit volume')

    return highlights


def generate_recommendations(score: AuthorScore) -> List[str]:
    """작성자 점수에서 개선 권고 문구 생성"""
    recommendations = []

    if score.dimension_scores['code_quality'].score < 60:
        recommendations.append('Focus on code readability and best practices')
    if score.dimension_scores['commit_discipline'].score < 60:
        recommendations.append('Improve commit message quality and commit size')
    if score.dimension_scores['collaboration'].score < 50:
        recommendations.append('Increase cross-module contributions and documentation')
    if score.trend.direction == TrendDirection.DECLINING:
        recommendations.append('Recent trend shows declining quality, consider review')

    return recommendations


def compute_summary(authors: Sequence[AuthorReport], commit_dates: Sequence[datetime]) -> ReportSummary:
    """작성자 점수 분포 요약 (authors는 점수 내림차순 정렬 상태)"""
    scores = sorted(a.score.overall_score for a in authors)
    average = sum(scores) / len(scores) if scores else 0.0
    median = scores[len(scores) // 2] if scores else 0.0
    dates = sorted(commit_dates)

    return ReportSummary(
        average_score=round_score(average),
        median_score=round_score(median),
        top_performer=authors[0].score.author_name if authors else 'N/A',
        total_authors=len(authors),
        start_date=dates[0] if dates else None,
        end_date=dates[-1] if dates else None,
    )
