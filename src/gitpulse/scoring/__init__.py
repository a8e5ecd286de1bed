"""커밋 채점 및 작성자 집계 패키지"""

from .dimensions import (
    DIMENSIONS,
    DimensionDefinition,
    DimensionWeight,
    get_default_weights,
    weighted_combine,
)
from .models import (
    AuthorScore,
    CommitScore,
    DimensionScore,
    PeriodScore,
    ScoreFlag,
    ScoreFlagType,
    ScoreMetadata,
    SubScore,
    Trend,
    TrendDirection,
)
from .aggregator import aggregate_author_scores
from .normalizer import normalize_scores, clamp_score, round_score

__all__ = [
    'DIMENSIONS',
    'DimensionDefinition',
    'DimensionWeight',
    'get_default_weights',
    'weighted_combine',
    'AuthorScore',
    'CommitScore',
    'DimensionScore',
    'PeriodScore',
    'ScoreFlag',
    'ScoreFlagType',
    'ScoreMetadata',
    'SubScore',
    'Trend',
    'TrendDirection',
    'aggregate_author_scores',
    'normalize_scores',
    'clamp_score',
    'round_score',
]
