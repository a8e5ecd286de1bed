"""작성자 점수 집계기

커밋 단위 점수를 작성자 단위의 안정적인 점수로 집계합니다.
규모 기반 가중 평균, 시간 감쇠, IQR 이상치 탐지, 추세 및 기간 분석을 포함합니다.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Optional, Sequence, Tuple

import numpy as np

from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.constants import (
    DIMENSION_KEYS,
    MIN_COMMITS_FOR_STATISTICS,
    OUTLIER_IQR_MULTIPLIER,
    TREND_SEGMENTS,
    TREND_THRESHOLD,
)
from .dimensions import DimensionWeight, weighted_combine
from .models import (
    AuthorScore,
    CommitScore,
    DimensionScore,
    PeriodScore,
    ScoreFlag,
    ScoreFlagType,
    Trend,
    TrendDirection,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


def aggregate_author_scores(
    author_email: str,
    author_name: str,
    commit_scores: Sequence[CommitScore],
    commit_diffs: Sequence[CommitDiff],
    weights: DimensionWeight,
    time_decay: bool = False,
    time_decay_lambda: float = 0.01,
    now: Optional[datetime] = None,
) -> AuthorScore:
    """작성자 한 명의 커밋 점수를 집계

    Args:
        author_email: 작성자 이메일
        author_name: 작성자 이름
        commit_scores: 작성자의 커밋 점수 목록
        commit_diffs: 작성자의 커밋 변경 목록 (가중치와 날짜 계산용)
        weights: 차원 가중치
        time_decay: 시간 감쇠 적용 여부
        time_decay_lambda: 일 단위 감쇠율
        now: 기준 시각 (기본값: 현재 UTC)

    Returns:
        AuthorScore: 집계된 작성자 점수
    """
    if not commit_scores:
        return create_empty_author_score(author_email, author_name)

    now = _as_aware(now) if now is not None else datetime.now(timezone.utc)
    diff_map = {d.hash: d for d in commit_diffs}

    commit_weights = compute_commit_weights(
        commit_scores, diff_map, time_decay, time_decay_lambda, now
    )
    dimension_scores = _compute_weighted_dimension_scores(commit_scores, commit_weights)

    # 집계된 차원 점수로부터 종합 점수를 다시 계산 (커밋별 종합 점수의 평균이 아님)
    overall_score = weighted_combine(
        {key: dimension_scores[key].score for key in DIMENSION_KEYS},
        weights,
    )

    skipped_count = sum(1 for s in commit_scores if s.is_skipped)

    author_score = AuthorScore(
        author_name=author_name,
        author_email=author_email,
        overall_score=overall_score,
        dimension_scores=dimension_scores,
        commit_count=len(commit_scores),
        scored_commit_count=len(commit_scores) - skipped_count,
        skipped_commit_count=skipped_count,
        trend=analyze_trend(commit_scores, commit_diffs, now),
        period_scores=compute_period_scores(commit_scores, commit_diffs, now),
        flags=detect_outliers(commit_scores),
    )

    logger.debug(
        f"작성자 집계 완료: {author_email} "
        f"({len(commit_scores)}개 커밋, 종합 {overall_score:.1f}점, 추세 {author_score.trend.direction.value})"
    )
    return author_score


def compute_commit_weights(
    commit_scores: Sequence[CommitScore],
    diff_map: Dict[str, CommitDiff],
    time_decay: bool,
    time_decay_lambda: float,
    now: datetime,
) -> np.ndarray:
    """커밋별 가중치 계산

    규모 가중치 log2(1 + effective_changes)에 시간 감쇠 exp(-λ·경과일)를 곱합니다.
    변경 정보가 없는 커밋은 effective_changes=1로 간주합니다.
    """
    effective_changes = np.array([
        diff_map[s.commit_hash].stats.effective_changes if s.commit_hash in diff_map else 1
        for s in commit_scores
    ], dtype=float)
    size_weights = np.log2(1.0 + effective_changes)

    if not time_decay:
        return size_weights

    days_since = np.array([
        (now - _as_aware(diff_map[s.commit_hash].commit.date)).total_seconds() / SECONDS_PER_DAY
        if s.commit_hash in diff_map else 0.0
        for s in commit_scores
    ], dtype=float)
    time_weights = np.exp(-time_decay_lambda * days_since)
    return size_weights * time_weights


def _compute_weighted_dimension_scores(
    commit_scores: Sequence[CommitScore],
    commit_weights: np.ndarray,
) -> Dict[str, DimensionScore]:
    """차원별 가중 평균 점수 계산"""
    total_weight = float(np.sum(commit_weights))
    result: Dict[str, DimensionScore] = {}

    for key in DIMENSION_KEYS:
        values = np.array([s.dimensions[key].score for s in commit_scores], dtype=float)
        score = float(np.dot(values, commit_weights) / total_weight) if total_weight > 0 else 0.0
        result[key] = DimensionScore(
            score=score,
            sub_scores=[],
            reasoning=f"Aggregated from {len(commit_scores)} commits",
        )

    return result


def detect_outliers(commit_scores: Sequence[CommitScore]) -> List[ScoreFlag]:
    """IQR 방식 이상치 탐지

    커밋이 4개 미만이면 플래그를 만들지 않습니다.
    사분위수는 정렬된 위치(floor(n·0.25), floor(n·0.75))로 결정합니다.
    """
    flags: List[ScoreFlag] = []
    if len(commit_scores) < MIN_COMMITS_FOR_STATISTICS:
        return flags

    overall_scores = sorted(s.overall_score for s in commit_scores)
    n = len(overall_scores)
    q1 = overall_scores[int(n * 0.25)]
    q3 = overall_scores[int(n * 0.75)]
    iqr = q3 - q1
    lower_bound = q1 - OUTLIER_IQR_MULTIPLIER * iqr
    upper_bound = q3 + OUTLIER_IQR_MULTIPLIER * iqr

    for commit_score in commit_scores:
        score = commit_score.overall_score
        if score < lower_bound:
            flags.append(ScoreFlag(
                type=ScoreFlagType.OUTLIER_LOW,
                message=(f"Commit {commit_score.short_hash} scored {score:.1f} "
                         f"(below IQR lower bound {lower_bound:.1f})"),
                commit_hash=commit_score.short_hash,
                score=score,
                bound=lower_bound,
            ))
        elif score > upper_bound:
            flags.append(ScoreFlag(
                type=ScoreFlagType.OUTLIER_HIGH,
                message=(f"Commit {commit_score.short_hash} scored {score:.1f} "
                         f"(above IQR upper bound {upper_bound:.1f})"),
                commit_hash=commit_score.short_hash,
                score=score,
                bound=upper_bound,
            ))

    return flags


def analyze_trend(
    commit_scores: Sequence[CommitScore],
    commit_diffs: Sequence[CommitDiff],
    now: Optional[datetime] = None,
) -> Trend:
    """시간순 4구간 평균으로 추세 분석

    커밋이 4개 미만이면 stable 방향과 입력 순서 그대로의 종합 점수를 반환합니다.
    """
    if len(commit_scores) < MIN_COMMITS_FOR_STATISTICS:
        return Trend(
            direction=TrendDirection.STABLE,
            sparkline=[s.overall_score for s in commit_scores],
        )

    ordered = [score for _, score in _sort_chronologically(commit_scores, commit_diffs, now)]
    segment_size = len(ordered) // TREND_SEGMENTS

    segments: List[float] = []
    for i in range(TREND_SEGMENTS):
        start = i * segment_size
        end = len(ordered) if i == TREND_SEGMENTS - 1 else (i + 1) * segment_size
        segments.append(float(np.mean([s.overall_score for s in ordered[start:end]])))

    first_half = (segments[0] + segments[1]) / 2
    second_half = (segments[2] + segments[3]) / 2
    difference = second_half - first_half

    if difference > TREND_THRESHOLD:
        direction = TrendDirection.IMPROVING
    elif difference < -TREND_THRESHOLD:
        direction = TrendDirection.DECLINING
    else:
        direction = TrendDirection.STABLE

    return Trend(direction=direction, sparkline=segments)


def compute_period_scores(
    commit_scores: Sequence[CommitScore],
    commit_diffs: Sequence[CommitDiff],
    now: Optional[datetime] = None,
) -> List[PeriodScore]:
    """첫 커밋과 마지막 커밋 사이 기간을 4개의 동일 길이 달력 구간으로 나누어 점수 계산

    마지막 구간만 상한을 포함하고 나머지는 상한을 제외하므로
    경계에 놓인 커밋이 중복되거나 누락되지 않습니다.
    """
    if len(commit_scores) < MIN_COMMITS_FOR_STATISTICS:
        return []

    dated = _sort_chronologically(commit_scores, commit_diffs, now)
    start_date = dated[0][0]
    end_date = dated[-1][0]
    period_length = (end_date - start_date) / TREND_SEGMENTS

    periods: List[PeriodScore] = []
    for i in range(TREND_SEGMENTS):
        is_last = i == TREND_SEGMENTS - 1
        period_start = start_date + period_length * i
        period_end = end_date if is_last else start_date + period_length * (i + 1)

        members = [
            score for date, score in dated
            if date >= period_start and (date <= period_end if is_last else date < period_end)
        ]
        average = float(np.mean([s.overall_score for s in members])) if members else 0.0

        periods.append(PeriodScore(
            period_index=i,
            start_date=period_start,
            end_date=period_end,
            average_score=average,
            commit_count=len(members),
        ))

    return periods


def create_empty_author_score(author_email: str, author_name: str) -> AuthorScore:
    """채점된 커밋이 없는 작성자의 0점 결과"""
    return AuthorScore(
        author_name=author_name,
        author_email=author_email,
        overall_score=0.0,
        dimension_scores={key: DimensionScore.zero('No commits scored') for key in DIMENSION_KEYS},
        commit_count=0,
        scored_commit_count=0,
        skipped_commit_count=0,
        trend=Trend(direction=TrendDirection.STABLE, sparkline=[]),
        period_scores=[],
        flags=[],
    )


def _sort_chronologically(
    commit_scores: Sequence[CommitScore],
    commit_diffs: Sequence[CommitDiff],
    now: Optional[datetime],
) -> List[Tuple[datetime, CommitScore]]:
    """커밋 날짜 기준 정렬 (날짜를 알 수 없는 커밋은 기준 시각으로 간주)"""
    fallback = _as_aware(now) if now is not None else datetime.now(timezone.utc)
    diff_map = {d.hash: d for d in commit_diffs}
    dated = [
        (_as_aware(diff_map[s.commit_hash].commit.date) if s.commit_hash in diff_map else fallback, s)
        for s in commit_scores
    ]
    return sorted(dated, key=lambda item: item[0])


def _as_aware(value: datetime) -> datetime:
    """시간대 정보가 없는 datetime은 UTC로 간주"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
