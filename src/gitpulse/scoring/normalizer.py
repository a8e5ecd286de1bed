from typing import List

from .models import CommitScore


def normalize_scores(scores: List[CommitScore]) -> List[float]:
    """종합 점수를 0-100 범위로 min-max 정규화

    종합 점수는 차원 점수로부터 계산되는 값이므로 CommitScore를 수정하지 않고
    입력 순서대로 정규화된 값 목록을 반환합니다. 모든 점수가 같으면 원래 값을 그대로 둡니다.
    """
    if not scores:
        return []

    values = [s.overall_score for s in scores]
    low = min(values)
    high = max(values)
    spread = high - low

    if spread == 0:
        return values

    return [(value - low) / spread * 100 for value in values]


def clamp_score(score: float) -> float:
    """점수를 0-100 범위로 제한"""
    return max(0.0, min(100.0, score))


def round_score(score: float, decimals: int = 1) -> float:
    """소수점 자릿수 반올림"""
    return round(score, decimals)
