"""
채점 파이프라인 상수 정의 모듈

이 모듈은 차원 가중치 기본값과 파이프라인 전반에서 공유하는 임계값을 중앙에서 관리합니다.
"""

from typing import Dict, Tuple


# 평가 차원 키 (고정 순서)
DIMENSION_KEYS: Tuple[str, ...] = (
    'code_quality',
    'complexity_impact',
    'commit_discipline',
    'collaboration',
)

# 차원 가중치 기본값
DEFAULT_DIMENSION_WEIGHTS: Dict[str, float] = {
    'code_quality': 0.30,
    'complexity_impact': 0.25,
    'commit_discipline': 0.25,
    'collaboration': 0.20,
}

# 소규모 커밋 배치 크기
BATCH_SIZE = 5

# 토큰 예산을 문자 수로 환산하는 근사 비율
APPROX_CHARS_PER_TOKEN = 4
TRUNCATION_MARKER = '\n\n[... diff truncated due to size ...]'

# 비용 추정
ESTIMATED_TOKENS_PER_CALL = 8500
COST_PER_MILLION_TOKENS = 2.5

# 통계 분석 (이상치, 추세, 기간)
MIN_COMMITS_FOR_STATISTICS = 4
TREND_SEGMENTS = 4
TREND_THRESHOLD = 5.0
OUTLIER_IQR_MULTIPLIER = 1.5

# 캐시 키 길이 (커밋 해시 접두사)
CACHE_KEY_LENGTH = 12
RUBRIC_HASH_LENGTH = 16
