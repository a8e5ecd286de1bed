"""점수 캐시 패키지"""

from .rubric_hash import compute_rubric_hash, compute_rubric_hash_from_dir
from .score_cache import CachedScore, CacheWriteError, ScoreCache, repo_cache_id

__all__ = [
    'compute_rubric_hash',
    'compute_rubric_hash_from_dir',
    'CachedScore',
    'CacheWriteError',
    'ScoreCache',
    'repo_cache_id',
]
