"""커밋 점수 캐시

커밋 해시 단위로 점수를 하나의 JSON 파일에 영속화합니다.
각 레코드는 기록 당시의 루브릭 해시를 함께 저장하며, 현재 루브릭 해시와 다르면
저장소에 남아 있더라도 존재하지 않는 것으로 취급합니다.
"""

import hashlib
import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, Union

from gitpulse.constants import CACHE_KEY_LENGTH
from gitpulse.scoring.models import CommitScore

logger = logging.getLogger(__name__)

DEFAULT_CACHE_ROOT = Path.home() / '.gitpulse' / 'cache'


class CacheWriteError(OSError):
    """캐시 레코드 기록 실패"""
    pass


@dataclass
class CachedScore:
    """캐시 레코드"""
    commit_hash: str
    score: CommitScore
    rubric_hash: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'commit_hash': self.commit_hash,
            'score': self.score.to_dict(),
            'rubric_hash': self.rubric_hash,
            'timestamp': self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CachedScore':
        """딕셔너리에서 CachedScore 객체 생성"""
        return cls(
            commit_hash=data['commit_hash'],
            score=CommitScore.from_dict(data['score']),
            rubric_hash=data['rubric_hash'],
            timestamp=datetime.fromisoformat(data['timestamp']),
        )


def repo_cache_id(repo_path: Union[str, Path]) -> str:
    """저장소 경로로부터 캐시 디렉토리 이름 생성 (<이름>-<경로 해시 12자리>)"""
    resolved = Path(repo_path).resolve()
    path_hash = hashlib.sha256(str(resolved).encode('utf-8')).hexdigest()[:12]
    return f"{resolved.name}-{path_hash}"


class ScoreCache:
    """저장소 단위 커밋 점수 캐시"""

    def __init__(self, repo_path: Union[str, Path], cache_root: Optional[Union[str, Path]] = None):
        """
        Args:
            repo_path: 분석 대상 저장소 경로
            cache_root: 캐시 루트 디렉토리 (기본값: ~/.gitpulse/cache)
        """
        root = Path(cache_root).expanduser() if cache_root else DEFAULT_CACHE_ROOT
        self.cache_dir = root / repo_cache_id(repo_path) / 'scores'

    def get(self, commit_hash: str, rubric_hash: str) -> Optional[CommitScore]:
        """캐시된 점수 조회

        레코드가 없거나, 손상되었거나, 다른 루브릭 해시로 기록된 경우 None을 반환합니다.
        """
        cached = self._read_record(self._get_cache_path(commit_hash))
        if cached is None:
            return None
        if cached.commit_hash != commit_hash or cached.rubric_hash != rubric_hash:
            return None
        return cached.score

    def has(self, commit_hash: str, rubric_hash: str) -> bool:
        return self.get(commit_hash, rubric_hash) is not None

    def set(self, commit_hash: str, score: CommitScore, rubric_hash: str) -> None:
        """점수 기록 (레코드 단위 원자적 교체)

        Raises:
            CacheWriteError: 디렉토리 생성 또는 파일 기록 실패
        """
        cached = CachedScore(
            commit_hash=commit_hash,
            score=score,
            rubric_hash=rubric_hash,
            timestamp=datetime.now(),
        )
        file_path = self._get_cache_path(commit_hash)

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(cached.to_dict(), f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, file_path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise CacheWriteError(f"Failed to write cache record for {commit_hash}: {e}") from e

    def get_all(self, rubric_hash: str) -> Dict[str, CommitScore]:
        """현재 루브릭 해시로 유효한 모든 캐시 점수 조회"""
        result: Dict[str, CommitScore] = {}

        if not self.cache_dir.exists():
            return result

        for file_path in sorted(self.cache_dir.glob('*.json')):
            cached = self._read_record(file_path)
            if cached is not None and cached.rubric_hash == rubric_hash:
                result[cached.commit_hash] = cached.score

        return result

    def clear(self) -> None:
        """저장소의 모든 캐시 레코드 삭제"""
        if self.cache_dir.exists():
            shutil.rmtree(self.cache_dir)
            logger.info(f"Cleared score cache: {self.cache_dir}")

    def _read_record(self, file_path: Path) -> Optional[CachedScore]:
        """레코드 파일 읽기 (없거나 손상된 경우 None)"""
        if not file_path.exists():
            return None

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return CachedScore.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.debug(f"손상된 캐시 레코드 건너뜀: {file_path.name} - {e}")
            return None

    def _get_cache_path(self, commit_hash: str) -> Path:
        return self.cache_dir / f"{commit_hash[:CACHE_KEY_LENGTH]}.json"
