"""GitPulse 단위 테스트를 위한 pytest 설정"""

import hashlib
import itertools
import tempfile
import threading
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Generator, List, Optional, Sequence

import pytest

from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.commit_collection.commit_info import AuthorInfo, CommitInfo
from gitpulse.commit_collection.file_diff import FileDiff, FileStatus
from gitpulse.constants import DIMENSION_KEYS
from gitpulse.llm.oracle import ScoringOracle
from gitpulse.scoring.dimensions import get_default_weights
from gitpulse.scoring.models import CommitScore, DimensionScore, ScoreFlag, ScoreMetadata

BASE_DATE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

_hash_counter = itertools.count()


def pytest_configure(config):
    """pytest 설정을 구성합니다. 단위/통합 테스트용 마커들을 등록합니다."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def new_hash() -> str:
    """테스트마다 고유한 40자리 커밋 해시"""
    return hashlib.sha1(f"commit-{next(_hash_counter)}".encode()).hexdigest()


def build_score(
    commit_hash: str,
    score: float = 50.0,
    dimensions: Optional[dict] = None,
    flags: Optional[List[ScoreFlag]] = None,
) -> CommitScore:
    """모든 차원이 같은 점수(또는 지정한 차원 점수)인 CommitScore"""
    dims = dimensions or {key: score for key in DIMENSION_KEYS}
    return CommitScore(
        commit_hash=commit_hash,
        dimensions={key: DimensionScore(score=dims[key], reasoning='test') for key in DIMENSION_KEYS},
        flags=list(flags or []),
        reasoning='test score',
        metadata=ScoreMetadata(
            model='fake-model',
            provider='fake',
            tokens_used=100,
            timestamp=datetime(2024, 1, 1),
            rubric_hash='rubric',
        ),
        weights=get_default_weights(),
    )


class FakeOracle(ScoringOracle):
    """호출을 기록하는 테스트용 오라클"""

    def __init__(self, score: float = 70.0, fail_hashes: Sequence[str] = (), delay: float = 0.0):
        self.score = score
        self.fail_hashes = set(fail_hashes)
        self.delay = delay
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    @property
    def provider(self) -> str:
        return 'fake'

    @property
    def model(self) -> str:
        return 'fake-model'

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def score_one(self, diff: CommitDiff) -> CommitScore:
        self._record('one', [diff.hash])
        if diff.hash in self.fail_hashes:
            raise RuntimeError(f"oracle failure for {diff.hash[:7]}")
        return build_score(diff.hash, self.score)

    def score_batch(self, diffs: Sequence[CommitDiff]) -> List[CommitScore]:
        self._record('batch', [d.hash for d in diffs])
        if any(d.hash in self.fail_hashes for d in diffs):
            raise RuntimeError("oracle failure for batch")
        return [build_score(d.hash, self.score) for d in diffs]

    def _record(self, kind: str, hashes: List[str]) -> None:
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            self.calls.append((kind, hashes))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """테스트용 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_diff() -> Callable[..., CommitDiff]:
    """CommitDiff 생성 팩토리

    changes만큼의 추가 라인을 가진 파일 하나로 구성됩니다. files=[]를 주면 변경 파일이 없는 커밋이 됩니다.
    """
    def _make(
        changes: int = 20,
        message: str = 'feat: add feature',
        commit_hash: Optional[str] = None,
        parent_count: int = 1,
        files: Optional[List[FileDiff]] = None,
        author_name: str = 'Alice',
        author_email: str = 'alice@example.com',
        date: Optional[datetime] = None,
        days_offset: float = 0.0,
    ) -> CommitDiff:
        commit = CommitInfo(
            hash=commit_hash or new_hash(),
            author=AuthorInfo(name=author_name, email=author_email),
            date=date or BASE_DATE + timedelta(days=days_offset),
            message=message,
            parent_hashes=[new_hash() for _ in range(parent_count)],
        )
        if files is None:
            files = [FileDiff(
                path='src/app.py',
                status=FileStatus.MODIFIED,
                additions=changes,
                deletions=0,
                content='\n'.join(f'+line {i}' for i in range(changes)),
            )]
        return CommitDiff.create(commit, files)

    return _make


@pytest.fixture
def make_score() -> Callable[..., CommitScore]:
    """CommitScore 생성 팩토리"""
    return build_score


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def fake_oracle_factory() -> Callable[..., FakeOracle]:
    """실패 커밋, 지연 시간을 지정할 수 있는 FakeOracle 팩토리"""
    return FakeOracle
