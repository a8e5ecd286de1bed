"""채점 오케스트레이터

작업 단위 목록을 받아 오라클이 필요 없는 단위는 합성 점수로 처리하고,
나머지는 제한된 동시성으로 오라클에 보내 점수를 만들고 캐시에 기록합니다.
한 단위의 오라클 실패는 해당 단위에만 기록되며, 다른 단위의 채점과 캐시 기록은 계속됩니다.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence

from gitpulse.cache.score_cache import CacheWriteError, ScoreCache
from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.constants import DIMENSION_KEYS
from gitpulse.llm.oracle import OracleResponseError, ScoringOracle
from gitpulse.scoring.dimensions import DimensionWeight, get_default_weights
from gitpulse.scoring.models import (
    CommitScore,
    DimensionScore,
    ScoreFlag,
    ScoreFlagType,
    ScoreMetadata,
)
from .batch import WorkUnit, WorkUnitKind
from .classification import Classification
from .progress import AnalysisPhase, AnalysisProgress, ProgressCallback
from .task_outcome import TaskOutcome
from .worker_pool import BoundedWorkerPool

logger = logging.getLogger(__name__)


@dataclass
class UnitFailure:
    """오라클 채점에 실패한 작업 단위"""
    label: str
    commit_hashes: List[str]
    error: BaseException

    @property
    def error_message(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"

    def to_dict(self) -> Dict[str, object]:
        return {
            'label': self.label,
            'commit_hashes': list(self.commit_hashes),
            'error': self.error_message,
        }


@dataclass
class ScoringRunResult:
    """채점 단계 실행 결과"""
    scores: Dict[str, CommitScore] = field(default_factory=dict)
    failures: List[UnitFailure] = field(default_factory=list)
    oracle_calls: int = 0
    oracle_units: int = 0
    completed_units: int = 0
    cache_write_failures: int = 0

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


@dataclass
class _UnitTally:
    """작업 하나가 자기 자신만 기록하는 집계값"""
    oracle_calls: int = 0
    cache_write_failures: int = 0


def build_skipped_score(
    diff: CommitDiff,
    classification: Classification,
    weights: Optional[DimensionWeight] = None
) -> CommitScore:
    """오라클 없이 0점 합성 점수 생성"""
    return CommitScore(
        commit_hash=diff.hash,
        dimensions={key: DimensionScore.zero('Skipped') for key in DIMENSION_KEYS},
        flags=[ScoreFlag(type=ScoreFlagType.SKIPPED, message=f"Classified as {classification.value}")],
        reasoning=f"Commit classified as {classification.value}, not scored",
        metadata=ScoreMetadata(
            model='none',
            provider='none',
            tokens_used=0,
            timestamp=datetime.now(),
            rubric_hash='',
        ),
        weights=weights if weights is not None else get_default_weights(),
    )


def merge_with_cached(
    cached: Mapping[str, CommitScore],
    fresh: Mapping[str, CommitScore]
) -> Dict[str, CommitScore]:
    """캐시 점수와 새 점수 병합 (커밋당 하나, 새 점수 우선)"""
    merged: Dict[str, CommitScore] = dict(cached)
    merged.update(fresh)
    return merged


class ScoringOrchestrator:
    """작업 단위 채점 실행기"""

    def __init__(
        self,
        oracle: ScoringOracle,
        cache: Optional[ScoreCache],
        rubric_hash: str,
        max_concurrency: int = 3
    ):
        """
        Args:
            oracle: 채점 오라클
            cache: 점수 캐시 (None이면 기록하지 않음)
            rubric_hash: 캐시 기록에 사용할 현재 루브릭 해시
            max_concurrency: 동시에 실행할 최대 오라클 작업 수
        """
        self.oracle = oracle
        self.cache = cache
        self.rubric_hash = rubric_hash
        self.pool = BoundedWorkerPool(max_concurrency)

    def score_units(
        self,
        units: Sequence[WorkUnit],
        on_progress: ProgressCallback = None,
        weights: Optional[DimensionWeight] = None
    ) -> ScoringRunResult:
        """작업 단위 목록 채점

        Args:
            units: 채점할 작업 단위 목록
            on_progress: 오라클 단위가 끝날 때마다 호출되는 진행 상황 콜백
            weights: 합성 점수에 기록할 차원 가중치

        Returns:
            ScoringRunResult: 커밋 해시별 점수와 실패 목록
        """
        result = ScoringRunResult()

        oracle_units: List[WorkUnit] = []
        for unit in units:
            if unit.requires_oracle:
                oracle_units.append(unit)
                continue
            for diff in unit.diffs:
                result.scores[diff.hash] = build_skipped_score(diff, unit.classification, weights)

        result.oracle_units = len(oracle_units)
        if not oracle_units:
            return result

        logger.info(f"오라클 채점 시작: {len(oracle_units)}개 단위 (동시 실행 최대 {self.pool.max_workers})")

        tallies = [_UnitTally() for _ in oracle_units]
        tasks = [
            self._make_task(unit, tally)
            for unit, tally in zip(oracle_units, tallies)
        ]

        total = len(oracle_units)

        def on_complete(outcome: TaskOutcome) -> None:
            unit = oracle_units[outcome.index]
            result.completed_units += 1

            if outcome.success:
                for score in outcome.data:
                    result.scores[score.commit_hash] = score
                message = f"Scored {unit.label}"
            else:
                result.failures.append(UnitFailure(
                    label=unit.label,
                    commit_hashes=unit.commit_hashes,
                    error=outcome.error,
                ))
                logger.error(f"단위 채점 실패: {unit.label} - {outcome.error_message}")
                message = f"Failed {unit.label}"

            if on_progress is not None:
                on_progress(AnalysisProgress(
                    phase=AnalysisPhase.SCORING,
                    current=result.completed_units,
                    total=total,
                    message=message,
                ))

        self.pool.run(tasks, on_complete)

        result.oracle_calls = sum(t.oracle_calls for t in tallies)
        result.cache_write_failures = sum(t.cache_write_failures for t in tallies)

        logger.info(
            f"오라클 채점 완료: {total - len(result.failures)}/{total} 단위 성공, "
            f"{result.oracle_calls}회 호출"
        )
        return result

    def _make_task(self, unit: WorkUnit, tally: _UnitTally):
        def task() -> List[CommitScore]:
            scores = self._score_unit(unit, tally)
            self._write_to_cache(scores, tally)
            return scores
        return task

    def _score_unit(self, unit: WorkUnit, tally: _UnitTally) -> List[CommitScore]:
        """단위 하나를 오라클로 채점 (배치는 한 번, 그 외는 커밋마다 한 번)"""
        if unit.kind == WorkUnitKind.BATCH and len(unit.diffs) > 1:
            tally.oracle_calls += 1
            scores = self.oracle.score_batch(unit.diffs)

            returned = {s.commit_hash for s in scores}
            missing = [h for h in unit.commit_hashes if h not in returned]
            if missing or len(scores) != len(unit.diffs):
                raise OracleResponseError(
                    f"Batch result does not match members of {unit.label}: missing {missing}"
                )
            return scores

        scores = []
        for diff in unit.diffs:
            tally.oracle_calls += 1
            scores.append(self.oracle.score_one(diff))
        return scores

    def _write_to_cache(self, scores: Sequence[CommitScore], tally: _UnitTally) -> None:
        if self.cache is None:
            return

        for score in scores:
            try:
                self.cache.set(score.commit_hash, score, self.rubric_hash)
            except CacheWriteError as e:
                tally.cache_write_failures += 1
                logger.error(f"캐시 기록 실패: {score.short_hash} - {e}")
