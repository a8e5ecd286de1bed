"""분석 파이프라인

추출 → 채점 → 집계 단계를 순서대로 실행하여 분석 리포트를 생성합니다.
"""

import dataclasses
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from gitpulse.cache.rubric_hash import compute_rubric_hash
from gitpulse.cache.score_cache import ScoreCache
from gitpulse.commit_collection.analysis_scope import AnalysisScope
from gitpulse.commit_collection.author_contribution import aggregate_by_author
from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.commit_collection.commit_extractor import CommitExtractor, GitCommandError
from gitpulse.commit_collection.commit_info import CommitInfo
from gitpulse.config.settings import GitPulseConfig
from gitpulse.constants import COST_PER_MILLION_TOKENS, ESTIMATED_TOKENS_PER_CALL
from gitpulse.llm.client_factory import create_llm_client
from gitpulse.llm.oracle import ScoringOracle
from gitpulse.llm.prompt_builder import load_all_rubrics
from gitpulse.llm.scoring_engine import LLMScoringEngine
from gitpulse.scoring.aggregator import aggregate_author_scores
from gitpulse.scoring.models import CommitScore
from .batch import estimate_oracle_calls, group_into_units
from .orchestrator import ScoringOrchestrator, UnitFailure, merge_with_cached
from .progress import AnalysisPhase, AnalysisProgress, ProgressCallback
from .report import (
    AnalysisReport,
    AuthorReport,
    CostEstimate,
    ReportMetadata,
    compute_summary,
    generate_highlights,
    generate_recommendations,
)

logger = logging.getLogger(__name__)


class AnalysisError(RuntimeError):
    """분석 단계 실패

    실패한 단계와 진행 정도를 함께 전달하여, 이미 캐시된 결과를 재실행에서 재사용할 수 있음을 알립니다.
    채점 단계는 단위별 실패 목록을, 추출 단계는 원인 예외(cause)를 가집니다.
    """

    def __init__(
        self,
        phase: AnalysisPhase,
        current: int,
        total: int,
        failures: Optional[List[UnitFailure]] = None,
        cause: Optional[BaseException] = None
    ):
        self.phase = phase
        self.current = current
        self.total = total
        self.failures = failures or []
        self.cause = cause

        if self.failures:
            details = '; '.join(f"{f.label}: {f.error_message}" for f in self.failures)
            message = (
                f"Analysis failed during {phase.value} ({current}/{total} units completed, "
                f"{len(self.failures)} failed): {details}"
            )
        else:
            message = f"Analysis failed during {phase.value} ({current}/{total} completed): {cause}"
        super().__init__(message)


class Analyzer:
    """저장소 분석기"""

    def __init__(
        self,
        config: GitPulseConfig,
        extractor: CommitExtractor,
        oracle: Optional[ScoringOracle],
        cache: Optional[ScoreCache],
        rubric_hash: str,
        no_cache: bool = False
    ):
        """
        Args:
            config: 전체 설정
            extractor: list_commits(scope)와 get_diff(commit)를 제공하는 커밋 추출기
            oracle: 채점 오라클 (비용 추정만 할 때는 None)
            cache: 점수 캐시 (비활성화 시 None)
            rubric_hash: 현재 루브릭 해시
            no_cache: True이면 캐시를 읽지 않음 (새 점수는 기록)
        """
        self.config = config
        self.extractor = extractor
        self.oracle = oracle
        self.cache = cache
        self.rubric_hash = rubric_hash
        self.no_cache = no_cache

    @classmethod
    def create(
        cls,
        repo_path: Union[str, Path],
        config: GitPulseConfig,
        no_cache: bool = False,
        with_oracle: bool = True
    ) -> 'Analyzer':
        """저장소 경로와 설정으로 분석기 생성"""
        rubrics = load_all_rubrics(repo_path)
        rubric_hash = compute_rubric_hash(rubrics)

        oracle = None
        if with_oracle:
            oracle = LLMScoringEngine(
                client=create_llm_client(config),
                weights=config.scoring.weights,
                rubrics=rubrics,
                rubric_hash=rubric_hash,
                max_tokens_per_diff=config.scoring.max_tokens_per_diff,
            )

        cache = None
        if config.cache.enabled:
            cache = ScoreCache(repo_path, config.cache.resolve_directory())

        return cls(
            config=config,
            extractor=CommitExtractor(repo_path),
            oracle=oracle,
            cache=cache,
            rubric_hash=rubric_hash,
            no_cache=no_cache,
        )

    @property
    def repository_path(self) -> str:
        return str(getattr(self.extractor, 'repo_path', ''))

    def estimate(self, scope: AnalysisScope) -> CostEstimate:
        """오라클 호출 없이 분석 비용 추정"""
        commits = self._list_commits(scope)
        diffs = self._extract_diffs(commits)

        cached = self._load_cached_scores(diffs)
        to_analyze = [d for d in diffs if d.hash not in cached]

        units = group_into_units(to_analyze, self.config.analysis)
        llm_calls = estimate_oracle_calls(units)
        estimated_tokens = llm_calls * ESTIMATED_TOKENS_PER_CALL

        return CostEstimate(
            total_commits=len(commits),
            cached_commits=len(cached),
            to_analyze=len(to_analyze),
            estimated_llm_calls=llm_calls,
            estimated_tokens=estimated_tokens,
            estimated_cost=estimated_tokens / 1_000_000 * COST_PER_MILLION_TOKENS,
        )

    def analyze(self, scope: AnalysisScope, on_progress: ProgressCallback = None) -> AnalysisReport:
        """전체 분석 실행

        Raises:
            AnalysisError: 커밋 추출 실패, 또는 하나 이상의 단위 채점이 실패한 경우
                (나머지 단위는 캐시에 기록된 상태)
        """
        if self.oracle is None:
            raise RuntimeError("Analyzer was created without a scoring oracle")

        def emit(phase: AnalysisPhase, current: int, total: int, message: str) -> None:
            if on_progress is not None:
                on_progress(AnalysisProgress(phase=phase, current=current, total=total, message=message))

        # 1단계: 커밋 추출
        emit(AnalysisPhase.EXTRACTING, 0, 0, 'Extracting commits...')
        commits = self._list_commits(scope)
        emit(AnalysisPhase.EXTRACTING, 0, len(commits), f'Found {len(commits)} commits')

        diffs = self._extract_diffs(
            commits,
            lambda i, commit: emit(
                AnalysisPhase.EXTRACTING, i, len(commits),
                f'Extracted diff for {commit.abbreviated_hash} {commit.subject}',
            ),
        )

        # 2단계: 채점
        weights = self.config.scoring.weights
        cached = self._load_cached_scores(diffs)
        to_score = [d for d in diffs if d.hash not in cached]
        logger.info(f"채점 대상: {len(to_score)}개 커밋 (캐시 적중 {len(cached)}개)")

        units = group_into_units(to_score, self.config.analysis)
        orchestrator = ScoringOrchestrator(
            oracle=self.oracle,
            cache=self.cache,
            rubric_hash=self.rubric_hash,
            max_concurrency=self.config.analysis.max_concurrency,
        )
        run = orchestrator.score_units(units, on_progress, weights)

        if run.has_failures:
            raise AnalysisError(
                phase=AnalysisPhase.SCORING,
                current=run.completed_units - len(run.failures),
                total=run.oracle_units,
                failures=run.failures,
            )

        merged = merge_with_cached(cached, run.scores)
        # 캐시된 점수도 현재 가중치로 종합 점수를 계산
        all_scores: Dict[str, CommitScore] = {
            h: dataclasses.replace(s, weights=weights) for h, s in merged.items()
        }
        commit_scores = [all_scores[d.hash] for d in diffs if d.hash in all_scores]

        # 3단계: 집계
        emit(AnalysisPhase.AGGREGATING, 0, 0, 'Aggregating scores...')
        authors = self._build_author_reports(diffs, all_scores)

        metadata = ReportMetadata(
            generated_at=datetime.now(),
            repository_path=self.repository_path,
            scope=scope,
            dimension_weights=weights,
            total_commits=len(commits),
            analyzed_commits=len(commit_scores),
            cached_commits=len(cached),
            skipped_commits=sum(1 for s in commit_scores if s.is_skipped),
            llm_provider=self.oracle.provider,
            llm_model=self.oracle.model,
            rubric_hash=self.rubric_hash,
            oracle_calls=run.oracle_calls,
            cache_write_failures=run.cache_write_failures,
        )
        summary = compute_summary(authors, [c.date for c in commits])
        emit(AnalysisPhase.AGGREGATING, len(authors), len(authors), f'Aggregated {len(authors)} authors')

        logger.info(
            f"분석 완료: {len(commits)}개 커밋, {len(authors)}명 작성자, 오라클 호출 {run.oracle_calls}회"
        )
        return AnalysisReport(
            metadata=metadata,
            summary=summary,
            authors=authors,
            commit_scores=commit_scores,
        )

    def _list_commits(self, scope: AnalysisScope) -> List[CommitInfo]:
        try:
            return self.extractor.list_commits(scope)
        except GitCommandError as e:
            logger.error(f"커밋 목록 조회 실패: {e}")
            raise AnalysisError(AnalysisPhase.EXTRACTING, 0, 0, cause=e) from e

    def _extract_diffs(
        self,
        commits: Sequence[CommitInfo],
        on_extracted: Optional[Callable[[int, CommitInfo], None]] = None
    ) -> List[CommitDiff]:
        """커밋별 diff 추출 (실패 시 추출 완료 개수와 함께 AnalysisError)"""
        diffs: List[CommitDiff] = []
        for i, commit in enumerate(commits, 1):
            try:
                diffs.append(self.extractor.get_diff(commit))
            except GitCommandError as e:
                logger.error(f"diff 추출 실패 ({commit.abbreviated_hash}): {e}")
                raise AnalysisError(AnalysisPhase.EXTRACTING, i - 1, len(commits), cause=e) from e
            if on_extracted is not None:
                on_extracted(i, commit)
        return diffs

    def _load_cached_scores(self, diffs: Sequence[CommitDiff]) -> Dict[str, CommitScore]:
        """이번 실행 대상 커밋의 유효한 캐시 점수"""
        if self.no_cache or self.cache is None:
            return {}

        wanted = {d.hash for d in diffs}
        return {
            commit_hash: score
            for commit_hash, score in self.cache.get_all(self.rubric_hash).items()
            if commit_hash in wanted
        }

    def _build_author_reports(
        self,
        diffs: Sequence[CommitDiff],
        scores: Dict[str, CommitScore]
    ) -> List[AuthorReport]:
        scoring = self.config.scoring
        reports = []

        for email, contribution in aggregate_by_author(diffs).items():
            hashes = set(contribution.commit_hashes)
            author_scores = [scores[h] for h in contribution.commit_hashes if h in scores]
            author_diffs = [d for d in diffs if d.hash in hashes]

            author_score = aggregate_author_scores(
                author_email=email,
                author_name=contribution.author.name,
                commit_scores=author_scores,
                commit_diffs=author_diffs,
                weights=scoring.weights,
                time_decay=scoring.time_decay,
                time_decay_lambda=scoring.time_decay_lambda,
            )
            reports.append(AuthorReport(
                score=author_score,
                contribution=contribution,
                highlights=generate_highlights(author_score),
                recommendations=generate_recommendations(author_score),
            ))

        reports.sort(key=lambda r: r.score.overall_score, reverse=True)
        return reports
