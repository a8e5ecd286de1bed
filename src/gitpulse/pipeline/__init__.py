"""채점 파이프라인 모듈

커밋 분류, 작업 단위 구성, 동시 채점 오케스트레이션, 분석 실행
"""

from .analyzer import AnalysisError, Analyzer
from .batch import WorkUnit, WorkUnitKind, estimate_oracle_calls, group_into_units
from .classification import Classification, classify_commit, is_mechanical_commit
from .orchestrator import (
    ScoringOrchestrator,
    ScoringRunResult,
    UnitFailure,
    build_skipped_score,
    merge_with_cached,
)
from .progress import AnalysisPhase, AnalysisProgress
from .report import AnalysisReport, AuthorReport, CostEstimate, ReportMetadata, ReportSummary
from .task_outcome import TaskOutcome
from .worker_pool import BoundedWorkerPool

__all__ = [
    'AnalysisError',
    'Analyzer',
    'WorkUnit',
    'WorkUnitKind',
    'estimate_oracle_calls',
    'group_into_units',
    'Classification',
    'classify_commit',
    'is_mechanical_commit',
    'ScoringOrchestrator',
    'ScoringRunResult',
    'UnitFailure',
    'build_skipped_score',
    'merge_with_cached',
    'AnalysisPhase',
    'AnalysisProgress',
    'AnalysisReport',
    'AuthorReport',
    'CostEstimate',
    'ReportMetadata',
    'ReportSummary',
    'TaskOutcome',
    'BoundedWorkerPool',
]
