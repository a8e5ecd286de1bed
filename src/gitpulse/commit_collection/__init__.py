"""Commit collection module

Git 커밋 추출 및 커밋 변경 데이터 모델
"""

from .analysis_scope import AnalysisScope
from .author_contribution import AuthorContribution, aggregate_by_author
from .commit_diff import CommitDiff
from .commit_extractor import CommitExtractor, GitCommandError
from .commit_info import AuthorInfo, CommitInfo
from .diff_stats import DiffStats, is_generated_file
from .file_diff import FileDiff, FileStatus

__all__ = [
    'AnalysisScope',
    'AuthorContribution',
    'aggregate_by_author',
    'CommitDiff',
    'CommitExtractor',
    'GitCommandError',
    'AuthorInfo',
    'CommitInfo',
    'DiffStats',
    'is_generated_file',
    'FileDiff',
    'FileStatus',
]
