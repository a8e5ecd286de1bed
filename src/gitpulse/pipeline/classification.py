"""커밋 분류 모듈

커밋 변경 내용과 설정된 임계값으로 채점 방식을 결정하는 순수 함수를 제공합니다.
"""

import re
from enum import Enum
from typing import List, Pattern

from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.config.settings import AnalysisSettings


class Classification(Enum):
    """커밋 분류

    - SKIPPED: 설정에 따라 건너뛰는 머지 커밋
    - MECHANICAL: 기계적 커밋 (머지, 리버트, 버전 범프, 의존성/릴리스 작업 등)
    - SMALL: 소규모 변경 (배치 채점 대상)
    - NORMAL: 일반 변경
    - LARGE: 대규모 변경 (분할/절단 대상)
    """

    SKIPPED = "skipped"
    MECHANICAL = "mechanical"
    SMALL = "small"
    NORMAL = "normal"
    LARGE = "large"

    @property
    def requires_oracle(self) -> bool:
        """오라클 호출이 필요한 분류인지 여부"""
        return self not in (Classification.SKIPPED, Classification.MECHANICAL)

    def __repr__(self) -> str:
        return f"Classification.{self.name}"


# 메시지 시작 위치에 고정된 기계적 커밋 패턴 (대소문자 무시)
MECHANICAL_PATTERNS: List[Pattern[str]] = [
    re.compile(r'merge (branch|pull request|remote)', re.IGNORECASE),
    re.compile(r'revert "', re.IGNORECASE),
    re.compile(r'bump version', re.IGNORECASE),
    re.compile(r'auto-?generated', re.IGNORECASE),
    re.compile(r'\[skip ci\]', re.IGNORECASE),
    re.compile(r'chore\(deps\)', re.IGNORECASE),
    re.compile(r'chore\(release\)', re.IGNORECASE),
]


def is_mechanical_commit(diff: CommitDiff) -> bool:
    """기계적 커밋 여부 (변경 파일이 없거나 메시지가 기계적 패턴과 일치)"""
    if not diff.files:
        return True

    message = diff.commit.message
    return any(pattern.match(message) for pattern in MECHANICAL_PATTERNS)


def classify_commit(diff: CommitDiff, settings: AnalysisSettings) -> Classification:
    """커밋 분류 (먼저 일치하는 규칙이 우선)

    Args:
        diff: 분류할 커밋 변경 내용
        settings: 임계값과 머지 건너뛰기 설정

    Returns:
        Classification: 다섯 분류 중 하나
    """
    if diff.commit.is_merge_commit and settings.skip_merge_commits:
        return Classification.SKIPPED

    if is_mechanical_commit(diff):
        return Classification.MECHANICAL

    effective_changes = diff.stats.effective_changes

    if effective_changes < settings.small_commit_threshold:
        return Classification.SMALL

    if effective_changes > settings.large_commit_threshold:
        return Classification.LARGE

    return Classification.NORMAL
