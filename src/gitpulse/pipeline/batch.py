"""작업 단위 구성 모듈

분류된 커밋을 오라클 호출 단위(WorkUnit)로 묶어 호출 횟수를 줄입니다.
모든 입력 커밋은 정확히 하나의 작업 단위에 속합니다.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.config.settings import AnalysisSettings
from gitpulse.constants import BATCH_SIZE
from .classification import Classification, classify_commit

logger = logging.getLogger(__name__)

# 분할 단위의 호출 수 추정에 사용하는 호출당 파일 수
FILES_PER_SPLIT_CALL = 5


class WorkUnitKind(Enum):
    """작업 단위 종류"""
    SINGLE = "single"
    BATCH = "batch"
    SPLIT = "split"


@dataclass(frozen=True)
class WorkUnit:
    """오라클 호출 단위 (하나 이상의 커밋)"""
    kind: WorkUnitKind
    diffs: List[CommitDiff]
    classification: Classification

    def __post_init__(self):
        if not self.diffs:
            raise ValueError("WorkUnit requires at least one diff")

    @property
    def commit_hashes(self) -> List[str]:
        return [d.hash for d in self.diffs]

    @property
    def requires_oracle(self) -> bool:
        return self.classification.requires_oracle

    @property
    def label(self) -> str:
        """진행 상황 표시용 이름"""
        if len(self.diffs) == 1:
            return self.diffs[0].commit.abbreviated_hash
        return f"batch of {len(self.diffs)} ({self.diffs[0].commit.abbreviated_hash}..)"


def group_into_units(diffs: Sequence[CommitDiff], settings: AnalysisSettings) -> List[WorkUnit]:
    """커밋 목록을 작업 단위로 그룹화

    소규모 커밋은 BATCH_SIZE개가 모이면 하나의 배치로 내보내고,
    입력이 끝난 뒤 남은 소규모 커밋은 1개면 NORMAL 단일 단위, 2개 이상이면 배치가 됩니다.

    Args:
        diffs: 입력 순서의 커밋 변경 목록
        settings: 분류 설정

    Returns:
        List[WorkUnit]: 입력을 빠짐없이, 중복 없이 분할한 작업 단위 목록
    """
    units: List[WorkUnit] = []
    pending_small: List[CommitDiff] = []

    for diff in diffs:
        classification = classify_commit(diff, settings)

        if classification in (Classification.SKIPPED, Classification.MECHANICAL):
            units.append(WorkUnit(WorkUnitKind.SINGLE, [diff], classification))
        elif classification == Classification.SMALL:
            pending_small.append(diff)
            if len(pending_small) >= BATCH_SIZE:
                units.append(WorkUnit(WorkUnitKind.BATCH, pending_small, Classification.SMALL))
                pending_small = []
        elif classification == Classification.LARGE:
            units.append(WorkUnit(WorkUnitKind.SPLIT, [diff], Classification.LARGE))
        elif classification == Classification.NORMAL:
            units.append(WorkUnit(WorkUnitKind.SINGLE, [diff], Classification.NORMAL))
        else:
            raise ValueError(f"Unhandled classification: {classification!r}")

    # 남은 소규모 커밋 처리
    if len(pending_small) == 1:
        units.append(WorkUnit(WorkUnitKind.SINGLE, pending_small, Classification.NORMAL))
    elif pending_small:
        units.append(WorkUnit(WorkUnitKind.BATCH, pending_small, Classification.SMALL))

    logger.debug(f"작업 단위 구성 완료: {len(diffs)}개 커밋 → {len(units)}개 단위")
    return units


def estimate_oracle_calls(units: Sequence[WorkUnit]) -> int:
    """작업 단위 목록의 예상 오라클 호출 수

    배치는 1회, 분할 단위는 파일 5개당 1회, 그 외 단일 단위는 1회로 추정합니다.
    """
    calls = 0
    for unit in units:
        if not unit.requires_oracle:
            continue
        if unit.kind == WorkUnitKind.BATCH:
            calls += 1
        elif unit.kind == WorkUnitKind.SPLIT:
            calls += max(1, math.ceil(len(unit.diffs[0].files) / FILES_PER_SPLIT_CALL))
        else:
            calls += len(unit.diffs)
    return calls
