"""채점 오라클 인터페이스"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.scoring.models import CommitScore


class OracleResponseError(RuntimeError):
    """오라클 응답이 잘못되었거나 일부 커밋 결과가 빠진 경우"""
    pass


class ScoringOracle(ABC):
    """커밋 변경 내용을 네 차원 점수로 변환하는 외부 채점기

    구현체는 여러 스레드에서 동시에 호출될 수 있습니다.
    """

    @property
    @abstractmethod
    def provider(self) -> str:
        """제공자 이름"""
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """모델 이름"""
        pass

    @abstractmethod
    def score_one(self, diff: CommitDiff) -> CommitScore:
        """단일 커밋 채점"""
        pass

    @abstractmethod
    def score_batch(self, diffs: Sequence[CommitDiff]) -> List[CommitScore]:
        """여러 커밋을 한 번의 호출로 채점

        Returns:
            입력의 각 커밋마다 정확히 하나의 점수

        Raises:
            OracleResponseError: 응답에 일부 커밋의 결과가 없는 경우
        """
        pass
