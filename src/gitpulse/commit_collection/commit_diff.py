from dataclasses import dataclass
from typing import List, Dict, Any, Optional

from .commit_info import CommitInfo
from .diff_stats import DiffStats
from .file_diff import FileDiff


@dataclass(frozen=True)
class CommitDiff:
    """커밋 하나의 전체 변경 내용

    추출 단계에서 커밋당 한 번 생성되며 이후에는 읽기 전용으로만 사용됩니다.
    """
    commit: CommitInfo
    files: List[FileDiff]
    stats: DiffStats

    @classmethod
    def create(cls, commit: CommitInfo, files: List[FileDiff],
               stats: Optional[DiffStats] = None) -> 'CommitDiff':
        """파일 목록으로부터 통계를 계산하여 CommitDiff 생성"""
        return cls(
            commit=commit,
            files=list(files),
            stats=stats if stats is not None else DiffStats.from_files(files),
        )

    @property
    def hash(self) -> str:
        return self.commit.hash

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'commit': self.commit.to_dict(),
            'files': [f.to_dict() for f in self.files],
            'stats': self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommitDiff':
        """딕셔너리에서 CommitDiff 객체 생성"""
        return cls(
            commit=CommitInfo.from_dict(data['commit']),
            files=[FileDiff.from_dict(f) for f in data['files']],
            stats=DiffStats.from_dict(data['stats']),
        )
