from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Iterable

from .file_diff import FileDiff


# 유효 변경량 계산에서 제외할 파일 (잠금 파일, 생성된 산출물)
GENERATED_FILE_NAMES = {
    'package-lock.json', 'yarn.lock', 'pnpm-lock.yaml', 'poetry.lock',
    'pipfile.lock', 'cargo.lock', 'composer.lock', 'gemfile.lock', 'go.sum',
}

GENERATED_FILE_SUFFIXES = (
    '.lock', '.min.js', '.min.css', '.map', '.snap', '.pb.go', '_pb2.py',
)


def is_generated_file(path: str) -> bool:
    """잠금 파일 또는 자동 생성 파일 여부"""
    name = Path(path).name.lower()
    if name in GENERATED_FILE_NAMES:
        return True
    return name.endswith(GENERATED_FILE_SUFFIXES)


@dataclass(frozen=True)
class DiffStats:
    """커밋 변경 통계"""
    total_files: int
    total_additions: int
    total_deletions: int
    effective_changes: int

    @property
    def total_lines_changed(self) -> int:
        """총 변경 라인 수"""
        return self.total_additions + self.total_deletions

    @property
    def addition_ratio(self) -> float:
        """추가 라인 비율 (0.0 ~ 1.0)"""
        total = self.total_lines_changed
        return self.total_additions / total if total > 0 else 0.0

    @classmethod
    def from_files(cls, files: Iterable[FileDiff]) -> 'DiffStats':
        """파일 변경 목록에서 통계 계산

        유효 변경량은 바이너리 파일과 잠금/생성 파일을 제외한 추가+삭제 라인 수입니다.
        """
        files = list(files)
        effective = sum(
            f.additions + f.deletions
            for f in files
            if not f.is_binary and not is_generated_file(f.path)
        )
        return cls(
            total_files=len(files),
            total_additions=sum(f.additions for f in files),
            total_deletions=sum(f.deletions for f in files),
            effective_changes=effective,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DiffStats':
        """딕셔너리에서 DiffStats 객체 생성"""
        return cls(
            total_files=data['total_files'],
            total_additions=data['total_additions'],
            total_deletions=data['total_deletions'],
            effective_changes=data['effective_changes'],
        )
