from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional


class FileStatus(Enum):
    """파일 변경 상태"""
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"

    @classmethod
    def from_git_code(cls, code: str) -> 'FileStatus':
        """git --name-status 상태 코드(A, M, D, R100, C75 ...) 변환"""
        mapping = {
            'A': cls.ADDED,
            'M': cls.MODIFIED,
            'D': cls.DELETED,
            'R': cls.RENAMED,
            'C': cls.COPIED,
        }
        return mapping.get(code[:1].upper(), cls.MODIFIED)


@dataclass(frozen=True)
class FileDiff:
    """파일 단위 변경 내용"""
    path: str
    status: FileStatus
    additions: int
    deletions: int
    content: str
    is_binary: bool = False
    old_path: Optional[str] = None

    @property
    def total_lines_changed(self) -> int:
        return self.additions + self.deletions

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'path': self.path,
            'status': self.status.value,
            'additions': self.additions,
            'deletions': self.deletions,
            'content': self.content,
            'is_binary': self.is_binary,
            'old_path': self.old_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileDiff':
        """딕셔너리에서 FileDiff 객체 생성"""
        return cls(
            path=data['path'],
            status=FileStatus(data['status']),
            additions=data['additions'],
            deletions=data['deletions'],
            content=data.get('content', ''),
            is_binary=data.get('is_binary', False),
            old_path=data.get('old_path'),
        )
