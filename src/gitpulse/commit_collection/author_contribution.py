from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Iterable, Optional

from .commit_diff import CommitDiff
from .commit_info import AuthorInfo, CommitInfo


@dataclass
class AuthorContribution:
    """작성자별 기여 요약"""
    author: AuthorInfo
    commits: List[CommitInfo] = field(default_factory=list)
    total_additions: int = 0
    total_deletions: int = 0
    files_changed: int = 0
    active_days: int = 0
    first_commit_date: Optional[datetime] = None
    last_commit_date: Optional[datetime] = None

    @property
    def commit_hashes(self) -> List[str]:
        return [c.hash for c in self.commits]

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'author': self.author.to_dict(),
            'commit_count': len(self.commits),
            'total_additions': self.total_additions,
            'total_deletions': self.total_deletions,
            'files_changed': self.files_changed,
            'active_days': self.active_days,
            'first_commit_date': self.first_commit_date.isoformat() if self.first_commit_date else None,
            'last_commit_date': self.last_commit_date.isoformat() if self.last_commit_date else None,
        }


def aggregate_by_author(diffs: Iterable[CommitDiff]) -> Dict[str, AuthorContribution]:
    """커밋을 작성자 이메일 기준으로 그룹화

    Args:
        diffs: 추출된 커밋 변경 목록 (입력 순서 유지)

    Returns:
        이메일 → AuthorContribution 매핑 (최초 등장 순서)
    """
    contributions: Dict[str, AuthorContribution] = {}

    for diff in diffs:
        commit = diff.commit
        key = commit.author.email
        contribution = contributions.get(key)

        if contribution is None:
            contribution = AuthorContribution(
                author=commit.author,
                first_commit_date=commit.date,
                last_commit_date=commit.date,
            )
            contributions[key] = contribution

        contribution.commits.append(commit)
        contribution.total_additions += diff.stats.total_additions
        contribution.total_deletions += diff.stats.total_deletions
        contribution.files_changed += diff.stats.total_files
        if commit.date < contribution.first_commit_date:
            contribution.first_commit_date = commit.date
        if commit.date > contribution.last_commit_date:
            contribution.last_commit_date = commit.date

    # 활동 일수 계산
    for contribution in contributions.values():
        days = {c.date.date().isoformat() for c in contribution.commits}
        contribution.active_days = len(days)

    return contributions
