from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional


@dataclass
class AnalysisScope:
    """커밋 추출 범위 (브랜치, 기간, 작성자, 최대 개수, 경로)"""
    branch: Optional[str] = None
    since: Optional[str] = None
    until: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    max_commits: Optional[int] = None
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
