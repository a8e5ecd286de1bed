from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any


@dataclass(frozen=True)
class AuthorInfo:
    """커밋 작성자 정보"""
    name: str
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'email': self.email}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuthorInfo':
        """딕셔너리에서 AuthorInfo 객체 생성"""
        return cls(name=data['name'], email=data['email'])


@dataclass(frozen=True)
class CommitInfo:
    """개별 커밋 식별 정보"""
    hash: str
    author: AuthorInfo
    date: datetime
    message: str
    parent_hashes: List[str] = field(default_factory=list)
    refs: str = ''

    @property
    def abbreviated_hash(self) -> str:
        """7자리 축약 해시"""
        return self.hash[:7]

    @property
    def subject(self) -> str:
        """커밋 메시지 첫 줄"""
        return self.message.split('\n', 1)[0].strip()

    @property
    def is_merge_commit(self) -> bool:
        """부모 커밋이 둘 이상이면 머지 커밋"""
        return len(self.parent_hashes) > 1

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'hash': self.hash,
            'author': self.author.to_dict(),
            'date': self.date.isoformat(),
            'message': self.message,
            'parent_hashes': list(self.parent_hashes),
            'refs': self.refs,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommitInfo':
        """딕셔너리에서 CommitInfo 객체 생성"""
        return cls(
            hash=data['hash'],
            author=AuthorInfo.from_dict(data['author']),
            date=datetime.fromisoformat(data['date']),
            message=data['message'],
            parent_hashes=list(data.get('parent_hashes', [])),
            refs=data.get('refs', ''),
        )
