"""루브릭 해시 계산

활성 루브릭 집합 전체를 하나의 다이제스트로 요약합니다.
이름 순으로 정렬한 뒤 `name:content` 쌍을 이어 해싱하므로 로드 순서와 무관하게
같은 루브릭 집합은 같은 해시를 가지며, 어떤 루브릭이든 내용이 바뀌면 해시가 바뀝니다.
"""

import hashlib
from pathlib import Path
from typing import Mapping, Union

from gitpulse.constants import RUBRIC_HASH_LENGTH


def compute_rubric_hash(rubrics: Mapping[str, str]) -> str:
    """루브릭 이름 → 내용 매핑의 해시 계산"""
    digest = hashlib.sha256()
    for name in sorted(rubrics):
        digest.update(f"{name}:{rubrics[name]}".encode('utf-8'))
    return digest.hexdigest()[:RUBRIC_HASH_LENGTH]


def compute_rubric_hash_from_dir(rubrics_dir: Union[str, Path]) -> str:
    """디렉토리 내 *.md 루브릭 파일들의 해시 계산"""
    rubrics_path = Path(rubrics_dir)
    rubrics = {
        path.name: path.read_text(encoding='utf-8')
        for path in rubrics_path.glob('*.md')
    }
    return compute_rubric_hash(rubrics)
