"""채점 프롬프트 생성

루브릭 로드, 시스템/사용자 프롬프트 구성, diff 절단을 담당합니다.
루브릭은 저장소의 .gitpulse/rubrics, 사용자 홈의 ~/.gitpulse/rubrics, 패키지 기본 루브릭 순서로 찾습니다.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.constants import APPROX_CHARS_PER_TOKEN, TRUNCATION_MARKER

logger = logging.getLogger(__name__)

RUBRIC_FILES: Tuple[str, ...] = (
    'code-quality.md',
    'complexity-impact.md',
    'commit-discipline.md',
    'collaboration.md',
)

DEFAULT_RUBRICS_DIR = Path(__file__).resolve().parent.parent / 'rubrics'
USER_RUBRICS_DIR = Path.home() / '.gitpulse' / 'rubrics'


@dataclass
class BuiltPrompt:
    """생성된 프롬프트

    truncated_hashes에는 토큰 예산을 넘어 diff가 잘린 커밋 해시가 담깁니다.
    """
    system: str
    user: str
    truncated_hashes: List[str] = field(default_factory=list)


def _rubric_search_paths(rubric_file: str, repo_path: Optional[Union[str, Path]] = None) -> List[Path]:
    paths: List[Path] = []
    if repo_path:
        paths.append(Path(repo_path) / '.gitpulse' / 'rubrics' / rubric_file)
    paths.append(USER_RUBRICS_DIR / rubric_file)
    paths.append(DEFAULT_RUBRICS_DIR / rubric_file)
    return paths


def load_rubric(rubric_file: str, repo_path: Optional[Union[str, Path]] = None) -> str:
    """루브릭 파일 로드

    Raises:
        FileNotFoundError: 어떤 검색 경로에도 루브릭이 없는 경우
    """
    for search_path in _rubric_search_paths(rubric_file, repo_path):
        if search_path.exists():
            logger.debug(f"Loaded rubric {rubric_file} from {search_path}")
            return search_path.read_text(encoding='utf-8')

    raise FileNotFoundError(f"Rubric file not found: {rubric_file}")


def load_all_rubrics(repo_path: Optional[Union[str, Path]] = None) -> Dict[str, str]:
    """네 개 차원의 루브릭을 모두 로드 (파일명 → 내용)"""
    return {name: load_rubric(name, repo_path) for name in RUBRIC_FILES}


def truncate_diff_content(diff: CommitDiff, max_tokens: int) -> Tuple[str, bool]:
    """diff 내용을 토큰 예산에 맞게 절단

    Args:
        diff: 커밋 변경 내용
        max_tokens: 토큰 예산 (문자 수 = 토큰 × 4로 근사)

    Returns:
        (내용, 절단 여부)
    """
    max_chars = max_tokens * APPROX_CHARS_PER_TOKEN
    full_content = '\n\n'.join(
        f"--- {f.path} ({f.status.value})\n{f.content}" for f in diff.files
    )

    if len(full_content) <= max_chars:
        return full_content, False

    return full_content[:max_chars] + TRUNCATION_MARKER, True


def build_system_prompt(rubrics: Dict[str, str]) -> str:
    rubric_content = '\n\n'.join(
        f"---\n## Rubric: {name}\n\n{content}" for name, content in rubrics.items()
    )

    return f"""You are a senior software engineering evaluator. Your task is to analyze git commit diffs and provide structured scoring based on the rubrics provided below.

You must evaluate each commit objectively based on the actual code changes shown in the diff. Focus on what the code does, not assumptions about the developer.

Score each dimension from 0 to 100, where:
- 90-100: Exceptional
- 70-89: Good
- 50-69: Acceptable
- 30-49: Below average
- 0-29: Poor

{rubric_content}

---

Important guidelines:
- Only evaluate what you can see in the diff
- Be fair and consistent across all commits
- Consider the context and purpose of the change
- Small but well-crafted changes can score highly
- Large but sloppy changes should score lower"""


def _commit_header(diff: CommitDiff) -> str:
    commit = diff.commit
    stats = diff.stats
    return (
        f"**Author:** {commit.author.name}\n"
        f"**Date:** {commit.date.isoformat()}\n"
        f"**Message:** {commit.message}\n"
        f"**Stats:** {stats.total_files} files changed, +{stats.total_additions} -{stats.total_deletions}"
    )


def build_commit_prompt(diff: CommitDiff, rubrics: Dict[str, str], max_tokens: int = 8000) -> BuiltPrompt:
    """단일 커밋 채점 프롬프트 생성"""
    content, truncated = truncate_diff_content(diff, max_tokens)

    user = (
        "## Commit to Evaluate\n\n"
        f"**Hash:** {diff.commit.abbreviated_hash}\n"
        f"{_commit_header(diff)}\n\n"
        "### Diff Content\n\n"
        f"{content}\n\n"
        "Please evaluate this commit according to all four rubric dimensions."
    )

    return BuiltPrompt(
        system=build_system_prompt(rubrics),
        user=user,
        truncated_hashes=[diff.hash] if truncated else [],
    )


def build_batch_prompt(diffs: Sequence[CommitDiff], rubrics: Dict[str, str], max_tokens: int = 8000) -> BuiltPrompt:
    """배치 채점 프롬프트 생성 (토큰 예산을 커밋 수로 균등 분배)"""
    if not diffs:
        raise ValueError("Batch prompt requires at least one diff")

    per_commit_budget = max_tokens // len(diffs)
    sections = []
    truncated_hashes: List[str] = []

    for i, diff in enumerate(diffs, 1):
        content, truncated = truncate_diff_content(diff, per_commit_budget)
        if truncated:
            truncated_hashes.append(diff.hash)
        sections.append(
            f"### Commit {i}: {diff.commit.abbreviated_hash}\n"
            f"{_commit_header(diff)}\n\n"
            f"```diff\n{content}\n```"
        )

    commits_text = '\n\n---\n\n'.join(sections)
    user = (
        f"## Batch of {len(diffs)} Commits to Evaluate\n\n"
        f"{commits_text}\n\n"
        "Please evaluate each commit individually according to all four rubric dimensions. "
        "Return scores for each commit identified by its hash."
    )

    return BuiltPrompt(
        system=build_system_prompt(rubrics),
        user=user,
        truncated_hashes=truncated_hashes,
    )
