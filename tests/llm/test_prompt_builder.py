"""채점 프롬프트 생성 단위 테스트"""

from unittest.mock import patch

import pytest

from gitpulse.commit_collection.file_diff import FileDiff, FileStatus
from gitpulse.constants import TRUNCATION_MARKER
from gitpulse.llm.prompt_builder import (
    RUBRIC_FILES,
    build_batch_prompt,
    build_commit_prompt,
    build_system_prompt,
    load_all_rubrics,
    load_rubric,
    truncate_diff_content,
)

RUBRICS = {name: f"# {name}\nguidance" for name in RUBRIC_FILES}


def _file(path='src/app.py', content='+print("hello")', status=FileStatus.MODIFIED):
    return FileDiff(path=path, status=status, additions=1, deletions=0, content=content)


class TestTruncateDiffContent:
    """truncate_diff_content 테스트"""

    def test_content_within_budget(self, make_diff):
        diff = make_diff(files=[_file(content='+x')])

        content, truncated = truncate_diff_content(diff, max_tokens=100)

        assert content == "--- src/app.py (modified)\n+x"
        assert truncated is False

    def test_content_over_budget_is_cut_with_marker(self, make_diff):
        """토큰 × 4 문자에서 자르고 절단 표시를 덧붙임"""
        # Given
        diff = make_diff(files=[_file(content='+' + 'a' * 1000)])

        # When
        content, truncated = truncate_diff_content(diff, max_tokens=10)

        # Then
        assert truncated is True
        assert content.endswith(TRUNCATION_MARKER)
        assert len(content) == 40 + len(TRUNCATION_MARKER)

    def test_multiple_files_are_joined(self, make_diff):
        diff = make_diff(files=[
            _file('a.py', '+a'),
            _file('b.py', '+b', status=FileStatus.ADDED),
        ])

        content, _ = truncate_diff_content(diff, max_tokens=1000)

        assert content == "--- a.py (modified)\n+a\n\n--- b.py (added)\n+b"


class TestBuildPrompts:
    """프롬프트 생성 테스트"""

    def test_system_prompt_contains_every_rubric(self):
        system = build_system_prompt(RUBRICS)

        for name, content in RUBRICS.items():
            assert f"## Rubric: {name}" in system
            assert content in system

    def test_commit_prompt(self, make_diff):
        # Given
        diff = make_diff(changes=3, message='fix: handle empty input')

        # When
        prompt = build_commit_prompt(diff, RUBRICS)

        # Then
        assert f"**Hash:** {diff.hash[:7]}" in prompt.user
        assert "**Message:** fix: handle empty input" in prompt.user
        assert "**Stats:** 1 files changed, +3 -0" in prompt.user
        assert prompt.truncated_hashes == []
        assert prompt.system == build_system_prompt(RUBRICS)

    def test_commit_prompt_records_truncation(self, make_diff):
        diff = make_diff(changes=500)

        prompt = build_commit_prompt(diff, RUBRICS, max_tokens=50)

        assert prompt.truncated_hashes == [diff.hash]
        assert TRUNCATION_MARKER in prompt.user

    def test_batch_prompt_lists_every_commit(self, make_diff):
        diffs = [make_diff(changes=2) for _ in range(3)]

        prompt = build_batch_prompt(diffs, RUBRICS)

        assert "## Batch of 3 Commits to Evaluate" in prompt.user
        for i, diff in enumerate(diffs, 1):
            assert f"### Commit {i}: {diff.hash[:7]}" in prompt.user

    def test_batch_budget_is_shared(self, make_diff):
        """배치의 토큰 예산은 커밋 수로 균등 분배"""
        # Given: 각 diff는 단독 예산(100토큰=400자)에는 맞지만 1/4 예산에는 맞지 않음
        diffs = [make_diff(files=[_file(content='+' + 'b' * 200)]) for _ in range(4)]

        # When
        single = build_commit_prompt(diffs[0], RUBRICS, max_tokens=100)
        batch = build_batch_prompt(diffs, RUBRICS, max_tokens=100)

        # Then
        assert single.truncated_hashes == []
        assert batch.truncated_hashes == [d.hash for d in diffs]

    def test_empty_batch_is_rejected(self):
        with pytest.raises(ValueError):
            build_batch_prompt([], RUBRICS)


class TestLoadRubrics:
    """루브릭 로드 테스트"""

    def test_repo_rubric_overrides_default(self, temp_dir):
        # Given
        rubrics_dir = temp_dir / '.gitpulse' / 'rubrics'
        rubrics_dir.mkdir(parents=True)
        (rubrics_dir / 'code-quality.md').write_text('# Team quality rubric', encoding='utf-8')

        # When
        with patch('gitpulse.llm.prompt_builder.USER_RUBRICS_DIR', temp_dir / 'none'):
            rubrics = load_all_rubrics(temp_dir)

        # Then
        assert rubrics['code-quality.md'] == '# Team quality rubric'
        assert rubrics['collaboration.md'] != ''

    def test_user_rubric_used_before_default(self, temp_dir):
        user_dir = temp_dir / 'user-rubrics'
        user_dir.mkdir()
        (user_dir / 'collaboration.md').write_text('# Personal', encoding='utf-8')

        with patch('gitpulse.llm.prompt_builder.USER_RUBRICS_DIR', user_dir):
            assert load_rubric('collaboration.md', temp_dir) == '# Personal'

    def test_missing_rubric(self, temp_dir):
        with patch('gitpulse.llm.prompt_builder.USER_RUBRICS_DIR', temp_dir / 'none'):
            with pytest.raises(FileNotFoundError):
                load_rubric('does-not-exist.md', temp_dir)
