"""커밋 분류 단위 테스트"""

import pytest

from gitpulse.commit_collection.file_diff import FileDiff, FileStatus
from gitpulse.config.settings import AnalysisSettings
from gitpulse.pipeline.classification import Classification, classify_commit, is_mechanical_commit


@pytest.fixture
def settings() -> AnalysisSettings:
    return AnalysisSettings(small_commit_threshold=10, large_commit_threshold=500)


class TestClassifyCommit:
    """classify_commit 테스트"""

    def test_merge_commit_is_skipped_when_configured(self, make_diff, settings):
        """두 부모를 가진 머지 커밋은 skipped"""
        # Given
        diff = make_diff(message="Merge branch 'main' into feature", parent_count=2)

        # When & Then
        assert classify_commit(diff, settings) == Classification.SKIPPED

    def test_merge_commit_falls_through_when_not_skipping(self, make_diff):
        """머지 건너뛰기를 끄면 메시지 패턴으로 mechanical 분류"""
        # Given
        settings = AnalysisSettings(skip_merge_commits=False)
        diff = make_diff(message="Merge branch 'main' into feature", parent_count=2)

        # When & Then
        assert classify_commit(diff, settings) == Classification.MECHANICAL

    def test_merge_without_merge_message_is_normal_when_not_skipping(self, make_diff):
        settings = AnalysisSettings(skip_merge_commits=False)
        diff = make_diff(changes=50, message='integrate feature work', parent_count=2)

        assert classify_commit(diff, settings) == Classification.NORMAL

    @pytest.mark.parametrize("message", [
        "Merge pull request #12 from org/branch",
        "merge remote-tracking branch 'origin/main'",
        'Revert "feat: add cache"',
        "Bump version to 1.2.3",
        "auto-generated client code",
        "Autogenerated docs",
        "[skip ci] update badge",
        "chore(deps): bump lodash from 4.17.20 to 4.17.21",
        "CHORE(RELEASE): v2.0.0",
    ])
    def test_mechanical_messages(self, make_diff, settings, message):
        """기계적 메시지 패턴은 대소문자 무관하게 mechanical"""
        diff = make_diff(changes=50, message=message)

        assert classify_commit(diff, settings) == Classification.MECHANICAL

    @pytest.mark.parametrize("message", [
        "fix: handle merge branch naming",
        "docs: explain how to bump version",
        "feat: chore(deps) cleanup helper",
    ])
    def test_patterns_are_anchored_at_message_start(self, make_diff, settings, message):
        """패턴이 메시지 중간에 있으면 기계적 커밋이 아님"""
        diff = make_diff(changes=50, message=message)

        assert classify_commit(diff, settings) == Classification.NORMAL

    def test_commit_without_files_is_mechanical(self, make_diff, settings):
        diff = make_diff(files=[])

        assert is_mechanical_commit(diff)
        assert classify_commit(diff, settings) == Classification.MECHANICAL

    def test_size_thresholds(self, make_diff, settings):
        """유효 변경량 기준 small / normal / large 경계"""
        assert classify_commit(make_diff(changes=9), settings) == Classification.SMALL
        assert classify_commit(make_diff(changes=10), settings) == Classification.NORMAL
        assert classify_commit(make_diff(changes=500), settings) == Classification.NORMAL
        assert classify_commit(make_diff(changes=501), settings) == Classification.LARGE

    def test_generated_files_do_not_count_toward_size(self, make_diff, settings):
        """잠금 파일 변경은 유효 변경량에서 제외"""
        # Given
        files = [
            FileDiff(path='package-lock.json', status=FileStatus.MODIFIED,
                     additions=3000, deletions=2000, content=''),
            FileDiff(path='src/index.js', status=FileStatus.MODIFIED,
                     additions=3, deletions=1, content='+x'),
        ]
        diff = make_diff(files=files)

        # When & Then
        assert diff.stats.effective_changes == 4
        assert classify_commit(diff, settings) == Classification.SMALL

    def test_classification_is_deterministic(self, make_diff, settings):
        diff = make_diff(changes=42)

        results = {classify_commit(diff, settings) for _ in range(10)}

        assert results == {Classification.NORMAL}

    def test_requires_oracle(self):
        assert not Classification.SKIPPED.requires_oracle
        assert not Classification.MECHANICAL.requires_oracle
        assert Classification.SMALL.requires_oracle
        assert Classification.NORMAL.requires_oracle
        assert Classification.LARGE.requires_oracle
