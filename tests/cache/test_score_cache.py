"""커밋 점수 캐시 단위 테스트"""

import json
from pathlib import Path

import pytest

from gitpulse.cache.score_cache import CacheWriteError, CachedScore, ScoreCache, repo_cache_id

RUBRIC_HASH = '1111222233334444'
OTHER_RUBRIC_HASH = '5555666677778888'
COMMIT_HASH = 'abcdef0123456789abcdef0123456789abcdef01'


@pytest.fixture
def cache(temp_dir) -> ScoreCache:
    return ScoreCache(temp_dir / 'my-repo', cache_root=temp_dir / 'cache')


class TestRepoCacheId:
    """저장소 캐시 디렉토리 이름 테스트"""

    def test_contains_repo_name_and_path_hash(self, temp_dir):
        cache_id = repo_cache_id(temp_dir / 'my-repo')

        name, path_hash = cache_id.rsplit('-', 1)
        assert name == 'my-repo'
        assert len(path_hash) == 12

    def test_same_name_different_paths_do_not_collide(self, temp_dir):
        assert repo_cache_id(temp_dir / 'a' / 'repo') != repo_cache_id(temp_dir / 'b' / 'repo')


class TestScoreCache:
    """ScoreCache 테스트"""

    def test_set_then_get(self, cache, make_score):
        """기록한 점수를 같은 루브릭 해시로 조회"""
        # Given
        score = make_score(COMMIT_HASH, 82.0)

        # When
        cache.set(COMMIT_HASH, score, RUBRIC_HASH)
        loaded = cache.get(COMMIT_HASH, RUBRIC_HASH)

        # Then
        assert loaded is not None
        assert loaded.commit_hash == COMMIT_HASH
        assert loaded.overall_score == pytest.approx(82.0)
        assert cache.has(COMMIT_HASH, RUBRIC_HASH)

    def test_record_file_layout(self, cache, make_score):
        """커밋 해시 12자리 접두사를 파일명으로 사용"""
        cache.set(COMMIT_HASH, make_score(COMMIT_HASH), RUBRIC_HASH)

        files = list(cache.cache_dir.glob('*.json'))
        assert [f.name for f in files] == [f"{COMMIT_HASH[:12]}.json"]
        assert cache.cache_dir.name == 'scores'
        record = json.loads(files[0].read_text(encoding='utf-8'))
        assert record['rubric_hash'] == RUBRIC_HASH
        assert record['commit_hash'] == COMMIT_HASH

    def test_missing_entry_returns_none(self, cache):
        assert cache.get(COMMIT_HASH, RUBRIC_HASH) is None
        assert not cache.has(COMMIT_HASH, RUBRIC_HASH)

    def test_stale_rubric_hash_is_absent(self, cache, make_score):
        """다른 루브릭 해시로 기록된 레코드는 없는 것으로 취급"""
        # Given
        cache.set(COMMIT_HASH, make_score(COMMIT_HASH), RUBRIC_HASH)

        # When & Then
        assert cache.get(COMMIT_HASH, OTHER_RUBRIC_HASH) is None
        assert cache.get_all(OTHER_RUBRIC_HASH) == {}
        # 레코드는 삭제되지 않음
        assert cache.get(COMMIT_HASH, RUBRIC_HASH) is not None

    def test_corrupt_record_is_absent(self, cache, make_score):
        """손상된 레코드는 오류 없이 없는 것으로 취급"""
        # Given
        cache.set(COMMIT_HASH, make_score(COMMIT_HASH), RUBRIC_HASH)
        record_path = cache.cache_dir / f"{COMMIT_HASH[:12]}.json"
        record_path.write_text('{not valid json', encoding='utf-8')

        # When & Then
        assert cache.get(COMMIT_HASH, RUBRIC_HASH) is None
        assert cache.get_all(RUBRIC_HASH) == {}

    def test_record_missing_fields_is_absent(self, cache):
        cache.cache_dir.mkdir(parents=True)
        (cache.cache_dir / f"{COMMIT_HASH[:12]}.json").write_text(
            json.dumps({'commit_hash': COMMIT_HASH}), encoding='utf-8'
        )

        assert cache.get(COMMIT_HASH, RUBRIC_HASH) is None

    @pytest.mark.parametrize("corrupt", [
        lambda record: record.update(score=5),
        lambda record: record.update(score=[]),
        lambda record: record['score'].update(metadata=[1, 2]),
        lambda record: record['score'].update(dimensions='broken'),
        lambda record: record['score']['dimensions'].update(code_quality=7),
        lambda record: record['score']['dimensions']['code_quality'].update(score='abc'),
        lambda record: record['score']['dimensions']['code_quality'].update(score=None),
    ])
    def test_malformed_record_is_absent(self, cache, make_score, corrupt):
        """형식이 잘못된 레코드는 조회와 전체 조회 모두에서 없는 것으로 취급"""
        # Given
        cache.set(COMMIT_HASH, make_score(COMMIT_HASH), RUBRIC_HASH)
        path = cache.cache_dir / f"{COMMIT_HASH[:12]}.json"
        record = json.loads(path.read_text(encoding='utf-8'))
        corrupt(record)
        path.write_text(json.dumps(record), encoding='utf-8')

        # When & Then
        assert cache.get(COMMIT_HASH, RUBRIC_HASH) is None
        assert cache.get_all(RUBRIC_HASH) == {}

    def test_prefix_collision_is_not_returned(self, cache, make_score):
        """같은 접두사를 가진 다른 커밋의 레코드는 반환하지 않음"""
        other_hash = COMMIT_HASH[:12] + '0' * 28
        cache.set(other_hash, make_score(other_hash), RUBRIC_HASH)

        assert cache.get(COMMIT_HASH, RUBRIC_HASH) is None

    def test_get_all_filters_by_rubric_hash(self, cache, make_score):
        # Given
        hashes = [(f"{i:x}" * 40)[:40] for i in range(1, 4)]
        for h in hashes[:2]:
            cache.set(h, make_score(h), RUBRIC_HASH)
        cache.set(hashes[2], make_score(hashes[2]), OTHER_RUBRIC_HASH)

        # When
        result = cache.get_all(RUBRIC_HASH)

        # Then
        assert set(result) == set(hashes[:2])

    def test_get_all_on_empty_cache(self, cache):
        assert cache.get_all(RUBRIC_HASH) == {}

    def test_overwrite_replaces_record(self, cache, make_score):
        cache.set(COMMIT_HASH, make_score(COMMIT_HASH, 10.0), RUBRIC_HASH)
        cache.set(COMMIT_HASH, make_score(COMMIT_HASH, 90.0), OTHER_RUBRIC_HASH)

        assert cache.get(COMMIT_HASH, RUBRIC_HASH) is None
        assert cache.get(COMMIT_HASH, OTHER_RUBRIC_HASH).overall_score == pytest.approx(90.0)
        assert not list(cache.cache_dir.glob('*.tmp'))

    def test_clear_removes_all_records(self, cache, make_score):
        cache.set(COMMIT_HASH, make_score(COMMIT_HASH), RUBRIC_HASH)

        cache.clear()

        assert cache.get_all(RUBRIC_HASH) == {}
        assert not cache.cache_dir.exists()

    def test_clear_on_missing_directory(self, cache):
        cache.clear()

    def test_write_failure_raises_cache_write_error(self, temp_dir, make_score):
        """캐시 디렉토리를 만들 수 없으면 CacheWriteError"""
        # Given: 캐시 루트 위치에 일반 파일이 있음
        blocker = temp_dir / 'blocked'
        blocker.write_text('not a directory', encoding='utf-8')
        cache = ScoreCache(temp_dir / 'repo', cache_root=blocker)

        # When & Then
        with pytest.raises(CacheWriteError):
            cache.set(COMMIT_HASH, make_score(COMMIT_HASH), RUBRIC_HASH)

    def test_cached_score_dict_conversion(self, make_score):
        from datetime import datetime

        cached = CachedScore(
            commit_hash=COMMIT_HASH,
            score=make_score(COMMIT_HASH, 64.0),
            rubric_hash=RUBRIC_HASH,
            timestamp=datetime(2024, 5, 1, 9, 30),
        )

        restored = CachedScore.from_dict(json.loads(json.dumps(cached.to_dict())))

        assert restored.timestamp == datetime(2024, 5, 1, 9, 30)
        assert restored.score.to_dict() == cached.score.to_dict()
