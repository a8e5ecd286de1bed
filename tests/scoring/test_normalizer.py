"""점수 정규화 유틸리티 단위 테스트"""

import pytest

from gitpulse.scoring.normalizer import clamp_score, normalize_scores, round_score


class TestNormalizeScores:
    """normalize_scores 테스트"""

    def test_min_max_normalization(self, make_score):
        scores = [make_score(str(i) * 40, v) for i, v in enumerate([20.0, 40.0, 60.0])]

        assert normalize_scores(scores) == pytest.approx([0.0, 50.0, 100.0])

    def test_identical_scores_are_unchanged(self, make_score):
        scores = [make_score(str(i) * 40, 42.0) for i in range(3)]

        assert normalize_scores(scores) == pytest.approx([42.0, 42.0, 42.0])

    def test_does_not_mutate_scores(self, make_score):
        score = make_score('a' * 40, 30.0)

        normalize_scores([score, make_score('b' * 40, 90.0)])

        assert score.overall_score == pytest.approx(30.0)

    def test_empty(self):
        assert normalize_scores([]) == []


class TestScoreHelpers:
    """clamp_score, round_score 테스트"""

    @pytest.mark.parametrize("raw, expected", [(-5.0, 0.0), (55.5, 55.5), (120.0, 100.0)])
    def test_clamp(self, raw, expected):
        assert clamp_score(raw) == expected

    def test_round(self):
        assert round_score(72.456) == 72.5
        assert round_score(72.456, decimals=2) == 72.46
