"""LLM 기반 채점 엔진

프롬프트를 구성하여 LLM 클라이언트에 구조화된 JSON 응답을 요청하고,
응답을 검증하여 CommitScore로 변환합니다.
"""

import logging
import re
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from gitpulse.commit_collection.commit_diff import CommitDiff
from gitpulse.constants import DIMENSION_KEYS
from gitpulse.scoring.dimensions import DimensionWeight
from gitpulse.scoring.models import (
    CommitScore,
    DimensionScore,
    ScoreFlag,
    ScoreFlagType,
    ScoreMetadata,
    SubScore,
)
from .llm_response import LLMResponse
from .oracle import OracleResponseError, ScoringOracle
from .prompt_builder import BuiltPrompt, build_batch_prompt, build_commit_prompt
from .schemas import (
    BatchCommitScoringResponse,
    BatchScoringResponse,
    CommitScoringResponse,
    DimensionScoreResponse,
)

logger = logging.getLogger(__name__)

# 축약 해시 매칭에 필요한 최소 길이
MIN_HASH_PREFIX_LENGTH = 7

_CODE_FENCE_PATTERN = re.compile(r'^```(?:json)?\s*(.*?)\s*```$', re.DOTALL)


def _strip_code_fence(text: str) -> str:
    """```json ... ``` 로 감싼 응답에서 본문만 추출"""
    stripped = text.strip()
    match = _CODE_FENCE_PATTERN.match(stripped)
    return match.group(1) if match else stripped


def _to_dimension_score(response: DimensionScoreResponse) -> DimensionScore:
    return DimensionScore(
        score=response.score,
        sub_scores=[SubScore(name=s.name, score=s.score, weight=s.weight) for s in response.sub_scores],
        reasoning=response.reasoning,
    )


class LLMScoringEngine(ScoringOracle):
    """LLM 클라이언트를 사용하는 채점 오라클"""

    def __init__(
        self,
        client,
        weights: DimensionWeight,
        rubrics: Dict[str, str],
        rubric_hash: str,
        max_tokens_per_diff: int = 8000
    ):
        """
        Args:
            client: query(messages, system_instruction, response_schema)를 제공하는 LLM 클라이언트
            weights: 점수에 기록할 차원 가중치
            rubrics: 루브릭 파일명 → 내용
            rubric_hash: 점수 메타데이터에 기록할 루브릭 해시
            max_tokens_per_diff: diff 토큰 예산
        """
        self.client = client
        self.weights = weights
        self.rubrics = rubrics
        self.rubric_hash = rubric_hash
        self.max_tokens_per_diff = max_tokens_per_diff

    @property
    def provider(self) -> str:
        return getattr(self.client, 'provider_name', 'unknown')

    @property
    def model(self) -> str:
        return getattr(self.client, 'model_name', 'unknown')

    def score_one(self, diff: CommitDiff) -> CommitScore:
        prompt = build_commit_prompt(diff, self.rubrics, self.max_tokens_per_diff)
        response = self._query(prompt, CommitScoringResponse)
        parsed = self._parse(response, CommitScoringResponse)

        return self._build_score(
            diff.hash,
            parsed,
            tokens_used=response.total_tokens,
            flags=self._truncation_flags(diff.hash, prompt),
        )

    def score_batch(self, diffs: Sequence[CommitDiff]) -> List[CommitScore]:
        if not diffs:
            return []

        prompt = build_batch_prompt(diffs, self.rubrics, self.max_tokens_per_diff)
        response = self._query(prompt, BatchScoringResponse)
        parsed = self._parse(response, BatchScoringResponse)

        tokens_per_commit = response.total_tokens // len(diffs)
        scores = []

        for diff in diffs:
            result = self._find_batch_result(diff.hash, parsed.scores)
            if result is None:
                raise OracleResponseError(
                    f"Batch response is missing a result for commit {diff.commit.abbreviated_hash}"
                )

            flags = [ScoreFlag(type=ScoreFlagType.BATCHED, message="Scored as part of a batch")]
            flags.extend(self._truncation_flags(diff.hash, prompt))
            scores.append(self._build_score(diff.hash, result, tokens_per_commit, flags))

        logger.debug(f"배치 채점 완료: {len(diffs)}개 커밋, {response.total_tokens} 토큰")
        return scores

    def _query(self, prompt: BuiltPrompt, schema) -> LLMResponse:
        return self.client.query(
            messages=[{"role": "user", "content": prompt.user}],
            system_instruction=prompt.system,
            response_schema=schema,
        )

    @staticmethod
    def _parse(response: LLMResponse, schema):
        try:
            return schema.model_validate_json(_strip_code_fence(response.text))
        except ValidationError as e:
            raise OracleResponseError(f"Invalid scoring response: {e}") from e

    @staticmethod
    def _find_batch_result(
        commit_hash: str,
        results: Sequence[BatchCommitScoringResponse]
    ) -> Optional[BatchCommitScoringResponse]:
        """전체 해시 또는 7자 이상의 접두사로 배치 결과 매칭"""
        for result in results:
            candidate = result.commit_hash.strip()
            if candidate == commit_hash:
                return result
        for result in results:
            candidate = result.commit_hash.strip()
            if len(candidate) >= MIN_HASH_PREFIX_LENGTH and commit_hash.startswith(candidate):
                return result
        return None

    @staticmethod
    def _truncation_flags(commit_hash: str, prompt: BuiltPrompt) -> List[ScoreFlag]:
        if commit_hash in prompt.truncated_hashes:
            return [ScoreFlag(type=ScoreFlagType.TRUNCATED, message="Diff truncated to fit the token budget")]
        return []

    def _build_score(
        self,
        commit_hash: str,
        parsed: CommitScoringResponse,
        tokens_used: int,
        flags: List[ScoreFlag]
    ) -> CommitScore:
        return CommitScore(
            commit_hash=commit_hash,
            dimensions={key: _to_dimension_score(getattr(parsed, key)) for key in DIMENSION_KEYS},
            flags=flags,
            reasoning=parsed.overall_reasoning,
            metadata=ScoreMetadata(
                model=self.model,
                provider=self.provider,
                tokens_used=tokens_used,
                timestamp=datetime.now(),
                rubric_hash=self.rubric_hash,
            ),
            weights=self.weights,
        )
