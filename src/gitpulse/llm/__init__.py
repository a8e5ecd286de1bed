"""LLM 클라이언트 및 채점 오라클 모듈

Gemini / OpenRouter 클라이언트와 이를 사용하는 커밋 채점 엔진 구현
"""

from .client_factory import create_llm_client
from .gemini_client import GeminiClient
from .llm_response import LLMResponse
from .openrouter_client import OpenRouterClient
from .oracle import OracleResponseError, ScoringOracle
from .prompt_builder import (
    RUBRIC_FILES,
    BuiltPrompt,
    build_batch_prompt,
    build_commit_prompt,
    load_all_rubrics,
    load_rubric,
    truncate_diff_content,
)
from .scoring_engine import LLMScoringEngine

__all__ = [
    "create_llm_client",
    "GeminiClient",
    "LLMResponse",
    "OpenRouterClient",
    "OracleResponseError",
    "ScoringOracle",
    "RUBRIC_FILES",
    "BuiltPrompt",
    "build_batch_prompt",
    "build_commit_prompt",
    "load_all_rubrics",
    "load_rubric",
    "truncate_diff_content",
    "LLMScoringEngine",
]
