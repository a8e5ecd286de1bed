"""설정에 따른 LLM 클라이언트 생성"""

import logging
import os
from typing import Union

from gitpulse.config.settings import GitPulseConfig, LLMProvider
from .gemini_client import GeminiClient
from .openrouter_client import OpenRouterClient

logger = logging.getLogger(__name__)

LLMClient = Union[GeminiClient, OpenRouterClient]


def create_llm_client(config: GitPulseConfig) -> LLMClient:
    """제공자 설정에 맞는 LLM 클라이언트 생성

    Raises:
        ValueError: 필요한 API 키 환경 변수가 없는 경우
    """
    api_key = os.getenv(config.api_key_env)

    if config.provider == LLMProvider.GEMINI:
        if not api_key:
            raise ValueError(f"{config.api_key_env} environment variable is required for provider 'gemini'")
        return GeminiClient(api_key=api_key, model_name=config.model)

    if config.provider == LLMProvider.OPENROUTER:
        if not api_key:
            raise ValueError(f"{config.api_key_env} environment variable is required for provider 'openrouter'")
        return OpenRouterClient(api_key=api_key, model_name=config.model)

    # OpenAI 호환 엔드포인트는 키 없이 동작하는 경우가 있음 (로컬 서버 등)
    logger.debug(f"Using custom OpenAI-compatible endpoint: {config.base_url}")
    return OpenRouterClient(
        api_key=api_key or "no-key",
        model_name=config.model,
        base_url=config.base_url,
        provider_name=LLMProvider.CUSTOM.value,
    )
