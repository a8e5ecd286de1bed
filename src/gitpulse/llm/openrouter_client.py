"""OpenRouter API 클라이언트

OpenRouter 또는 OpenAI 호환 엔드포인트를 통해 다양한 모델을 호출할 수 있는 클라이언트입니다.
"""

import json
import logging
from typing import Dict, List, Optional, Type, cast, TYPE_CHECKING

from openai import OpenAI
from pydantic import BaseModel

from .llm_response import LLMResponse

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletionMessageParam

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterClient:
    """OpenRouter API 클라이언트"""

    def __init__(
        self,
        api_key: str,
        model_name: str,
        base_url: str = OPENROUTER_BASE_URL,
        provider_name: str = "openrouter"
    ):
        """클라이언트 초기화

        Args:
            api_key: OpenRouter(또는 호환 엔드포인트) API 키
            model_name: 사용할 모델 이름 (예: "gemini-2.5-flash", "openai/gpt-4o")
            base_url: API 기본 URL
            provider_name: 채점 메타데이터에 기록할 제공자 이름
        """
        self.api_key = api_key
        self.base_url = base_url
        self.provider_name = provider_name
        self.model_name = self._convert_model_name(model_name) if base_url == OPENROUTER_BASE_URL else model_name
        self.client = OpenAI(api_key=api_key, base_url=base_url)

        logger.info(f"Initialized OpenRouterClient with model: {self.model_name} ({base_url})")

    def query(
        self,
        messages: List[Dict[str, str]],
        system_instruction: str,
        response_schema: Optional[Type[BaseModel]] = None
    ) -> LLMResponse:
        """API에 쿼리를 보내고 응답을 받습니다

        Args:
            messages: 메시지 리스트 (role, content 포함)
            system_instruction: 시스템 인스트럭션
            response_schema: 구조화된 출력을 위한 Pydantic BaseModel 클래스.
                JSON 모드를 켜고 스키마를 시스템 인스트럭션에 덧붙입니다.

        Returns:
            LLMResponse: 응답 텍스트와 토큰 사용량

        Raises:
            RuntimeError: 응답이 비어있는 경우
            Exception: API 오류
        """
        try:
            if response_schema:
                schema_json = json.dumps(response_schema.model_json_schema(), ensure_ascii=False)
                system_instruction = (
                    f"{system_instruction}\n\n"
                    f"Respond with a single JSON object matching this JSON schema:\n{schema_json}"
                )

            openai_messages = self._convert_messages_to_openai_format(messages, system_instruction)

            logger.debug(f"Sending query to OpenRouter with model: {self.model_name}")

            request_kwargs = {
                "model": self.model_name,
                "messages": openai_messages,
                "temperature": 0.0,
            }
            if response_schema:
                request_kwargs["response_format"] = {"type": "json_object"}

            response = self.client.chat.completions.create(**request_kwargs)

            if not response.choices or not response.choices[0].message.content:
                raise RuntimeError("Empty response from OpenRouter API")

            usage = response.usage
            input_tokens = (usage.prompt_tokens or 0) if usage else 0
            output_tokens = (usage.completion_tokens or 0) if usage else 0

            logger.debug(f"Received response from OpenRouter ({input_tokens}+{output_tokens} tokens)")
            return LLMResponse(
                text=response.choices[0].message.content,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        except Exception as e:
            logger.error(f"OpenRouter API error: {e}")
            raise e

    def _convert_model_name(self, model_name: str) -> str:
        """모델명을 OpenRouter 형식으로 변환

        Args:
            model_name: 원본 모델명 (예: "gemini-2.5-flash")

        Returns:
            OpenRouter 형식의 모델명 (예: "google/gemini-2.5-flash")
        """
        if model_name.startswith("gemini-"):
            return f"google/{model_name}"

        # 이미 provider/model 형식이면 그대로 반환
        if "/" in model_name:
            return model_name

        logger.warning(f"Unknown model format: {model_name}, using as-is")
        return model_name

    def _convert_messages_to_openai_format(
        self,
        messages: List[Dict[str, str]],
        system_instruction: str
    ) -> List["ChatCompletionMessageParam"]:
        """메시지를 OpenAI 형식으로 변환"""
        openai_messages: List["ChatCompletionMessageParam"] = []

        if system_instruction:
            openai_messages.append(cast("ChatCompletionMessageParam", {
                "role": "system",
                "content": system_instruction
            }))

        for msg in messages:
            role = msg.get("role", "user")
            content = msg.get("content", "")

            if role == "assistant":
                openai_messages.append(cast("ChatCompletionMessageParam", {
                    "role": "assistant",
                    "content": content
                }))
            elif role == "system":
                # 시스템 메시지는 이미 추가했으므로 사용자 메시지로 변환
                openai_messages.append(cast("ChatCompletionMessageParam", {
                    "role": "user",
                    "content": f"[SYSTEM] {content}"
                }))
            else:
                openai_messages.append(cast("ChatCompletionMessageParam", {
                    "role": "user",
                    "content": content
                }))

        return openai_messages
