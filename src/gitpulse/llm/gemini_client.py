"""Gemini API 클라이언트

Google Gemini API에 대한 단순한 래퍼 클라이언트입니다.
"""

import logging
from typing import Any, Dict, List, Optional, Type

from google import genai
from google.genai.errors import ClientError, ServerError
from google.genai.types import GenerateContentConfig
from pydantic import BaseModel

from .llm_response import LLMResponse

logger = logging.getLogger(__name__)


def _remove_additional_properties(schema_dict: Any) -> None:
    """Gemini API는 additionalProperties를 지원하지 않으므로 재귀적으로 제거"""
    if isinstance(schema_dict, dict):
        schema_dict.pop('additionalProperties', None)
        for value in schema_dict.values():
            _remove_additional_properties(value)
    elif isinstance(schema_dict, list):
        for item in schema_dict:
            _remove_additional_properties(item)


class GeminiClient:
    """Gemini API 클라이언트"""

    provider_name = "gemini"

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash"):
        """클라이언트 초기화

        Args:
            api_key: Gemini API 키
            model_name: 사용할 모델 이름
        """
        self.api_key = api_key
        self.model_name = model_name
        self.client = genai.Client(api_key=api_key)

        logger.info(f"Initialized GeminiClient with model: {model_name}")

    def query(
        self,
        messages: List[Dict[str, str]],
        system_instruction: str,
        response_schema: Optional[Type[BaseModel]] = None
    ) -> LLMResponse:
        """Gemini API에 쿼리를 보내고 응답을 받습니다

        Args:
            messages: 메시지 리스트 (role, content 포함)
            system_instruction: 시스템 인스트럭션
            response_schema: 구조화된 출력을 위한 Pydantic BaseModel 클래스

        Returns:
            LLMResponse: 응답 텍스트(구조화된 출력이면 JSON 문자열)와 토큰 사용량

        Raises:
            RuntimeError: 응답이 비어있는 경우
            ValueError: response_schema가 BaseModel 하위 클래스가 아닌 경우
            ClientError, ServerError: API 오류
        """
        try:
            contents = self._build_contents(messages)
            logger.debug(f"Sending query to Gemini: {contents[:100]}...")

            config = GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=0.0
            )

            if response_schema:
                if not issubclass(response_schema, BaseModel):
                    raise ValueError("response_schema must be a Pydantic BaseModel subclass")

                json_schema = response_schema.model_json_schema()
                _remove_additional_properties(json_schema)

                config.response_mime_type = "application/json"
                config.response_schema = json_schema
                logger.debug("Configured structured output with Pydantic model schema")

            response = self.client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config
            )

            if response.text is None:
                raise RuntimeError("Empty response from Gemini API")

            usage = getattr(response, 'usage_metadata', None)
            input_tokens = (getattr(usage, 'prompt_token_count', None) or 0) if usage else 0
            output_tokens = (getattr(usage, 'candidates_token_count', None) or 0) if usage else 0

            logger.debug(f"Received response from Gemini ({input_tokens}+{output_tokens} tokens)")
            return LLMResponse(
                text=response.text,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        except (ClientError, ServerError) as e:
            logger.error(f"Gemini API error: {e}")
            raise e

    @staticmethod
    def _build_contents(messages: List[Dict[str, str]]) -> str:
        """메시지를 단일 프롬프트로 변환"""
        if len(messages) == 1:
            return messages[0]["content"]

        content_parts = []
        for msg in messages:
            role = msg.get("role", "")
            content = msg.get("content", "")
            if role == "system":
                content_parts.append(f"[SYSTEM] {content}")
            elif role == "user":
                content_parts.append(f"[USER] {content}")
            else:
                content_parts.append(content)
        return "\n\n".join(content_parts)
