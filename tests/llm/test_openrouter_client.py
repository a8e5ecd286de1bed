"""OpenRouter API 클라이언트 단위 테스트"""

import pytest
from unittest.mock import Mock, patch

from gitpulse.llm.openrouter_client import OPENROUTER_BASE_URL, OpenRouterClient
from gitpulse.llm.schemas import BatchScoringResponse


def _completion(content, prompt_tokens=200, completion_tokens=50):
    message = Mock(content=content)
    response = Mock()
    response.choices = [Mock(message=message)]
    response.usage = Mock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return response


class TestOpenRouterClient:
    """OpenRouterClient 테스트 클래스"""

    @pytest.fixture
    def mock_openai(self):
        """OpenAI SDK 모킹"""
        with patch('gitpulse.llm.openrouter_client.OpenAI') as mock_openai:
            mock_client = Mock()
            mock_openai.return_value = mock_client
            yield mock_openai, mock_client

    @pytest.mark.parametrize("model_name, expected", [
        ("gemini-2.5-flash", "google/gemini-2.5-flash"),
        ("openai/gpt-4o", "openai/gpt-4o"),
        ("mystery-model", "mystery-model"),
    ])
    def test_model_name_conversion(self, mock_openai, model_name, expected):
        client = OpenRouterClient("key", model_name)

        assert client.model_name == expected
        assert client.provider_name == "openrouter"
        mock_openai[0].assert_called_once_with(api_key="key", base_url=OPENROUTER_BASE_URL)

    def test_custom_endpoint_keeps_model_name(self, mock_openai):
        """OpenAI 호환 엔드포인트에서는 모델명을 변환하지 않음"""
        client = OpenRouterClient(
            "no-key", "gemini-2.5-flash", base_url="http://localhost:8000/v1", provider_name="custom"
        )

        assert client.model_name == "gemini-2.5-flash"
        assert client.provider_name == "custom"

    def test_query_success(self, mock_openai):
        """쿼리 성공 테스트"""
        # Given
        _, mock_client = mock_openai
        mock_client.chat.completions.create.return_value = _completion("평가 결과")
        client = OpenRouterClient("key", "openai/gpt-4o")

        # When
        result = client.query([{"role": "user", "content": "평가"}], system_instruction="평가자")

        # Then
        assert result.text == "평가 결과"
        assert result.total_tokens == 250
        kwargs = mock_client.chat.completions.create.call_args[1]
        assert kwargs['messages'] == [
            {"role": "system", "content": "평가자"},
            {"role": "user", "content": "평가"},
        ]
        assert 'response_format' not in kwargs

    def test_query_with_schema_uses_json_mode(self, mock_openai):
        """스키마가 주어지면 JSON 모드를 켜고 시스템 프롬프트에 스키마를 덧붙임"""
        # Given
        _, mock_client = mock_openai
        mock_client.chat.completions.create.return_value = _completion('{"scores": []}')
        client = OpenRouterClient("key", "openai/gpt-4o")

        # When
        client.query([{"role": "user", "content": "평가"}], "평가자", response_schema=BatchScoringResponse)

        # Then
        kwargs = mock_client.chat.completions.create.call_args[1]
        assert kwargs['response_format'] == {"type": "json_object"}
        system_message = kwargs['messages'][0]['content']
        assert system_message.startswith("평가자")
        assert '"scores"' in system_message

    def test_system_role_message_becomes_user(self, mock_openai):
        _, mock_client = mock_openai
        mock_client.chat.completions.create.return_value = _completion("ok")
        client = OpenRouterClient("key", "openai/gpt-4o")

        client.query([{"role": "system", "content": "extra"}, {"role": "assistant", "content": "hi"}], "")

        messages = mock_client.chat.completions.create.call_args[1]['messages']
        assert messages == [
            {"role": "user", "content": "[SYSTEM] extra"},
            {"role": "assistant", "content": "hi"},
        ]

    def test_query_empty_response(self, mock_openai):
        _, mock_client = mock_openai
        mock_client.chat.completions.create.return_value = _completion(None)
        client = OpenRouterClient("key", "openai/gpt-4o")

        with pytest.raises(RuntimeError, match="Empty response from OpenRouter API"):
            client.query([{"role": "user", "content": "x"}], "")

    def test_query_without_usage(self, mock_openai):
        _, mock_client = mock_openai
        completion = _completion("ok")
        completion.usage = None
        mock_client.chat.completions.create.return_value = completion
        client = OpenRouterClient("key", "openai/gpt-4o")

        assert client.query([{"role": "user", "content": "x"}], "").total_tokens == 0

    def test_api_error_is_propagated(self, mock_openai):
        _, mock_client = mock_openai
        mock_client.chat.completions.create.side_effect = ConnectionError("network down")
        client = OpenRouterClient("key", "openai/gpt-4o")

        with pytest.raises(ConnectionError):
            client.query([{"role": "user", "content": "x"}], "")
