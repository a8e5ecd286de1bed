from dataclasses import dataclass


@dataclass(frozen=True)
class LLMResponse:
    """LLM 응답 텍스트와 토큰 사용량"""
    text: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens
