"""GitPulse

LLM 기반 커밋 diff 채점 및 작성자별 기여 품질 분석 도구
"""

__version__ = "0.1.0"
