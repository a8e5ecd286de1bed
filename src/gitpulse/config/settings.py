"""설정 관리 모듈

YAML 설정 파일을 로드하고 검증하는 기능을 제공합니다.
Pydantic을 사용하여 타입 안전성과 검증을 보장합니다.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Optional
import yaml
from pydantic import BaseModel, Field, model_validator
import logging

from gitpulse.scoring.dimensions import DimensionWeight, get_default_weights

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ('.gitpulse.yml', '.gitpulse.yaml')
GLOBAL_CONFIG_PATH = Path.home() / '.gitpulse' / 'config.yml'

# 제공자별 API 키 환경 변수
PROVIDER_API_KEY_ENV = {
    'gemini': 'GEMINI_API_KEY',
    'openrouter': 'OPENROUTER_API_KEY',
    'custom': 'OPENAI_API_KEY',
}


class LLMProvider(str, Enum):
    """채점 오라클 제공자"""
    GEMINI = "gemini"
    OPENROUTER = "openrouter"
    CUSTOM = "custom"


class ScoringSettings(BaseModel):
    """채점 설정"""
    weights: DimensionWeight = Field(default_factory=get_default_weights)
    time_decay: bool = False
    time_decay_lambda: float = Field(default=0.01, ge=0.0)  # 일 단위 감쇠율
    max_tokens_per_diff: int = Field(default=8000, gt=0)


class AnalysisSettings(BaseModel):
    """커밋 분류 및 실행 설정"""
    small_commit_threshold: int = Field(default=10, ge=0)
    large_commit_threshold: int = Field(default=500, ge=0)
    skip_merge_commits: bool = True
    max_concurrency: int = Field(default=3, ge=1)

    @model_validator(mode='after')
    def validate_thresholds(self):
        """임계값 순서 검증"""
        if self.large_commit_threshold < self.small_commit_threshold:
            raise ValueError(
                f"large_commit_threshold ({self.large_commit_threshold}) must be >= "
                f"small_commit_threshold ({self.small_commit_threshold})"
            )
        return self


class CacheSettings(BaseModel):
    """점수 캐시 설정"""
    enabled: bool = True
    directory: str = "~/.gitpulse/cache"

    def resolve_directory(self) -> Path:
        return Path(self.directory).expanduser()


class LoggingConfig(BaseModel):
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class GitPulseConfig(BaseModel):
    """전체 설정"""
    provider: LLMProvider = LLMProvider.GEMINI
    model: str = "gemini-2.5-flash"
    base_url: Optional[str] = None
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode='after')
    def validate_config(self):
        """전체 설정 검증"""
        if self.provider == LLMProvider.CUSTOM and not self.base_url:
            raise ValueError("Custom provider requires a base_url")

        # API 키 확인
        env_var = PROVIDER_API_KEY_ENV[self.provider.value]
        if not os.getenv(env_var) and self.provider != LLMProvider.CUSTOM:
            logger.warning(f"Missing environment variable: {env_var}")

        return self

    @property
    def api_key_env(self) -> str:
        return PROVIDER_API_KEY_ENV[self.provider.value]


def load_config(config_path: str) -> GitPulseConfig:
    """설정 파일 로드

    Args:
        config_path: 설정 파일 경로

    Returns:
        로드된 설정 객체

    Raises:
        FileNotFoundError: 설정 파일이 존재하지 않는 경우
        ValueError: 설정 파일 형식이 잘못된 경우
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        config = GitPulseConfig(**config_data)
        logger.info(f"Loaded configuration from: {config_path}")
        return config

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML format: {e}")
    except Exception as e:
        raise ValueError(f"Failed to load config: {e}")


def find_config_path(repo_path: Optional[str] = None) -> Optional[str]:
    """설정 파일 경로 탐색

    저장소 루트의 .gitpulse.yml / .gitpulse.yaml, 그 다음 ~/.gitpulse/config.yml 순서로 찾습니다.
    """
    search_dirs = [Path(repo_path)] if repo_path else []
    search_dirs.append(Path.cwd())

    for directory in search_dirs:
        for file_name in CONFIG_FILE_NAMES:
            candidate = directory / file_name
            if candidate.exists():
                return str(candidate)

    if GLOBAL_CONFIG_PATH.exists():
        return str(GLOBAL_CONFIG_PATH)

    return None


def load_config_for_repo(repo_path: Optional[str] = None) -> GitPulseConfig:
    """저장소 기준 설정 로드 (설정 파일이 없으면 기본값)"""
    config_path = find_config_path(repo_path)
    if config_path is None:
        logger.info("Config file not found, using defaults")
        return GitPulseConfig()
    return load_config(config_path)
