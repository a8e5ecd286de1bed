"""Configuration management

YAML configuration file loading and management implementations.
"""

from .settings import (
    AnalysisSettings,
    CacheSettings,
    GitPulseConfig,
    LLMProvider,
    LoggingConfig,
    ScoringSettings,
    find_config_path,
    load_config,
    load_config_for_repo,
)

__all__ = [
    "AnalysisSettings",
    "CacheSettings",
    "GitPulseConfig",
    "LLMProvider",
    "LoggingConfig",
    "ScoringSettings",
    "find_config_path",
    "load_config",
    "load_config_for_repo",
]
