# SPDX-License-Identifier: MIT
"""InputCheck 설정 로더 및 스키마 정의.

config/inputcheck.yaml (선택)을 로드하고 환경변수로 오버라이드합니다.

환경변수:
  - INPUTCHECK_MODEL: generator 모델명
  - INPUTCHECK_MAX_CHARS: 입력 최대 문자 수
  - INPUTCHECK_TIMEOUT_MS: generator 타임아웃 (ms)
  - INPUTCHECK_MAX_REPAIRS: 검증 실패 시 최대 repair 횟수
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from inputcheck.errors import ConfigError

ENGINE_VERSION = "inputcheck-v1.6.0"

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "inputcheck.yaml"


class GeneratorSettings(BaseModel):
    """Generator 호출 설정"""

    model: str = Field(default="gpt-4.1-mini")
    timeout_ms: int = Field(default=20000)
    temperature: float = Field(default=0.1)
    top_p: float = Field(default=0.8)
    max_tokens: int = Field(default=900)

    @field_validator("timeout_ms", "max_tokens")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("temperature", "top_p")
    @classmethod
    def validate_unit_range(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("must be between 0.0 and 2.0")
        return v


class CompositionSettings(BaseModel):
    """Composer 구조 규칙"""

    capsule_max_words: int = Field(default=25)
    mini_answer_max_sentences: int = Field(default=5)
    max_frame_items: int = Field(default=3)
    max_steps: int = Field(default=5)
    max_tools: int = Field(default=5)
    max_sub_intents: int = Field(default=5)
    slug_max_length: int = Field(default=80)
    share_link_line: str = Field(default="Run this through Input Check at https://theanswervault.com/")

    @field_validator("capsule_max_words")
    @classmethod
    def validate_capsule_words(cls, v: int) -> int:
        if not 1 <= v <= 25:
            raise ValueError("capsule_max_words must be between 1 and 25")
        return v

    @field_validator("max_frame_items")
    @classmethod
    def validate_frame_items(cls, v: int) -> int:
        if not 0 <= v <= 3:
            raise ValueError("max_frame_items must be between 0 and 3")
        return v

    @field_validator("max_steps")
    @classmethod
    def validate_steps(cls, v: int) -> int:
        if not 3 <= v <= 5:
            raise ValueError("max_steps must be between 3 and 5")
        return v

    @field_validator("share_link_line")
    @classmethod
    def validate_link_line(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("share_link_line must be non-empty")
        return v


class InputCheckSettings(BaseModel):
    """InputCheck 전체 설정"""

    engine_version: str = Field(default=ENGINE_VERSION)
    max_chars: int = Field(default=2000)
    max_repairs: int = Field(default=2)
    clarification_score_ceiling: int = Field(default=6)
    near_duplicate_threshold: float = Field(default=0.9)
    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    composition: CompositionSettings = Field(default_factory=CompositionSettings)

    @field_validator("max_chars")
    @classmethod
    def validate_max_chars(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_chars must be positive")
        return v

    @field_validator("max_repairs")
    @classmethod
    def validate_max_repairs(cls, v: int) -> int:
        if not 0 <= v <= 5:
            raise ValueError("max_repairs must be between 0 and 5")
        return v

    @field_validator("clarification_score_ceiling")
    @classmethod
    def validate_ceiling(cls, v: int) -> int:
        # 8-10 is reserved for unambiguous, safe questions
        if not 0 <= v <= 7:
            raise ValueError("clarification_score_ceiling must be between 0 and 7")
        return v

    @field_validator("near_duplicate_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError("near_duplicate_threshold must be in (0.0, 1.0]")
        return v


_ENV_OVERRIDES = {
    "INPUTCHECK_MODEL": ("generator", "model", str),
    "INPUTCHECK_TIMEOUT_MS": ("generator", "timeout_ms", int),
    "INPUTCHECK_MAX_CHARS": (None, "max_chars", int),
    "INPUTCHECK_MAX_REPAIRS": (None, "max_repairs", int),
}


def _apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, (section, key, cast) in _ENV_OVERRIDES.items():
        env_val = os.getenv(env_name)
        if env_val is None or not env_val.strip():
            continue
        try:
            value = cast(env_val.strip())
        except ValueError as e:
            raise ConfigError(f"{env_name} is not a valid {cast.__name__}: {env_val!r}") from e
        if section is None:
            raw[key] = value
        else:
            raw.setdefault(section, {})[key] = value
    return raw


def load_settings(config_path: Path | str | None = None) -> InputCheckSettings:
    """설정 로드

    Args:
        config_path: 설정 파일 경로. None이면 기본 경로 (없으면 기본값) 사용.

    Returns:
        InputCheckSettings: 검증된 설정 객체

    Raises:
        FileNotFoundError: 명시한 설정 파일이 없는 경우
        ConfigError: 설정 형식이 잘못된 경우
    """
    raw_config: Dict[str, Any] = {}

    if config_path is None:
        path: Optional[Path] = DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None
    else:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"설정 파일을 찾을 수 없습니다: {path}")

    if path is not None:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"settings file must hold a mapping: {path}")
        raw_config = loaded

    raw_config = _apply_env_overrides(raw_config)

    try:
        return InputCheckSettings(**raw_config)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


# 싱글톤 패턴으로 설정 캐싱
_cached_settings: InputCheckSettings | None = None


def get_settings(reload: bool = False) -> InputCheckSettings:
    """캐시된 설정 반환

    Args:
        reload: True이면 설정 파일을 다시 로드

    Returns:
        InputCheckSettings
    """
    global _cached_settings  # noqa: PLW0603

    if _cached_settings is None or reload:
        _cached_settings = load_settings()

    return _cached_settings


__all__ = [
    "ENGINE_VERSION",
    "GeneratorSettings",
    "CompositionSettings",
    "InputCheckSettings",
    "load_settings",
    "get_settings",
]
