# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Environment-bound configuration.

Values are read from the environment and from a ``.env`` file in the working
directory. Nothing in here is consulted by the network core itself; the CLI
and the providers read it and pass explicit values down.
"""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types.llm_types import Model, Provider

load_dotenv()


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"

    # Inference
    MODEL: str = "gpt-4o"
    PROVIDER: Optional[Provider] = None  # inferred from MODEL when unset
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    TEMPERATURE: float = Field(default=0.666, ge=0.0, le=2.0)
    MAX_TOKENS: int = 4096

    # Bounds on the suspension points; None means unbounded
    ROUND_TIMEOUT: Optional[float] = None
    TOOL_TIMEOUT: Optional[float] = 600.0
    MAX_ROUNDS: Optional[int] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def model(self) -> Model:
        model = Model.from_id(self.MODEL, self.PROVIDER)
        model.max_output_tokens = self.MAX_TOKENS
        return model


@lru_cache()
def get_settings() -> Settings:
    return Settings()
