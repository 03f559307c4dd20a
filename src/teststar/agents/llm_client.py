from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from openai import OpenAI

from teststar.config.schema import ModelConfig


class LLMClient:
    """Minimal helper for issuing chat completions to the generation service."""

    def __init__(self, config: ModelConfig, api_key: Optional[str] = None, client: Optional[OpenAI] = None):
        self.config = config
        key = api_key or os.getenv("OPENAI_API_KEY")
        if not key and client is None:
            raise RuntimeError("OPENAI_API_KEY must be set or an OpenAI client provided.")
        self.client = client or OpenAI(api_key=key)

    def generate(self, messages: List[Dict[str, Any]], **kwargs: Any) -> str:
        """Run one chat completion with the configured model; an empty reply comes back as ``""``."""
        request: Dict[str, Any] = {
            "model": self.config.name,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_output_tokens,
            **kwargs,
        }
        response = self.client.chat.completions.create(messages=messages, **request)
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def complete(self, prompt: str, system: Optional[str] = None, **kwargs: Any) -> str:
        """Send a single user prompt, optionally preceded by a system message."""
        messages: List[Dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return self.generate(messages, **kwargs)
