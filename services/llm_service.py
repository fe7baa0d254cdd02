"""
LLM Service
Client for an OpenAI-compatible chat completions endpoint

One instance is built per application (see app.lifespan) and handed to
routes through a dependency.
"""

import logging
from typing import Dict, List, Optional, Any
import json
import re
import asyncio

import requests

from config import Settings
from services.exceptions import AssistantUnavailableError, AssistantResponseError


logger = logging.getLogger(__name__)


class LLMService:
    """
    Service for interacting with the language model
    Every call is a single round trip; nothing is retried here
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.api_key = settings.LLM_API_KEY
        self.base_url = settings.LLM_BASE_URL.rstrip("/")
        self.model_name = settings.LLM_MODEL
        self.parse_model_name = settings.LLM_PARSE_MODEL or settings.LLM_MODEL
        self.temperature = settings.LLM_TEMPERATURE
        self.max_tokens = settings.LLM_MAX_TOKENS
        self.timeout = settings.LLM_TIMEOUT_SECONDS
        self._session = session or requests.Session()

        if not self.api_key:
            logger.warning("LLM_API_KEY not configured; assistant features disabled")
        else:
            logger.info("LLM client configured with model: %s", self.model_name)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Send a chat completion request

        Args:
            messages: List of {"role": "user"|"assistant", "content": "..."}
            system_prompt: System instructions
            model: Override the default model
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum response tokens
            response_format: Structured output constraint

        Returns:
            Text of the first choice
        """
        if not self.configured:
            raise AssistantUnavailableError("Language assistant is not configured. Set LLM_API_KEY.")

        api_messages = []
        if system_prompt:
            api_messages.append({"role": "system", "content": system_prompt})
        for msg in messages:
            role = "assistant" if msg["role"] in ("assistant", "model") else "user"
            api_messages.append({"role": role, "content": msg["content"]})

        payload = {
            "model": model or self.model_name,
            "messages": api_messages,
            "temperature": temperature if temperature is not None else self.temperature,
            "max_tokens": max_tokens if max_tokens is not None else self.max_tokens,
        }
        if response_format:
            payload["response_format"] = response_format

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = await asyncio.get_running_loop().run_in_executor(
                None,
                lambda: self._session.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload,
                    timeout=self.timeout,
                ),
            )
        except requests.RequestException as e:
            logger.error("LLM request failed: %s", e)
            raise AssistantUnavailableError(f"Language assistant request failed: {e}") from e

        if resp.status_code != 200:
            logger.error("LLM API error %s: %s", resp.status_code, resp.text[:500])
            raise AssistantUnavailableError(f"Language assistant error: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise AssistantResponseError("Language assistant returned invalid JSON") from e

        if not isinstance(data, dict):
            raise AssistantResponseError("Language assistant returned an unexpected payload")

        choices = data.get("choices") or []
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> str:
        """Single-prompt generation"""
        return await self.complete(
            [{"role": "user", "content": prompt}],
            system_prompt=system_prompt,
            **kwargs
        )

    async def generate_json(
        self,
        prompt: str,
        schema: Dict[str, Any],
        schema_name: str = "response",
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Generate a JSON object constrained by a JSON schema

        Raises:
            AssistantResponseError: the reply held no JSON object
        """
        json_system = (system_prompt or "") + (
            "\n\nYou must respond with valid JSON only. No additional text, "
            "no markdown code blocks, just pure JSON."
            f"\n\nExpected JSON schema:\n{json.dumps(schema, indent=2)}"
        )

        response = await self.generate(
            prompt,
            system_prompt=json_system.strip(),
            response_format={
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": schema, "strict": False},
            },
            **kwargs
        )

        parsed = self.parse_json_response(response)
        if not isinstance(parsed, dict):
            raise AssistantResponseError("Language assistant did not return a JSON object")
        return parsed

    async def chat(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> str:
        """Multi-turn conversation"""
        return await self.complete(messages, system_prompt=system_prompt, **kwargs)

    def parse_json_response(self, response: str) -> Optional[Any]:
        """
        Parse JSON from LLM response, handling common issues

        Returns:
            Parsed JSON value, or None when nothing could be parsed
        """
        if not response:
            return None

        response = response.strip()

        try:
            return json.loads(response)
        except json.JSONDecodeError:
            pass

        # Try to extract JSON from markdown code blocks
        json_patterns = [
            r'```json\s*([\s\S]*?)\s*```',
            r'```\s*([\s\S]*?)\s*```',
            r'\{[\s\S]*\}',
        ]

        for pattern in json_patterns:
            match = re.search(pattern, response)
            if match:
                try:
                    json_str = match.group(1) if '```' in pattern else match.group(0)
                    return json.loads(json_str.strip())
                except json.JSONDecodeError:
                    continue

        logger.warning("Failed to parse JSON from response: %s...", response[:200])
        return None
