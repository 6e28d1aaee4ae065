"""
LLM Client
==========
Thin wrapper that sends a prompt plus a JSON schema to the configured
provider and returns the parsed JSON object.

Providers:
- openrouter (OpenAI SDK pointed at OpenRouter)
- openai
- anthropic

Every failure (no client, transport error, non-JSON answer) is raised as
LLMError so callers can decide whether it is fatal.
"""

import json
import logging
from typing import Any, Dict, Optional

from ..config.settings import LLM_CONFIG
from ..errors import LLMError

log = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert startup pitch reviewer. "
    "Always respond with a single valid JSON object only."
)


class LLMClient:
    """
    Language-model evaluation capability: evaluate(prompt, schema) -> dict.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key for LLM provider
            provider: LLM provider ("openrouter", "openai", or "anthropic")
            model: Model name in the provider's format
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key or LLM_CONFIG.get("api_key")
        self.provider = provider or LLM_CONFIG.get("provider", "openrouter")
        self.model = model or LLM_CONFIG.get("model")
        self.timeout = timeout or LLM_CONFIG.get("timeout_seconds", 30)
        self.base_url = LLM_CONFIG.get("base_url", "https://openrouter.ai/api/v1")
        self.max_tokens = LLM_CONFIG.get("max_tokens", 1500)
        self.temperature = LLM_CONFIG.get("temperature", 0.3)
        self.client = None

        self._initialize_client()

    @property
    def configured(self) -> bool:
        return self.client is not None

    def _initialize_client(self):
        """Initialize the SDK client based on provider"""
        if not self.api_key:
            log.info("No LLM API key configured; language-model calls will fail")
            return

        if self.provider == "openrouter":
            from openai import OpenAI
            self.client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": LLM_CONFIG.get("site_url", ""),
                    "X-Title": LLM_CONFIG.get("app_name", ""),
                },
            )
        elif self.provider == "openai":
            from openai import OpenAI
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        elif self.provider == "anthropic":
            from anthropic import Anthropic
            self.client = Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        else:
            raise ValueError(f"Unknown provider: {self.provider}")

    def evaluate(self, prompt: str, schema: Dict[str, Any]) -> Dict[str, Any]:
        """
        Ask the model to answer `prompt` with a JSON object matching `schema`.

        Raises:
            LLMError: when the call fails or the answer is not a JSON object
        """
        if not self.client:
            raise LLMError("LLM client is not configured")

        full_prompt = (
            f"{prompt}\n\n"
            f"Respond with a JSON object matching this JSON schema:\n"
            f"{json.dumps(schema, indent=2)}\n\n"
            f"Return ONLY the JSON object, no other text."
        )

        try:
            raw = self._call_llm(full_prompt)
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"{self.provider} request failed: {e}") from e

        return parse_json_response(raw)

    def _call_llm(self, prompt: str) -> str:
        """Call the provider API and return the text of the answer"""
        if self.provider in ["openrouter", "openai"]:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = response.choices[0].message.content
        else:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
            content = response.content[0].text

        if not content:
            raise LLMError("Empty response from language model")
        return content


def parse_json_response(response: str) -> Dict[str, Any]:
    """Parse a model answer, tolerating a surrounding markdown code fence"""
    clean = response.strip()
    if clean.startswith("```"):
        clean = clean.split("```")[1]
        if clean.startswith("json"):
            clean = clean[4:]
    clean = clean.strip()

    try:
        data = json.loads(clean)
    except json.JSONDecodeError as e:
        raise LLMError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise LLMError(f"Expected a JSON object, got {type(data).__name__}")
    return data
