"""
Centralized LLM client for consistent API access across different providers.
Every interview prompt asks for JSON; the client applies JSON mode where the
provider supports it and degrades step by step when a request fails.
"""

import asyncio
import json
import logging
from typing import List, Dict, Any, Optional
from urllib.parse import urlparse

from openai import AsyncOpenAI

from app.llm.utils import ensure_json_instruction_in_messages

logger = logging.getLogger(__name__)

# Returned when no client is configured or every request attempt failed,
# so a running interview never stalls on the model.
STUB_REPLY = {
    "reply": "Thank you for that. Could you elaborate a bit more on your experience in that situation?",
    "intent": "follow_up",
    "suggestedNextPhase": None,
}


class LlmResponse:
    """Text content of a completion plus token usage when reported."""

    def __init__(self, content: str, prompt_tokens: int = 0, completion_tokens: int = 0,
                 is_stub: bool = False):
        self.content = content
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.is_stub = is_stub


class LlmClient:
    """
    Centralized client for all LLM API requests.
    Supports various OpenAI-compatible providers with provider-specific defaults.
    """

    # Provider-specific token limits
    TOKEN_LIMITS = {
        "default": 1024,
        "openai": 4096,
        "groq": 32768,
        "openrouter": 4096,
        "academic_cloud": 1500,
        "anthropic": 4096
    }

    # Default temperature values by provider
    TEMPERATURE_DEFAULTS = {
        "default": 0.4,
        "openai": 0.4,
        "groq": 0.4,
        "openrouter": 0.4,
        "academic_cloud": 0.5,
        "anthropic": 0.5
    }

    # Providers that accept response_format={"type": "json_object"}
    JSON_MODE_PROVIDERS = {"openai", "groq", "openrouter", "academic_cloud"}

    # Singleton instance
    _instance = None

    def __init__(self, client: Optional[Any], model: str = None):
        """
        Initialize an LLM client.

        Args:
            client: OpenAI-compatible async client, or None to always return the stub reply
            model: Default model name for requests
        """
        self.client = client
        self.model = model
        self.base_url = str(getattr(client, "base_url", "") or "")

        self.provider = self._detect_provider(self.base_url)
        logger.info(f"Initialized LlmClient with provider: {self.provider}")

    @classmethod
    def from_settings(cls, api_key: str, base_url: str, model: str) -> "LlmClient":
        """
        Builds a client from configuration. Without an API key the client runs
        in stub mode.
        """
        if not api_key:
            logger.warning("No LLM API key configured, interviewer replies will use the stub response")
            return cls(None, model)

        base_url = base_url.rstrip("/")
        host = (urlparse(base_url).hostname or "").lower()
        default_headers: Dict[str, str] = {}
        if host.endswith("anthropic.com"):
            default_headers["anthropic-version"] = "2023-06-01"
            default_headers["x-api-key"] = api_key

        return cls(AsyncOpenAI(api_key=api_key, base_url=base_url, default_headers=default_headers), model)

    @classmethod
    def get_default_client(cls) -> Optional['LlmClient']:
        """
        Returns the default client used in the application.
        """
        return cls._instance

    @classmethod
    def set_default_client(cls, client: Optional['LlmClient']) -> Optional['LlmClient']:
        """
        Sets the default client for the application.
        """
        cls._instance = client
        return cls._instance

    def _detect_provider(self, base_url: str) -> str:
        """
        Detects the LLM provider based on the base_url.

        Args:
            base_url: The provider URL

        Returns:
            Provider name as string
        """
        url_str = str(base_url).lower() if base_url else ""
        host = (urlparse(url_str).hostname or "").lower()

        if "openai.com" in host:
            return "openai"
        elif "anthropic.com" in host:
            return "anthropic"
        elif "groq.com" in host:
            return "groq"
        elif "openrouter.ai" in host:
            return "openrouter"
        elif "chat-ai.academiccloud.de" in url_str or "vllm" in url_str:
            return "academic_cloud"
        else:
            return "unknown"

    def _prepare_messages_for_provider(self, messages: List[Dict[str, str]]) -> List[Dict[str, str]]:
        """
        Prepares messages for the specific provider.

        Args:
            messages: List of messages in OpenAI format

        Returns:
            Adjusted message list
        """
        if not messages:
            return []

        # Copy messages to avoid modifying originals
        prepared_messages = [dict(m) for m in messages]

        if self.provider == "anthropic":
            # Anthropic requires a closing user message
            if prepared_messages[-1]["role"] != "user":
                prepared_messages.append({"role": "user", "content": "answer"})

        elif self.provider == "groq":
            # Groq only accepts 'role' and 'content'
            sanitized = []
            for m in prepared_messages:
                role = m.get("role")
                content = m.get("content", "")
                if not isinstance(content, str):
                    content = json.dumps(content, ensure_ascii=False)
                if role:
                    sanitized.append({"role": role, "content": content})
            prepared_messages = sanitized

        return prepared_messages

    def get_optimal_token_limit(self) -> int:
        return self.TOKEN_LIMITS.get(self.provider, self.TOKEN_LIMITS["default"])

    def get_default_temperature(self) -> float:
        return self.TEMPERATURE_DEFAULTS.get(self.provider, self.TEMPERATURE_DEFAULTS["default"])

    @staticmethod
    def stub_response() -> LlmResponse:
        return LlmResponse(json.dumps(STUB_REPLY), prompt_tokens=100, completion_tokens=30, is_stub=True)

    async def _complete(self, params: Dict[str, Any], timeout: Optional[float]) -> LlmResponse:
        call = self.client.chat.completions.create(**params)
        response = await (asyncio.wait_for(call, timeout) if timeout else call)
        content = (response.choices[0].message.content or "").strip()
        usage = getattr(response, "usage", None)
        return LlmResponse(
            content,
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )

    async def chat(self,
                   messages: List[Dict[str, str]],
                   temperature: Optional[float] = None,
                   max_tokens: Optional[int] = None,
                   timeout: Optional[float] = None,
                   model: str = None) -> LlmResponse:
        """
        Executes a chat completion that is expected to return a JSON object.

        Attempts, in order: JSON mode (where supported), a minimal request
        without format parameters, and finally the stub reply.

        Args:
            messages: Messages for the LLM request
            temperature: Sampling temperature (provider default if None)
            max_tokens: Completion token limit (provider default if None)
            timeout: Per-attempt timeout in seconds
            model: Model name (overrides default model)

        Returns:
            LlmResponse with the raw text content
        """
        if not self.client:
            return self.stub_response()

        model = model or self.model
        if not model:
            raise ValueError("No model specified. Please pass model parameter or specify in constructor.")

        prepared = self._prepare_messages_for_provider(messages)
        base_params: Dict[str, Any] = {
            "model": model,
            "messages": prepared,
            "temperature": temperature if temperature is not None else self.get_default_temperature(),
            "max_tokens": max_tokens or self.get_optimal_token_limit(),
        }

        json_params = dict(base_params)
        json_params["messages"] = ensure_json_instruction_in_messages(prepared)
        if self.provider in self.JSON_MODE_PROVIDERS:
            json_params["response_format"] = {"type": "json_object"}

        logger.info(f"Making chat request to {self.provider} with {model}")

        try:
            return await self._complete(json_params, timeout)
        except Exception as e:
            logger.error(f"JSON chat request failed: {e}")

        try:
            logger.warning("Trying minimal request as fallback")
            minimal_params = {"model": model, "messages": prepared}
            response = await self._complete(minimal_params, timeout)
            logger.info("Minimal request successful")
            return response
        except Exception as minimal_error:
            logger.error(f"All LLM attempts failed, using stub reply: {minimal_error}")
            return self.stub_response()


def get_llm_client() -> LlmClient:
    """
    Returns the application LLM client, creating it from settings on first use.
    """
    client = LlmClient.get_default_client()
    if client is None:
        from app.interview import settings

        client = LlmClient.set_default_client(
            LlmClient.from_settings(settings.LLM_API_KEY, settings.LLM_BASE_URL, settings.LLM_MODEL)
        )
    return client
