"""Model provider clients.

Thin wrappers over the OpenAI and Gemini HTTP APIs. Each client sends the
full conversation history and returns the reply text exactly as received;
turning that text into structure is the response parser's job.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from enum import Enum
from typing import Any, Optional

import requests
from pydantic import BaseModel

from .config import ChatConfig, get_config

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class AIProvider(str, Enum):
    """Supported model providers."""
    OPENAI = "openai"
    GEMINI = "gemini"


class AIModel(BaseModel):
    """A model offered by a provider."""
    id: str
    name: str


DEFAULT_MODELS: dict[AIProvider, list[AIModel]] = {
    AIProvider.OPENAI: [
        AIModel(id="gpt-4o-mini", name="GPT-4o Mini (Fast & Cheap)"),
        AIModel(id="gpt-4o", name="GPT-4o (Most Capable)"),
        AIModel(id="gpt-3.5-turbo", name="GPT-3.5 Turbo (Legacy)"),
    ],
    AIProvider.GEMINI: [
        AIModel(id="gemini-2.0-flash-exp", name="Gemini 2.0 Flash (Latest)"),
        AIModel(id="gemini-1.5-flash-latest", name="Gemini 1.5 Flash"),
        AIModel(id="gemini-1.5-pro-latest", name="Gemini 1.5 Pro"),
    ],
}


class ProviderError(Exception):
    """Raised when a provider request fails."""

    def __init__(self, message: str, provider: AIProvider, status_code: Optional[int] = None):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        super().__init__(self.message)


def build_system_prompt(today: Optional[date] = None) -> str:
    """Instructions asking the model for the structured JSON envelope."""
    current = (today or date.today()).strftime("%B %Y")
    return f"""You are a senior software architect helping developers choose the optimal tech stack. Current date: {current}.

IMPORTANT: You MUST respond with a valid JSON object in this exact format:

{{
  "text": "Your conversational response here. Use markdown for formatting (bold with **text**, numbered lists with 1. 2. 3., etc.)",
  "suggestions": ["Button 1", "Button 2", "Button 3"]
}}

The "suggestions" array should contain 3-5 quick reply options that the user can click. Make them short and actionable.

CONVERSATION FLOW:
1. First, ask about their project type. Suggestions might be: ["Web App", "Mobile App", "E-commerce", "Blog/Portfolio", "API/Backend"]
2. Then ask about their experience level. Suggestions: ["Beginner", "Intermediate", "Advanced"]
3. Ask about their priorities. Suggestions: ["Fast Development", "Scalability", "Low Cost", "Performance"]
4. Ask about expected scale. Suggestions: ["Personal Project", "Startup/Small", "Enterprise/Large"]

When you have enough information (usually after 3-4 exchanges), provide final recommendations in this format:
{{
  "text": "Based on your requirements, here are my recommendations:",
  "suggestions": ["Explain frontend choice", "Explain backend choice", "Start over"],
  "recommendations": {{
    "frontend": {{"name": "Technology Name", "reason": "Why this is best (2-3 sentences)", "alternatives": ["Alt1", "Alt2"]}},
    "backend": {{"name": "Technology Name", "reason": "Why this is best", "alternatives": ["Alt1", "Alt2"]}},
    "database": {{"name": "Technology Name", "reason": "Why this is best", "alternatives": ["Alt1", "Alt2"]}},
    "hosting": {{"name": "Technology Name", "reason": "Why this is best", "alternatives": ["Alt1", "Alt2"]}},
    "summary": "A 2-sentence summary of why this stack works well together."
  }}
}}

Remember: ALWAYS respond with valid JSON. The "text" field is required. The "suggestions" field should have relevant quick-reply options."""


def _dig(data: Any, *path: Any) -> Any:
    """Follow keys/indexes into decoded JSON, returning None on any miss."""
    for step in path:
        try:
            data = data[step]
        except (KeyError, IndexError, TypeError):
            return None
    return data


class ProviderClient(ABC):
    """Base class for provider clients."""

    provider: AIProvider
    default_error = "API request failed"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        session: Optional[requests.Session] = None,
        chat_config: Optional[ChatConfig] = None,
    ):
        self.api_key = api_key
        self.model = model or DEFAULT_MODELS[self.provider][0].id
        self.session = session or requests.Session()
        self.chat_config = chat_config or get_config().chat

    @abstractmethod
    def complete(self, messages: list[dict[str, str]]) -> str:
        """Send the conversation and return the raw reply text."""

    @abstractmethod
    def list_models(self) -> list[AIModel]:
        """Models available to this key, or the defaults on any failure."""

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = self.session.request(method, url, timeout=self.chat_config.request_timeout, **kwargs)
        except requests.Timeout:
            raise ProviderError("Request to the model provider timed out.", self.provider)
        except requests.ConnectionError:
            raise ProviderError("Could not connect to the model provider.", self.provider)
        except requests.RequestException as exc:
            raise ProviderError(f"Network error: {exc}", self.provider)

        if not resp.ok:
            try:
                message = _dig(resp.json(), "error", "message")
            except ValueError:
                message = None
            raise ProviderError(message or self.default_error, self.provider, resp.status_code)

        try:
            return resp.json()
        except ValueError:
            raise ProviderError("Provider returned a response that is not JSON.", self.provider, resp.status_code)


class OpenAIClient(ProviderClient):
    """Chat completions client for OpenAI."""

    provider = AIProvider.OPENAI
    default_error = "OpenAI API request failed"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    def complete(self, messages: list[dict[str, str]]) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "system", "content": build_system_prompt()}, *messages],
            "temperature": self.chat_config.temperature,
            "max_tokens": self.chat_config.max_tokens,
            "response_format": {"type": "json_object"},
        }
        logger.debug("Sending %d messages to OpenAI model %s", len(messages), self.model)
        data = self._request("POST", f"{OPENAI_BASE_URL}/chat/completions", headers=self._headers(), json=payload)
        return _dig(data, "choices", 0, "message", "content") or ""

    def list_models(self) -> list[AIModel]:
        try:
            data = self._request("GET", f"{OPENAI_BASE_URL}/models", headers=self._headers())
        except ProviderError as exc:
            logger.warning("Could not list OpenAI models, using defaults: %s", exc)
            return DEFAULT_MODELS[self.provider]

        ids = [
            entry["id"] for entry in (_dig(data, "data") or [])
            if isinstance(entry, dict) and isinstance(entry.get("id"), str)
            and ("gpt-4" in entry["id"] or "gpt-3.5" in entry["id"])
        ]
        models = [AIModel(id=model_id, name=model_id) for model_id in sorted(ids)]
        return models or DEFAULT_MODELS[self.provider]


class GeminiClient(ProviderClient):
    """generateContent client for Google Gemini."""

    provider = AIProvider.GEMINI
    default_error = "Gemini API request failed"

    def _contents(self, messages: list[dict[str, str]]) -> list[dict]:
        # Gemini has no system role; the prompt rides on the first message.
        contents = []
        for index, msg in enumerate(messages):
            text = msg["content"]
            if index == 0:
                text = f"{build_system_prompt()}\n\nUser's message: {text}"
            contents.append({
                "role": "model" if msg["role"] == "assistant" else "user",
                "parts": [{"text": text}],
            })
        return contents

    def complete(self, messages: list[dict[str, str]]) -> str:
        payload = {
            "contents": self._contents(messages),
            "generationConfig": {
                "temperature": self.chat_config.temperature,
                "maxOutputTokens": self.chat_config.max_tokens,
                "responseMimeType": "application/json",
            },
        }
        logger.debug("Sending %d messages to Gemini model %s", len(messages), self.model)
        data = self._request(
            "POST",
            f"{GEMINI_BASE_URL}/models/{self.model}:generateContent",
            params={"key": self.api_key},
            json=payload,
        )
        return _dig(data, "candidates", 0, "content", "parts", 0, "text") or ""

    def list_models(self) -> list[AIModel]:
        try:
            data = self._request("GET", f"{GEMINI_BASE_URL}/models", params={"key": self.api_key})
        except ProviderError as exc:
            logger.warning("Could not list Gemini models, using defaults: %s", exc)
            return DEFAULT_MODELS[self.provider]

        models = []
        for entry in _dig(data, "models") or []:
            if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                continue
            if "generateContent" not in (entry.get("supportedGenerationMethods") or []):
                continue
            if "gemini" not in entry["name"]:
                continue
            model_id = entry["name"].replace("models/", "")
            models.append(AIModel(id=model_id, name=entry.get("displayName") or model_id))
        return models or DEFAULT_MODELS[self.provider]


_CLIENTS: dict[AIProvider, type[ProviderClient]] = {
    AIProvider.OPENAI: OpenAIClient,
    AIProvider.GEMINI: GeminiClient,
}


def create_client(
    provider: AIProvider,
    api_key: str,
    model: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> ProviderClient:
    """Build the client for ``provider``."""
    try:
        client_cls = _CLIENTS[AIProvider(provider)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown AI provider: {provider}")
    return client_cls(api_key, model=model, session=session)
