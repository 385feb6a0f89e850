import os
from json.decoder import JSONDecodeError
from openai import OpenAI
from typing import Dict, Any, List, Optional


DEFAULT_MODEL_NAME = "google/gemini-2.5-flash"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_REQUEST_TIMEOUT = 15.0


def _sanitize_env_value(value: Optional[str]) -> Optional[str]:
    """
    Clean up env-provided strings that may include surrounding quotes or whitespace.

    Some shells/export flows set values like OPENROUTER_API_KEY="sk-or-...".
    The OpenAI SDK forwards the raw string, so we strip wrapping quotes here
    to avoid 401s that look like "No cookie auth credentials found".
    """
    if value is None:
        return None
    cleaned = value.strip()
    if len(cleaned) >= 2 and (
        (cleaned[0] == '"' and cleaned[-1] == '"') or (cleaned[0] == "'" and cleaned[-1] == "'")
    ):
        cleaned = cleaned[1:-1].strip()
    return cleaned


class LLMProviderInterface:
    """
    A common interface for the text-generation calls behind the objective generator.
    """
    def get_response(self, prompt: str, system: Optional[str] = None) -> Dict[str, Any]:
        """Returns {"text": ..., "input_tokens": ..., "output_tokens": ...}."""
        raise NotImplementedError("Subclasses should implement this method.")

    @staticmethod
    def extract_api_kwargs(config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Extracts fields not part of the standard internal configuration
        into a dictionary suitable for passing as kwargs to the underlying API call.
        """
        api_kwargs = {}
        # Fields used internally for setup, not passed to the API directly
        known_fields = {'name', 'pricing', 'kwargs', 'model_name', 'request_timeout'}

        api_kwargs.update(config.get('kwargs', {}))

        for field_name, value in config.items():
            if field_name in known_fields:
                continue
            api_kwargs[field_name] = value

        return api_kwargs


class OpenRouterProvider(LLMProviderInterface):
    """
    Chat-completions client pointed at OpenRouter (or any OpenAI-compatible
    base URL from OPENROUTER_BASE_URL).
    """

    def __init__(self, api_key: str, config: Dict[str, Any]):
        base_url = _sanitize_env_value(os.getenv("OPENROUTER_BASE_URL")) or DEFAULT_BASE_URL
        self.model_name = config['model_name']
        self.request_timeout = float(config.get('request_timeout', DEFAULT_REQUEST_TIMEOUT))
        self.client = OpenAI(
            api_key=_sanitize_env_value(api_key) or api_key,
            base_url=base_url,
            timeout=self.request_timeout,
            max_retries=1,
        )
        self.api_kwargs = self.extract_api_kwargs(config)
        self.extra_headers = self._attribution_headers(self.api_kwargs.pop('extra_headers', None))

    @staticmethod
    def _attribution_headers(explicit: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        headers = {}
        referer = os.getenv("OPENROUTER_SITE_URL")
        title = os.getenv("OPENROUTER_SITE_NAME", "Snake Arcade")
        if referer:
            headers["HTTP-Referer"] = referer
        if title:
            headers["X-Title"] = title
        if explicit:
            headers.update(explicit)
        return headers or None

    @staticmethod
    def build_messages(prompt: str, system: Optional[str] = None) -> List[Dict[str, str]]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    def get_response(self, prompt: str, system: Optional[str] = None) -> Dict[str, Any]:
        request_kwargs = dict(self.api_kwargs)
        if self.extra_headers:
            request_kwargs['extra_headers'] = self.extra_headers

        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=self.build_messages(prompt, system),
                **request_kwargs,
            )
        except JSONDecodeError as exc:
            raise ValueError(
                "OpenRouter chat completion returned a non-JSON payload. "
                "This usually means the model slug is invalid or the request was redirected to an HTML error page."
            ) from exc

        if not getattr(response, 'choices', None):
            raise ValueError(f"OpenRouter response has no choices: {response}")

        usage = getattr(response, 'usage', None)
        content = response.choices[0].message.content or ""

        return {
            "text": content.strip(),
            "input_tokens": usage.prompt_tokens if usage else 0,
            "output_tokens": usage.completion_tokens if usage else 0
        }


def default_model_config() -> Dict[str, Any]:
    """
    Model configuration for the objective generator, read from the environment.
    """
    model_name = _sanitize_env_value(os.getenv("SNAKE_ARCADE_MODEL")) or DEFAULT_MODEL_NAME
    timeout = _sanitize_env_value(os.getenv("SNAKE_ARCADE_LLM_TIMEOUT"))
    return {
        "name": model_name,
        "model_name": model_name,
        "request_timeout": float(timeout) if timeout else DEFAULT_REQUEST_TIMEOUT,
        "max_tokens": 400,
        "temperature": 0.9,
    }


def create_llm_provider(config: Optional[Dict[str, Any]] = None) -> LLMProviderInterface:
    """
    Factory function for creating an LLM provider instance.
    All models route through OpenRouter.
    """
    openrouter_api_key = _sanitize_env_value(os.getenv("OPENROUTER_API_KEY"))
    if not openrouter_api_key:
        raise ValueError("OPENROUTER_API_KEY is not set in the environment variables.")

    return OpenRouterProvider(api_key=openrouter_api_key, config=config or default_model_config())
