"""Client for the OpenAI-compatible annotation service."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import AnnotationServiceError


@dataclass
class LLMRequest:
    """Represents one chat-completion request."""

    prompt: str
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    api_key: str
    request_timeout: Optional[float]


class LLMRunner:
    """Executes prompts against the configured chat-completions endpoint."""

    DEFAULT_MODEL = "moonshot-v1-8k"
    DEFAULT_BASE_URL = "https://api.moonshot.cn/v1"
    DEFAULT_TEMPERATURE = 0.3
    DEFAULT_MAX_TOKENS = 4096
    ENV_API_KEY = "MOONSHOT_API_KEY"
    ENV_BASE_URL = "MOONSHOT_BASE_URL"
    ENV_MODEL = "GOCMT_MODEL"

    def __init__(
        self,
        api_key: str,
        *,
        model: str | None = None,
        base_url: str | None = None,
        temperature: Optional[float] = DEFAULT_TEMPERATURE,
        max_tokens: Optional[int] = DEFAULT_MAX_TOKENS,
        request_timeout: Optional[float] = 120.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        if not api_key:
            raise AnnotationServiceError("An API key is required for the annotation service.")
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._runner = runner or self._http_runner

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        **kwargs: object,
    ) -> "LLMRunner":
        """Build a runner from environment variables, which override ``model``/``base_url``."""
        env = os.environ if environ is None else environ
        api_key = env.get(cls.ENV_API_KEY, "")
        if not api_key:
            raise AnnotationServiceError(f"the environment variable {cls.ENV_API_KEY} is not set.")
        return cls(
            api_key,
            model=env.get(cls.ENV_MODEL) or model,
            base_url=env.get(cls.ENV_BASE_URL) or base_url,
            **kwargs,  # type: ignore[arg-type]
        )

    def run(self, prompt: str) -> str:
        """Send the prompt and return the reply text."""
        request = LLMRequest(
            prompt=prompt,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        endpoint = f"{request.base_url}/chat/completions"
        payload: dict[str, object] = {
            "model": request.model,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        data = json.dumps(payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {request.api_key}",
        }
        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or 120.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise AnnotationServiceError(
                f"ChatCompletion failed with status {exc.code}: {message}"
            ) from exc
        except URLError as exc:
            raise AnnotationServiceError(f"ChatCompletion failed: {exc.reason}") from exc
        except TimeoutError as exc:
            raise AnnotationServiceError("ChatCompletion timed out") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise AnnotationServiceError("ChatCompletion returned invalid JSON") from exc

        content = LLMRunner._extract_content(response_payload)
        if not content:
            raise AnnotationServiceError("ChatCompletion returned an empty response")
        return content.strip()

    @staticmethod
    def _extract_content(payload: object) -> str:
        if not isinstance(payload, dict):
            return ""
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        return ""


__all__ = ["LLMRequest", "LLMRunner"]
