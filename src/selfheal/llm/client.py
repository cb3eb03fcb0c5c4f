"""
Model client for locator suggestions.

Sends one recovery prompt to either backend protocol and returns the raw
suggestion text:

- Local: Ollama-style ``POST {base_url}/api/generate``
- Cloud: OpenAI-style ``POST /v1/chat/completions`` with bearer auth

Every backend failure (transport, timeout, HTTP status, malformed body)
degrades to an empty suggestion. The resolver treats that as "no
suggestion this attempt" and moves on.
"""

from __future__ import annotations

import re
from typing import Any

import httpx
import structlog

from selfheal.exceptions import BackendUnavailableError
from selfheal.llm.config import ModelConfig, Provider

logger = structlog.get_logger(__name__)

CLOUD_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_MARKUP_CHARS = 3000
TRUNCATION_MARKER = "\n... [HTML truncated - was too long]"

_THINK_RE = re.compile(r"<think>.*?</think>\s*", re.DOTALL)
_QUOTE_CHARS = "`\"'"

_PROMPT_TEMPLATE = """\
You are a Selenium test automation expert.

PROBLEM:
The following locator failed to find the element: {failed_locator}

WHAT I'M LOOKING FOR:
{element_description}

CURRENT PAGE HTML:
{markup}

TASK:
Suggest a new XPath or CSS selector that would find this element.
Return ONLY the selector string, nothing else - no explanations, no markdown.

EXAMPLES OF GOOD RESPONSES:
//input[@id='username']
#searchInput
input[name='search']"""


def truncate_markup(markup: str, max_length: int = DEFAULT_MAX_MARKUP_CHARS) -> str:
    """Keep the first ``max_length`` characters, appending a marker when cut."""
    if len(markup) <= max_length:
        return markup
    return markup[:max_length] + TRUNCATION_MARKER


def build_prompt(
    page_markup: str,
    failed_locator: str,
    element_description: str,
    max_markup_chars: int = DEFAULT_MAX_MARKUP_CHARS,
) -> str:
    """Build the single recovery prompt sent to either backend."""
    return _PROMPT_TEMPLATE.format(
        failed_locator=failed_locator,
        element_description=element_description,
        markup=truncate_markup(page_markup, max_markup_chars),
    )


def clean_suggestion(raw: str | None) -> str:
    """
    Reduce a model answer to a bare selector string.

    Strips ``<think>`` blocks, markdown code fences and surrounding quotes,
    and keeps only the first non-empty line.

    Args:
        raw: Raw model output

    Returns:
        Selector text, or empty string if nothing usable remains
    """
    if not raw:
        return ""

    content = _THINK_RE.sub("", raw).strip()

    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("```"):
            continue
        if len(line) >= 2 and line[0] == line[-1] and line[0] in _QUOTE_CHARS:
            line = line[1:-1].strip()
        return line

    return ""


class ModelClient:
    """
    Client for one configured model backend.

    Immutable after construction. Each request opens its own
    ``httpx.AsyncClient`` so one instance can be shared by resolutions
    running on different threads and event loops.

    Usage::

        client = ModelClient(ModelConfig())
        suggestion = await client.request_locator_suggestion(html, "By.Id: q", "Search box")
    """

    def __init__(
        self,
        config: ModelConfig,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_markup_chars: int = DEFAULT_MAX_MARKUP_CHARS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._timeout = timeout
        self._max_markup_chars = max_markup_chars
        self._transport = transport
        self._log = logger.bind(component="model_client", provider=str(config.provider))

    @property
    def config(self) -> ModelConfig:
        """Backend configuration this client was built with."""
        return self._config

    @property
    def timeout(self) -> float:
        """Per-request timeout in seconds."""
        return self._timeout

    async def request_locator_suggestion(
        self,
        page_markup: str,
        failed_locator_description: str,
        element_description: str,
    ) -> str:
        """
        Ask the backend for a replacement locator.

        Args:
            page_markup: Current page HTML (truncated before sending)
            failed_locator_description: Description of the locator that missed
            element_description: Human-readable description of the target

        Returns:
            Cleaned suggestion text, or empty string on any backend failure
        """
        prompt = build_prompt(
            page_markup,
            failed_locator_description,
            element_description,
            self._max_markup_chars,
        )

        try:
            match self._config.provider:
                case Provider.CLOUD:
                    raw = await self._call_cloud(prompt)
                case _:
                    raw = await self._call_local(prompt)
        except BackendUnavailableError as e:
            self._log.warning(
                "Model backend request failed",
                backend=e.provider,
                error=e.reason,
            )
            return ""

        return clean_suggestion(raw)

    async def _call_local(self, prompt: str) -> str:
        """Send the prompt to an Ollama-compatible ``/api/generate``."""
        payload = {
            "model": self._config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self._config.temperature,
                "num_predict": self._config.max_tokens,
            },
        }
        data = await self._post_json(f"{self._config.base_url}/api/generate", payload)

        response = data.get("response") if isinstance(data, dict) else None
        if not isinstance(response, str):
            raise BackendUnavailableError(Provider.LOCAL, "response body has no 'response' string")
        return response

    async def _call_cloud(self, prompt: str) -> str:
        """Send the prompt to the cloud chat-completions endpoint."""
        if not self._config.api_key:
            raise BackendUnavailableError(Provider.CLOUD, "no API key configured")

        payload = {
            "model": self._config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self._config.api_key}"}
        data = await self._post_json(CLOUD_CHAT_COMPLETIONS_URL, payload, headers=headers)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendUnavailableError(
                Provider.CLOUD, f"unexpected response shape: {e!r}"
            ) from e
        if not isinstance(content, str):
            raise BackendUnavailableError(Provider.CLOUD, "message content is not a string")
        return content

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON body and return the decoded JSON response."""
        provider = self._config.provider
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            raise BackendUnavailableError(provider, f"timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise BackendUnavailableError(provider, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise BackendUnavailableError(provider, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise BackendUnavailableError(provider, f"malformed JSON: {e}") from e
        except Exception as e:
            # Socket-level errors for a bad BaseUrl (e.g. OverflowError on port 99999)
            raise BackendUnavailableError(provider, f"{type(e).__name__}: {e}") from e
