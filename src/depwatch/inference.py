"""Text-generation backends used to turn release notes into records.

A backend is any callable ``prompt -> text``. :class:`AnthropicInference`
wraps the ``anthropic`` SDK and reports an absent SDK or API key as
:class:`NoModelAvailable`.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any

from depwatch.errors import NoModelAvailable

log = logging.getLogger(__name__)

type InferFn = Callable[[str], str]

PROMPT_TEMPLATE = """\
You are given text extracted from Chrome release notes.
Identify any deprecated or changed APIs and return them in a JSON array of objects,
using the code block ```json ...``` format.
Example:
```json
[
  {{ "apiName": "...", "changeType": "...", "description": "..." }},
  ...
]
```
Here is the text:
{text}
"""


def build_prompt(sections_text: str) -> str:
    return PROMPT_TEMPLATE.format(text=sections_text)


class AnthropicInference:
    """Callable backend over the Anthropic Messages API."""

    def __init__(
        self,
        *,
        model: str,
        max_tokens: int = 4096,
        api_key: str | None = None,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        self._api_key = api_key if api_key is not None else os.environ.get("ANTHROPIC_API_KEY", "")
        self._client: Any = None

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise NoModelAvailable("ANTHROPIC_API_KEY is not set")
        try:
            import anthropic
        except ImportError as exc:
            raise NoModelAvailable(f"anthropic SDK unavailable: {exc}") from exc
        self._client = anthropic.Anthropic(api_key=self._api_key)
        return self._client

    def __call__(self, prompt: str) -> str:
        client = self._get_client()
        response = client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=0.0,
            messages=[{"role": "user", "content": prompt}],
        )
        text_parts: list[str] = []
        for block in getattr(response, "content", []):
            txt = getattr(block, "text", "")
            if isinstance(txt, str):
                text_parts.append(txt)
        raw = "".join(text_parts)
        log.info("Model %s returned %d character(s)", self._model, len(raw))
        return raw


def infer_with_retry(infer: InferFn, prompt: str, *, attempts: int = 2) -> str:
    """Call *infer* up to *attempts* times.

    :class:`NoModelAvailable` is never retried. The last error is re-raised
    once attempts are exhausted.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")
    for attempt in range(1, attempts):
        try:
            return infer(prompt)
        except NoModelAvailable:
            raise
        except Exception as exc:
            log.warning("Inference attempt %d/%d failed: %s", attempt, attempts, exc)
    return infer(prompt)
