"""
OpenAI API Client

Thin wrapper around the openai library's chat completions.

- One instance per process, built at start-up and kept on app.state
- The underlying client is only created when an API key is configured;
  calls without a key raise ConfigurationError (a 500, not a start-up failure)
- One attempt per call, no retry, no caching
"""
import json
import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from jobboard.core.config import Settings
from jobboard.core.errors import ConfigurationError, ExternalServiceError

log = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a professional career coach and resume writer. "
    "You write concise, specific and professional text."
)


class CompletionClient:
    """
    Wrapper for the OpenAI chat completions API.
    """

    def __init__(self, api_key: str = "", model: str = "gpt-4", base_url: Optional[str] = None):
        self.model = model
        self.client = OpenAI(api_key=api_key, base_url=base_url) if api_key else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionClient":
        return cls(settings.openai_api_key, settings.openai_model, settings.openai_base_url)

    @property
    def configured(self) -> bool:
        return self.client is not None

    def complete(
        self,
        user_content: str,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        json_mode: bool = False
    ) -> str:
        """
        Send one chat completion request.
        Returns the raw text of the first choice.
        """
        if not self.configured:
            raise ConfigurationError("OpenAI API key not configured")

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content}
                ],
                max_tokens=max_tokens,
                temperature=temperature,
                **kwargs
            )
        except OpenAIError as e:
            log.error("OpenAI request failed: %s", e)
            raise ExternalServiceError("AI request failed", details=str(e))

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise ExternalServiceError("No response from AI")
        return content.strip()

    def close(self) -> None:
        if self.client is not None:
            self.client.close()


def extract_json(text: str):
    """
    Extract JSON from a model response.
    Handles cases where the model wraps JSON in markdown code blocks.
    Raises ValueError when the text is not JSON.
    """
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    return json.loads(text.strip())
