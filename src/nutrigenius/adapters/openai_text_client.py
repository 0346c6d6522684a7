"""OpenAI Responses API client for plan and coach generation."""

import logging
from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from nutrigenius.errors import GenerationError
from nutrigenius.services.text_model import TextModelClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAITextClient(TextModelClient):
    """Text client backed by the OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAITextClient":
        """Create an OpenAI text client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        messages: list[dict[str, str]],
    ) -> str:
        """Send role-tagged messages and return the output text."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {"role": message["role"], "content": message["content"]}
                for message in messages
            ],
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except OpenAIError as exc:
            _logger.warning("OpenAI request failed: %s", exc)
            raise GenerationError("The model service is unavailable") from exc
        output_text = response.output_text
        if not output_text or not output_text.strip():
            raise GenerationError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
