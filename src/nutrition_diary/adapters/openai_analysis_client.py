"""OpenAI Responses API client for label analysis."""

import json
from dataclasses import dataclass

from openai import APIError, AsyncOpenAI, RateLimitError

from nutrition_diary.services.analysis import (
    AnalysisClient,
    AnalysisFailedError,
    AnalysisQuotaExceededError,
)


@dataclass
class OpenAIAnalysisClient(AnalysisClient):
    """Analysis client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAnalysisClient":
        """Create an OpenAI analysis client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": image_data_url},
                    ],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "label_analysis",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except RateLimitError as exc:
            raise AnalysisQuotaExceededError("OpenAI rate limit reached") from exc
        except APIError as exc:
            raise AnalysisFailedError(f"OpenAI request failed: {exc}") from exc
        output_text = response.output_text
        if not output_text:
            raise AnalysisFailedError("OpenAI returned an empty response")
        try:
            return json.loads(output_text)
        except json.JSONDecodeError as exc:
            raise AnalysisFailedError("OpenAI returned malformed JSON") from exc
