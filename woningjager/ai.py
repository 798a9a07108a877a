"""AI extraction of listing attributes from detail page text."""

import json
import logging

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from woningjager.config import settings
from woningjager.models import AIProperties

logger = logging.getLogger(__name__)

# Detail pages can be long; the interesting parts come first
MAX_INPUT_CHARS = 12000

SYSTEM_PROMPT = """\
You read Dutch real-estate listings for a buyer looking for an apartment in
Amsterdam. Answer with one JSON object with these keys, using null when the
text does not say:

- "garden": true if the property has a private garden
- "rooftarrace": true if the property has a private roof terrace
- "year": construction year (integer)
- "rooms": number of rooms (integer)
- "servicecosts": monthly VvE/service costs in euros (integer)
- "size": living area in m² (integer)
- "price": asking price in euros (integer)
- "rating": how attractive the property is for a young family, 0 to 100
- "reason": one or two sentences in English explaining the rating
"""


class AIExtractor:
    """Best-effort structured extraction through the OpenAI chat API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.openai_model
        self.client = client

    @property
    def enabled(self) -> bool:
        return self.client is not None or bool(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self.client is None:
            self.client = AsyncOpenAI(api_key=self.api_key)
        return self.client

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None

    async def parse_properties(self, text: str) -> AIProperties | None:
        """
        Extract structured attributes from free listing text.

        Args:
            text: Description, feature tables, etc. of one listing

        Returns:
            AIProperties, or None when disabled or when extraction fails
        """
        text = text.strip()
        if not text:
            return None
        if not self.enabled:
            logger.debug("No OpenAI API key, skipping AI extraction")
            return None

        try:
            completion = await self._get_client().chat.completions.create(
                model=self.model,
                response_format={"type": "json_object"},
                temperature=0,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": text[:MAX_INPUT_CHARS]},
                ],
            )
        except openai.OpenAIError as e:
            logger.warning("AI extraction failed: %s", e)
            return None

        content = completion.choices[0].message.content or ""
        try:
            return AIProperties.model_validate(json.loads(content))
        except (ValueError, ValidationError) as e:
            logger.warning("AI returned unusable output: %s", e)
            return None
