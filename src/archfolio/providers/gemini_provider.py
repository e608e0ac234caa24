from __future__ import annotations

import logging
from io import BytesIO
from typing import Any

from PIL import Image

from archfolio.assets.preview import data_uri
from archfolio.config import settings
from archfolio.layout.schema import RESPONSE_SCHEMA
from archfolio.providers.base import GeneratedMap, LayoutRequest, RawLayoutResponse

logger = logging.getLogger(__name__)

MAP_PROMPT = (
    "Create a minimalist, abstract, black and white map for the location: {location}. "
    "The map should be a high-contrast, stylized representation, suitable for an architectural portfolio. "
    "Do not include any text or labels. Focus on major roads and geographical features."
)


class GeminiProvider:
    name = "gemini"

    def __init__(self, api_key: str) -> None:
        # Imported lazily so the package imports without the SDK configured.
        from google import genai  # type: ignore

        self.client = genai.Client(api_key=api_key)

    async def suggest_layout(self, request: LayoutRequest, prompt: str) -> RawLayoutResponse:
        """
        Ask for a JSON layout constrained by RESPONSE_SCHEMA. The schema only
        shapes the output; the validator still checks every field.
        """
        from google.genai import types  # type: ignore

        model = settings.gemini_text_model
        resp = await self.client.aio.models.generate_content(
            model=model,
            contents=[prompt],
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=RESPONSE_SCHEMA,
            ),
        )
        raw_text: str | None = getattr(resp, "text", None)
        return RawLayoutResponse(
            raw_text=raw_text,
            provider=self.name,
            model=model,
            parsed=getattr(resp, "parsed", None),
            raw_metadata={"image_count": len(request.image_urls)},
        )

    async def generate_map(self, location: str) -> GeneratedMap:
        from google.genai import types  # type: ignore

        model = settings.gemini_image_model
        resp = await self.client.aio.models.generate_content(
            model=model,
            contents=[MAP_PROMPT.format(location=location)],
            config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
        )
        images = _extract_images_from_generate_content(resp)
        if not images:
            raise RuntimeError("Failed to generate map image.")
        buf = BytesIO()
        images[0].save(buf, format="PNG")
        logger.info("Generated map for %r with %s", location, model)
        return GeneratedMap(data_uri=data_uri(buf.getvalue(), "image/png"), provider=self.name, model=model)


def _extract_images_from_generate_content(resp: Any) -> list[Image.Image]:
    out: list[Image.Image] = []
    for cand in getattr(resp, "candidates", []) or []:
        content = getattr(cand, "content", None)
        parts = getattr(content, "parts", None) or []
        for part in parts:
            inline = getattr(part, "inline_data", None)
            if not inline:
                continue
            mime = getattr(inline, "mime_type", None) or ""
            data = getattr(inline, "data", None)
            if not data or (mime and not mime.startswith("image/")):
                continue
            try:
                img = Image.open(BytesIO(data))
                img.load()
            except OSError:
                logger.debug("Skipping undecodable %s part", mime or "inline")
                continue
            out.append(img)
    return out
