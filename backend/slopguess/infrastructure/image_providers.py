"""Image Providers - placeholder images for offline mode and the OpenAI image API.

Invariants:
    - MockImageProvider: same prompt -> same URL, seed from a 32-bit string hash
    - OpenAIImageProvider returns inline PNG bytes (base64 decoded), never a URL
    - 400 responses from the image API map to REJECTED_CONTENT
"""

import base64
import logging

import openai
from openai import AsyncOpenAI

from slopguess.config import Settings
from slopguess.core.domain_types import GeneratedImage, ImageProviderKind, ImageQuality
from slopguess.core.errors import (
    ConfigurationError, ProviderError, ProviderErrorType,
)
from slopguess.core.repository_protocols import ImageProvider
from slopguess.infrastructure.openai_client import build_openai_client, map_openai_error

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "https://picsum.photos/seed/{seed}/1024/1024"
STYLE_PREFIX = "Vivid, colorful, highly detailed digital illustration. "
IMAGE_SIZE = "1024x1024"


def prompt_seed(prompt: str) -> int:
    """31-multiplier string hash folded to a signed 32-bit int, then abs()."""
    h = 0
    for ch in prompt:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class MockImageProvider:
    name = "mock"

    async def generate(self, prompt: str, quality: ImageQuality | None = None) -> GeneratedImage:
        seed = prompt_seed(prompt)
        return GeneratedImage(
            image_url=PLACEHOLDER_URL.format(seed=seed),
            metadata={"provider": self.name, "prompt": prompt, "seed": seed},
        )


class OpenAIImageProvider:
    name = "openai"

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-image-1",
        default_quality: ImageQuality = ImageQuality.LOW,
    ):
        self._client = client
        self.model = model
        self.default_quality = default_quality

    async def generate(self, prompt: str, quality: ImageQuality | None = None) -> GeneratedImage:
        if not prompt or not prompt.strip():
            raise ProviderError(self.name, ProviderErrorType.BAD_REQUEST, "Prompt must not be empty")
        quality = quality or self.default_quality
        try:
            response = await self._client.images.generate(
                model=self.model,
                prompt=STYLE_PREFIX + prompt,
                n=1,
                size=IMAGE_SIZE,
                quality=quality.value,
                output_format="png",
            )
        except openai.OpenAIError as e:
            mapped = map_openai_error(e, "openai_images", ProviderErrorType.REJECTED_CONTENT)
            logger.error(
                f"Image generation failed: {mapped.message}",
                extra={"provider": self.name, "error_code": mapped.error_type.value},
            )
            raise mapped from e

        if not response.data or not response.data[0].b64_json:
            raise ProviderError(
                self.name, ProviderErrorType.SERVER_ERROR, "Image API returned no image data",
            )
        return GeneratedImage(
            image_bytes=base64.b64decode(response.data[0].b64_json),
            metadata={
                "provider": self.name,
                "model": self.model,
                "quality": quality.value,
                "revised_prompt": response.data[0].revised_prompt,
            },
        )


def build_image_provider(settings: Settings) -> ImageProvider:
    if settings.image_provider == ImageProviderKind.OPENAI:
        if not settings.openai_api_key.strip():
            raise ConfigurationError(
                "IMAGE_PROVIDER=openai requires OPENAI_API_KEY to be set",
            )
        client = build_openai_client(
            settings.openai_api_key,
            settings.openai_max_retries,
            settings.openai_timeout_seconds,
        )
        return OpenAIImageProvider(client, settings.image_model, settings.image_quality)
    return MockImageProvider()
