"""Telegram notifications."""

import json
import logging

import httpx

from woningjager.config import settings

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

# Telegram limits photo captions to 1024 characters
CAPTION_LIMIT = 1024


class TelegramNotifier:
    """
    Sends alerts through the Telegram Bot API.

    Without a token and chat id the message is only logged.
    """

    def __init__(
        self,
        token: str | None = None,
        chat_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token if token is not None else settings.telegram_token
        self.chat_id = chat_id if chat_id is not None else settings.telegram_chat_id
        self.timeout = timeout or settings.request_timeout
        self.transport = transport
        self.client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.chat_id)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=f"{TELEGRAM_API_URL}/bot{self.token}",
                timeout=self.timeout,
                transport=self.transport,
            )
        return self.client

    async def close(self) -> None:
        """Close HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def send(
        self,
        text: str,
        images: list[str | bytes] | tuple = (),
        silent: bool = False,
    ) -> bool:
        """
        Send a Markdown message with optional images.

        Images are public URLs or raw image bytes. One image is sent as a
        photo with the text as caption, several as an album.

        Returns:
            True if Telegram accepted the message

        Raises:
            httpx.HTTPError: On network errors
        """
        if not self.enabled:
            logger.info("No Telegram token configured, not sending:\n%s", text)
            return False

        images = [image for image in images if image]
        if images and len(text) > CAPTION_LIMIT:
            # too long for a caption, send the text on its own
            self._check(await self._send_images(images, None, silent))
            images = []

        if not images:
            response = await self._get_client().post(
                "/sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": text,
                    "parse_mode": "Markdown",
                    "disable_notification": silent,
                },
            )
        else:
            response = await self._send_images(images, text, silent)

        return self._check(response)

    async def _send_images(
        self, images: list[str | bytes], caption: str | None, silent: bool
    ) -> httpx.Response:
        client = self._get_client()
        files = {}

        if len(images) == 1:
            data = {"chat_id": self.chat_id, "disable_notification": silent}
            if caption:
                data.update(caption=caption, parse_mode="Markdown")
            image = images[0]
            if isinstance(image, bytes):
                files["photo"] = ("image.png", image, "image/png")
            else:
                data["photo"] = image
            if files:
                return await client.post("/sendPhoto", data=_form(data), files=files)
            return await client.post("/sendPhoto", json=data)

        media = []
        for index, image in enumerate(images[:10]):
            if isinstance(image, bytes):
                name = f"image{index}"
                files[name] = (f"{name}.png", image, "image/png")
                item = {"type": "photo", "media": f"attach://{name}"}
            else:
                item = {"type": "photo", "media": image}
            if index == 0 and caption:
                item.update(caption=caption, parse_mode="Markdown")
            media.append(item)

        data = {
            "chat_id": self.chat_id,
            "media": json.dumps(media),
            "disable_notification": silent,
        }
        return await client.post("/sendMediaGroup", data=_form(data), files=files or None)

    @staticmethod
    def _check(response: httpx.Response) -> bool:
        try:
            payload = response.json()
        except ValueError:
            payload = {"ok": False, "description": response.text}
        if not payload.get("ok"):
            logger.error("Telegram error: %s", payload.get("description", payload))
            return False
        return True


def _form(data: dict) -> dict[str, str]:
    """Multipart form values must be strings."""
    return {
        key: ("true" if value is True else "false" if value is False else str(value))
        for key, value in data.items()
    }
