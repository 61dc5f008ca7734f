"""Claude Vision adapter for investment-app screenshots."""

import base64
import io
import json
import logging
import os
import time
from pathlib import Path

import anthropic
from PIL import Image, UnidentifiedImageError

from yieldbook.exceptions import VisionExtractionError
from yieldbook.ingestion.base import BaseAdapter
from yieldbook.ingestion.prompts import EXTRACTION_PROMPT, SYSTEM_PROMPT
from yieldbook.models.ledger import ExtractedRecord

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_BACKOFF = 1.0
MAX_IMAGE_BYTES = 4_500_000  # API limit is 5 MB
MAX_IMAGE_WIDTH = 1024


def compress_image(image: Image.Image, max_bytes: int = MAX_IMAGE_BYTES, max_width: int = MAX_IMAGE_WIDTH) -> bytes:
    """Downscale to ``max_width`` and encode as JPEG under ``max_bytes``.

    Screenshots carry transparency often enough that everything is
    flattened onto white first.
    """
    if image.mode in ("RGBA", "LA", "P"):
        rgba = image.convert("RGBA")
        flattened = Image.new("RGB", rgba.size, (255, 255, 255))
        flattened.paste(rgba, mask=rgba.getchannel("A"))
        image = flattened
    elif image.mode != "RGB":
        image = image.convert("RGB")

    if image.width > max_width:
        height = round(image.height * max_width / image.width)
        image = image.resize((max_width, height))

    for quality in (85, 60, 40):
        buf = io.BytesIO()
        image.save(buf, format="JPEG", quality=quality)
        if buf.tell() <= max_bytes:
            return buf.getvalue()

    for scale in (0.75, 0.5, 0.25):
        resized = image.resize((int(image.width * scale), int(image.height * scale)))
        buf = io.BytesIO()
        resized.save(buf, format="JPEG", quality=40)
        if buf.tell() <= max_bytes:
            return buf.getvalue()
    return buf.getvalue()


def salvage_truncated_array(text: str) -> list | None:
    """Recover the complete objects of a JSON array cut off mid-stream."""
    depth = 0
    last_complete_end = -1
    in_string = False
    escape_next = False

    for i, ch in enumerate(text):
        if escape_next:
            escape_next = False
            continue
        if ch == "\\":
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                last_complete_end = i

    if last_complete_end <= 0:
        return None

    salvaged = text[:last_complete_end + 1].rstrip().rstrip(",") + "]"
    try:
        result = json.loads(salvaged)
    except json.JSONDecodeError:
        return None
    if isinstance(result, list) and result:
        return result
    return None


def parse_json_response(response_text: str) -> dict | list | None:
    """Parse JSON from a model reply, handling markdown fences and truncation."""
    text = response_text.strip()

    if text.startswith("```"):
        first_newline = text.index("\n") if "\n" in text else len(text)
        text = text[first_newline + 1:]
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3].rstrip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    for start_char, end_char in (("{", "}"), ("[", "]")):
        start = text.find(start_char)
        end = text.rfind(end_char)
        if start != -1 and end > start:
            try:
                return json.loads(text[start:end + 1])
            except json.JSONDecodeError:
                continue

    # A truncated {"records": [...] reply still holds an array of whole rows.
    array_start = text.find("[")
    if array_start != -1:
        result = salvage_truncated_array(text[array_start:])
        if result is not None:
            logger.warning("Salvaged %d complete records from truncated JSON response", len(result))
            return result
    return None


class ScreenshotAdapter(BaseAdapter):
    """Extracts raw records from a screenshot using Claude Vision."""

    MODEL = "claude-sonnet-4-20250514"

    def __init__(self, api_key: str | None = None, client: anthropic.Anthropic | None = None):
        self._client = client
        self._api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if self._client is None and not self._api_key:
            raise VisionExtractionError("", "ANTHROPIC_API_KEY not set. Export it or pass --api-key.")

    @property
    def client(self) -> anthropic.Anthropic:
        if self._client is None:
            self._client = anthropic.Anthropic(api_key=self._api_key)
        return self._client

    def extract(self, file_path: Path) -> list[ExtractedRecord]:
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        image_bytes = self.load_image(file_path)
        response_text = self._call_claude_vision(file_path, image_bytes)
        result = parse_json_response(response_text)
        if result is None:
            logger.error(
                "Vision extraction returned no parseable JSON. Raw response (first 2000 chars):\n%s",
                response_text[:2000],
            )
            raise VisionExtractionError(
                str(file_path), f"no parseable JSON. Response preview: {response_text[:300]}"
            )

        records = self.unwrap_records(file_path, result)
        logger.info("Extracted %d record(s) from %s", len(records), file_path.name)
        return records

    @staticmethod
    def load_image(file_path: Path) -> bytes:
        try:
            with Image.open(file_path) as image:
                return compress_image(image)
        except UnidentifiedImageError as exc:
            raise VisionExtractionError(str(file_path), "not a readable image") from exc

    def _call_claude_vision(self, file_path: Path, image_bytes: bytes, max_tokens: int = 4096) -> str:
        """Send one screenshot with the extraction prompt, retrying on 429 and 5xx."""
        msg_params = {
            "model": self.MODEL,
            "max_tokens": max_tokens,
            "system": SYSTEM_PROMPT,
            "messages": [{
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": "image/jpeg",
                            "data": base64.b64encode(image_bytes).decode("utf-8"),
                        },
                    },
                    {"type": "text", "text": EXTRACTION_PROMPT},
                ],
            }],
        }

        last_error = None
        for attempt in range(MAX_RETRIES):
            try:
                response = self.client.messages.create(**msg_params)
            except Exception as exc:
                last_error = exc
                error_str = str(exc)
                is_retryable = any(code in error_str for code in ("429", "500", "502", "503", "529"))
                if is_retryable and attempt < MAX_RETRIES - 1:
                    backoff = INITIAL_BACKOFF * (2 ** attempt)
                    logger.warning(
                        "Vision API call failed (attempt %d/%d): %s. Retrying in %.1fs...",
                        attempt + 1, MAX_RETRIES, exc, backoff,
                    )
                    time.sleep(backoff)
                    continue
                break
            if response.stop_reason == "max_tokens":
                logger.warning("Vision API response was truncated (hit max_tokens=%d)", max_tokens)
            return response.content[0].text

        raise VisionExtractionError(str(file_path), f"API call failed after {attempt + 1} attempt(s): {last_error}")
