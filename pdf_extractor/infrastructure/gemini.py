"""Integration with the Gemini ``generateContent`` REST API."""
from __future__ import annotations

import base64
import json
import logging
from typing import Any, Sequence
from urllib.parse import urlparse

import httpx

from pdf_extractor.domain import Document, FieldValue

from .extraction import ExtractionError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-3-flash-preview"


class GeminiError(ExtractionError):
    """Raised when the Gemini service rejects or cannot answer a request."""


class GeminiExtractionClient:
    """Extract user defined fields from a document with a single Gemini call."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 120.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        parsed = urlparse(api_base)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("api_base must include scheme and host")

        self._api_key = api_key
        self._model = model
        self._request_url = f"{parsed.scheme}://{parsed.netloc}/v1beta/models/{model}:generateContent"
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_prompt(fields: Sequence[str]) -> str:
        return (
            "Analyze the attached PDF document.\n"
            f"Extract the following specific data points: {', '.join(fields)}.\n"
            "Return the result as a clean JSON object where keys are the field names "
            "requested and values are the extracted data.\n"
            "If a field is not found, use null.\n"
            "Format dates as YYYY-MM-DD if applicable.\n"
            "Do not nest the JSON, keep it flat."
        )

    @staticmethod
    def _build_response_schema(fields: Sequence[str]) -> dict[str, Any]:
        # every value is requested as a nullable string so arbitrary field names work
        return {
            "type": "OBJECT",
            "properties": {field: {"type": "STRING", "nullable": True} for field in fields},
        }

    def _build_payload(self, document: Document, fields: Sequence[str]) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {
                            "inline_data": {
                                "mime_type": document.content_type or "application/pdf",
                                "data": base64.b64encode(document.content).decode("ascii"),
                            }
                        },
                        {"text": self._build_prompt(fields)},
                    ]
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": self._build_response_schema(fields),
            },
        }

    @staticmethod
    def _response_text(payload: dict[str, Any]) -> str:
        error = payload.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise GeminiError(str(message or "Gemini request failed"))

        feedback = payload.get("promptFeedback") or {}
        if feedback.get("blockReason"):
            raise GeminiError(f"Request blocked: {feedback['blockReason']}")

        candidates = payload.get("candidates") or []
        if not candidates:
            return ""
        content = candidates[0].get("content") or {}
        parts = content.get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def extract(self, document: Document, fields: Sequence[str]) -> dict[str, FieldValue]:
        payload = self._build_payload(document, fields)
        response = self._client.post(
            self._request_url,
            headers={"x-goog-api-key": self._api_key},
            json=payload,
        )
        response.raise_for_status()

        text = self._response_text(response.json()).strip()
        if not text:
            return {}

        try:
            record = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GeminiError(f"Model returned invalid JSON: {exc.msg}") from exc

        if not isinstance(record, dict):
            logger.warning("Gemini returned %s instead of an object for %s", type(record).__name__, document.filename)
            return {}
        return record

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__ = ["GeminiExtractionClient", "GeminiError"]
