"""Chef's specials suggested by the Gemini text-generation API."""

from __future__ import annotations

from typing import Any, Iterable

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from rms import config
from rms.logger import log_error, log_event
from rms.models import MenuItem


class SpecialsError(Exception):
    """Specials could not be generated; the message is shown to the user as-is."""


class SpecialDish(BaseModel):
    name: str
    description: str
    price: float
    ingredients: list[str]


_SPECIALS_ADAPTER = TypeAdapter(list[SpecialDish])

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING", "description": "The creative name of the special dish."},
            "description": {"type": "STRING", "description": "A brief, appealing description of the dish."},
            "price": {"type": "NUMBER", "description": "The suggested price for the dish."},
            "ingredients": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
                "description": "List of key ingredients used.",
            },
        },
        "required": ["name", "description", "price", "ingredients"],
    },
}


def build_prompt(items: Iterable[MenuItem]) -> str:
    inventory = ", ".join(f"{item.name} (Category: {item.category}, Stock: {item.stock})" for item in items)
    return (
        'You are an expert executive chef for a modern restaurant. Your task is to create three exciting '
        '"Chef\'s Specials" for today\'s menu.\n\n'
        f"Analyze the following list of currently available inventory items:\n{inventory}\n\n"
        "Based on this inventory, generate three unique and appealing special dishes. For each dish, provide:\n"
        "1. A creative and enticing name.\n"
        "2. A brief, mouth-watering description (20-30 words).\n"
        f"3. A suggested price in {config.CURRENCY_CODE} (as a number).\n"
        "4. A list of key ingredients used from the inventory.\n\n"
        "Your response must be a valid JSON array, adhering to the provided schema. Do not include any text "
        "or markdown formatting outside of the JSON structure."
    )


def _response_text(payload: dict[str, Any]) -> str:
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as exc:
        raise SpecialsError("Failed to generate specials from AI: response contained no candidates") from exc
    return "".join(str(part.get("text", "")) for part in parts).strip()


def generate_chef_specials(
    menu: Iterable[MenuItem],
    api_key: str | None = None,
    session: Any = None,
) -> list[SpecialDish]:
    """
    Ask the model for three specials built from the in-stock menu.

    `menu` should be a snapshot; nothing here touches application state. Every
    failure (no stock, missing key, transport, HTTP status, malformed JSON,
    schema mismatch) surfaces as a single SpecialsError.
    """
    available = [item for item in menu if item.stock > 0]
    if not available:
        raise SpecialsError("No items in stock to generate specials from.")

    key = api_key if api_key is not None else config.GEMINI_API_KEY
    if not key:
        raise SpecialsError("Gemini API key is not configured (set RMS_GEMINI_API_KEY).")

    body = {
        "contents": [{"role": "user", "parts": [{"text": build_prompt(available)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }
    url = config.GEMINI_ENDPOINT.format(model=config.GEMINI_MODEL)
    http = session if session is not None else requests

    log_event(f"specials_request model={config.GEMINI_MODEL} items={len(available)}")
    try:
        response = http.post(
            url,
            json=body,
            headers={"x-goog-api-key": key, "Content-Type": "application/json"},
            timeout=config.GEMINI_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as exc:
        log_error("specials_request failed", exc)
        raise SpecialsError(f"Failed to generate specials from AI: {exc}") from exc
    except ValueError as exc:
        log_error("specials_response not JSON", exc)
        raise SpecialsError(f"Failed to generate specials from AI: {exc}") from exc

    text = _response_text(payload)
    try:
        specials = _SPECIALS_ADAPTER.validate_json(text)
    except ValidationError as exc:
        log_error("specials_response invalid", exc)
        raise SpecialsError(f"Failed to generate specials from AI: {exc.error_count()} invalid field(s)") from exc

    log_event(f"specials_generated count={len(specials)}")
    return specials
