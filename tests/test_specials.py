import json
from dataclasses import replace
from datetime import datetime

import pytest
import requests

from rms.data import initial_state
from rms.specials import SpecialsError, build_prompt, generate_chef_specials

MENU = initial_state(datetime(2024, 6, 12)).menu

SPECIALS = [
    {"name": "Mojito Glazed Salmon", "description": "Salmon with a minty lime glaze.", "price": 999,
     "ingredients": ["Grilled Salmon", "Classic Mojito"]},
    {"name": "Tiramisu Espresso Shot", "description": "A shot of espresso poured over tiramisu.", "price": 399,
     "ingredients": ["Tiramisu", "Espresso"]},
    {"name": "Bruschetta Carbonara", "description": "Carbonara served with crisp bruschetta.", "price": 699,
     "ingredients": ["Spaghetti Carbonara", "Bruschetta"]},
]


class _FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class _FakeSession:
    def __init__(self, response: _FakeResponse) -> None:
        self.response = response
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self.response


def _candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_generates_specials_from_in_stock_items() -> None:
    session = _FakeSession(_FakeResponse(_candidate(json.dumps(SPECIALS))))
    specials = generate_chef_specials(MENU, api_key="secret", session=session)

    assert [special.name for special in specials] == [s["name"] for s in SPECIALS]
    assert specials[0].ingredients == ["Grilled Salmon", "Classic Mojito"]

    url, kwargs = session.calls[0]
    assert url.endswith(":generateContent")
    assert kwargs["headers"]["x-goog-api-key"] == "secret"
    prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
    assert "Espresso (Category: Beverages, Stock: 100)" in prompt
    assert "Chocolate Lava Cake" not in prompt
    assert kwargs["json"]["generationConfig"]["responseMimeType"] == "application/json"


def test_prompt_mentions_currency() -> None:
    assert "INR" in build_prompt(MENU[:1])


def test_no_stock_fails_without_calling_the_api() -> None:
    session = _FakeSession(_FakeResponse(_candidate("[]")))
    empty = tuple(replace(item, stock=0) for item in MENU)
    with pytest.raises(SpecialsError, match="No items in stock"):
        generate_chef_specials(empty, api_key="secret", session=session)
    assert session.calls == []


def test_missing_api_key() -> None:
    with pytest.raises(SpecialsError, match="API key"):
        generate_chef_specials(MENU, api_key="", session=_FakeSession(_FakeResponse({})))


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse({}, status_code=500),
        _FakeResponse(ValueError("Expecting value")),
        _FakeResponse({"candidates": []}),
        _FakeResponse(_candidate("Here are your specials!")),
        _FakeResponse(_candidate(json.dumps([{"name": "Soup", "description": "Hot"}]))),
    ],
    ids=["http-error", "body-not-json", "no-candidates", "text-not-json", "missing-fields"],
)
def test_failures_surface_as_specials_error(response) -> None:
    with pytest.raises(SpecialsError):
        generate_chef_specials(MENU, api_key="secret", session=_FakeSession(response))
