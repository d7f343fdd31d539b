"""Shared fixtures for siteforge tests."""

from __future__ import annotations

import copy
import typing as typ
from pathlib import Path

import pytest
import requests
from ruamel.yaml import YAML

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

HERO_IMAGE = "https://cdn.example.test/media/hero.jpg"

_BASE_CONFIG: dict[str, typ.Any] = {
    "name": "Atelier Lithos",
    "languages": ["en", "fr"],
    "defaultLanguage": "en",
    "theme": {
        "colors": {"primary": "#1f2937", "background": "#ffffff", "foreground": "#111827"},
        "fonts": {
            "heading": {"family": "Playfair Display", "weights": [400, 700]},
            "body": {"family": "Inter", "weights": [400], "fallback": "sans-serif"},
        },
        "borderRadius": "0.5rem",
    },
    "seo": {
        "title": {"en": "Atelier Lithos", "fr": "Atelier Lithos"},
        "description": "Stone carving studio",
    },
    "navigation": {
        "links": [{"label": {"en": "About", "fr": "À propos"}, "anchor": "about"}],
    },
    "sections": [
        {
            "type": "hero",
            "id": "hero",
            "props": {
                "title": {"en": "Welcome", "fr": "Bienvenue"},
                "backgroundImage": HERO_IMAGE,
                "backgroundImageAlt": "Sculptor at work",
            },
        },
        {
            "type": "about",
            "id": "about",
            "props": {"title": "About us", "content": ["We carve stone by hand."]},
        },
    ],
    "footer": {"copyright": "© 2025 Atelier Lithos"},
}


@pytest.fixture()
def site_config() -> dict[str, typ.Any]:
    """Return a fresh, valid configuration mapping."""
    return copy.deepcopy(_BASE_CONFIG)


def _dump_yaml(path: Path, data: typ.Any) -> Path:
    yaml = YAML()
    with path.open("w", encoding="utf-8") as handle:
        yaml.dump(data, handle)
    return path


@pytest.fixture()
def write_yaml() -> typ.Callable[[Path, typ.Any], Path]:
    """Return a helper that dumps data to a YAML file."""
    return _dump_yaml


@pytest.fixture()
def config_file(tmp_path: Path, site_config: dict[str, typ.Any]) -> Path:
    """Write the valid configuration to ``config.yaml`` in a temp dir."""
    return _dump_yaml(tmp_path / "config.yaml", site_config)


@pytest.fixture()
def make_response(mocker: MockerFixture) -> typ.Callable[..., typ.Any]:
    """Return a factory for stub ``requests.Response`` objects."""

    def factory(
        status: int = 200, *, body: bytes = b"", location: str | None = None
    ) -> typ.Any:
        response = mocker.Mock(spec=requests.Response)
        response.status_code = status
        response.headers = {"Location": location} if location else {}
        response.iter_content.return_value = [body] if body else []
        return response

    return factory


@pytest.fixture()
def fake_session(mocker: MockerFixture) -> typ.Callable[..., typ.Any]:
    """Return a factory for sessions serving canned responses per URL.

    Each URL maps to a response, a list of responses returned in order, or an
    exception instance to raise.
    """

    def factory(routes: dict[str, typ.Any]) -> typ.Any:
        queues = {
            url: list(value) if isinstance(value, list) else [value]
            for url, value in routes.items()
        }
        session = mocker.Mock(spec=requests.Session)

        def get(url: str, **_: typ.Any) -> typ.Any:
            queue = queues[url]
            outcome = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        session.get.side_effect = get
        return session

    return factory
