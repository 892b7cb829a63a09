"""Shared fixtures for the canvasprint test-suite."""

from __future__ import annotations

import pytest

from canvasprint import config


@pytest.fixture
def anyio_backend() -> str:
    """Force the anyio plugin to use the asyncio backend only."""

    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep ``CANVASPRINT_*`` variables from the developer shell out of tests."""

    monkeypatch.setattr(config, "_load_environment", lambda: None)
    for key in (
        "CANVASPRINT_ENV",
        "CANVASPRINT_LOCATOR",
        "CANVASPRINT_SINK",
        "CANVASPRINT_FILENAME",
        "CANVASPRINT_OUTPUT_DIR",
        "CANVASPRINT_BASE_URL",
        "CANVASPRINT_DECLARATION",
        "CANVASPRINT_SINGLE_FLIGHT",
        "CANVASPRINT_FETCH_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)


def make_page(
    *,
    graphic: str = '<svg id="SVG" viewBox="0 0 10 10"><rect class="rect" width="5" height="5"/></svg>',
    head: str = "<style>.rect{fill:red}</style>",
) -> str:
    return (
        '<html xmlns="http://www.w3.org/1999/xhtml">'
        f"<head>{head}</head>"
        f'<body><div id="app"><div>{graphic}</div></div></body>'
        "</html>"
    )


@pytest.fixture(name="make_page")
def make_page_fixture():
    """Return a builder for XHTML pages hosting a graphic."""

    return make_page
