from __future__ import annotations

import httpx
import pytest
from bs4 import BeautifulSoup
from httpx import ASGITransport
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

import scraper
from config import load_settings


def make_card(
    name: str | None = "Hotel Lumière",
    href: str | None = "/hotel/fr/lumiere.html",
    price: str | None = "€ 1,240",
    original_price: str | None = None,
    rating: str | None = "8.7",
    reviews: str | None = "Excellent 1,532 reviews",
    distance: str | None = "1.2 km from centre",
    address: str | None = "7th arr., Paris",
    image: str | None = "https://cf.bstatic.com/xdata/images/hotel/1.jpg",
) -> str:
    """Render one modern property card; ``None`` leaves that field out."""
    parts = []
    if image:
        parts.append(f'<img data-testid="image" src="{image}">')
    if name:
        title = f'<div data-testid="title">{name}</div>'
        if href:
            title = f'<a data-testid="title-link" href="{href}">{title}</a>'
        parts.append(title)
    if address:
        parts.append(f'<span data-testid="address">{address}</span>')
    if distance:
        parts.append(f'<span data-testid="distance">{distance}</span>')
    if rating or reviews:
        score = '<div data-testid="review-score">'
        score += f'<div aria-label="Scored {rating}">{rating}</div>' if rating else "<div></div>"
        score += f"<div>{reviews}</div>" if reviews else ""
        parts.append(score + "</div>")
    if price:
        struck = (
            f'<span style="text-decoration: line-through">{original_price}</span> '
            if original_price else ""
        )
        parts.append(f'<span data-testid="price-and-discounted-price">{struck}{price}</span>')
    return f'<div data-testid="property-card">{"".join(parts)}</div>'


def make_page(*cards: str, extra: str = "") -> str:
    return f"<html><head><title>Hotels</title></head><body>{extra}{''.join(cards)}</body></html>"


class FakeElement:
    def __init__(self, page: FakePage, selector: str):
        self.page = page
        self.selector = selector

    async def click(self) -> None:
        self.page.clicked.append(self.selector)


class FakePage:
    """Stands in for a Playwright page, answering selectors from fixed HTML."""

    def __init__(self, html: str, title: str = "Hotels", errors: dict | None = None):
        self.html = html
        self._title = title
        # method name -> exception raised when that method is called
        self.errors = errors or {}
        self.soup = BeautifulSoup(html, "html.parser")
        self.visited: list[str] = []
        self.clicked: list[str] = []
        self.url = "about:blank"

    async def goto(self, url: str, **kwargs) -> None:
        self.visited.append(url)
        self.url = url

    def _raise_for(self, method: str) -> None:
        if method in self.errors:
            raise self.errors[method]

    async def title(self) -> str:
        self._raise_for("title")
        return self._title

    async def inner_text(self, selector: str) -> str:
        el = self.soup.select_one(selector)
        return el.get_text(" ") if el else ""

    async def query_selector(self, selector: str) -> FakeElement | None:
        return FakeElement(self, selector) if self.soup.select_one(selector) else None

    async def wait_for_selector(self, selector: str, timeout: float | None = None) -> FakeElement:
        self._raise_for("wait_for_selector")
        if self.soup.select_one(selector) is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return FakeElement(self, selector)

    async def content(self) -> str:
        return self.html


@pytest.fixture
def settings():
    return load_settings(headless=True, timeout_ms=1_000, listing_wait_ms=500)


@pytest.fixture(autouse=True)
def pauses(monkeypatch):
    """Skip real sleeps; records the (min, max) bounds of each pause."""
    calls = []

    async def _no_sleep(min_s, max_s):
        calls.append((min_s, max_s))

    monkeypatch.setattr(scraper, "async_random_sleep", _no_sleep)
    return calls


@pytest.fixture
def fake_browser(monkeypatch):
    """Replace browser launch with a FakePage serving the given HTML.

    Returns an installer; every opened session is appended to
    ``installer.sessions`` so tests can check teardown.
    """
    def install(html: str, title: str = "Hotels", errors: dict | None = None):
        async def _open(settings):
            session = scraper.Session(settings=settings, page=FakePage(html, title, errors))
            install.sessions.append(session)
            return session

        monkeypatch.setattr(scraper, "open_session", _open)
        return install

    install.sessions = []
    return install


@pytest.fixture
async def client(settings):
    from server import create_app

    app = create_app(settings)
    async with httpx.AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c
