"""
Playwright scraper for Booking.com search results.

One browser session per scrape: launch, load the target page, bail out on
anti-bot pages, dismiss the cookie dialog, wait for listing cards, then hand
the rendered HTML to the extractor. The browser is always torn down.
"""

from __future__ import annotations

import random
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from typing import AsyncIterator
from urllib.parse import quote

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)
from playwright_stealth import Stealth

from config import Settings
from errors import BlockedError, LaunchFailure, NavigationError
from extractor import BASE_URL, CARD_SELECTORS, extract_listings
from models import ListingRecord, PropertyTarget, SearchQuery
from utils import async_random_sleep, get_logger

log = get_logger("scraper")

# User-agent pool
_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
]
_VIEWPORT = {"width": 1920, "height": 1080}

SEARCH_URL = BASE_URL + "/searchresults.html"

# Lower-cased phrases that only show up on challenge / block pages
BLOCK_MARKERS = (
    "captcha",
    "are you a robot",
    "verify you are human",
    "unusual traffic",
    "access denied",
    "press and hold",
)

CONSENT_SELECTORS = (
    "#onetrust-accept-btn-handler",
    "button[id*='accept']",
)


# ── Session lifecycle ─────────────────────────────────────────────────────────

@dataclass
class Session:
    """Browser handles owned by a single scrape."""

    settings: Settings
    playwright: Playwright | None = None
    browser: Browser | None = None
    context: BrowserContext | None = None
    page: Page | None = None
    closed: bool = False


async def build_browser_context(browser: Browser, settings: Settings) -> BrowserContext:
    """Create a Chromium context with randomised UA and fixed viewport."""
    ua = random.choice(_USER_AGENTS)
    kwargs: dict = dict(
        user_agent=ua,
        viewport=_VIEWPORT,
        locale="en-US",
        extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
    )
    if settings.proxy_url:
        kwargs["proxy"] = {"server": settings.proxy_url}
        log.info("Using proxy: %s", settings.proxy_url)
    log.debug("User agent: %s", ua)
    return await browser.new_context(**kwargs)


async def open_session(settings: Settings) -> Session:
    """Launch Chromium and open a stealth page. Raises LaunchFailure."""
    session = Session(settings=settings)
    try:
        session.playwright = await async_playwright().start()
        session.browser = await session.playwright.chromium.launch(
            headless=settings.headless,
            args=["--disable-blink-features=AutomationControlled"],
        )
        session.context = await build_browser_context(session.browser, settings)
        session.page = await session.context.new_page()
        session.page.set_default_timeout(settings.timeout_ms)
        await Stealth().apply_stealth_async(session.page)
    except Exception as exc:
        await close_session(session)
        raise LaunchFailure(f"Browser failed to launch: {exc}") from exc

    log.info("Browser session opened (headless=%s)", settings.headless)
    return session


async def close_session(session: Session) -> None:
    """Release everything the session holds. Safe to call more than once."""
    if session.closed:
        return
    session.closed = True

    closers = [
        ("context", session.context.close if session.context else None),
        ("browser", session.browser.close if session.browser else None),
        ("playwright", session.playwright.stop if session.playwright else None),
    ]
    for label, close in closers:
        if close is None:
            continue
        try:
            await close()
        except Exception as exc:
            log.warning("Error closing %s: %s", label, exc)
    log.info("Browser session closed")


@asynccontextmanager
async def browser_session(settings: Settings) -> AsyncIterator[Session]:
    session = await open_session(settings)
    try:
        yield session
    finally:
        await close_session(session)


# ── Navigation ────────────────────────────────────────────────────────────────

def build_search_url(query: SearchQuery, today: date | None = None) -> str:
    check_in, check_out = query.resolved_dates(today)
    return (
        f"{SEARCH_URL}?ss={quote(query.city, safe='')}"
        f"&checkin={check_in.isoformat()}&checkout={check_out.isoformat()}"
        f"&group_adults={query.adults}&no_rooms=1&group_children=0"
    )


def target_url(target: SearchQuery | PropertyTarget) -> str:
    if isinstance(target, PropertyTarget):
        return target.url
    return build_search_url(target)


def detect_block(text: str) -> str | None:
    """Return the first block marker found in ``text``, if any."""
    lowered = text.lower()
    for marker in BLOCK_MARKERS:
        if marker in lowered:
            return marker
    return None


async def _page_text(page: Page) -> str:
    try:
        body = await page.inner_text("body")
    except PlaywrightError as exc:
        log.debug("Could not read body text: %s", exc)
        body = ""
    try:
        title = await page.title()
    except PlaywrightError as exc:
        log.debug("Could not read page title: %s", exc)
        title = ""
    return f"{title}\n{body}"


async def dismiss_cookie_consent(page: Page, pause: tuple[float, float]) -> bool:
    """Click the first accept-style consent button. Absence is fine.

    ``pause`` is the (min, max) seconds to wait for the dialog to close.
    """
    for selector in CONSENT_SELECTORS:
        try:
            button = await page.query_selector(selector)
            if button is None:
                continue
            await button.click()
        except PlaywrightError as exc:
            log.debug("Consent button %s not clickable: %s", selector, exc)
            continue
        log.info("Dismissed cookie consent (%s)", selector)
        await async_random_sleep(*pause)
        return True
    return False


async def wait_for_listings(page: Page, timeout_ms: int) -> str | None:
    """Wait for any card selector; return the first strategy that matched.

    None means no cards rendered in time, which is reported as an empty
    result rather than a failure. Any other browser error raises
    NavigationError.
    """
    try:
        await page.wait_for_selector(", ".join(CARD_SELECTORS), timeout=timeout_ms)
    except PlaywrightTimeoutError:
        log.warning("No listing cards within %dms, treating as empty", timeout_ms)
        return None
    except PlaywrightError as exc:
        raise NavigationError(f"Waiting for listings failed: {exc}") from exc

    try:
        for selector in CARD_SELECTORS:
            if await page.query_selector(selector) is not None:
                log.info("Listings ready (%s)", selector)
                return selector
    except PlaywrightError as exc:
        raise NavigationError(f"Waiting for listings failed: {exc}") from exc
    return None


async def navigate(session: Session, target: SearchQuery | PropertyTarget) -> str | None:
    """Load ``target`` and wait for cards.

    Raises NavigationError if the page does not load and BlockedError on a
    challenge page. Returns the matched card selector, or None if empty.
    """
    page = session.page
    url = target_url(target)
    log.info("Navigating to %s", url)
    try:
        # DOM ready only; waiting for network idle gets penalised
        await page.goto(url, wait_until="domcontentloaded", timeout=session.settings.timeout_ms)
    except PlaywrightError as exc:
        raise NavigationError(f"Failed to load {url}: {exc}") from exc

    marker = detect_block(await _page_text(page))
    if marker:
        log.error("Block page detected (%r) at %s", marker, url)
        raise BlockedError(url)

    settings = session.settings
    await dismiss_cookie_consent(page, (settings.pause_min, settings.pause_max))
    return await wait_for_listings(page, settings.listing_wait_ms)


# ── Top-level entry point ─────────────────────────────────────────────────────

async def scrape_listings(
    target: SearchQuery | PropertyTarget,
    settings: Settings,
) -> list[ListingRecord]:
    """Run one full scrape in its own browser session."""
    if isinstance(target, SearchQuery):
        check_in, check_out = target.resolved_dates()
        log.info(
            "Searching %s: check-in=%s check-out=%s adults=%d",
            target.city, check_in, check_out, target.adults,
        )

    async with browser_session(settings) as session:
        try:
            ready = await navigate(session, target)
            if ready is None:
                return []
            html = await session.page.content()
        except PlaywrightError as exc:
            raise NavigationError(f"Browser error during scrape: {exc}") from exc

    listings = extract_listings(html)
    log.info("Scraping complete, total listings: %d", len(listings))
    return listings
