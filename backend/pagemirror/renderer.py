"""
Headless Chromium sessions via Playwright.

A session owns one browser, one context and one page. It is only ever
handed out through `open_browser_session()`, which closes the browser on
every exit path.
"""

import asyncio
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright

from pagemirror.config import get_settings

_render_slots: asyncio.Semaphore | None = None


def _get_render_slots(limit: int) -> asyncio.Semaphore | None:
    global _render_slots
    if limit <= 0:
        return None
    if _render_slots is None:
        _render_slots = asyncio.Semaphore(limit)
    return _render_slots


class BrowserSession:
    def __init__(self, page, timeout_ms: int, wait_until: str = "networkidle"):
        self.page = page
        self.timeout_ms = timeout_ms
        self.wait_until = wait_until

    async def navigate(self, url: str) -> str:
        """Load `url` and return the rendered document HTML."""
        await self.page.goto(url, wait_until=self.wait_until, timeout=self.timeout_ms)
        return await self.page.content()

    async def frame_sources(self) -> list[str | None]:
        """`src` of every iframe in the current document, in order."""
        frames = await self.page.query_selector_all("iframe")
        return [await frame.get_attribute("src") for frame in frames]


@asynccontextmanager
async def _launch(settings):
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, args=settings.browser_args)
        try:
            context = await browser.new_context(
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                user_agent=settings.user_agent,
            )
            page = await context.new_page()
            yield BrowserSession(page, settings.page_load_timeout, settings.wait_until)
        finally:
            await browser.close()


@asynccontextmanager
async def open_browser_session(settings=None):
    """Scoped rendering session, throttled by `max_concurrent_renders` if set."""
    settings = settings or get_settings()
    slots = _get_render_slots(settings.max_concurrent_renders)
    if slots is None:
        async with _launch(settings) as session:
            yield session
        return

    async with slots:
        async with _launch(settings) as session:
            yield session
