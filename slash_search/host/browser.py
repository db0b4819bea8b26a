from __future__ import annotations

import logging
import os

from playwright.async_api import (
    BrowserContext,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from ..config import settings
from ..engine import dom
from ..engine.discovery import find_and_focus
from .shortcut import SHORTCUT_KEY, attach_shortcut

ACTIVE_ELEMENT_JS = "() => document.activeElement"


class BrowserSession:
    def __init__(self, user_data_dir: str | None = None) -> None:
        self.context: BrowserContext | None = None
        self.page: Page | None = None
        self._playwright: Playwright | None = None
        self.user_data_dir = os.path.expanduser(
            user_data_dir or settings.user_data_dir or "~/.slash_search_profiles/default"
        )

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        self.context = await self._playwright.chromium.launch_persistent_context(
            user_data_dir=self.user_data_dir,
            headless=settings.headless,
        )
        self.page = await self.context.new_page()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.context:
            await self.context.close()
        if self._playwright:
            await self._playwright.stop()

    def _require_page(self) -> Page:
        if not self.page:
            raise RuntimeError("Browser page is not initialized. Use within an async context manager.")
        return self.page

    async def goto(self, url: str, wait_ms: int | None = None) -> None:
        """
        Navigate to a URL and give the app a moment to hydrate.
        """
        page = self._require_page()
        await page.goto(url, wait_until="domcontentloaded", timeout=settings.navigation_timeout_ms)
        try:
            await page.wait_for_load_state("networkidle", timeout=settings.network_idle_timeout_ms)
        except PlaywrightTimeoutError:
            logging.info("browser: networkidle_timeout url=%s", url)

        wait_ms = settings.hydrate_wait_ms if wait_ms is None else wait_ms
        if wait_ms > 0:
            await page.wait_for_timeout(wait_ms)

    async def attach_shortcut(self) -> bool:
        return await attach_shortcut(self._require_page())

    async def focus_search(self) -> bool:
        return await find_and_focus(self._require_page())

    async def press_shortcut(self) -> None:
        await self._require_page().keyboard.press(SHORTCUT_KEY)

    async def describe_active_element(self) -> str | None:
        page = self._require_page()
        element = (await page.evaluate_handle(ACTIVE_ELEMENT_JS)).as_element()
        if element is None:
            return None
        return await dom.describe(element)

    def __repr__(self) -> str:
        return f"BrowserSession(headless={settings.headless})"
