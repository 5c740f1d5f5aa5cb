# browser.py
# Playwright browser lifecycle for a single test.
#
# open_browser returns a BrowserSession holding the Playwright controller,
# the browser and the page, so callers release everything with one close().
# The viewport must match the display size declared to the oracle, otherwise
# action coordinates drift.

from dataclasses import dataclass

from playwright.sync_api import Browser, Page, Playwright, sync_playwright

from page_pilot.config import Settings

LAUNCH_ARGS = ["--disable-extensions", "--disable-filesystem"]


@dataclass
class BrowserSession:
    playwright: Playwright
    browser: Browser
    page: Page

    def close(self) -> None:
        """Close the browser, then stop Playwright even if closing failed."""
        try:
            self.browser.close()
        finally:
            self.playwright.stop()


def open_browser(url: str, settings: Settings | None = None) -> BrowserSession:
    """Launch Chromium sized to the configured viewport and navigate to ``url``."""
    settings = settings or Settings()

    playwright = sync_playwright().start()
    try:
        browser = playwright.chromium.launch(
            headless=settings.headless,
            chromium_sandbox=True,
            env={},
            args=LAUNCH_ARGS,
        )
        page = browser.new_page()
        page.set_viewport_size(
            {"width": settings.display_width, "height": settings.display_height}
        )
        page.goto(url)
    except Exception:
        playwright.stop()
        raise

    return BrowserSession(playwright=playwright, browser=browser, page=page)
