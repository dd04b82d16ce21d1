"""
Playwright browser driver.

This module owns the browser lifecycle (launch or attach, context, page)
and exposes the primitive operations the MA-EYES page object is built on.
"""

from typing import List, Optional

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Locator,
    Page,
    sync_playwright,
)

from .config import Config
from .errors import StructuralError
from .logging_utils import get_logger, log_error, log_step
from .network_utils import format_connectivity_error, is_vpn_proxy_error


class BrowserDriver:
    """
    Thin wrapper around a Playwright page.

    Use as a context manager so the browser is always closed (or, when
    attached to an existing browser, disconnected).
    """

    def __init__(self, config: Config):
        """
        Initialize the driver.

        Args:
            config: Application configuration
        """
        self.config = config
        self.logger = get_logger()
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._owns_context = True

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def start(self):
        """
        Start Playwright and launch or attach to Chromium.
        """
        log_step("Starting browser...", self.logger)

        self.playwright = sync_playwright().start()

        if self.config.connect_url:
            self.logger.debug(f"Connecting to {self.config.connect_url}")
            self.browser = self.playwright.chromium.connect_over_cdp(self.config.connect_url)
            if self.browser.contexts:
                self.context = self.browser.contexts[0]
                self._owns_context = False
        else:
            self.browser = self.playwright.chromium.launch(
                headless=self.config.headless,
                handle_sigint=self.config.handle_sigint,
            )

        if self.context is None:
            self.context = self.browser.new_context(
                ignore_https_errors=self.config.ignore_https,
                no_viewport=True,
            )

        self.context.set_default_timeout(self.config.element_timeout)
        self.context.set_default_navigation_timeout(self.config.navigation_timeout)

        self.page = self.context.new_page()
        self.page.on("console", lambda message: self.logger.debug(f"Browser console: {message.text}"))

        self.logger.debug(
            f"Browser ready (headless={self.config.headless}, connect_url={self.config.connect_url})"
        )

    def close(self):
        """
        Close the page and browser, or disconnect from an attached browser.
        """
        if self.page:
            self.page.close()
        if self.context and self._owns_context:
            self.context.close()
        if self.browser:
            # For a CDP connection this only disconnects
            self.browser.close()
        if self.playwright:
            self.playwright.stop()

        self.logger.debug("Browser closed")

    def navigate(self, url: str):
        """
        Navigate to a URL and wait for the page to load.

        Raises:
            playwright.sync_api.Error: If navigation fails
        """
        self.logger.debug(f"Navigating to {url}")
        try:
            self.page.goto(url, wait_until='load')
        except PlaywrightError as e:
            log_error(f"Failed to navigate: {e}", self.logger)
            if is_vpn_proxy_error(str(e)):
                for line in format_connectivity_error(url, str(e), True).splitlines():
                    self.logger.error(f"  {line}")
            raise

    def wait_for_load(self):
        """Wait for the navigation triggered by the last action."""
        self.page.wait_for_load_state('load')

    def current_url(self) -> str:
        return self.page.url

    def locate_all(self, selector: str) -> List[Locator]:
        return self.page.locator(selector).all()

    def locate_one(self, selector: str, error_message: str) -> Locator:
        """
        Locate exactly one element.

        Args:
            selector: Playwright selector
            error_message: Context for the error when the match count is wrong

        Returns:
            Locator of the single match

        Raises:
            StructuralError: If the selector does not match exactly one element
        """
        locator = self.page.locator(selector)
        count = locator.count()
        if count != 1:
            raise StructuralError(f"{error_message}; {selector} matched {count} element(s), expected 1")
        return locator

    def read_text(self, locator: Locator) -> str:
        return locator.inner_text()

    def outer_html(self, locator: Locator) -> str:
        return locator.evaluate("element => element.outerHTML")

    def click(self, locator: Locator):
        """
        Click an element.

        Raises:
            StructuralError: If the element cannot be clicked
        """
        try:
            locator.click()
        except PlaywrightError as e:
            raise StructuralError(f"Click failed: {e}") from e

    def type_text(self, text: str):
        """Type text into the focused element, one key at a time."""
        try:
            self.page.keyboard.type(text)
        except PlaywrightError as e:
            raise StructuralError(f"Typing \"{text}\" failed: {e}") from e

    def press_key(self, key: str):
        try:
            self.page.keyboard.press(key)
        except PlaywrightError as e:
            raise StructuralError(f"Pressing {key} failed: {e}") from e

    def fill(self, locator: Locator, text: str):
        try:
            locator.fill(text)
        except PlaywrightError as e:
            raise StructuralError(f"Input failed: {e}") from e

    def select_option(self, locator: Locator, value: str) -> List[str]:
        """
        Select an option of a <select> element.

        Returns:
            Values that ended up selected

        Raises:
            StructuralError: If the option cannot be selected
        """
        try:
            return locator.select_option(value)
        except PlaywrightError as e:
            raise StructuralError(f"Selecting \"{value}\" failed: {e}") from e

    def sleep(self, milliseconds: int):
        self.page.wait_for_timeout(milliseconds)

    def cookies(self) -> List[dict]:
        return self.context.cookies()

    def add_cookies(self, cookies: List[dict]):
        self.context.add_cookies(cookies)
