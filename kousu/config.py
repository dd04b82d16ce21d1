"""
Configuration for the MA-EYES work-log tool.

A single immutable Config is built by the CLI from arguments and environment
variables and passed explicitly to the browser, the page object and the
month walker.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Config:
    """
    Application configuration.

    Attributes:
        ma_url: Login URL of MA-EYES
        ma_user: User code for the login form
        ma_pass: Password for the login form
        year: Year of the month to process
        month: Month to process (1-12)
        element_timeout: Default timeout for element operations (milliseconds)
        navigation_timeout: Default timeout for navigation (milliseconds)
        overlay_timeout: Timeout of each phase of the loading wait (milliseconds)
        commit_timeout: Timeout of the loading wait after a cell edit (milliseconds)
        settle_delay: Pause after the loading overlay appears or disappears (milliseconds)
        poll_interval: Interval between overlay checks (milliseconds)
        headless: Run the browser without a window
        ignore_https: Ignore TLS certificate errors
        handle_sigint: Let Playwright handle Ctrl-C
        connect_url: Attach to an existing browser over CDP instead of launching
        cookie_load: Cookie file to restore the session from
        cookie_save: Cookie file to write after login
    """
    ma_url: str = ''
    ma_user: str = ''
    ma_pass: str = ''
    year: int = 2000
    month: int = 1

    element_timeout: int = 120000     # 120 seconds
    navigation_timeout: int = 120000  # 120 seconds
    overlay_timeout: int = 30000      # 30 seconds
    commit_timeout: int = 3000        # 3 seconds
    settle_delay: int = 500
    poll_interval: int = 100

    # Browser options
    headless: bool = False
    ignore_https: bool = False
    handle_sigint: bool = True
    connect_url: Optional[str] = None

    # Session options
    cookie_load: Optional[str] = None
    cookie_save: Optional[str] = None

    def validate(self):
        """
        Validate configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.ma_url:
            raise ValueError("MA-EYES URL is required (--ma-url or KOUSU_MA_URL)")

        if self.cookie_load is None and (not self.ma_user or not self.ma_pass):
            raise ValueError(
                "User and password are required (--ma-user/--ma-pass or KOUSU_MA_USER/KOUSU_MA_PASS)"
            )

        if self.cookie_load and self.cookie_save:
            raise ValueError("Cannot use --z-cookie-load with --z-cookie-save")

        if self.connect_url and self.headless:
            raise ValueError("Cannot use --z-headless with --z-connect-url")

        if self.connect_url and not self.handle_sigint:
            raise ValueError("Cannot use --no-z-handle-sigint with --z-connect-url")

        if not (1 <= self.month <= 12):
            raise ValueError(f"Month must be between 1 and 12, got: {self.month}")

        if not (2000 <= self.year <= 2100):
            raise ValueError(f"Year must be between 2000 and 2100, got: {self.year}")

        for name in ('element_timeout', 'navigation_timeout', 'overlay_timeout', 'commit_timeout'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got: {getattr(self, name)}")
