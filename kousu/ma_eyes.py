"""
MA-EYES page object.

This module implements login, month selection and the loading wait on top
of the browser driver, provides the production CalendarView used by the
month walker, and runs the get/put/import-kinmu operations end to end.

MA-EYES updates the work-result page with partial AJAX requests that do not
fire navigation events. Instead of navigation, the loading overlay (a blockUI
div showing a GIF) is watched: first until it appears, then until it
disappears.
"""

from typing import Callable, List, Optional

from .browser import BrowserDriver
from .config import Config
from .errors import KousuError, StructuralError
from .extractor import ATTENDANCE_CELLS, DATE_PATTERN
from .logging_utils import get_logger, log_step, log_success, log_warning
from .models import Document, PutSummary
from .selectors import MaEyesSelectors
from .session import load_cookies, save_cookies
from .walker import CalendarView, MonthWalker

logger = get_logger()

WAIT_SUCCESS = 'success'
WAIT_ERROR = 'error'
WAIT_TIMEOUT = 'timeout'

# Pause after an unexpected overlay count before carrying on
OVERLAY_ERROR_DELAY = 5000

LOGIN_PATH = '/loginView.xhtml'

CALENDAR_ERROR = "Calendar has an unexpected layout"
ATTENDANCE_ERROR = "Attendance table not found"
HOURS_ERROR = "Project hours table not found"


def wait_for_overlay(
    poll_overlays: Callable[[], List[str]],
    kind: str,
    timeout_ms: int,
    sleep: Callable[[int], None],
    poll_interval: int = 100,
) -> str:
    """
    Poll the loading overlay until it appears or disappears.

    Args:
        poll_overlays: Returns the outer HTML of every blockUI overlay on the page
        kind: "appear" or "disappear"
        timeout_ms: Give up after this many milliseconds
        sleep: Sleeps for the given number of milliseconds
        poll_interval: Milliseconds between two polls

    Returns:
        "success", "error" (unexpected overlay count) or "timeout"
    """
    for _ in range(max(1, timeout_ms // poll_interval)):
        overlays = poll_overlays()
        if len(overlays) != MaEyesSelectors.BLOCKUI_COUNT:
            log_warning(
                f"Unexpected number of loading overlays: {len(overlays)} "
                f"(expected {MaEyesSelectors.BLOCKUI_COUNT}); waiting {OVERLAY_ERROR_DELAY // 1000}s"
            )
            sleep(OVERLAY_ERROR_DELAY)
            return WAIT_ERROR

        visible = MaEyesSelectors.BLOCKUI_VISIBLE_MARKER in overlays[MaEyesSelectors.BLOCKUI_LOADING_INDEX]
        if kind == 'appear' and visible:
            return WAIT_SUCCESS
        if kind == 'disappear' and not visible:
            return WAIT_SUCCESS

        sleep(poll_interval)

    logger.debug(f"Loading overlay did not {kind} within {timeout_ms} ms; continuing")
    return WAIT_TIMEOUT


def wait_loading(
    poll_overlays: Callable[[], List[str]],
    sleep: Callable[[int], None],
    timeout_ms: int = 30000,
    settle_delay: int = 500,
    poll_interval: int = 100,
):
    """
    Wait for the loading overlay to appear and then disappear.

    A timeout in either phase ends the wait without an error.
    """
    if wait_for_overlay(poll_overlays, 'appear', timeout_ms, sleep, poll_interval) == WAIT_TIMEOUT:
        return
    sleep(settle_delay)
    if wait_for_overlay(poll_overlays, 'disappear', timeout_ms, sleep, poll_interval) == WAIT_TIMEOUT:
        return
    sleep(settle_delay)


class MaEyesPage(CalendarView):
    """
    The MA-EYES work-result page driven through a BrowserDriver.
    """

    def __init__(self, driver: BrowserDriver, config: Config):
        self.driver = driver
        self.config = config

    # Loading wait

    def _overlays(self) -> List[str]:
        return [
            self.driver.outer_html(locator)
            for locator in self.driver.locate_all(MaEyesSelectors.BLOCKUI_CONTENT)
        ]

    def wait_loading(self, timeout_ms: Optional[int] = None):
        """
        Wait until the page finished the update triggered by the last action.

        Args:
            timeout_ms: Timeout of each phase (defaults to the overlay timeout)
        """
        wait_loading(
            self._overlays,
            self.driver.sleep,
            timeout_ms=timeout_ms or self.config.overlay_timeout,
            settle_delay=self.config.settle_delay,
            poll_interval=self.config.poll_interval,
        )

    # Login and month selection

    def login(self):
        """
        Open MA-EYES and log in.

        With a cookie file the saved session is restored instead of filling
        the form. When the landing page is already the work-result page (an
        attached browser that is logged in) nothing is filled either.

        Raises:
            StructuralError: If the login form is not found
            KousuError: If the login page is still shown after submitting
        """
        log_step(f"Opening {self.config.ma_url}...")

        if self.config.cookie_load:
            self.driver.add_cookies(load_cookies(self.config.cookie_load))
            self.driver.navigate(self.config.ma_url)
            return

        self.driver.navigate(self.config.ma_url)

        if self.driver.current_url().endswith(MaEyesSelectors.WORK_RESULT_PATH):
            logger.debug("Already logged in")
            return

        log_step("Logging in...")
        user = self.driver.locate_one(MaEyesSelectors.LOGIN_USER, "User code input not found")
        self.driver.fill(user, self.config.ma_user)
        password = self.driver.locate_one(MaEyesSelectors.LOGIN_PASSWORD, "Password input not found")
        self.driver.fill(password, self.config.ma_pass)
        button = self.driver.locate_one(MaEyesSelectors.LOGIN_BUTTON, "Login button not found")
        self.driver.click(button)
        self.driver.wait_for_load()

        if self.driver.current_url().endswith(LOGIN_PATH):
            raise KousuError("Login failed; check --ma-user and --ma-pass")

        if self.config.cookie_save:
            save_cookies(self.config.cookie_save, self.driver.cookies())

        log_success("Logged in")

    def _select(self, selector: str, value: str, what: str):
        element = self.driver.locate_one(selector, CALENDAR_ERROR)
        logger.debug(f"Select {what}: {value}")
        selected = self.driver.select_option(element, value)
        if selected != [value]:
            raise StructuralError(f"Failed to select {what} {value} (selected: {selected})")
        self.wait_loading()

    def select_year_month(self, year: int, month: int):
        """
        Select a month in the calendar.

        Raises:
            StructuralError: If the year or month cannot be selected
        """
        log_step(f"Selecting {year}-{month:02d}...")
        self._select(MaEyesSelectors.YEAR_SELECT, str(year), 'year')
        # The month select is 0-based
        self._select(MaEyesSelectors.MONTH_SELECT, str(month - 1), 'month')

    # CalendarView

    def calendar_row_count(self) -> int:
        return len(self.driver.locate_all(MaEyesSelectors.CALENDAR_ROWS))

    def calendar_row_days(self, row: int) -> List[str]:
        # Cells are located again on every call since the calendar is re-rendered
        cells = self.driver.locate_all(MaEyesSelectors.get_calendar_day_selector(row))
        return [self.driver.read_text(cell) for cell in cells]

    def select_day(self, row: int, column: int):
        cells = self.driver.locate_all(MaEyesSelectors.get_calendar_day_selector(row))
        if column >= len(cells):
            raise StructuralError(
                f"{CALENDAR_ERROR}: row {row + 1} has {len(cells)} day(s), column {column + 1} requested"
            )
        self.driver.click(cells[column])
        self.wait_loading()

    def attendance_markup(self) -> str:
        table = self.driver.locate_one(MaEyesSelectors.ATTENDANCE_TABLE, ATTENDANCE_ERROR)
        return self.driver.outer_html(table)

    def hours_markup(self) -> str:
        container = self.driver.locate_one(MaEyesSelectors.HOURS_CONTAINER, HOURS_ERROR)
        return self.driver.outer_html(container)

    def column_dates(self) -> List[str]:
        cells = self.driver.locate_all(MaEyesSelectors.ATTENDANCE_DATES)
        if len(cells) != ATTENDANCE_CELLS:
            raise StructuralError(
                f"Attendance table has an unexpected layout: {len(cells)} date cell(s), "
                f"expected {ATTENDANCE_CELLS}"
            )
        dates = []
        for cell in cells[1:]:
            text = self.driver.read_text(cell).strip()
            match = DATE_PATTERN.search(text)
            dates.append(match.group(0) if match else text)
        return dates

    def project_ids(self) -> List[str]:
        cells = self.driver.locate_all(MaEyesSelectors.HOURS_PROJECT_IDS)
        return [self.driver.read_text(cell).strip() for cell in cells]

    def cell_text(self, project_row: int, day_column: int) -> str:
        cell = self.driver.locate_one(
            MaEyesSelectors.get_hours_cell_selector(project_row, day_column),
            "Project hours table has an unexpected layout",
        )
        return self.driver.read_text(cell)

    def edit_cell(self, project_row: int, day_column: int, text: str):
        cell = self.driver.locate_one(
            MaEyesSelectors.get_hours_cell_selector(project_row, day_column),
            "Project hours table has an unexpected layout",
        )
        self.driver.click(cell)
        self.driver.type_text(text)

        # Tab leaves the cell and sends the value to the server
        self.driver.press_key('Tab')
        self.wait_loading(self.config.commit_timeout)

    def save(self):
        log_step("Saving week...")
        button = self.driver.locate_one(MaEyesSelectors.SAVE_BUTTON, "Save button not found")
        self.driver.click(button)
        self.wait_loading()

    def import_attendance(self):
        log_step("Importing attendance (勤務時間取込)...")
        button = self.driver.locate_one(MaEyesSelectors.IMPORT_ATTENDANCE_BUTTON, "Import attendance button not found")
        self.driver.click(button)
        self.wait_loading()


def _open_month(page: MaEyesPage, config: Config) -> bool:
    """
    Log in and select the configured month.

    Returns:
        False when the run only saved cookies and should stop here
    """
    page.login()
    if config.cookie_save:
        log_success(f"Cookies saved to {config.cookie_save}")
        return False
    page.select_year_month(config.year, config.month)
    return True


def run_get_operation(config: Config) -> Optional[Document]:
    """
    Read the configured month from MA-EYES.

    Args:
        config: Application configuration

    Returns:
        Document of the month, or None when only cookies were saved
    """
    with BrowserDriver(config) as driver:
        page = MaEyesPage(driver, config)
        if not _open_month(page, config):
            return None
        return MonthWalker(page, config).get()


def run_put_operation(config: Config, document: Document) -> Optional[PutSummary]:
    """
    Write a document into the configured month of MA-EYES.

    Args:
        config: Application configuration
        document: Validated document

    Returns:
        Summary of the run, or None when only cookies were saved
    """
    with BrowserDriver(config) as driver:
        page = MaEyesPage(driver, config)
        if not _open_month(page, config):
            return None
        return MonthWalker(page, config).put(document)


def run_import_kinmu_operation(config: Config) -> Optional[int]:
    """
    Import attendance into every week of the configured month.

    Returns:
        Number of weeks processed, or None when only cookies were saved
    """
    with BrowserDriver(config) as driver:
        page = MaEyesPage(driver, config)
        if not _open_month(page, config):
            return None
        return MonthWalker(page, config).import_kinmu()
