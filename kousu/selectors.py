"""
DOM selectors for MA-EYES.

This module defines every selector the tool needs to interact with the
MA-EYES web interface (PrimeFaces/JSF pages).

IMPORTANT: The element ids (j_idtNN) are generated by JSF. If MA-EYES is
upgraded and the page structure changes, this module will need to be updated.
"""


class MaEyesSelectors:
    """
    Centralized selectors for MA-EYES DOM elements.

    All selectors use Playwright's ``xpath=`` locator syntax.
    """

    # Login form (loginView.xhtml)
    LOGIN_USER = 'xpath=//input[@data-p-label="ユーザコード"]'
    LOGIN_PASSWORD = 'xpath=//input[@data-p-label="パスワード"]'
    LOGIN_BUTTON = 'xpath=//div[@class="login-actions"]/button'

    # Page shown after login
    WORK_RESULT_PATH = '/workResult.xhtml'

    # Month calendar (jQuery UI datepicker)
    YEAR_SELECT = 'xpath=//select[@class="ui-datepicker-year"]'
    MONTH_SELECT = 'xpath=//select[@class="ui-datepicker-month"]'
    CALENDAR_ROWS = 'xpath=//table[@class="ui-datepicker-calendar"]/tbody/tr'

    # Attendance table of the selected week
    ATTENDANCE_TABLE = 'xpath=//table[@id="workResultView:j_idt69"]'
    ATTENDANCE_DATES = 'xpath=//table[@id="workResultView:j_idt69"]//tr[1]/td'

    # Project hours table of the selected week
    HOURS_CONTAINER = 'xpath=//div[@id="workResultView:items"]'
    HOURS_PROJECT_IDS = 'xpath=//tbody[@id="workResultView:items_data"]/tr/td[4]'

    # Buttons
    SAVE_BUTTON = 'xpath=//button[@id="workResultView:j_idt50:saveButton"]'
    IMPORT_ATTENDANCE_BUTTON = 'xpath=//button[@id="workResultView:j_idt52"]'

    # blockUI overlays; the second one shows the loading GIF
    BLOCKUI_CONTENT = 'xpath=//div[contains(@class, "ui-blockui-content")]'
    BLOCKUI_COUNT = 2
    BLOCKUI_LOADING_INDEX = 1
    BLOCKUI_VISIBLE_MARKER = 'display: block'

    @staticmethod
    def get_calendar_day_selector(row: int) -> str:
        """
        Get selector for the day cells of a calendar row.

        Args:
            row: 0-based calendar row

        Returns:
            Selector string matching the seven day cells of the row
        """
        return f'xpath=//table[@class="ui-datepicker-calendar"]/tbody/tr[{row + 1}]/td'

    @staticmethod
    def get_hours_cell_selector(project_row: int, day_column: int) -> str:
        """
        Get selector for one editable cell of the project hours table.

        Day columns start at the 7th cell of each row (td[7] is Monday).

        Args:
            project_row: 0-based project row
            day_column: 0-based weekday column, Monday first

        Returns:
            Selector string matching exactly one cell
        """
        return (
            f'xpath=//tbody[@id="workResultView:items_data"]'
            f'/tr[{project_row + 1}]/td[{day_column + 7}]'
        )
