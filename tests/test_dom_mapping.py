"""
Tests for DOM mapping and selectors.

These tests use Playwright to verify that the selectors and the MA-EYES
page object work with synthetic HTML that mimics the work-result page.
They need Chromium (``playwright install chromium``); deselect them with
``pytest -m "not browser"`` where it is not installed.
"""

import pytest
from playwright.sync_api import sync_playwright

from kousu.browser import BrowserDriver
from kousu.config import Config
from kousu.errors import StructuralError
from kousu.extractor import parse_week_attendance, parse_week_hours
from kousu.ma_eyes import MaEyesPage
from kousu.models import Document, WorkDay
from kousu.reconciler import Reconciler
from kousu.selectors import MaEyesSelectors
from kousu.walker import MonthWalker

from html_fixtures import DATES, attendance_html, hours_html

pytestmark = pytest.mark.browser

NBSP = '&nbsp;'


def calendar_html():
    """Datepicker of August 2020 (two rows are enough for the selectors)."""
    rows = [
        [NBSP] * 5 + ['1', '2'],
        ['3', '4', '5', '6', '7', '8', '9'],
    ]
    body = ''.join(
        '<tr>' + ''.join(
            f'<td>{day}</td>' if day == NBSP else f'<td><a class="ui-state-default" href="#">{day}</a></td>'
            for day in row
        ) + '</tr>'
        for row in rows
    )
    years = ''.join(f'<option value="{y}">{y}</option>' for y in (2019, 2020, 2021))
    months = ''.join(f'<option value="{m}">{m + 1}月</option>' for m in range(12))
    return (
        '<div class="ui-datepicker">'
        f'<select class="ui-datepicker-year">{years}</select>'
        f'<select class="ui-datepicker-month">{months}</select>'
        f'<table class="ui-datepicker-calendar"><tbody>{body}</tbody></table>'
        '</div>'
    )


# Editable cells become an input on click; Tab writes the input back as
# cell text.
EDITOR_SCRIPT = """
<script>
window.saves = 0;
window.imports = 0;
document.querySelectorAll('td.ui-editable-column').forEach(function (td) {
    td.addEventListener('click', function () {
        if (td.querySelector('input')) { return; }
        td.textContent = '';
        var input = document.createElement('input');
        td.appendChild(input);
        input.addEventListener('keydown', function (event) {
            if (event.key === 'Tab') { td.textContent = input.value; }
        });
        input.focus();
    });
});
</script>
"""

WORK_RESULT_HTML = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Test MA-EYES</title>
</head>
<body>
    {calendar_html()}
    {attendance_html()}
    {hours_html()}
    <button id="workResultView:j_idt50:saveButton" onclick="window.saves++">保存</button>
    <button id="workResultView:j_idt52" onclick="window.imports++">勤務時間取込</button>
    <div class="ui-blockui-content ui-widget" style="display: none;"></div>
    <div class="ui-blockui-content ui-widget" style="display: none;"><img src="loading.gif"></div>
    {EDITOR_SCRIPT}
</body>
</html>
"""

TEST_CONFIG = Config(
    ma_url='https://ma.example.com/maeyes/',
    ma_user='user',
    ma_pass='secret',
    year=2020,
    month=8,
    element_timeout=5000,
    overlay_timeout=200,
    commit_timeout=200,
    settle_delay=0,
    poll_interval=50,
)


@pytest.fixture(scope="module")
def browser():
    """Create a browser instance for tests."""
    with sync_playwright() as p:
        browser = p.chromium.launch()
        yield browser
        browser.close()


@pytest.fixture
def ma_page(browser):
    """MaEyesPage driving a fresh copy of the synthetic work-result page."""
    context = browser.new_context()
    context.set_default_timeout(TEST_CONFIG.element_timeout)
    page = context.new_page()
    page.set_content(WORK_RESULT_HTML)

    driver = BrowserDriver(TEST_CONFIG)
    driver.context = context
    driver.page = page

    yield MaEyesPage(driver, TEST_CONFIG)
    context.close()


class TestMaEyesSelectors:
    """Tests for MA-EYES selectors."""

    def test_single_match_selectors(self, ma_page):
        """Test that each fixed selector matches exactly one element."""
        page = ma_page.driver.page
        for selector in (
            MaEyesSelectors.YEAR_SELECT,
            MaEyesSelectors.MONTH_SELECT,
            MaEyesSelectors.ATTENDANCE_TABLE,
            MaEyesSelectors.HOURS_CONTAINER,
            MaEyesSelectors.SAVE_BUTTON,
            MaEyesSelectors.IMPORT_ATTENDANCE_BUTTON,
        ):
            assert page.locator(selector).count() == 1, selector

    def test_overlays(self, ma_page):
        """Test that both blockUI overlays are found."""
        assert ma_page.driver.page.locator(MaEyesSelectors.BLOCKUI_CONTENT).count() == MaEyesSelectors.BLOCKUI_COUNT

    def test_hours_cell_selector(self, ma_page):
        """Test that the cell selector addresses the weekday columns."""
        page = ma_page.driver.page

        assert page.locator(MaEyesSelectors.get_hours_cell_selector(0, 0)).inner_text() == '7.5'
        assert page.locator(MaEyesSelectors.get_hours_cell_selector(0, 5)).inner_text() == '0.0'
        assert page.locator(MaEyesSelectors.get_hours_cell_selector(0, 7)).count() == 0


class TestMaEyesPage:
    """Tests for the MaEyesPage CalendarView against a real DOM."""

    def test_calendar(self, ma_page):
        """Test the calendar rows and their day texts."""
        assert ma_page.calendar_row_count() == 2
        days = ma_page.calendar_row_days(0)
        assert [day.strip() for day in days] == [''] * 5 + ['1', '2']

    def test_weeks(self, ma_page):
        """Test that the walker selects the first day of each row."""
        labels = [label for _, label in MonthWalker(ma_page).weeks()]

        assert labels == ['1(土)', '3(月)']

    def test_select_year_month(self, ma_page):
        """Test that the year and the 0-based month are selected."""
        ma_page.select_year_month(2020, 8)

        page = ma_page.driver.page
        assert page.locator(MaEyesSelectors.YEAR_SELECT).input_value() == '2020'
        assert page.locator(MaEyesSelectors.MONTH_SELECT).input_value() == '7'

    def test_widget_markup_parses(self, ma_page):
        """Test that the markup read from the page feeds the extractor."""
        attendance = parse_week_attendance(ma_page.attendance_markup())
        hours, projects = parse_week_hours(ma_page.hours_markup())

        assert [day.date for day in attendance] == DATES
        assert hours[0].hours == {'project0': 7.5, 'project1': 0.0}
        assert projects == {'project0': '[project0]Project Zero', 'project1': '[project1]Project One'}

    def test_column_dates(self, ma_page):
        """Test the dates of the grid columns."""
        assert ma_page.column_dates() == DATES

    def test_project_ids(self, ma_page):
        """Test the project ids in grid row order."""
        assert ma_page.project_ids() == ['project0', 'project1']

    def test_edit_cell(self, ma_page):
        """Test that an edit is typed into the cell and committed."""
        ma_page.edit_cell(1, 2, '3.5')

        assert ma_page.cell_text(1, 2).strip() == '3.5'
        assert ma_page.cell_text(0, 2).strip() == '7.5'

    def test_save_and_import(self, ma_page):
        """Test that the buttons are pressed once each."""
        ma_page.import_attendance()
        ma_page.save()

        page = ma_page.driver.page
        assert page.evaluate('window.imports') == 1
        assert page.evaluate('window.saves') == 1

    def test_missing_element(self, ma_page):
        """Test that a missing element is a structural error."""
        ma_page.driver.page.set_content('<html><body></body></html>')

        with pytest.raises(StructuralError, match='Save button not found'):
            ma_page.save()

    def test_reconcile_week(self, ma_page):
        """Test a put of one changed cell against the page."""
        hours = [
            {'project0': 7.5, 'project1': 0.0} if i < 5 else {'project0': 0.0, 'project1': 0.0}
            for i in range(7)
        ]
        hours[2] = {'project0': 7.5, 'project1': 1.0}
        document = Document(
            version='3.0.0',
            projects={'project0': 'Zero', 'project1': 'One'},
            works=[
                WorkDay(date, '09:00', '17:30', False, 1.0, '', sum(h.values()), 0.0, h)
                for date, h in zip(DATES, hours)
            ],
        )

        result = Reconciler(document).apply_week(ma_page)

        assert [(edit.project_row, edit.day_column, edit.target) for edit in result.edits] == [(1, 2, '1.0')]
        assert ma_page.cell_text(1, 2).strip() == '1.0'
        assert ma_page.driver.page.evaluate('window.saves') == 1
