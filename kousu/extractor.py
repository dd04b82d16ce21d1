"""
Week-grid extractor.

Parses the markup of the two weekly widgets of the MA-EYES work-result page:

- the attendance table (date, clock-in, clock-out, next-day flag, break,
  leave type; one column per weekday)
- the project-hours table (worked and unaccounted totals per day in the
  header, one row of hours per project in the body)

Both parsers check the fixed anchor labels of the widget first and raise
StructuralError when the page does not have the expected shape.

Attendance table layout::

    tr[0]  ""      7/27(月)  7/28(火)  ...  8/2(日)
    tr[1]  出社    <input value="09:00">       (no input: adjacent month)
    tr[2]  退社    <input value="17:30">
    tr[3]  翌日    <input aria-checked="false">
    tr[4]  休憩    <input value="1.0">
    tr[5]  休み    <label>&nbsp;|全休|午前|午後</label>

Project-hours table layout (1-based columns)::

    thead/tr[2]  th[6] 作業時間  th[7..13] worked hours per day
    thead/tr[3]  th[6] 不明時間  th[7..13] unaccounted hours per day
    thead/tr[4]  th[4] 項目No    th[5] 名称
    tbody/tr     td[4] project id, td[5] name, td[7..13] hours per day
"""

import math
import re
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from .errors import StructuralError
from .logging_utils import get_logger, log_warning
from .models import Attendance, DayHours
from .widgets import WidgetReader

logger = get_logger()

DAYS_PER_WEEK = 7

ATTENDANCE_LABELS = ['', '出社', '退社', '翌日', '休憩', '休み']
ATTENDANCE_CELLS = DAYS_PER_WEEK + 1

DATE_PATTERN = re.compile(r'\d{1,2}/\d{1,2}\((月|火|水|木|金|土|日)\)')

YASUMI_LABELS = ('全休', '午前', '午後')

HOURS_HEAD_ID = 'workResultView:items_head'
HOURS_DATA_ID = 'workResultView:items_data'

# (header row, 0-based th index, expected label)
HOURS_ANCHORS = [
    (1, 5, '作業時間'),
    (2, 5, '不明時間'),
    (3, 3, '項目No'),
    (3, 4, '名称'),
]
SERIES_START = 6
DATA_ID_COLUMN = 3
DATA_NAME_COLUMN = 4
DATA_HOURS_START = 6
DATA_MIN_CELLS = DATA_HOURS_START + DAYS_PER_WEEK

ATTENDANCE_ERROR = "Attendance table has an unexpected layout"
HOURS_ERROR = "Project hours table has an unexpected layout"


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'lxml')


def _cells(row, name: str) -> list:
    return row.find_all(name, recursive=False)


def _input_attribute(cell, attribute: str, row: int, column: int) -> Optional[str]:
    """Read an attribute of the cell's input; None when the cell has no input."""
    element = cell.find('input')
    if element is None:
        return None
    value = element.get(attribute)
    if value is None:
        raise StructuralError(
            f"{ATTENDANCE_ERROR}: row {row + 1} column {column + 1} "
            f"({ATTENDANCE_LABELS[row]}): input has no {attribute} attribute"
        )
    return value


def parse_week_attendance(html: str) -> List[Optional[Attendance]]:
    """
    Parse the weekly attendance table.

    Args:
        html: Outer HTML of the attendance table

    Returns:
        One entry per weekday column, None for days that are not applicable
        (days of the adjacent month render without inputs)

    Raises:
        StructuralError: If the table does not have the expected layout
    """
    soup = _parse(html)

    rows = soup.find_all('tr')
    if len(rows) != len(ATTENDANCE_LABELS):
        raise StructuralError(
            f"{ATTENDANCE_ERROR}: expected {len(ATTENDANCE_LABELS)} rows "
            f"(date 出社 退社 翌日 休憩 休み), found {len(rows)}"
        )

    table: List[list] = []
    for i, (row, label) in enumerate(zip(rows, ATTENDANCE_LABELS)):
        cells = _cells(row, 'td')
        if len(cells) != ATTENDANCE_CELLS:
            raise StructuralError(
                f"{ATTENDANCE_ERROR}: row {i + 1}: expected {ATTENDANCE_CELLS} cells "
                f"(header + 月火水木金土日), found {len(cells)}"
            )
        found = cells[0].get_text().strip()
        if found != label:
            raise StructuralError(
                f"{ATTENDANCE_ERROR}: row {i + 1} column 1 is not \"{label}\" (found: \"{found}\")"
            )
        table.append(cells[1:])

    dates = []
    for column, cell in enumerate(table[0], start=1):
        text = cell.get_text()
        match = DATE_PATTERN.search(text)
        if match is None:
            raise StructuralError(
                f"{ATTENDANCE_ERROR}: row 1 column {column + 1} is not a date: \"{text.strip()}\""
            )
        dates.append(match.group(0))

    begins = [_input_attribute(cell, 'value', 1, column) for column, cell in enumerate(table[1], start=1)]
    ends = [_input_attribute(cell, 'value', 2, column) for column, cell in enumerate(table[2], start=1)]

    yokujitsus: List[Optional[bool]] = []
    for column, cell in enumerate(table[3], start=1):
        checked = _input_attribute(cell, 'aria-checked', 3, column)
        if checked is None:
            yokujitsus.append(None)
            continue
        if checked not in ('true', 'false'):
            raise StructuralError(
                f"{ATTENDANCE_ERROR}: row 4 column {column + 1} (翌日): aria-checked={checked}"
            )
        yokujitsus.append(checked == 'true')

    kyukeis = [_input_attribute(cell, 'value', 4, column) for column, cell in enumerate(table[4], start=1)]

    yasumis: List[Optional[str]] = []
    for column, cell in enumerate(table[5], start=1):
        label = cell.find('label')
        if label is None:
            yasumis.append(None)
            continue
        # str.strip() also removes the non-breaking space of an empty selection
        text = label.get_text().strip()
        if text and text not in YASUMI_LABELS:
            raise StructuralError(
                f"{ATTENDANCE_ERROR}: row 6 column {column + 1} (休み): selected option: \"{text}\""
            )
        yasumis.append(text)

    days: List[Optional[Attendance]] = []
    for i, date in enumerate(dates):
        values = (begins[i], ends[i], yokujitsus[i], kyukeis[i], yasumis[i])
        if any(value is None for value in values):
            days.append(None)
            continue
        try:
            kyukei = float(kyukeis[i])
        except ValueError:
            kyukei = math.nan
        if not math.isfinite(kyukei):
            raise StructuralError(f"{ATTENDANCE_ERROR}: {date} (休憩): \"{kyukeis[i]}\"")
        days.append(Attendance(
            date=date,
            begin=begins[i],
            end=ends[i],
            yokujitsu=yokujitsus[i],
            kyukei=kyukei,
            yasumi=yasumis[i],
        ))

    return days


def _second_span_text(cell) -> str:
    spans = cell.find_all('span')
    if len(spans) < 2:
        return ''
    return spans[1].get_text().strip()


def _to_hours(text: str, context: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise StructuralError(f"{HOURS_ERROR}: {context}: \"{text}\"")
    if not math.isfinite(value):
        raise StructuralError(f"{HOURS_ERROR}: {context}: \"{text}\"")
    return value


def _read_series(header_cells: list, label: str) -> List[Optional[float]]:
    series = []
    for column, cell in enumerate(header_cells[SERIES_START:], start=SERIES_START + 1):
        text = _second_span_text(cell)
        if text == '':
            series.append(None)
            continue
        series.append(_to_hours(text, f"{label} column {column}"))
    if len(series) != DAYS_PER_WEEK:
        log_warning(f"{HOURS_ERROR}: {label} has {len(series)} days, expected {DAYS_PER_WEEK}")
    return series


def parse_week_hours(html: str) -> Tuple[List[DayHours], Dict[str, str]]:
    """
    Parse the weekly project-hours table.

    Args:
        html: Outer HTML of the project-hours container

    Returns:
        Tuple of (seven DayHours, Monday first; project id -> project name)

    Raises:
        StructuralError: If the anchors are missing or a value is not numeric
    """
    soup = _parse(html)

    head = soup.find('thead', id=HOURS_HEAD_ID)
    if head is None:
        raise StructuralError(f"{HOURS_ERROR}: thead#{HOURS_HEAD_ID} not found")
    data = soup.find('tbody', id=HOURS_DATA_ID)
    if data is None:
        raise StructuralError(f"{HOURS_ERROR}: tbody#{HOURS_DATA_ID} not found")

    header_rows = [_cells(row, 'th') for row in _cells(head, 'tr')]

    for row, column, label in HOURS_ANCHORS:
        if row >= len(header_rows) or column >= len(header_rows[row]):
            raise StructuralError(
                f"{HOURS_ERROR}: header row {row + 1} column {column + 1} not found (expected \"{label}\")"
            )
        found = _second_span_text(header_rows[row][column])
        if found != label:
            raise StructuralError(
                f"{HOURS_ERROR}: header row {row + 1} column {column + 1}: "
                f"expected \"{label}\", found \"{found}\""
            )

    sagyou = _read_series(header_rows[1], '作業時間')
    fumei = _read_series(header_rows[2], '不明時間')

    week = [
        DayHours(
            sagyou=sagyou[i] if i < len(sagyou) else None,
            fumei=fumei[i] if i < len(fumei) else None,
        )
        for i in range(DAYS_PER_WEEK)
    ]

    projects: Dict[str, str] = {}
    for i, row in enumerate(_cells(data, 'tr'), start=1):
        cells = _cells(row, 'td')
        if len(cells) < DATA_MIN_CELLS:
            # e.g. the "no records" message row of an empty table
            log_warning(
                f"{HOURS_ERROR}: row {i} has {len(cells)} cells, expected {DATA_MIN_CELLS}; skipped"
            )
            continue

        project_id = cells[DATA_ID_COLUMN].get_text().strip()
        projects[project_id] = cells[DATA_NAME_COLUMN].get_text().strip()

        for day, cell in enumerate(cells[DATA_HOURS_START:DATA_MIN_CELLS]):
            week[day].hours[project_id] = _to_hours(
                cell.get_text().strip(),
                f"{project_id} column {DATA_HOURS_START + day + 1}",
            )

    logger.debug(f"Number of projects: {len(projects)}")
    return week, projects


def read_week(reader: WidgetReader) -> Tuple[List[Optional[Attendance]], List[DayHours], Dict[str, str]]:
    """
    Read and parse both widgets of the selected week.

    Args:
        reader: Source of the widget markup

    Returns:
        Tuple of (attendance per weekday, DayHours per weekday, project id -> name)

    Raises:
        StructuralError: If either widget does not have the expected layout
    """
    attendance = parse_week_attendance(reader.attendance_markup())
    hours, projects = parse_week_hours(reader.hours_markup())
    return attendance, hours, projects
