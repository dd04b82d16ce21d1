"""
Tests for the week-grid extractor.
"""

import pytest

from kousu.errors import StructuralError
from kousu.extractor import parse_week_attendance, parse_week_hours, read_week
from kousu.models import Attendance
from kousu.widgets import StaticWidgetReader

from html_fixtures import (
    DATES,
    EMPTY_CELL,
    attendance_html,
    attendance_matrix,
    hours_html,
    render_attendance,
    workday,
)


class TestParseWeekAttendance:
    """Tests for parse_week_attendance."""

    def test_full_week(self):
        """Test a week where every day belongs to the month."""
        days = parse_week_attendance(attendance_html())

        assert len(days) == 7
        assert days[0] == Attendance(
            date='7/27(月)',
            begin='09:00',
            end='17:30',
            yokujitsu=False,
            kyukei=1.0,
            yasumi='',
        )
        assert days[5].yasumi == '全休'
        assert [day.date for day in days] == DATES

    def test_adjacent_month_days_are_none(self):
        """Test that days rendered without inputs are None."""
        html = attendance_html([None, None, None, None, None, workday(), workday()])

        days = parse_week_attendance(html)

        assert days[:5] == [None] * 5
        assert days[5].date == '8/1(土)'
        assert days[6].date == '8/2(日)'

    @pytest.mark.parametrize('row', [1, 2, 3, 4, 5])
    def test_day_dropped_when_one_attribute_missing(self, row):
        """Test that a day missing any single attribute is None, never partial."""
        matrix = attendance_matrix([workday() for _ in range(7)])
        matrix[row][3] = EMPTY_CELL

        days = parse_week_attendance(render_attendance(matrix))

        assert days[2] is None
        assert all(day is not None for i, day in enumerate(days) if i != 2)

    def test_values_are_converted(self):
        """Test yokujitsu, kyukei and yasumi conversion."""
        days = [
            workday(begin='22:00', end='06:00', yokujitsu=True, kyukei='0.5', yasumi='午前'),
            workday(yasumi='午後'),
        ] + [workday() for _ in range(5)]

        result = parse_week_attendance(attendance_html(days))

        assert result[0].yokujitsu is True
        assert result[0].kyukei == 0.5
        assert result[0].yasumi == '午前'
        assert result[1].yasumi == '午後'

    def test_five_rows_raises(self):
        """Test that a table with 5 rows is a structural error."""
        matrix = attendance_matrix([workday() for _ in range(7)])

        with pytest.raises(StructuralError, match='expected 6 rows'):
            parse_week_attendance(render_attendance(matrix[:5]))

    def test_wrong_cell_count_raises(self):
        """Test that a row without 8 cells is a structural error."""
        matrix = attendance_matrix([workday() for _ in range(7)])
        matrix[2] = matrix[2][:7]

        with pytest.raises(StructuralError, match='row 3'):
            parse_week_attendance(render_attendance(matrix))

    def test_wrong_label_raises(self):
        """Test that an unexpected first-column label is a structural error."""
        matrix = attendance_matrix([workday() for _ in range(7)])
        matrix[4][0] = '<td>休息</td>'

        with pytest.raises(StructuralError, match='休憩'):
            parse_week_attendance(render_attendance(matrix))

    def test_labels_compared_after_strip(self):
        """Test that whitespace around labels is ignored."""
        matrix = attendance_matrix([workday() for _ in range(7)])
        matrix[1][0] = '<td>\n  出社  </td>'

        assert len(parse_week_attendance(render_attendance(matrix))) == 7

    def test_invalid_date_raises(self):
        """Test that a date cell not matching the label pattern raises."""
        dates = list(DATES)
        dates[0] = '2020-07-27'

        with pytest.raises(StructuralError, match='not a date'):
            parse_week_attendance(attendance_html(dates=dates))

    def test_input_without_value_raises(self):
        """Test that an input missing its value attribute raises."""
        matrix = attendance_matrix([workday() for _ in range(7)])
        matrix[1][1] = '<td><input type="text"></td>'

        with pytest.raises(StructuralError, match='value'):
            parse_week_attendance(render_attendance(matrix))

    def test_invalid_aria_checked_raises(self):
        """Test that aria-checked other than true/false raises."""
        matrix = attendance_matrix([workday() for _ in range(7)])
        matrix[3][1] = '<td><input type="checkbox" aria-checked="mixed"></td>'

        with pytest.raises(StructuralError, match='aria-checked=mixed'):
            parse_week_attendance(render_attendance(matrix))

    def test_unknown_yasumi_raises(self):
        """Test that an unknown leave type raises."""
        with pytest.raises(StructuralError, match='休み'):
            parse_week_attendance(attendance_html([workday(yasumi='代休')] + [workday()] * 6))

    def test_non_numeric_kyukei_raises(self):
        """Test that a break that is not a number raises."""
        with pytest.raises(StructuralError, match='休憩'):
            parse_week_attendance(attendance_html([workday(kyukei='abc')] + [workday()] * 6))

    def test_nan_kyukei_raises(self):
        """Test that NaN is not accepted as a break duration."""
        with pytest.raises(StructuralError):
            parse_week_attendance(attendance_html([workday(kyukei='nan')] + [workday()] * 6))


class TestParseWeekHours:
    """Tests for parse_week_hours."""

    def test_parse_default_table(self):
        """Test totals, hours and project names of a normal week."""
        week, projects = parse_week_hours(hours_html())

        assert len(week) == 7
        assert projects == {
            'project0': '[project0]Project Zero',
            'project1': '[project1]Project One',
        }
        assert week[0].sagyou == 7.5
        assert week[0].fumei == 0.0
        assert week[0].hours == {'project0': 7.5, 'project1': 0.0}
        assert week[6].hours == {'project0': 0.0, 'project1': 0.0}

    def test_empty_totals_are_none(self):
        """Test that empty header cells become None."""
        sagyou = [None, None, 7.5, 7.5, 7.5, 0.0, 0.0]
        fumei = [None, None, 0.0, 0.0, 0.0, 0.0, 0.0]

        week, _ = parse_week_hours(hours_html(sagyou=sagyou, fumei=fumei))

        assert week[0].sagyou is None
        assert week[0].fumei is None
        assert week[2].sagyou == 7.5

    def test_missing_anchor_raises(self):
        """Test that a table without the 作業時間 anchor raises."""
        with pytest.raises(StructuralError, match='作業時間'):
            parse_week_hours(hours_html(sagyou_label='合計'))

    def test_missing_thead_raises(self):
        """Test that markup without the data table raises."""
        with pytest.raises(StructuralError, match='items_head'):
            parse_week_hours('<div id="workResultView:items"><table></table></div>')

    def test_non_numeric_total_raises(self):
        """Test that a total that is not a number raises."""
        sagyou = ['x', 7.5, 7.5, 7.5, 7.5, 0.0, 0.0]

        with pytest.raises(StructuralError, match='作業時間'):
            parse_week_hours(hours_html(sagyou=sagyou))

    def test_non_numeric_hours_raises(self):
        """Test that a project cell that is not a number raises."""
        projects = [('project0', 'Zero', ['7.5', 'abc', '7.5', '7.5', '7.5', '0.0', '0.0'])]

        with pytest.raises(StructuralError, match='project0'):
            parse_week_hours(hours_html(projects=projects))

    def test_short_series_is_padded(self, caplog_kousu):
        """Test that a short header series warns and pads with None."""
        week, _ = parse_week_hours(hours_html(sagyou=[7.5] * 6))

        assert len(week) == 7
        assert week[5].sagyou == 7.5
        assert week[6].sagyou is None
        assert '作業時間 has 6 days' in caplog_kousu.text

    def test_empty_message_row_is_skipped(self, caplog_kousu):
        """Test that the no-records row is skipped with a warning."""
        week, projects = parse_week_hours(hours_html(empty_message=True))

        assert projects == {}
        assert all(day.hours == {} for day in week)
        assert 'skipped' in caplog_kousu.text


class TestReadWeek:
    """Tests for read_week over captured markup."""

    def test_reads_both_widgets(self):
        """Test that both widgets of a static reader are parsed."""
        reader = StaticWidgetReader(attendance_html(), hours_html())

        attendance, hours, projects = read_week(reader)

        assert [day.date for day in attendance] == DATES
        assert hours[0].sagyou == 7.5
        assert set(projects) == {'project0', 'project1'}

    def test_structural_error_propagates(self):
        """Test that a malformed widget is reported."""
        reader = StaticWidgetReader(attendance_html(), hours_html(sagyou_label='合計'))

        with pytest.raises(StructuralError, match='作業時間'):
            read_week(reader)
