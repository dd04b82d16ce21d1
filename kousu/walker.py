"""
Month walker.

Drives the ``get``, ``put`` and ``import-kinmu`` commands across every
calendar week of the selected month. The walker only talks to a
CalendarView, so the same loops run against the live MA-EYES page and
against in-memory fakes in tests.
"""

from abc import abstractmethod
from typing import Iterator, List, Optional, Tuple

from .config import Config
from .extractor import DAYS_PER_WEEK, read_week
from .logging_utils import get_logger, log_section, log_step, log_warning
from .models import DayHours, Document, PutSummary, WorkDay
from .month_utils import WEEKDAY_LABELS, format_month
from .reconciler import Reconciler, WeekGrid
from .schema import DocumentSchema
from .widgets import WidgetReader

logger = get_logger()


class CalendarView(WidgetReader, WeekGrid):
    """
    Interface of the month calendar plus the widgets of the selected week.

    Calendar rows are weeks, Monday first. Cells of adjacent months are
    rendered blank (a non-breaking space).
    """

    @abstractmethod
    def calendar_row_count(self) -> int:
        """Return the number of week rows rendered for the month."""
        pass

    @abstractmethod
    def calendar_row_days(self, row: int) -> List[str]:
        """Return the text of the seven day cells of a calendar row."""
        pass

    @abstractmethod
    def select_day(self, row: int, column: int):
        """Click a day cell and wait until the week is loaded."""
        pass

    @abstractmethod
    def import_attendance(self):
        """Press the grid's import-attendance button and wait for it."""
        pass


class MonthWalker:
    """
    Iterates the weeks of a month and runs one command per week.
    """

    def __init__(self, view: CalendarView, config: Optional[Config] = None):
        """
        Initialize the walker.

        Args:
            view: Calendar of the selected month
            config: Run configuration (used for log output only)
        """
        self.view = view
        self.config = config

    def _month_label(self) -> str:
        if self.config is None:
            return ''
        return f" {format_month(self.config.year, self.config.month)}"

    def weeks(self) -> Iterator[Tuple[int, str]]:
        """
        Select each week of the month in calendar order.

        In each row the first non-blank day is selected, which is the Monday
        or the 1st of the month. Rows without such a day are skipped.

        Yields:
            Tuple of (calendar row, label of the selected day)
        """
        for row in range(self.view.calendar_row_count()):
            days = self.view.calendar_row_days(row)
            column = next((i for i, text in enumerate(days) if text.strip()), None)
            if column is None:
                logger.debug(f"Calendar row {row + 1} has no selectable day; skipped")
                continue

            label = f"{days[column].strip()}({WEEKDAY_LABELS[column % DAYS_PER_WEEK]})"
            log_step(f"Select week: {label}")
            self.view.select_day(row, column)
            yield row, label

    def get(self) -> Document:
        """
        Read every week of the month into a Document.

        Returns:
            Document in walker order; project names of later weeks win

        Raises:
            StructuralError: If a widget does not have the expected layout
        """
        log_section(f"GET{self._month_label()}", logger)

        document = Document(version=DocumentSchema.VERSION_CURRENT)

        for _, label in self.weeks():
            attendance, hours, projects = read_week(self.view)

            if len(attendance) != DAYS_PER_WEEK:
                log_warning(f"Week {label}: attendance has {len(attendance)} days, expected {DAYS_PER_WEEK}")
            if len(hours) != DAYS_PER_WEEK:
                log_warning(f"Week {label}: project hours has {len(hours)} days, expected {DAYS_PER_WEEK}")

            for i, day in enumerate(attendance):
                if day is None:
                    continue
                day_hours = hours[i] if i < len(hours) else DayHours(sagyou=None, fumei=None)
                document.works.append(WorkDay(
                    date=day.date,
                    begin=day.begin,
                    end=day.end,
                    yokujitsu=day.yokujitsu,
                    kyukei=day.kyukei,
                    yasumi=day.yasumi,
                    sagyou=day_hours.sagyou if day_hours.sagyou is not None else 0.0,
                    fumei=day_hours.fumei if day_hours.fumei is not None else 0.0,
                    hours=dict(day_hours.hours),
                ))

            # Names are not cross-checked between weeks
            document.projects.update(projects)

        logger.info(f"Read {len(document.works)} day(s), {len(document.projects)} project(s)")
        return document

    def put(self, document: Document) -> PutSummary:
        """
        Write the document's hours into every week of the month.

        Args:
            document: Validated document (not modified)

        Returns:
            PutSummary of the run

        Raises:
            StructuralError: If a cell cannot be located or edited
        """
        log_section(f"PUT{self._month_label()}", logger)

        reconciler = Reconciler(document)
        summary = PutSummary()

        for _, label in self.weeks():
            result = reconciler.apply_week(self.view)
            summary.add_week_result(result)
            logger.debug(
                f"Week {label}: {len(result.edits)} changed, {result.unchanged} unchanged"
            )

        return summary

    def import_kinmu(self) -> int:
        """
        Import attendance into the work log of every week and save it.

        Returns:
            Number of weeks processed
        """
        log_section(f"IMPORT-KINMU{self._month_label()}", logger)

        count = 0
        for _ in self.weeks():
            self.view.import_attendance()
            self.view.save()
            count += 1

        return count
