"""
Reconciler for the ``put`` command.

Compares one week of the live project-hours grid with the document and
rewrites only the cells whose displayed value differs.
"""

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List

from .logging_utils import get_logger, log_warning
from .models import CellEdit, Document, WeekResult, WorkDay

logger = get_logger()


class WeekGrid(ABC):
    """
    Interface for the editable project-hours grid of the selected week.

    Rows are projects in display order; columns are the seven weekdays,
    Monday first. Both are 0-based.
    """

    @abstractmethod
    def column_dates(self) -> List[str]:
        """Return the date labels of the seven columns (e.g. "7/27(月)")."""
        pass

    @abstractmethod
    def project_ids(self) -> List[str]:
        """Return the project identifiers of the grid rows in order."""
        pass

    @abstractmethod
    def cell_text(self, project_row: int, day_column: int) -> str:
        """Return the text currently displayed in a cell."""
        pass

    @abstractmethod
    def edit_cell(self, project_row: int, day_column: int, text: str):
        """
        Select a cell, type a value and commit it.

        Raises:
            StructuralError: If the cell cannot be located
        """
        pass

    @abstractmethod
    def save(self):
        """Trigger the week's save action and wait for it to finish."""
        pass


def format_hours(value: float) -> str:
    """
    Format hours the way the grid displays them (one decimal place).

    The exact binary value is rounded with ties going up, so 1.25 is
    written as "1.3".
    """
    return str(Decimal(value).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


class Reconciler:
    """
    Computes and applies the cell edits that make a week match the document.

    Example:
        >>> reconciler = Reconciler(document)
        >>> result = reconciler.apply_week(grid)
        >>> result.saved
        True
    """

    def __init__(self, document: Document):
        self.document = document
        self.works: Dict[str, WorkDay] = document.works_by_date()

    def diff_week(self, grid: WeekGrid) -> WeekResult:
        """
        Compute the edits for one week without touching the grid.

        Args:
            grid: Grid of the selected week

        Returns:
            WeekResult holding the edits, unchanged count and skips
        """
        result = WeekResult()
        project_ids = grid.project_ids()

        for column, date in enumerate(grid.column_dates()):
            work = self.works.get(date)
            if work is None:
                logger.debug(f"{date} not found in file; skipped")
                result.skipped_dates.append(date)
                continue

            for row, project_id in enumerate(project_ids):
                if project_id not in work.hours:
                    log_warning(f"{date}: project {project_id} not found in file; skipped")
                    if project_id not in result.missing_projects:
                        result.missing_projects.append(project_id)
                    continue

                target = format_hours(work.hours[project_id])
                current = grid.cell_text(row, column).strip()
                if current == target:
                    result.unchanged += 1
                    continue

                result.edits.append(CellEdit(
                    project_row=row,
                    day_column=column,
                    date=date,
                    project_id=project_id,
                    current=current,
                    target=target,
                ))

        return result

    def apply_week(self, grid: WeekGrid) -> WeekResult:
        """
        Apply the edits for one week and save when anything changed.

        Edit failures propagate; cells already committed stay committed.

        Args:
            grid: Grid of the selected week

        Returns:
            WeekResult with ``saved`` set when the save action ran
        """
        result = self.diff_week(grid)

        for edit in result.edits:
            name = self.document.projects.get(edit.project_id, '')
            logger.debug(f"{edit.date} {edit.project_id} {name}: {edit.current!r} -> {edit.target}")
            grid.edit_cell(edit.project_row, edit.day_column, edit.target)

        if not result.changed:
            logger.debug("Week unchanged; save skipped")
            return result

        logger.info(f"Saving week ({len(result.edits)} cell(s) changed)")
        grid.save()
        result.saved = True
        return result
