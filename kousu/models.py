"""
Data models for the MA-EYES work-log tool.

This module defines the document persisted by ``get`` and consumed by
``put``, the per-week fragments produced by the extractor, and the
summaries reported at the end of a run.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class WorkDay:
    """
    One calendar day of the work log.

    Attributes:
        date: Day label exactly as MA-EYES renders it (e.g. "7/27(月)")
        begin: Clock-in time "HH:MM"
        end: Clock-out time "HH:MM"
        yokujitsu: Whether ``end`` rolls over into the next day
        kyukei: Break duration in hours
        yasumi: Leave type: "", "全休", "午前" or "午後"
        sagyou: Total worked hours of the day
        fumei: Unaccounted hours of the day
        hours: Hours per project identifier
    """
    date: str
    begin: str
    end: str
    yokujitsu: bool
    kyukei: float
    yasumi: str
    sagyou: float
    fumei: float
    hours: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Return the JSON-ready mapping in the on-disk key order."""
        return {
            'date': self.date,
            'begin': self.begin,
            'end': self.end,
            'yokujitsu': self.yokujitsu,
            'kyukei': self.kyukei,
            'yasumi': self.yasumi,
            'sagyou': self.sagyou,
            'fumei': self.fumei,
            'hours': dict(self.hours),
        }


@dataclass
class Document:
    """
    A month of work-log data.

    Attributes:
        version: Schema generation tag (always the current one in memory)
        projects: Project identifier -> human-readable project name
        works: Work days in the order the month walker produced them
    """
    version: str
    projects: Dict[str, str] = field(default_factory=dict)
    works: List[WorkDay] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'version': self.version,
            'projects': dict(self.projects),
            'works': [work.to_dict() for work in self.works],
        }

    def works_by_date(self) -> Dict[str, WorkDay]:
        """
        Index the work days by their date label.

        Later entries win when a date appears more than once.
        """
        return {work.date: work for work in self.works}


@dataclass(frozen=True)
class Attendance:
    """Attendance columns of one day in the weekly attendance table."""
    date: str
    begin: str
    end: str
    yokujitsu: bool
    kyukei: float
    yasumi: str


@dataclass
class DayHours:
    """
    Hours columns of one day in the weekly project-hours table.

    ``sagyou`` and ``fumei`` are None when the header cell was empty, which
    MA-EYES does for days of the adjacent month.
    """
    sagyou: Optional[float]
    fumei: Optional[float]
    hours: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class CellEdit:
    """A single grid cell whose displayed value differs from the document."""
    project_row: int
    day_column: int
    date: str
    project_id: str
    current: str
    target: str


@dataclass
class WeekResult:
    """
    Result of reconciling one calendar week.

    Attributes:
        edits: Cells that were rewritten
        unchanged: Number of cells already holding the target value
        skipped_dates: Dates shown in the grid but absent from the document
        missing_projects: Projects shown in the grid but absent from a day's hours
        saved: Whether the week's save action was triggered
    """
    edits: List[CellEdit] = field(default_factory=list)
    unchanged: int = 0
    skipped_dates: List[str] = field(default_factory=list)
    missing_projects: List[str] = field(default_factory=list)
    saved: bool = False

    @property
    def changed(self) -> bool:
        return len(self.edits) > 0


@dataclass
class PutSummary:
    """
    Summary of a whole ``put`` run.

    Attributes:
        weeks_visited: Calendar weeks selected
        weeks_saved: Weeks whose save action was triggered
        cells_changed: Total cells rewritten
        cells_unchanged: Total cells already up to date
        skipped_dates: Dates in the grid with no entry in the document
        missing_projects: Distinct projects in the grid missing from the document
    """
    weeks_visited: int = 0
    weeks_saved: int = 0
    cells_changed: int = 0
    cells_unchanged: int = 0
    skipped_dates: List[str] = field(default_factory=list)
    missing_projects: List[str] = field(default_factory=list)

    def add_week_result(self, result: WeekResult):
        """Fold a week result into the summary."""
        self.weeks_visited += 1
        if result.saved:
            self.weeks_saved += 1
        self.cells_changed += len(result.edits)
        self.cells_unchanged += result.unchanged
        self.skipped_dates.extend(result.skipped_dates)
        for project_id in result.missing_projects:
            if project_id not in self.missing_projects:
                self.missing_projects.append(project_id)

    def format_summary(self) -> str:
        """
        Format the summary as a human-readable string.

        Returns:
            Formatted summary text
        """
        lines = [
            "\n" + "=" * 60,
            "PUT OPERATION SUMMARY",
            "=" * 60,
            "\nWeeks:",
            f"  Visited: {self.weeks_visited}",
            f"  Saved: {self.weeks_saved}",
            "\nCells:",
            f"  Changed: {self.cells_changed}",
            f"  Unchanged: {self.cells_unchanged}",
        ]

        if self.skipped_dates:
            lines.append(f"\nDates not in file: {len(self.skipped_dates)}")

        if self.missing_projects:
            lines.append("\nProjects missing from file (left untouched):")
            for project_id in self.missing_projects:
                lines.append(f"  - {project_id}")

        lines.append("=" * 60 + "\n")
        return "\n".join(lines)
