"""
Structured widget readers.

The extractor only needs the markup of the two weekly widgets. Readers hide
where that markup comes from: the live MA-EYES page or captured markup.
"""

from abc import ABC, abstractmethod


class WidgetReader(ABC):
    """
    Interface for reading the markup of the weekly widgets.
    """

    @abstractmethod
    def attendance_markup(self) -> str:
        """
        Return the outer HTML of the weekly attendance table.

        Raises:
            StructuralError: If the table cannot be located
        """
        pass

    @abstractmethod
    def hours_markup(self) -> str:
        """
        Return the outer HTML of the weekly project-hours container.

        Raises:
            StructuralError: If the container cannot be located
        """
        pass


class StaticWidgetReader(WidgetReader):
    """Reader over markup captured ahead of time (saved pages, test fixtures)."""

    def __init__(self, attendance_html: str, hours_html: str):
        self.attendance_html = attendance_html
        self.hours_html = hours_html

    def attendance_markup(self) -> str:
        return self.attendance_html

    def hours_markup(self) -> str:
        return self.hours_html
