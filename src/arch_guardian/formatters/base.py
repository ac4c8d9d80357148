"""Base formatter interface for governance report rendering."""

from abc import ABC, abstractmethod

from ..analyzer import GovernanceReport


class BaseFormatter(ABC):
    """Abstract base class for report formatters."""

    @abstractmethod
    def render(self, report: GovernanceReport) -> None:
        """Write the report to stdout."""

    @abstractmethod
    def format(self, report: GovernanceReport) -> str:
        """Return the formatted report."""
