"""JSON formatter for governance reports."""

import json

from ..analyzer import GovernanceReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render a report as JSON with sorted keys, so identical runs are byte-identical."""

    def render(self, report: GovernanceReport) -> None:
        print(self.format(report))

    def format(self, report: GovernanceReport) -> str:
        return json.dumps(report.to_dict(), indent=2, sort_keys=True)
