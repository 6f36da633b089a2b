"""
Report generation service
"""
import logging
import csv
from typing import List

from vpa_advisor.core.exceptions import OutputWriteError
from vpa_advisor.models.resource_models import ReportRow, REPORT_HEADER

logger = logging.getLogger(__name__)


class ReportService:
    """Service for report generation"""

    def __init__(self, results_file: str = "results.csv"):
        self.results_file = results_file

    def write_results(self, rows: List[ReportRow]) -> str:
        """Export report rows in CSV, replacing any previous report"""
        try:
            with open(self.results_file, 'w', newline='', encoding='utf-8') as f:
                writer = csv.writer(f, lineterminator='\n')
                writer.writerow(REPORT_HEADER)
                for row in rows:
                    writer.writerow(row.to_csv_row())
        except OSError as e:
            raise OutputWriteError(f"writing results to {self.results_file}: {e}") from e

        logger.info(f"CSV report exported: {self.results_file}")
        return self.results_file
