"""
Reporting job: write the uncapped CPU and memory recommendation of every VPA
to CSV, in Kubernetes units so values can be copied straight into manifests.
"""
import logging
from typing import List, Optional

from vpa_advisor.models.resource_models import ReportRow
from vpa_advisor.services.namespace_selector import select_namespaces
from vpa_advisor.services.recommendation_collector import collect
from vpa_advisor.services.report_service import ReportService

logger = logging.getLogger(__name__)


def run(k8s_client, report_service: ReportService, namespaces: Optional[str] = None) -> List[ReportRow]:
    """Collect recommendations for the selected namespaces and write the report"""
    selected = select_namespaces(k8s_client, namespaces)
    rows = collect(k8s_client, selected)
    report_service.write_results(rows)
    return rows
