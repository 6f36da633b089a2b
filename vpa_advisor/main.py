"""
VPA Advisor
Command line entry points for VPA provisioning and recommendation reporting
"""
import logging
import sys
from typing import Optional, Tuple

import cyclopts

from vpa_advisor.core.config import Settings, load_settings, setup_logging
from vpa_advisor.core.exceptions import VPAAdvisorError
from vpa_advisor.core.kubernetes_client import K8sClient
from vpa_advisor.services.report_service import ReportService
from vpa_advisor.tasks import get_recommendations as get_recommendations_task
from vpa_advisor.tasks import manage_vpas as manage_vpas_task

logger = logging.getLogger(__name__)


def _bootstrap() -> Tuple[Settings, K8sClient]:
    """Read settings, configure logging and connect to the cluster"""
    settings = load_settings()
    setup_logging(settings.log_level)
    logger.debug(f"Settings: {settings}")

    k8s_client = K8sClient(settings)
    k8s_client.initialize()
    return settings, k8s_client


manage_vpas_app = cyclopts.App(
    name="manage-vpas",
    help="Deploy a recommendation-only VPA for every Deployment, StatefulSet and DaemonSet"
)


@manage_vpas_app.default
def manage_vpas(*, namespaces: Optional[str] = None) -> None:
    """Create missing VPAs.

    Args:
        namespaces: Comma separated list of namespaces to target (default: all namespaces).
    """
    try:
        _, k8s_client = _bootstrap()
        manage_vpas_task.run(k8s_client, namespaces)
    except VPAAdvisorError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


get_recommendations_app = cyclopts.App(
    name="get-recommendations",
    help="Write the uncapped VPA recommendations of every workload to CSV"
)


@get_recommendations_app.default
def get_recommendations(*, namespaces: Optional[str] = None) -> None:
    """Report VPA recommendations.

    Args:
        namespaces: Comma separated list of namespaces to query (default: all namespaces).
    """
    try:
        settings, k8s_client = _bootstrap()
        report_service = ReportService(settings.results_file)
        get_recommendations_task.run(k8s_client, report_service, namespaces)
    except VPAAdvisorError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


app = cyclopts.App(help="Kubernetes VPA provisioning and recommendation reporting")
app.command(manage_vpas_app)
app.command(get_recommendations_app)


if __name__ == "__main__":
    app()
