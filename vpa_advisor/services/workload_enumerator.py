"""
Workload enumeration
"""
import logging
from typing import List

from vpa_advisor.core.kubernetes_client import WORKLOAD_KINDS
from vpa_advisor.models.resource_models import WorkloadRef

logger = logging.getLogger(__name__)


def enumerate_workloads(k8s_client, namespace: str) -> List[WorkloadRef]:
    """Deployments, then StatefulSets, then DaemonSets of a namespace.

    A failed listing propagates, so a namespace is either enumerated
    completely or not at all.
    """
    workloads = []
    for kind in WORKLOAD_KINDS:
        found = k8s_client.list_workloads(namespace, kind)
        logger.debug(f"Found {len(found)} {kind} objects in namespace {namespace}")
        workloads.extend(found)
    return workloads
