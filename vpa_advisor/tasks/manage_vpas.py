"""
Provisioning job: deploy a recommendation-only VPA for every
Deployment, StatefulSet and DaemonSet. Targets that already have a VPA are skipped.
"""
import logging
from typing import List, Optional

from vpa_advisor.models.resource_models import VPARecord
from vpa_advisor.services.namespace_selector import select_namespaces
from vpa_advisor.services.owner_resolver import resolve_targets
from vpa_advisor.services.vpa_reconciler import reconcile
from vpa_advisor.services.workload_enumerator import enumerate_workloads

logger = logging.getLogger(__name__)


def provision_namespace(k8s_client, namespace: str) -> List[VPARecord]:
    """Create the missing VPAs of one namespace"""
    logger.debug(f"Processing namespace {namespace}")

    workloads = enumerate_workloads(k8s_client, namespace)
    targets = resolve_targets(workloads)

    existing_vpas = k8s_client.list_vpas(namespace)
    logger.debug(f"Found {len(existing_vpas)} VPAs in namespace {namespace}")

    return reconcile(k8s_client, namespace, targets, existing_vpas)


def run(k8s_client, namespaces: Optional[str] = None) -> List[VPARecord]:
    """Provision VPAs across the selected namespaces, returning those created"""
    created = []
    for namespace in select_namespaces(k8s_client, namespaces):
        created.extend(provision_namespace(k8s_client, namespace))

    logger.info(f"Created {len(created)} VPAs")
    return created
