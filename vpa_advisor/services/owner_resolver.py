"""
Owner resolution: which controller a VPA has to target for a workload
"""
import logging
from typing import List

from vpa_advisor.models.resource_models import VPATarget, WorkloadRef, NATIVE_API_GROUP

logger = logging.getLogger(__name__)


def resolve(workload: WorkloadRef) -> VPATarget:
    """Return the VPA target for a workload.

    A VPA may only reference a top-level controller, so a workload managed by
    another object (e.g. a StatefulSet created by an operator) resolves to its
    controlling owner. Only the direct owner is considered. Kubernetes allows at
    most one controller reference; if malformed data carries several, the first
    one wins.
    """
    for ref in workload.owner_references:
        if ref.controller:
            logger.debug(
                f"{workload.kind} {workload.namespace}/{workload.name} owned by another controller: "
                f"{ref.kind} {ref.name} ({ref.api_version})"
            )
            return VPATarget(api_group=ref.api_version, kind=ref.kind, name=ref.name)

    return VPATarget(api_group=NATIVE_API_GROUP, kind=workload.kind, name=workload.name)


def resolve_targets(workloads: List[WorkloadRef]) -> List[VPATarget]:
    """Resolve every workload to its VPA target, keeping duplicates"""
    return [resolve(workload) for workload in workloads]
