"""
Recommendation collection: uncapped VPA targets joined with current requests
"""
import logging
from typing import List, Optional, Set, Tuple

from vpa_advisor.core.quantities import (
    to_milli_value, to_value, format_mebibytes, format_millicores
)
from vpa_advisor.models.resource_models import (
    ContainerRecommendation, ContainerResources, ReportRow, ResourceDrift, VPARecord
)

logger = logging.getLogger(__name__)


def hpa_target_set(targets: List[Tuple[str, str]]) -> Set[Tuple[str, str]]:
    """Lower-cased (kind, name) pairs of HPA scale targets"""
    return {(kind.lower(), name.lower()) for kind, name in targets}


def find_container(containers: List[ContainerResources], container_name: str) -> Optional[ContainerResources]:
    """Container with this name, ignoring case"""
    wanted = container_name.lower()
    for container in containers:
        if container.name.lower() == wanted:
            return container
    return None


def current_requests(container: Optional[ContainerResources]) -> ResourceDrift:
    """Current requests of a container; zero or missing requests are NOT_SET"""
    drift = ResourceDrift()
    if container is None:
        return drift

    cpu_milli = to_milli_value(container.cpu_request)
    if cpu_milli != 0:
        drift.current_cpu_milli = cpu_milli
        drift.current_cpu_str = format_millicores(cpu_milli)
        drift.current_cpu_set = True

    mem_bytes = to_value(container.memory_request)
    mem_str = format_mebibytes(mem_bytes)
    # Requests below one mebibyte display as 0Mi and count as unset
    if mem_str != "0Mi":
        drift.current_mem_bytes = mem_bytes
        drift.current_mem_str = mem_str
        drift.current_mem_set = True

    return drift


def compute_drift(recommendation: ContainerRecommendation, container: Optional[ContainerResources]) -> ResourceDrift:
    """Recommended minus current, per resource, only where a current request is set"""
    drift = current_requests(container)
    if drift.current_cpu_set:
        drift.cpu_diff = recommendation.cpu_milli - drift.current_cpu_milli
    if drift.current_mem_set:
        drift.mem_diff = recommendation.memory_bytes - drift.current_mem_bytes
    return drift


def rows_for_vpa(
    vpa: VPARecord,
    containers: List[ContainerResources],
    hpa_targets: Set[Tuple[str, str]]
) -> List[ReportRow]:
    """One report row per container recommendation of a VPA"""
    target = vpa.target
    has_hpa = (target.kind.lower(), target.name.lower()) in hpa_targets

    rows = []
    for recommendation in vpa.recommendations or []:
        container = find_container(containers, recommendation.container_name)
        drift = compute_drift(recommendation, container)
        row = ReportRow(
            namespace=vpa.namespace,
            resource_type=target.kind,
            resource_name=target.name,
            container_name=recommendation.container_name,
            vpa_name=vpa.name,
            target_cpu=recommendation.cpu_string,
            target_memory=recommendation.memory_string,
            drift=drift,
            hpa_enabled=has_hpa
        )
        logger.debug(
            f"Container {row.container_name}: current cpu {drift.current_cpu_milli}m, "
            f"current memory {drift.current_mem_bytes}, recommended cpu {recommendation.cpu_milli}m, "
            f"recommended memory {recommendation.memory_bytes}, hpa {has_hpa}"
        )
        rows.append(row)
    return rows


def collect_namespace(k8s_client, namespace: str) -> List[ReportRow]:
    """Report rows for every VPA in a namespace whose target still exists"""
    logger.debug(f"Processing namespace {namespace}")

    hpa_targets = hpa_target_set(k8s_client.list_hpa_targets(namespace))
    vpas = k8s_client.list_vpas(namespace)
    logger.debug(f"Found {len(vpas)} VPAs in namespace {namespace}")

    rows = []
    for vpa in vpas:
        if vpa.target is None:
            logger.warning(f"VPA {namespace}/{vpa.name} has no targetRef. Skipping")
            continue

        exists, containers = k8s_client.get_workload(namespace, vpa.target.kind, vpa.target.name)
        if not exists:
            logger.info(
                f"Target does not exist. Skipping VPA {namespace}/{vpa.name} "
                f"({vpa.target.kind} {vpa.target.name})"
            )
            continue

        if vpa.recommendations is None:
            logger.debug(f"VPA {namespace}/{vpa.name} has no recommendation yet")
            continue

        rows.extend(rows_for_vpa(vpa, containers, hpa_targets))

    return rows


def collect(k8s_client, namespaces: List[str]) -> List[ReportRow]:
    """Report rows for all namespaces, in namespace order"""
    rows = []
    for namespace in namespaces:
        rows.extend(collect_namespace(k8s_client, namespace))
    logger.info(f"Container recommendation results: {len(rows)}")
    return rows
