"""
VPA target reconciliation
"""
import logging
from typing import List, Dict, Any, Optional, Iterable

from vpa_advisor.models.resource_models import VPARecord, VPATarget

logger = logging.getLogger(__name__)

# Suffix for every created VPA name, avoids clashes with source control managed VPAs
VPA_SUFFIX = "8dn39"

# Recommendation only, never applies resource changes
UPDATE_MODE = "Off"

MANAGED_LABELS = {
    "source-control-managed": "false",
    "managed-by": "vpa-recommendations-script",
}


def vpa_name(target: VPATarget) -> str:
    """Name of the VPA created for a target"""
    return f"{target.name}-vpa-{VPA_SUFFIX}"


def build_vpa_manifest(target: VPATarget) -> Dict[str, Any]:
    """VerticalPodAutoscaler object for a target, in recommendation-only mode"""
    return {
        "apiVersion": "autoscaling.k8s.io/v1",
        "kind": "VerticalPodAutoscaler",
        "metadata": {
            "name": vpa_name(target),
            "labels": dict(MANAGED_LABELS)
        },
        "spec": {
            "targetRef": target.to_target_ref(),
            "updatePolicy": {
                "updateMode": UPDATE_MODE
            }
        }
    }


def unique_targets(targets: Iterable[VPATarget]) -> List[VPATarget]:
    """Drop repeated targets, keeping first-seen order"""
    seen = set()
    unique = []
    for target in targets:
        if target not in seen:
            seen.add(target)
            unique.append(target)
    return unique


def find_existing(target: VPATarget, vpas: Iterable[VPARecord]) -> Optional[VPARecord]:
    """Existing VPA with exactly this target (apiVersion, kind and name, case-sensitive)"""
    for vpa in vpas:
        if vpa.target is not None and vpa.target == target:
            return vpa
    return None


def reconcile(
    k8s_client,
    namespace: str,
    desired_targets: List[VPATarget],
    existing_vpas: List[VPARecord]
) -> List[VPARecord]:
    """Create a VPA for every desired target that has none yet.

    Returns the VPAs created. A failed creation propagates and stops the run.
    """
    known = list(existing_vpas)
    created = []

    for target in unique_targets(desired_targets):
        existing = find_existing(target, known)
        if existing is not None:
            logger.info(
                f"Found existing VPA {existing.name}. Skipping {target.kind} {namespace}/{target.name}"
            )
            continue

        manifest = build_vpa_manifest(target)
        k8s_client.create_vpa(namespace, manifest)
        logger.info(f"Created VPA {manifest['metadata']['name']} in namespace {namespace}")

        record = VPARecord(
            name=manifest["metadata"]["name"],
            namespace=namespace,
            target=target,
            update_mode=UPDATE_MODE,
            labels=manifest["metadata"]["labels"]
        )
        known.append(record)
        created.append(record)

    return created
