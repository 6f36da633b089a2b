"""
Test fixtures and configuration for pytest
"""
import pytest

from vpa_advisor.core.exceptions import ClusterQueryError, ClusterWriteError
from vpa_advisor.core.kubernetes_client import WORKLOAD_KINDS, parse_vpa
from vpa_advisor.models.resource_models import (
    ContainerRecommendation, ContainerResources, OwnerReference,
    VPARecord, VPATarget, WorkloadRef
)


class FakeK8sClient:
    """In-memory stand-in for K8sClient"""

    def __init__(self):
        self.namespaces = []
        self.workloads = {}    # (namespace, kind) -> [WorkloadRef]
        self.containers = {}   # (namespace, kind, name) -> [ContainerResources]
        self.hpas = {}         # namespace -> [(kind, name)]
        self.vpas = {}         # namespace -> [VPARecord]
        self.created = []      # (namespace, manifest)
        self.failing = set()   # method names that raise
        self.calls = []

    def _call(self, method, *args):
        self.calls.append((method,) + args)
        if method in self.failing:
            if method == "create_vpa":
                raise ClusterWriteError(f"{method} failed")
            raise ClusterQueryError(f"{method} failed", status=500)

    def add_workload(self, namespace, kind, name, owners=None, containers=None):
        if namespace not in self.namespaces:
            self.namespaces.append(namespace)
        workload = WorkloadRef(
            kind=kind,
            name=name,
            namespace=namespace,
            owner_references=owners or []
        )
        self.workloads.setdefault((namespace, kind), []).append(workload)
        self.containers[(namespace, kind, name)] = containers or []
        return workload

    def add_vpa(self, vpa):
        self.vpas.setdefault(vpa.namespace, []).append(vpa)
        return vpa

    def list_namespaces(self):
        self._call("list_namespaces")
        return list(self.namespaces)

    def list_workloads(self, namespace, kind):
        self._call("list_workloads", namespace, kind)
        return list(self.workloads.get((namespace, kind), []))

    def get_workload(self, namespace, kind, name):
        self._call("get_workload", namespace, kind, name)
        if kind not in WORKLOAD_KINDS:
            return True, []
        key = (namespace, kind, name)
        if key not in self.containers:
            return False, []
        return True, list(self.containers[key])

    def list_hpa_targets(self, namespace):
        self._call("list_hpa_targets", namespace)
        return list(self.hpas.get(namespace, []))

    def list_vpas(self, namespace):
        self._call("list_vpas", namespace)
        return list(self.vpas.get(namespace, []))

    def create_vpa(self, namespace, vpa_manifest):
        self._call("create_vpa", namespace)
        self.created.append((namespace, vpa_manifest))
        self.vpas.setdefault(namespace, []).append(parse_vpa(vpa_manifest, namespace))
        return vpa_manifest


@pytest.fixture
def fake_cluster():
    """Empty in-memory cluster"""
    return FakeK8sClient()


@pytest.fixture
def controller_owner():
    """Controlling owner reference of an operator-managed workload"""
    return OwnerReference(
        api_version="monitoring.coreos.com/v1",
        kind="Prometheus",
        name="monitoring",
        controller=True
    )


@pytest.fixture
def make_vpa():
    """Factory for VPARecord objects"""
    def _make_vpa(namespace, name, kind, target_name, api_group="apps/v1", recommendations=None):
        return VPARecord(
            name=name,
            namespace=namespace,
            target=VPATarget(api_group=api_group, kind=kind, name=target_name),
            update_mode="Off",
            recommendations=recommendations
        )
    return _make_vpa


@pytest.fixture
def make_recommendation():
    """Factory for ContainerRecommendation objects"""
    def _make_recommendation(container_name, cpu="500m", cpu_milli=500, memory_bytes=2147483648):
        return ContainerRecommendation(
            container_name=container_name,
            cpu_string=cpu,
            cpu_milli=cpu_milli,
            memory_bytes=memory_bytes,
            memory_string=f"{memory_bytes // 1024 // 1024}Mi"
        )
    return _make_recommendation


@pytest.fixture
def web_container():
    """Container with CPU and memory requests set"""
    return ContainerResources(name="web", cpu_request="250m", memory_request="1Gi")


@pytest.fixture
def sample_vpa_object():
    """VerticalPodAutoscaler as returned by the custom objects API"""
    return {
        "apiVersion": "autoscaling.k8s.io/v1",
        "kind": "VerticalPodAutoscaler",
        "metadata": {
            "name": "web-vpa-8dn39",
            "namespace": "shop",
            "labels": {
                "source-control-managed": "false",
                "managed-by": "vpa-recommendations-script"
            }
        },
        "spec": {
            "targetRef": {"apiVersion": "apps/v1", "kind": "Deployment", "name": "web"},
            "updatePolicy": {"updateMode": "Off"}
        },
        "status": {
            "recommendation": {
                "containerRecommendations": [
                    {
                        "containerName": "web",
                        "target": {"cpu": "587m", "memory": "262144k"},
                        "uncappedTarget": {"cpu": "587m", "memory": "2147483648"}
                    },
                    {
                        "containerName": "sidecar",
                        "uncappedTarget": {"cpu": "1", "memory": "100Mi"}
                    }
                ]
            }
        }
    }
