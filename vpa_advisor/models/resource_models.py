"""
Data models for Kubernetes resources
"""
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict

NATIVE_API_GROUP = "apps/v1"
NOT_SET = "NOT_SET"

REPORT_HEADER = [
    "namespace",
    "resourceType",
    "resourceName",
    "containerName",
    "targetCPU",
    "targetMemory",
    "currentCPU",
    "currentMemory",
    "cpuDiff",
    "memDiff",
    "hpaEnabled",
]


class OwnerReference(BaseModel):
    """Owner reference of a workload"""
    model_config = ConfigDict(frozen=True)

    api_version: str
    kind: str
    name: str
    controller: bool = False


class WorkloadRef(BaseModel):
    """Deployment, StatefulSet or DaemonSet found in a namespace"""
    model_config = ConfigDict(frozen=True)

    api_group: str = NATIVE_API_GROUP
    kind: str
    name: str
    namespace: str
    owner_references: List[OwnerReference] = []


class VPATarget(BaseModel):
    """Controller a VPA points at"""
    model_config = ConfigDict(frozen=True)

    api_group: str
    kind: str
    name: str

    def to_target_ref(self) -> Dict[str, str]:
        """Render as a CrossVersionObjectReference"""
        return {
            "apiVersion": self.api_group,
            "kind": self.kind,
            "name": self.name
        }

    @classmethod
    def from_target_ref(cls, target_ref: Dict[str, Any]) -> "VPATarget":
        """Build a target from a VPA spec.targetRef mapping"""
        return cls(
            api_group=target_ref.get("apiVersion", ""),
            kind=target_ref.get("kind", ""),
            name=target_ref.get("name", "")
        )


class ContainerRecommendation(BaseModel):
    """Uncapped VPA target for one container"""
    container_name: str
    cpu_milli: int = 0
    cpu_string: str = ""
    memory_bytes: int = 0
    memory_string: str = ""


class VPARecord(BaseModel):
    """Existing VPA object"""
    name: str
    namespace: str
    target: Optional[VPATarget] = None
    update_mode: Optional[str] = None
    labels: Dict[str, str] = {}
    # None when the recommender has not produced a recommendation yet
    recommendations: Optional[List[ContainerRecommendation]] = None


class ContainerResources(BaseModel):
    """Resource requests of a container in a pod template"""
    name: str
    cpu_request: Optional[str] = None
    memory_request: Optional[str] = None


class ResourceDrift(BaseModel):
    """Current requests of a container and their distance to the recommendation"""
    current_cpu_milli: int = 0
    current_mem_bytes: int = 0
    current_cpu_str: str = NOT_SET
    current_mem_str: str = NOT_SET
    cpu_diff: int = 0
    mem_diff: int = 0
    current_cpu_set: bool = False
    current_mem_set: bool = False


class ReportRow(BaseModel):
    """One report line per (VPA, container)"""
    namespace: str
    resource_type: str
    resource_name: str
    container_name: str
    vpa_name: str
    target_cpu: str
    target_memory: str
    drift: ResourceDrift
    hpa_enabled: bool = False

    def to_csv_row(self) -> List[str]:
        """Cells in report column order"""
        return [
            self.namespace,
            self.resource_type,
            self.resource_name,
            self.container_name,
            self.target_cpu,
            self.target_memory,
            self.drift.current_cpu_str,
            self.drift.current_mem_str,
            str(self.drift.cpu_diff),
            str(self.drift.mem_diff),
            "true" if self.hpa_enabled else "false",
        ]
