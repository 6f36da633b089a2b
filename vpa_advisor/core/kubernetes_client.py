"""
Kubernetes client for VPA provisioning and recommendation harvesting
"""
import logging
from typing import List, Dict, Any, Optional, Tuple
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.client import CustomObjectsApi
from urllib3.exceptions import HTTPError

from vpa_advisor.core.config import Settings, load_settings
from vpa_advisor.core.exceptions import (
    ClusterQueryError, ClusterWriteError, ConfigError, ResourceNotFoundError
)
from vpa_advisor.core.quantities import to_milli_value, to_value, format_mebibytes
from vpa_advisor.models.resource_models import (
    ContainerRecommendation, ContainerResources, OwnerReference,
    VPARecord, VPATarget, WorkloadRef, NATIVE_API_GROUP
)

logger = logging.getLogger(__name__)

VPA_GROUP = "autoscaling.k8s.io"
VPA_VERSION = "v1"
VPA_PLURAL = "verticalpodautoscalers"


class WorkloadReader:
    """Lists and reads one apps/v1 workload kind"""

    def __init__(self, kind: str, list_method: str, read_method: str):
        self.kind = kind
        self.list_method = list_method
        self.read_method = read_method

    def list(self, apps_v1: client.AppsV1Api, namespace: str, **kwargs) -> List[Any]:
        return getattr(apps_v1, self.list_method)(namespace=namespace, **kwargs).items

    def read(self, apps_v1: client.AppsV1Api, namespace: str, name: str, **kwargs) -> Any:
        return getattr(apps_v1, self.read_method)(name=name, namespace=namespace, **kwargs)


# Enumeration order matters: deployments, then statefulsets, then daemonsets
WORKLOAD_READERS: Dict[str, WorkloadReader] = {
    "Deployment": WorkloadReader(
        "Deployment", "list_namespaced_deployment", "read_namespaced_deployment"
    ),
    "StatefulSet": WorkloadReader(
        "StatefulSet", "list_namespaced_stateful_set", "read_namespaced_stateful_set"
    ),
    "DaemonSet": WorkloadReader(
        "DaemonSet", "list_namespaced_daemon_set", "read_namespaced_daemon_set"
    ),
}

WORKLOAD_KINDS = list(WORKLOAD_READERS)


def _query_error(e: ApiException, what: str) -> ClusterQueryError:
    """Translate an ApiException raised by a list/get call"""
    if e.status == 404:
        return ResourceNotFoundError(f"{what}: not found")
    return ClusterQueryError(f"{what}: {e.status} {e.reason}", status=e.status)


def _connection_reason(e: HTTPError) -> str:
    """Readable cause of a transport failure (timeout, refused connection)"""
    return str(getattr(e, "reason", None) or e)


def owner_references_from(metadata: Any) -> List[OwnerReference]:
    """Project V1ObjectMeta.owner_references onto OwnerReference models"""
    refs = []
    for ref in (metadata.owner_references or []):
        refs.append(OwnerReference(
            api_version=ref.api_version,
            kind=ref.kind,
            name=ref.name,
            # The API omits the field rather than sending false
            controller=bool(ref.controller)
        ))
    return refs


def container_resources_from(workload: Any) -> List[ContainerResources]:
    """Resource requests of every container in a workload's pod template"""
    containers = []
    pod_spec = workload.spec.template.spec
    for container in (pod_spec.containers or []):
        requests = {}
        if container.resources and container.resources.requests:
            requests = container.resources.requests
        containers.append(ContainerResources(
            name=container.name,
            cpu_request=requests.get("cpu"),
            memory_request=requests.get("memory")
        ))
    return containers


def parse_vpa(item: Dict[str, Any], namespace: str) -> VPARecord:
    """Build a VPARecord from a VerticalPodAutoscaler custom object"""
    metadata = item.get("metadata") or {}
    spec = item.get("spec") or {}
    status = item.get("status") or {}
    vpa_name = metadata.get("name", "")

    target_ref = spec.get("targetRef")
    target = VPATarget.from_target_ref(target_ref) if target_ref else None
    update_mode = (spec.get("updatePolicy") or {}).get("updateMode")

    recommendations = None
    recommendation = status.get("recommendation")
    if recommendation is not None:
        recommendations = []
        for container_rec in recommendation.get("containerRecommendations") or []:
            uncapped = container_rec.get("uncappedTarget") or {}
            cpu = uncapped.get("cpu")
            memory = uncapped.get("memory")
            try:
                memory_bytes = to_value(memory)
                cpu_milli = to_milli_value(cpu)
            except ValueError as e:
                raise ClusterQueryError(
                    f"Invalid quantity in VPA {namespace}/{vpa_name}: {e}"
                ) from e

            recommendations.append(ContainerRecommendation(
                container_name=container_rec.get("containerName", ""),
                # CPU keeps the API's own representation
                cpu_string=str(cpu) if cpu is not None else "0",
                cpu_milli=cpu_milli,
                memory_bytes=memory_bytes,
                memory_string=format_mebibytes(memory_bytes)
            ))

    return VPARecord(
        name=vpa_name,
        namespace=metadata.get("namespace", namespace),
        target=target,
        update_mode=update_mode,
        labels=metadata.get("labels") or {},
        recommendations=recommendations
    )


class K8sClient:
    """Client for interaction with Kubernetes"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()
        self.v1 = None
        self.apps_v1 = None
        self.autoscaling_v2 = None
        self.custom_api = None
        self.initialized = False

    def initialize(self):
        """Initialize Kubernetes client"""
        try:
            config.load_kube_config(
                config_file=self.settings.kubeconfig_path,
                context=self.settings.kube_context
            )
            logger.debug("Loaded kubeconfig")
        except config.ConfigException as kube_config_error:
            # Running inside a pod without a kubeconfig
            try:
                config.load_incluster_config()
                logger.debug("Loaded in-cluster configuration")
            except config.ConfigException as e:
                raise ConfigError(
                    f"Unable to load Kubernetes configuration: {kube_config_error}; "
                    f"in-cluster: {e}"
                ) from e

        # Initialize API clients
        self.v1 = client.CoreV1Api()
        self.apps_v1 = client.AppsV1Api()
        self.autoscaling_v2 = client.AutoscalingV2Api()
        self.custom_api = CustomObjectsApi()

        self.initialized = True
        logger.debug("Kubernetes client initialized successfully")

    def _check_initialized(self):
        """Raise if initialize() has not run yet"""
        if not self.initialized:
            raise RuntimeError("Kubernetes client not initialized")

    def _request_options(self) -> Dict[str, Any]:
        """Keyword arguments passed to every API call"""
        if self.settings.request_timeout:
            return {"_request_timeout": self.settings.request_timeout}
        return {}

    def list_namespaces(self) -> List[str]:
        """Names of all namespaces in the cluster, in listing order"""
        self._check_initialized()

        try:
            namespaces = self.v1.list_namespace(**self._request_options())
        except ApiException as e:
            logger.error(f"Error listing namespaces: {e.reason}")
            raise _query_error(e, "error listing namespaces") from e
        except HTTPError as e:
            logger.error(f"Error listing namespaces: {_connection_reason(e)}")
            raise ClusterQueryError(f"error listing namespaces: {_connection_reason(e)}") from e

        return [ns.metadata.name for ns in namespaces.items]

    def list_workloads(self, namespace: str, kind: str) -> List[WorkloadRef]:
        """All workloads of one kind in a namespace"""
        self._check_initialized()
        reader = WORKLOAD_READERS.get(kind)
        if reader is None:
            raise ValueError(f"Unsupported workload kind: {kind}")

        try:
            items = reader.list(self.apps_v1, namespace, **self._request_options())
        except ApiException as e:
            logger.error(f"Error listing {kind} objects in {namespace}: {e.reason}")
            raise _query_error(e, f"error querying for {kind} objects in {namespace} namespace") from e
        except HTTPError as e:
            logger.error(f"Error listing {kind} objects in {namespace}: {_connection_reason(e)}")
            raise ClusterQueryError(
                f"error querying for {kind} objects in {namespace} namespace: {_connection_reason(e)}"
            ) from e

        return [
            WorkloadRef(
                api_group=NATIVE_API_GROUP,
                kind=kind,
                name=item.metadata.name,
                namespace=namespace,
                owner_references=owner_references_from(item.metadata)
            )
            for item in items
        ]

    def get_workload(self, namespace: str, kind: str, name: str) -> Tuple[bool, List[ContainerResources]]:
        """Check a workload exists and return its container requests.

        Kinds without a reader cannot be introspected: they are reported as
        existing with no container specs.
        """
        self._check_initialized()
        reader = WORKLOAD_READERS.get(kind)
        if reader is None:
            logger.debug(f"No reader for kind {kind}, assuming {namespace}/{name} exists")
            return True, []

        try:
            workload = reader.read(self.apps_v1, namespace, name, **self._request_options())
        except ApiException as e:
            error = _query_error(e, f"error getting {kind} {namespace}/{name}")
            if isinstance(error, ResourceNotFoundError):
                return False, []
            logger.error(f"Error getting {kind} {namespace}/{name}: {e.reason}")
            raise error from e
        except HTTPError as e:
            logger.error(f"Error getting {kind} {namespace}/{name}: {_connection_reason(e)}")
            raise ClusterQueryError(
                f"error getting {kind} {namespace}/{name}: {_connection_reason(e)}"
            ) from e

        return True, container_resources_from(workload)

    def list_hpa_targets(self, namespace: str) -> List[Tuple[str, str]]:
        """(kind, name) of every HPA scale target in a namespace"""
        self._check_initialized()

        try:
            hpas = self.autoscaling_v2.list_namespaced_horizontal_pod_autoscaler(
                namespace=namespace, **self._request_options()
            )
        except ApiException as e:
            logger.error(f"Error listing HPAs in {namespace}: {e.reason}")
            raise _query_error(e, f"error getting HPAs in {namespace}") from e
        except HTTPError as e:
            logger.error(f"Error listing HPAs in {namespace}: {_connection_reason(e)}")
            raise ClusterQueryError(f"error getting HPAs in {namespace}: {_connection_reason(e)}") from e

        targets = []
        for hpa in hpas.items:
            ref = hpa.spec.scale_target_ref
            targets.append((ref.kind, ref.name))
        return targets

    def list_vpas(self, namespace: str) -> List[VPARecord]:
        """List VPA resources in a namespace"""
        self._check_initialized()

        try:
            vpa_list = self.custom_api.list_namespaced_custom_object(
                group=VPA_GROUP,
                version=VPA_VERSION,
                namespace=namespace,
                plural=VPA_PLURAL,
                **self._request_options()
            )
        except ApiException as e:
            if e.status == 404:
                logger.error("VPA CRD not found - VPA may not be installed in the cluster")
            else:
                logger.error(f"Error listing VPAs in {namespace}: {e.reason}")
            raise ClusterQueryError(
                f"error listing VPAs in {namespace}: {e.status} {e.reason}", status=e.status
            ) from e
        except HTTPError as e:
            logger.error(f"Error listing VPAs in {namespace}: {_connection_reason(e)}")
            raise ClusterQueryError(f"error listing VPAs in {namespace}: {_connection_reason(e)}") from e

        return [parse_vpa(item, namespace) for item in vpa_list.get("items", [])]

    def create_vpa(self, namespace: str, vpa_manifest: Dict[str, Any]) -> Dict[str, Any]:
        """Create a VPA resource"""
        self._check_initialized()
        vpa_name = vpa_manifest.get("metadata", {}).get("name")

        try:
            result = self.custom_api.create_namespaced_custom_object(
                group=VPA_GROUP,
                version=VPA_VERSION,
                namespace=namespace,
                plural=VPA_PLURAL,
                body=vpa_manifest,
                **self._request_options()
            )
        except ApiException as e:
            logger.error(f"Error creating VPA {vpa_name} in {namespace}: {e.reason}")
            raise ClusterWriteError(
                f"error creating VPA {namespace}/{vpa_name}: {e.status} {e.reason}"
            ) from e
        except HTTPError as e:
            logger.error(f"Error creating VPA {vpa_name} in {namespace}: {_connection_reason(e)}")
            raise ClusterWriteError(
                f"error creating VPA {namespace}/{vpa_name}: {_connection_reason(e)}"
            ) from e

        return result
