"""Read access to tenant custom resources on Kubernetes."""

from typing import Optional, Protocol

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException

from openstack_site_agent.backend import logger
from openstack_site_agent.backend.exceptions import STATUS_CODE_NOT_FOUND, BackendError
from openstack_site_agent.backend.structures import TenantRecord

TENANT_API_GROUP = "stackube.kubernetes.io"
TENANT_API_VERSION = "v1"
TENANT_PLURAL = "tenants"


class TenantStore(Protocol):
    """Lookup of tenant records kept outside the backend."""

    def get_tenant(self, name: str) -> Optional[TenantRecord]:
        """Return the tenant record, or None if there is none."""


class KubernetesTenantStore:
    """Tenant store backed by cluster-scoped Tenant custom resources."""

    def __init__(
        self,
        kubeconfig_path: Optional[str] = None,
        custom_api: Optional[k8s_client.CustomObjectsApi] = None,
    ) -> None:
        """Initialize Kubernetes client.

        Args:
            kubeconfig_path: Path to a kubeconfig file; in-cluster
                configuration is used when empty
            custom_api: Preconfigured custom objects API, skips config loading
        """
        if custom_api is None:
            try:
                if kubeconfig_path:
                    k8s_config.load_kube_config(config_file=kubeconfig_path)
                else:
                    k8s_config.load_incluster_config()
            except Exception as e:
                raise BackendError(f"Failed to load Kubernetes config: {e}") from e
            custom_api = k8s_client.CustomObjectsApi(k8s_client.ApiClient())
        self.custom_api = custom_api

    def get_tenant(self, name: str) -> Optional[TenantRecord]:
        """Get a Tenant custom resource by name."""
        try:
            tenant = self.custom_api.get_cluster_custom_object(
                group=TENANT_API_GROUP,
                version=TENANT_API_VERSION,
                plural=TENANT_PLURAL,
                name=name,
            )
        except ApiException as e:
            if e.status == STATUS_CODE_NOT_FOUND:
                logger.debug("Tenant custom resource %s not found", name)
                return None
            raise BackendError(f"Failed to get tenant {name}: {e}", e.status) from e
        except urllib3.exceptions.HTTPError as e:
            raise BackendError(f"Kubernetes API unreachable while getting tenant {name}: {e}") from e

        spec = tenant.get("spec") or {}
        return TenantRecord(
            name=tenant.get("metadata", {}).get("name", name),
            tenant_id=spec.get("tenantID", ""),
            username=spec.get("username", ""),
            password=spec.get("password", ""),
        )
