"""Tests for the Kubernetes tenant store."""

from unittest.mock import MagicMock, patch

import pytest
import urllib3
from kubernetes.client.rest import ApiException

from openstack_site_agent.backend.exceptions import BackendError
from openstack_site_agent.backends.openstack_backend.tenant_store import KubernetesTenantStore


@pytest.fixture
def custom_api():
    return MagicMock()


@pytest.fixture
def store(custom_api):
    return KubernetesTenantStore(custom_api=custom_api)


class TestKubernetesTenantStore:
    def test_get_tenant(self, store, custom_api):
        custom_api.get_cluster_custom_object.return_value = {
            "metadata": {"name": "t1"},
            "spec": {"tenantID": "p1", "username": "t1", "password": "secret"},
        }

        record = store.get_tenant("t1")

        custom_api.get_cluster_custom_object.assert_called_once_with(
            group="stackube.kubernetes.io", version="v1", plural="tenants", name="t1"
        )
        assert record.name == "t1"
        assert record.tenant_id == "p1"
        assert record.username == "t1"
        assert record.password == "secret"

    def test_tenant_without_spec(self, store, custom_api):
        custom_api.get_cluster_custom_object.return_value = {"metadata": {"name": "t1"}}

        record = store.get_tenant("t1")

        assert record.tenant_id == ""

    def test_missing_tenant_is_none(self, store, custom_api):
        custom_api.get_cluster_custom_object.side_effect = ApiException(status=404)

        assert store.get_tenant("t1") is None

    def test_api_error_raises_backend_error(self, store, custom_api):
        custom_api.get_cluster_custom_object.side_effect = ApiException(status=403)

        with pytest.raises(BackendError) as excinfo:
            store.get_tenant("t1")

        assert excinfo.value.status_code == 403

    def test_unreachable_api_raises_backend_error(self, store, custom_api):
        custom_api.get_cluster_custom_object.side_effect = urllib3.exceptions.MaxRetryError(
            None, "/apis/tenants", "Connection refused"
        )

        with pytest.raises(BackendError) as excinfo:
            store.get_tenant("t1")

        assert excinfo.value.status_code is None
        assert isinstance(excinfo.value.__cause__, urllib3.exceptions.MaxRetryError)

    @patch("openstack_site_agent.backends.openstack_backend.tenant_store.k8s_client")
    @patch("openstack_site_agent.backends.openstack_backend.tenant_store.k8s_config")
    def test_loads_kubeconfig(self, k8s_config, k8s_client):
        KubernetesTenantStore(kubeconfig_path="/etc/kubernetes/admin.conf")

        k8s_config.load_kube_config.assert_called_once_with(
            config_file="/etc/kubernetes/admin.conf"
        )
        k8s_client.CustomObjectsApi.assert_called_once()

    @patch("openstack_site_agent.backends.openstack_backend.tenant_store.k8s_client")
    @patch("openstack_site_agent.backends.openstack_backend.tenant_store.k8s_config")
    def test_falls_back_to_in_cluster_config(self, k8s_config, k8s_client):
        KubernetesTenantStore()

        k8s_config.load_incluster_config.assert_called_once()
        k8s_config.load_kube_config.assert_not_called()

    @patch("openstack_site_agent.backends.openstack_backend.tenant_store.k8s_config")
    def test_config_failure_raises_backend_error(self, k8s_config):
        k8s_config.load_incluster_config.side_effect = RuntimeError("not in cluster")

        with pytest.raises(BackendError, match="not in cluster"):
            KubernetesTenantStore()
