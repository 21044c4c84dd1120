"""Tests for the OpenStack client facade."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from openstack import exceptions as os_exceptions

from openstack_site_agent.backend.exceptions import BackendError, NotFoundError
from openstack_site_agent.backend.structures import Network, Subnet, TenantRecord
from openstack_site_agent.backends.openstack_backend.client import OpenStackClient
from openstack_site_agent.common.utils import parse_configuration
from tests.fixtures import CONFIG, CONFIGURATION, EXT_NET_ID


@pytest.fixture
def identity():
    identity = MagicMock()
    identity.projects.side_effect = lambda **query: iter(
        [
            project
            for project in [
                SimpleNamespace(id="p1", name="t1"),
                SimpleNamespace(id="p-admin", name="admin"),
            ]
            if query.get("name", project.name) == project.name
        ]
    )
    return identity


@pytest.fixture
def client(identity, network_proxy):
    network_proxy.networks_by_id[EXT_NET_ID] = SimpleNamespace(
        id=EXT_NET_ID, name="public", project_id="p-admin", status="ACTIVE", subnet_ids=[]
    )
    connection = SimpleNamespace(
        identity=identity, network=network_proxy, load_balancer=MagicMock()
    )
    return OpenStackClient(connection, CONFIGURATION)


class TestOpenStackClient:
    def test_ping(self, client):
        assert client.ping()

    def test_ping_without_external_network(self, client, network_proxy):
        del network_proxy.networks_by_id[EXT_NET_ID]

        assert not client.ping()

    def test_ping_with_unreachable_keystone(self, client, identity):
        identity.projects.side_effect = os_exceptions.HttpException(
            message="unavailable", http_status=503
        )

        assert not client.ping()

    def test_network_lifecycle(self, client, network_proxy):
        tenant_id = client.get_tenant_id_from_name("t1")
        network = Network(
            name="net1",
            tenant_id=tenant_id,
            subnets=[Subnet(cidr="10.0.0.0/24", gateway="10.0.0.1")],
        )

        pair = client.create_network(network)
        port = client.create_port(pair.network_id, tenant_id, "pod-1")

        assert client.get_network_by_name("net1").uid == network.uid
        assert client.get_network_by_id(network.uid).name == "net1"
        assert client.get_port("pod-1").id == port.id
        assert [p.id for p in client.list_ports(pair.network_id, "compute:node-1")] == [port.id]

        client.delete_network("net1")

        assert list(network_proxy.networks_by_id) == [EXT_NET_ID]
        assert network_proxy.routers_by_id == {}
        assert network_proxy.ports_by_id == {}

    def test_system_namespace_resolves_to_admin(self, client):
        assert client.get_tenant_id_from_name("default") == "p-admin"

    def test_get_provider_subnet_failure(self, client):
        with pytest.raises(NotFoundError):
            client.get_provider_subnet("subnet-404")

    def test_plugin_settings(self, client):
        assert client.get_plugin_name() == "ovs"
        assert client.get_integration_bridge() == "br-int"
        assert client.get_tenant_store() is None

    def test_tenant_store_is_consulted(self, identity, network_proxy):
        store = MagicMock()
        store.get_tenant.return_value = TenantRecord(name="t2", tenant_id="p2")
        connection = SimpleNamespace(identity=identity, network=network_proxy)

        client = OpenStackClient(connection, CONFIGURATION, store)

        assert client.get_tenant_id_from_name("t2") == "p2"
        assert client.get_tenant_store() is store

    def test_delete_port_by_id_propagates_not_found(self, client):
        with pytest.raises(BackendError):
            client.delete_port_by_id("port-404")


class TestFromConfiguration:
    @patch("openstack_site_agent.backends.openstack_backend.client.KubernetesTenantStore")
    @patch("openstack_site_agent.backends.openstack_backend.client.utils.get_connection")
    def test_builds_tenant_store_when_enabled(self, get_connection, tenant_store_class):
        config = dict(CONFIG, kubernetes={"kubeconfig_path": "/etc/kubernetes/admin.conf"})
        configuration = parse_configuration(config)

        client = OpenStackClient.from_configuration(configuration)

        get_connection.assert_called_once_with(configuration)
        tenant_store_class.assert_called_once_with("/etc/kubernetes/admin.conf")
        assert client.get_tenant_store() is tenant_store_class.return_value
        assert client.connection is get_connection.return_value

    @patch("openstack_site_agent.backends.openstack_backend.client.KubernetesTenantStore")
    @patch("openstack_site_agent.backends.openstack_backend.client.utils.get_connection")
    def test_no_tenant_store_when_disabled(self, get_connection, tenant_store_class):
        client = OpenStackClient.from_configuration(CONFIGURATION)

        tenant_store_class.assert_not_called()
        assert client.get_tenant_store() is None
