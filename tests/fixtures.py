from openstack_site_agent.common.utils import parse_configuration

EXT_NET_ID = "7c1f3f16-0a8e-4fb3-8a77-1a1d4a1c2d55"
TENANT_ID = "3f8e4d0b9c2a4e1f8d7c6b5a49382716"

CONFIG = {
    "global": {
        "auth_url": "http://keystone.example.com:5000/v3",
        "username": "admin",
        "password": "secret",
        "tenant_name": "admin",
        "region": "RegionOne",
        "ext_net_id": EXT_NET_ID,
    },
    "plugin": {
        "plugin_name": "ovs",
        "integration_bridge": "br-int",
    },
    "kubernetes": {
        "enabled": False,
    },
    "networking": {
        "host_id": "node-1",
    },
}

CONFIGURATION = parse_configuration(CONFIG)
