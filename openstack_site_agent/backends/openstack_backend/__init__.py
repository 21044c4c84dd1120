"""OpenStack backend: Keystone tenants and users, Neutron networks and ports."""

ROUTER_INTERFACE_DEVICE_OWNER = "network:router_interface"
COMPUTE_DEVICE_OWNER_PREFIX = "compute"
