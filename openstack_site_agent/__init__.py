"""Tenant-aware OpenStack network provisioning agent."""

OPENSTACK_SITE_AGENT_VERSION = "0.1.0"
