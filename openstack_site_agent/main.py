"""Main application module."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from typing import Optional

import yaml

from openstack_site_agent import OPENSTACK_SITE_AGENT_VERSION
from openstack_site_agent.backend import bind_context, configure_logger, logger
from openstack_site_agent.backend.exceptions import BackendError, ConfigurationError
from openstack_site_agent.backend.structures import Network, Subnet
from openstack_site_agent.backends.openstack_backend.client import OpenStackClient
from openstack_site_agent.common import utils


def parse_subnet(value: str) -> Subnet:
    """Parse ``CIDR[,GATEWAY[,NAME]]`` into a subnet."""
    parts = value.split(",")
    if not parts[0]:
        raise argparse.ArgumentTypeError(f"Invalid subnet: {value}")
    return Subnet(
        cidr=parts[0],
        gateway=parts[1] if len(parts) > 1 else "",
        name=parts[2] if len(parts) > 2 else "",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the agent CLI."""
    parser = argparse.ArgumentParser(
        description="Provision tenant networks on OpenStack",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check connectivity
  openstack-site-agent -c config.yaml diagnostics

  # Create tenant network with one subnet
  openstack-site-agent -c config.yaml create-network net1 --tenant t1 \\
    --subnet 10.0.0.0/24,10.0.0.1 --dns 8.8.8.8

  # Tear the network down again
  openstack-site-agent -c config.yaml delete-network net1
        """,
    )
    parser.add_argument(
        "--config-file",
        "-c",
        help="Path to the config file with provider settings;"
        "default is openstack-site-agent-config.yaml",
        dest="config_file_path",
        default="openstack-site-agent-config.yaml",
    )
    parser.add_argument("--version", action="version", version=OPENSTACK_SITE_AGENT_VERSION)

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("diagnostics", help="Check access to OpenStack")

    create_tenant = commands.add_parser("create-tenant", help="Create tenant")
    create_tenant.add_argument("name")

    delete_tenant = commands.add_parser("delete-tenant", help="Delete tenant and its users")
    delete_tenant.add_argument("name")

    create_network = commands.add_parser("create-network", help="Create network")
    create_network.add_argument("name")
    create_network.add_argument("--tenant", required=True, help="Tenant name")
    create_network.add_argument(
        "--subnet",
        action="append",
        type=parse_subnet,
        default=[],
        help="Subnet as CIDR[,GATEWAY[,NAME]], may be repeated",
    )
    create_network.add_argument(
        "--dns", action="append", default=[], help="DNS server for every subnet"
    )

    delete_network = commands.add_parser("delete-network", help="Delete network")
    delete_network.add_argument("name")

    list_ports = commands.add_parser("list-ports", help="List ports of a network")
    list_ports.add_argument("network_id")
    list_ports.add_argument(
        "--device-owner", default="", help="Device owner to filter by; empty lists all ports"
    )

    delete_port = commands.add_parser("delete-port", help="Delete port by name")
    delete_port.add_argument("name")

    return parser


def run_command(client: OpenStackClient, args: argparse.Namespace) -> int:
    """Run the selected command and return the exit code."""
    if args.command == "diagnostics":
        if client.ping():
            logger.info("OpenStack is reachable")
            return 0
        logger.error("OpenStack is not reachable")
        return 1

    if args.command == "create-tenant":
        tenant_id = client.create_tenant(args.name)
        print(tenant_id)
    elif args.command == "delete-tenant":
        client.delete_all_users_on_tenant(args.name)
        client.delete_tenant(args.name)
    elif args.command == "create-network":
        for subnet in args.subnet:
            subnet.dns_servers = list(args.dns)
        network = Network(
            name=args.name,
            tenant_id=client.get_tenant_id_from_name(args.tenant),
            subnets=args.subnet,
        )
        client.create_network(network)
        print(json.dumps(asdict(network), indent=2))
    elif args.command == "delete-network":
        client.delete_network(args.name)
    elif args.command == "list-ports":
        ports = client.list_ports(args.network_id, args.device_owner)
        print(json.dumps([asdict(port) for port in ports], indent=2))
    elif args.command == "delete-port":
        client.delete_port_by_name(args.name)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entrypoint for the application."""
    args = create_parser().parse_args(argv)
    try:
        configuration = utils.load_configuration(args.config_file_path)
    except (OSError, yaml.YAMLError, ConfigurationError) as e:
        logger.error("Failed to load configuration: %s", e)
        return 2

    configure_logger(configuration.log_level)
    bind_context(command=args.command, host_id=configuration.networking.host_id)
    logger.info("OpenStack site agent version: %s", OPENSTACK_SITE_AGENT_VERSION)

    try:
        client = OpenStackClient.from_configuration(configuration)
        return run_command(client, args)
    except BackendError as e:
        logger.error("Command %s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
