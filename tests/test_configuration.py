"""Tests for configuration loading functions."""

import copy
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from openstack_site_agent.backend.exceptions import ConfigurationError
from openstack_site_agent.common.utils import (
    get_connection,
    load_configuration,
    parse_configuration,
)
from tests.fixtures import CONFIG, CONFIGURATION, EXT_NET_ID


class TestConfigurationLoading:
    """Test cases for configuration loading utilities."""

    def test_load_configuration(self):
        """Test that load_configuration validates the file and records its path."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(CONFIG, f)
            config_file_path = f.name

        try:
            configuration = load_configuration(config_file_path)

            assert configuration.config_file_path == config_file_path
            assert configuration.global_settings.ext_net_id == EXT_NET_ID
            assert configuration.plugin.integration_bridge == "br-int"
            assert configuration.networking.host_id == "node-1"
        finally:
            Path(config_file_path).unlink()

    def test_load_missing_file(self):
        with pytest.raises(FileNotFoundError):
            load_configuration("/nonexistent/openstack-site-agent-config.yaml")

    def test_defaults(self):
        """Test that optional sections fall back to their defaults."""
        configuration = parse_configuration({"global": CONFIG["global"]})

        assert configuration.kubernetes.enabled is True
        assert configuration.networking.security_group_name == "kube-securitygroup-default"
        assert configuration.networking.system_namespaces == [
            "default",
            "kube-system",
            "kube-public",
        ]
        assert configuration.networking.system_tenant == "admin"
        assert configuration.networking.host_id
        assert configuration.global_settings.user_domain_name == "Default"
        assert configuration.log_level == "INFO"

    @pytest.mark.parametrize("ext_net_id", [None, "", "   "])
    def test_external_network_is_mandatory(self, ext_net_id):
        config = copy.deepcopy(CONFIG)
        if ext_net_id is None:
            del config["global"]["ext_net_id"]
        else:
            config["global"]["ext_net_id"] = ext_net_id

        with pytest.raises(ConfigurationError, match="ext_net_id"):
            parse_configuration(config)

    def test_unknown_settings_are_rejected(self):
        config = copy.deepcopy(CONFIG)
        config["networking"]["unknown"] = True

        with pytest.raises(ConfigurationError):
            parse_configuration(config)

    def test_non_mapping_is_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_configuration(["global"])

    @patch("openstack_site_agent.common.utils.openstack.connect")
    def test_get_connection(self, connect):
        get_connection(CONFIGURATION)

        kwargs = connect.call_args.kwargs
        assert kwargs["auth_url"] == "http://keystone.example.com:5000/v3"
        assert kwargs["project_name"] == "admin"
        assert kwargs["region_name"] == "RegionOne"
        assert kwargs["user_domain_name"] == "Default"
