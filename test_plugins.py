#!/usr/bin/env python3
"""
Tests for the bundled plugins, the plugin registry, the validators and the CLI.
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch

import dns.exception
import dns.name
import dns.rcode
import dns.rdataclass
import dns.rdatatype
import dns.resolver
import yaml

from dns_updater.cli.main import config_logger, main
from dns_updater.core.models import AddressFamily, DnsRecordIntent, ResolvedAddressSet
from dns_updater.core.updater import UpdateOrchestrator
from dns_updater.exceptions import (
    ConfigurationError,
    NoDnsUpdateError,
    ProviderNotFoundError,
    ResolverNotFoundError,
)
from dns_updater.plugins import (
    PROVIDER_CLASSES,
    RESOLVER_CLASSES,
    BINDProvider,
    DNSProvider,
    MockDNSProvider,
    OpenDNSResolver,
    PluginRegistry,
    StaticResolver,
)
from dns_updater.utils.validators import (
    sanitize_fqdn,
    split_record,
    validate_ipv4,
    validate_ipv6,
    validate_record_name,
)

HOST_V4 = DnsRecordIntent("bind", "home.example.com", AddressFamily.IPV4, 300)
HOST_V6 = DnsRecordIntent("bind", "home.example.com", AddressFamily.IPV6, 60)
RESOLVED = ResolvedAddressSet(ipv4="5.6.7.8", ipv6="2001:db8::5")


class TestValidators(unittest.TestCase):
    """Test the validation functions."""

    def test_validate_record_name(self):
        valid = ["example.com", "home.example.com", "home.example.com.", "1host.example.com", "_acme.example.com"]
        invalid = ["", "single", "example..com", "-example.com", "a" * 64 + ".com"]

        for name in valid:
            with self.subTest(name=name):
                self.assertTrue(validate_record_name(name))
        for name in invalid:
            with self.subTest(name=name):
                self.assertFalse(validate_record_name(name))

    def test_validate_addresses(self):
        self.assertTrue(validate_ipv4("192.168.1.1"))
        self.assertFalse(validate_ipv4("256.1.2.3"))
        self.assertFalse(validate_ipv4("::1"))
        self.assertTrue(validate_ipv6("2001:db8::1"))
        self.assertFalse(validate_ipv6("1.2.3.4"))
        self.assertFalse(validate_ipv6(""))

    def test_split_record(self):
        self.assertEqual(split_record("www.home.example.com"), ("www.home", "example.com"))
        self.assertEqual(split_record("example.com."), ("", "example.com"))
        self.assertIsNone(split_record("localhost"))

    def test_sanitize_fqdn(self):
        self.assertEqual(sanitize_fqdn(" Home.Example.COM. "), "home.example.com")


class TestBaseProvider(unittest.TestCase):

    def test_update_not_implemented(self):
        class LazyProvider(DNSProvider):
            def update(self, record, resolved):
                return super().update(record, resolved)

        with self.assertRaises(NoDnsUpdateError):
            LazyProvider().update(HOST_V4, RESOLVED)

    def test_address_for_missing_family(self):
        provider = MockDNSProvider()
        with self.assertRaises(ValueError):
            provider.address_for(HOST_V6, ResolvedAddressSet(ipv4="1.2.3.4"))

    def test_split_invalid_record(self):
        bad = DnsRecordIntent("bind", "localhost", AddressFamily.IPV4)
        with self.assertRaises(ConfigurationError):
            DNSProvider.split_record(bad)


class TestMockDNSProvider(unittest.TestCase):
    """Test the mock DNS provider."""

    def test_update_record(self):
        provider = MockDNSProvider()

        provider.update(HOST_V4, RESOLVED)
        provider.update(HOST_V6, RESOLVED)

        self.assertEqual(provider.get_address("home.example.com", "A"), "5.6.7.8")
        self.assertEqual(provider.get_address("home.example.com", "AAAA"), "2001:db8::5")
        self.assertEqual(len(provider.calls), 2)

    def test_configured_failure(self):
        provider = MockDNSProvider({"fail": ["home.example.com"]})

        with self.assertRaises(RuntimeError):
            provider.update(HOST_V4, RESOLVED)
        self.assertIsNone(provider.get_address("home.example.com"))


class TestBINDProvider(unittest.TestCase):
    """Test the BIND DNS provider."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_bind_config_parsing(self):
        config = {"nameserver": "192.168.1.10", "port": 5353, "zone": "example.com", "min_ttl": 120}
        provider = BINDProvider(config)

        self.assertEqual(provider.nameserver, "192.168.1.10")
        self.assertEqual(provider.port, 5353)
        self.assertEqual(provider.min_ttl, 120)
        self.assertIsNone(provider.keyring)

    def test_tsig_key_loading(self):
        key_file = os.path.join(self.temp_dir, "update-key.conf")
        with open(key_file, "w") as f:
            f.write(
                'key "update-key" {\n'
                "    algorithm hmac-sha256;\n"
                '    secret "c2VjcmV0c2VjcmV0c2VjcmV0c2VjcmV0";\n'
                "};\n"
            )

        provider = BINDProvider({"key_file": key_file, "key_name": "update-key"})

        self.assertIsNotNone(provider.keyring)

    def test_missing_key_file(self):
        provider = BINDProvider({"key_file": os.path.join(self.temp_dir, "absent"), "key_name": "k"})
        self.assertIsNone(provider.keyring)

    @patch("dns_updater.plugins.bind_provider.dns.query.tcp")
    def test_update_sends_replace(self, tcp):
        tcp.return_value.rcode.return_value = dns.rcode.NOERROR
        provider = BINDProvider({"nameserver": "10.0.0.53", "port": 53, "min_ttl": 600})

        provider.update(HOST_V6, RESOLVED)

        message = tcp.call_args[0][0]
        self.assertEqual(tcp.call_args[0][1], "10.0.0.53")
        self.assertEqual(message.zone[0].name, dns.name.from_text("example.com"))
        added = [r for r in message.update if r.rdclass == dns.rdataclass.IN]
        self.assertEqual(len(added), 1)
        self.assertEqual(added[0].rdtype, dns.rdatatype.AAAA)
        self.assertEqual(added[0].ttl, 600)
        self.assertEqual([rd.to_text() for rd in added[0]], ["2001:db8::5"])

    @patch("dns_updater.plugins.bind_provider.dns.query.tcp")
    def test_update_uses_configured_zone(self, tcp):
        tcp.return_value.rcode.return_value = dns.rcode.NOERROR
        provider = BINDProvider({"zone": "home.example.com"})

        provider.update(HOST_V4, RESOLVED)

        message = tcp.call_args[0][0]
        self.assertEqual(message.zone[0].name, dns.name.from_text("home.example.com"))

    @patch("dns_updater.plugins.bind_provider.dns.query.tcp")
    def test_update_refused(self, tcp):
        tcp.return_value.rcode.return_value = dns.rcode.REFUSED
        provider = BINDProvider({})

        with self.assertRaises(RuntimeError):
            provider.update(HOST_V4, RESOLVED)

    @patch("dns_updater.plugins.bind_provider.dns.query.tcp")
    def test_update_unreachable(self, tcp):
        tcp.side_effect = dns.exception.Timeout()
        provider = BINDProvider({})

        with self.assertRaises(dns.exception.Timeout):
            provider.update(HOST_V4, RESOLVED)


class TestResolvers(unittest.TestCase):
    """Test the bundled IP resolvers."""

    def test_static_resolver(self):
        resolver = StaticResolver({"ipv6": "2001:db8::1"})

        self.assertFalse(resolver.capabilities.supports_ipv4)
        self.assertTrue(resolver.capabilities.supports_ipv6)
        self.assertEqual(resolver.ip(), {"ipv6": "2001:db8::1"})

    def test_opendns_resolver(self):
        def fake_resolve(name, record_type):
            self.assertEqual(name, "myip.opendns.com")
            if record_type == "AAAA":
                raise dns.exception.Timeout()
            answer = Mock()
            answer.to_text.return_value = "203.0.113.7"
            return [answer]

        resolver = OpenDNSResolver({"timeout": 1})
        with patch.object(dns.resolver.Resolver, "resolve", side_effect=fake_resolve):
            result = resolver.ip()

        self.assertEqual(result, {"ipv4": "203.0.113.7"})
        self.assertTrue(resolver.capabilities.supports_ipv4)
        self.assertTrue(resolver.capabilities.supports_ipv6)


class TestPluginRegistry(unittest.TestCase):
    """Test plugin registration and lookup."""

    def test_bundled_plugins_registered(self):
        self.assertIs(PROVIDER_CLASSES["bind"], BINDProvider)
        self.assertIs(PROVIDER_CLASSES["mock"], MockDNSProvider)
        self.assertIs(RESOLVER_CLASSES["opendns"], OpenDNSResolver)
        self.assertIs(RESOLVER_CLASSES["static"], StaticResolver)

    def test_from_config(self):
        registry = PluginRegistry.from_config(
            ["mock", "unknown", "mock"],
            ["static", "nothing"],
            {"static": {"ipv4": "1.2.3.4"}},
        )

        self.assertEqual(list(registry.providers), ["mock"])
        self.assertEqual(registry.get_resolver("static").ip(), {"ipv4": "1.2.3.4"})
        with self.assertRaises(ProviderNotFoundError):
            registry.get_provider("unknown")
        with self.assertRaises(ResolverNotFoundError):
            registry.get_resolver("nothing")

    def test_plugin_init_failure_is_logged(self):
        with self.assertLogs("dns_updater.plugins.registry", level="ERROR"):
            registry = PluginRegistry.from_config(["bind"], [], {"bind": {"port": "abc"}})

        self.assertEqual(registry.providers, {})


class TestCLI(unittest.TestCase):
    """Test the command line entry point."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = os.path.join(self.temp_dir, "config.yaml")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _write_config(self, mock_config=None):
        config = {
            "ip_plugins": ["static"],
            "dns_entries": [
                {"provider": "mock", "record": "home.example.com", "type": 4, "ttl": 300, "enable": True},
            ],
            "plugins": {"static": {"ipv4": "198.51.100.4"}, "mock": mock_config or {}},
        }
        with open(self.config_file, "w") as f:
            yaml.dump(config, f)

    def test_once_success(self):
        self._write_config()

        with self.assertRaises(SystemExit) as cm:
            main(["--once", "--config", self.config_file])

        self.assertEqual(cm.exception.code, 0)

    def test_once_with_failed_record(self):
        self._write_config({"fail": ["home.example.com"]})

        with self.assertRaises(SystemExit) as cm:
            main(["--once", "--config", self.config_file])

        self.assertEqual(cm.exception.code, 1)

    def test_malformed_config(self):
        with open(self.config_file, "w") as f:
            f.write("dns_entries: [{provider: mock}]\n")

        with self.assertRaises(SystemExit) as cm:
            main(["--once", "-c", self.config_file])

        self.assertEqual(cm.exception.code, 1)

    def test_malformed_entries_section(self):
        """Test a wrongly shaped config exits cleanly instead of with a traceback."""
        for content in ["dns_entries: [home.example.com]\n", "ip_plugins: 5\n", "dns_entries: {record: a}\n"]:
            with self.subTest(content=content):
                with open(self.config_file, "w") as f:
                    f.write(content)

                with self.assertRaises(SystemExit) as cm:
                    main(["--once", "-c", self.config_file])

                self.assertEqual(cm.exception.code, 1)

    def test_invalid_logging_level(self):
        self._write_config()
        with open(self.config_file, "a") as f:
            f.write("logging:\n  level: LOUD\n")

        with self.assertRaises(SystemExit) as cm:
            main(["--once", "-c", self.config_file])

        self.assertEqual(cm.exception.code, 1)

    def test_unwritable_log_file(self):
        self._write_config()
        log_file = os.path.join(self.temp_dir, "missing", "dns.log")
        with open(self.config_file, "a") as f:
            f.write(f"logging:\n  file: {log_file}\n")

        with self.assertRaises(SystemExit) as cm:
            main(["--once", "-c", self.config_file])

        self.assertEqual(cm.exception.code, 1)

    def test_logging_configured_before_loading(self):
        """Test messages emitted while loading the config go through configured logging."""
        self._write_config()
        calls = Mock()

        with patch("dns_updater.cli.main.config_logger", calls.config_logger), \
                patch("dns_updater.cli.main.RecordStore.from_file", calls.from_file):
            calls.from_file.side_effect = ConfigurationError("broken")
            with self.assertRaises(SystemExit):
                main(["--once", "-c", self.config_file])

        names = [name for name, _, _ in calls.mock_calls]
        self.assertEqual(names[:2], ["config_logger", "from_file"])

    def test_config_logger_validation(self):
        for config in [{"logging": {"level": "LOUD"}}, {"logging": "debug"}]:
            with self.subTest(config=config):
                with self.assertRaises(ConfigurationError):
                    config_logger(config)

    def test_service_stops_on_scheduling_failure(self):
        """Test an error which stopped recurring scheduling makes the service exit 1."""
        self._write_config()

        with patch("dns_updater.core.updater.threading.Timer"), \
                patch.object(UpdateOrchestrator, "wait", side_effect=RuntimeError("can't start new thread")):
            with self.assertRaises(SystemExit) as cm:
                main(["--service", "-c", self.config_file])

        self.assertEqual(cm.exception.code, 1)

    def test_no_mode_prints_usage(self):
        with self.assertRaises(SystemExit) as cm:
            main([])

        self.assertEqual(cm.exception.code, 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
