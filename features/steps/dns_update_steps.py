"""
Step definitions for DNS Updater scenarios.
"""

import yaml
from behave import given, then, when

from dns_updater.core.record_store import RecordStore
from dns_updater.core.updater import UpdateOrchestrator
from dns_updater.plugins.base_resolver import IPResolver
from dns_updater.plugins.registry import PluginRegistry
from dns_updater.plugins.static_resolver import StaticResolver


class FailingResolver(IPResolver):
    supports_ipv4 = True
    supports_ipv6 = True

    def ip(self):
        raise ConnectionError("resolver unreachable")


def _orchestrator(context):
    """Build the store, registry and orchestrator from the scenario config."""
    if getattr(context, "orchestrator", None) is None:
        with open(context.config_file, "w") as f:
            yaml.safe_dump(context.updater_config, f)

        store = RecordStore.from_file(str(context.config_file))
        registry = PluginRegistry.from_config(
            store.provider_names(),
            store.get_resolver_priority_list(),
            store.config.get("plugins"),
        )
        for name, resolver in context.extra_resolvers.items():
            registry.add_resolver(name, resolver)

        context.registry = registry
        context.provider = registry.get_provider("mock")
        context.orchestrator = UpdateOrchestrator(store, registry, single=True)
    return context.orchestrator


@given("the DNS updater is configured with the mock provider")
def step_impl(context):
    context.updater_config = {
        "service_timeout": 300000,
        "ip_plugins": ["static"],
        "dns_entries": [],
        "plugins": {"mock": {"fail": []}, "static": {}},
    }
    context.extra_resolvers = {}
    context.orchestrator = None


@given("the following DNS records are configured")
def step_impl(context):
    for row in context.table:
        context.updater_config["dns_entries"].append(
            {
                "provider": "mock",
                "record": row["record"],
                "type": int(row["type"]),
                "ttl": 300,
                "enable": row["enable"] == "true",
            }
        )


@given('the public address is "{ipv4}" and "{ipv6}"')
def step_impl(context, ipv4, ipv6):
    context.updater_config["plugins"]["static"] = {"ipv4": ipv4, "ipv6": ipv6}


@given('the provider rejects updates of "{record}"')
def step_impl(context, record):
    context.updater_config["plugins"]["mock"]["fail"].append(record)


@given("a failing resolver is tried first")
def step_impl(context):
    context.extra_resolvers["flaky"] = FailingResolver()
    context.updater_config["ip_plugins"].insert(0, "flaky")


@given('a preferred resolver reports "{ipv4}"')
def step_impl(context, ipv4):
    context.extra_resolvers["preferred"] = StaticResolver({"ipv4": ipv4})
    context.updater_config["ip_plugins"].insert(0, "preferred")


@when("I run an update cycle")
def step_impl(context):
    context.reports.append(_orchestrator(context).run_once())


@when('the public IPv4 address changes to "{ipv4}"')
def step_impl(context, ipv4):
    context.registry.get_resolver("static").config["ipv4"] = ipv4


@then('"{record}" should point to "{address}"')
def step_impl(context, record, address):
    record_type = "AAAA" if ":" in address else "A"
    actual = context.provider.get_address(record, record_type)
    assert actual == address, f"{record} points to {actual}, expected {address}"


@then('"{record}" should not have been updated')
def step_impl(context, record):
    updated = [r.record for r, _ in context.provider.calls]
    assert record not in updated, f"{record} was updated"


@then("the cycle should report {count:d} updated records")
@then("the last cycle should report {count:d} updated records")
def step_impl(context, count):
    report = context.reports[-1]
    assert len(report.updated) == count, f"{len(report.updated)} updated, expected {count}"


@then("the cycle should report {count:d} failed records")
def step_impl(context, count):
    report = context.reports[-1]
    assert len(report.failed) == count, f"{len(report.failed)} failed, expected {count}"


@then("the provider should have received {count:d} updates")
def step_impl(context, count):
    assert len(context.provider.calls) == count, f"{len(context.provider.calls)} updates"
