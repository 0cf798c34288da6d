"""Tests for ProviderRegistry: ordering, health and quota TTL."""

from datetime import timedelta

from matchrank.core import ProviderCredential
from matchrank.providers import build_registry
from matchrank.providers.registry import ProviderRegistry


def credential(name: str, priority: int, api_key: str = "key", is_active: bool = True) -> ProviderCredential:
    return ProviderCredential(
        name=name,
        api_key=api_key,
        base_url=f"https://{name}.example.com",
        priority=priority,
        is_active=is_active,
    )


# =============================================================================
# CONSTRUCTION
# =============================================================================


class TestFromCredentials:
    """Building a registry from the credential store."""

    def test_orders_by_priority(self, credentials, fake_provider):
        credentials.credentials = [credential("b", 2), credential("a", 3), credential("c", 1)]
        factories = {name: (lambda cred, transport: fake_provider(cred.name)) for name in "abc"}

        registry = ProviderRegistry.from_credentials(credentials, factories)
        assert registry.names() == ["c", "b", "a"]

    def test_skips_inactive_keyless_and_unknown(self, credentials, fake_provider):
        credentials.credentials = [
            credential("a", 1, is_active=False),
            credential("b", 2, api_key=""),
            credential("mystery", 3),
            credential("c", 4),
        ]
        factories = {name: (lambda cred, transport: fake_provider(cred.name)) for name in "abc"}

        registry = ProviderRegistry.from_credentials(credentials, factories)
        assert registry.names() == ["c"]

    def test_free_provider_becomes_fallback(self, credentials, fake_provider):
        credentials.credentials = [credential("free", 0, api_key=""), credential("a", 1)]
        factories = {name: (lambda cred, transport: fake_provider(cred.name)) for name in ("a", "free")}

        registry = ProviderRegistry.from_credentials(credentials, factories, free_provider="free")
        assert registry.names() == ["a"]
        assert registry.fallback.name == "free"
        assert registry.get("free") is registry.fallback

    def test_real_adapters_from_priority(self, credentials):
        credentials.credentials = [
            credential("football_data", 2),
            credential("api_football", 1),
            credential("soccersapi", 3, api_key=""),
            credential("tsdb", 99, api_key="123"),
        ]
        registry = build_registry(credentials)

        assert registry.names() == ["api_football", "football_data"]
        assert registry.fallback.name == "tsdb"
        assert registry.get("football_data").name == "football_data"
        registry.close()


# =============================================================================
# HEALTH
# =============================================================================


class TestHealth:
    def test_failure_skips_provider_until_next_pass(self, make_registry, fake_provider):
        p1, p2 = fake_provider("p1"), fake_provider("p2")
        registry = make_registry(p1, p2)
        first = registry.begin_pass()

        first.record_outcome("p1", success=False)
        assert first.next_usable() is p2
        assert not registry.is_usable("p1")

        assert registry.begin_pass().next_usable() is p1

    def test_exclude(self, make_registry, fake_provider):
        p1, p2 = fake_provider("p1"), fake_provider("p2")
        provider_pass = make_registry(p1, p2).begin_pass()
        assert provider_pass.next_usable(exclude={"p1"}) is p2
        assert provider_pass.next_usable(exclude={"p1", "p2"}) is None

    def test_quota_exhausted_provider_is_skipped(self, make_registry, fake_provider, credentials):
        p1, p2 = fake_provider("p1"), fake_provider("p2")
        credentials.exhausted = {"p1"}
        registry = make_registry(p1, p2)

        assert registry.begin_pass().usable_providers() == [p2]
        assert registry.health("p1").quota_exhausted

    def test_quota_rechecked_after_recorded_calls(self, make_registry, fake_provider, credentials):
        p1, p2 = fake_provider("p1"), fake_provider("p2")
        registry = make_registry(p1, p2)
        provider_pass = registry.begin_pass()
        assert provider_pass.next_usable() is p1

        credentials.exhausted = {"p1"}
        provider_pass.record_outcome("p1", success=True)

        assert provider_pass.next_usable() is p2
        assert registry.health("p1").quota_exhausted

    def test_quota_reread_only_after_ttl(self, make_registry, fake_provider, credentials, clock):
        registry = make_registry(fake_provider("p1"))
        registry.begin_pass()
        assert registry.is_usable("p1")

        credentials.exhausted = {"p1"}
        clock.now += timedelta(seconds=60)
        registry.begin_pass()
        assert registry.is_usable("p1")

        clock.now += timedelta(seconds=300)
        registry.begin_pass()
        assert not registry.is_usable("p1")

    def test_forced_refresh_ignores_ttl(self, make_registry, fake_provider, credentials):
        registry = make_registry(fake_provider("p1"))
        registry.begin_pass()
        credentials.exhausted = {"p1"}

        registry.begin_pass(force_refresh=True)
        assert not registry.is_usable("p1")

    def test_unreadable_quota_counts_as_exhausted(self, make_registry, fake_provider, credentials):
        credentials.fail_quota_check = True
        registry = make_registry(fake_provider("p1"))
        registry.begin_pass()
        assert not registry.is_usable("p1")

    def test_calls_reported_to_quota_tracker(self, make_registry, fake_provider, credentials):
        registry = make_registry(fake_provider("p1"))
        registry.record_outcome("p1", success=True)
        registry.record_outcome("p1", success=False, calls=3)
        assert credentials.recorded == {"p1": 4}

    def test_concurrent_passes_keep_their_own_failures(self, make_registry, fake_provider):
        p1, p2 = fake_provider("p1"), fake_provider("p2")
        registry = make_registry(p1, p2)
        first = registry.begin_pass()
        first.record_outcome("p1", success=False)

        second = registry.begin_pass()

        assert second.next_usable() is p1
        assert first.next_usable() is p2

    def test_late_outcome_leaves_health_alone(self, make_registry, fake_provider, credentials):
        registry = make_registry(fake_provider("p1"))
        with registry.begin_pass() as provider_pass:
            pass

        assert provider_pass.ended
        provider_pass.record_outcome("p1", success=False)

        assert registry.is_usable("p1")
        assert registry.begin_pass().is_usable("p1")
        assert credentials.recorded == {"p1": 1}

    def test_success_restores_reported_health(self, make_registry, fake_provider):
        registry = make_registry(fake_provider("p1"))
        registry.record_outcome("p1", success=False)
        registry.record_outcome("p1", success=True)
        assert registry.is_usable("p1")

    def test_registries_do_not_share_state(self, make_registry, fake_provider):
        first = make_registry(fake_provider("p1"))
        second = make_registry(fake_provider("p1"))
        first.record_outcome("p1", success=False)
        assert second.is_usable("p1")


# =============================================================================
# SYSTEM HEALTH
# =============================================================================


class TestSystemHealth:
    def test_counts_working_providers(self, make_registry, fake_provider, clock):
        registry = make_registry(fake_provider("p1"), fake_provider("p2"), fallback=fake_provider("free"))
        registry.begin_pass()
        registry.record_outcome("p2", success=False)

        health = registry.system_health()
        assert health.total_providers == 3
        assert health.working_providers == 2
        assert health.is_healthy
        assert health.last_check_timestamp == clock.now

    def test_no_working_providers_is_unhealthy(self, make_registry, fake_provider):
        registry = make_registry(fake_provider("p1"))
        registry.record_outcome("p1", success=False)
        assert not registry.system_health().is_healthy

    def test_health_snapshot_is_a_copy(self, make_registry, fake_provider):
        registry = make_registry(fake_provider("p1"))
        snapshot = registry.health("p1")
        snapshot.is_working = False
        assert registry.is_usable("p1")
