from core.engine import ReconciliationEngine
from core.models import DesiredState, OutcomeStatus


def test_zero_actions_is_a_noop_success(ctx, fake_host):
    engine = ReconciliationEngine(ctx)
    assert engine.run(DesiredState()) is True
    assert fake_host.calls == []


def test_plan_order_is_fixed(ctx):
    desired = DesiredState(
        hostname="new-host",
        ip_address="10.0.0.5",
        host_entries=(("db", "10.0.0.9"), ("cache", "10.0.0.10")),
    )
    labels = [label for label, _ in ReconciliationEngine(ctx).plan(desired)]
    assert labels == ["hostname new-host", "ip 10.0.0.5", "hostentry db 10.0.0.9", "hostentry cache 10.0.0.10"]


def test_ip_hosts_entry_uses_new_hostname(ctx, fake_host):
    desired = DesiredState(hostname="new-host", ip_address="10.0.0.5")

    assert ReconciliationEngine(ctx).run(desired) is True

    lines = fake_host.files["/etc/hosts"].splitlines()
    assert "10.0.0.5\tnew-host" in lines
    assert not any("old-host" in l for l in lines)


def test_failure_does_not_stop_later_actions(ctx, fake_host):
    fake_host.default_iface = None
    fake_host.links = ["lo"]
    desired = DesiredState(ip_address="10.0.0.5", host_entries=(("db", "10.0.0.9"),))

    engine = ReconciliationEngine(ctx)
    assert engine.run(desired) is False

    statuses = [outcome.status for _, outcome in engine.outcomes]
    assert statuses == [OutcomeStatus.FAILED, OutcomeStatus.APPLIED]
    assert "10.0.0.9\tdb" in fake_host.files["/etc/hosts"]


def test_no_change_counts_as_success(ctx, fake_host):
    fake_host.hostname = "web01"
    assert ReconciliationEngine(ctx).run(DesiredState(hostname="web01")) is True



def test_unexpected_exception_becomes_failed_outcome(ctx, fake_host, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(fake_host, "run", boom)
    engine = ReconciliationEngine(ctx)

    assert engine.run(DesiredState(host_entries=(("db", "10.0.0.9"),))) is False
    assert "disk on fire" in engine.outcomes[0][1].message
