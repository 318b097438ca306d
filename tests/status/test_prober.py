import random

from scyllanode.errors import ManagementError
from scyllanode.status.management import STORAGE_SERVICE
from scyllanode.status.prober import ClusterStatusProber, ProbePolicy, candidates


class FakeManagement:
    """Answers per address; an Exception value is raised instead."""
    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def read_attribute(self, address, mbean, attribute):
        self.calls.append((address, mbean, attribute))
        value = self.answers.get(address, {}).get(attribute, ManagementError("connection refused"))
        if isinstance(value, Exception):
            raise value
        return value


def test_candidates_exclude_bootstrapping_and_decommissioned(ctx):
    ctx.membership.mark_bootstrapping("a")
    ctx.membership.mark_decommissioning("b", "10.0.0.2")
    assert candidates(ctx, random.Random(1)) == ["10.0.0.3"]


def test_candidates_are_shuffled(ctx):
    seen = {tuple(candidates(ctx, random.Random(seed))) for seed in range(30)}
    assert len(seen) > 1
    assert all(sorted(s) == ["10.0.0.1", "10.0.0.2", "10.0.0.3"] for s in seen)


def test_live_nodes_from_single_answering_node(ctx):
    # only a answers, so whatever a reports is the live set
    answer = ["10.0.0.1", "10.0.0.2", "10.0.0.3"]
    client = FakeManagement({"10.0.0.1": {"LiveNodes": answer}})
    prober = ClusterStatusProber(client, rng=random.Random(7))

    assert prober.live_nodes(ctx) == set(answer)
    assert all(mbean == STORAGE_SERVICE and attr == "LiveNodes" for _, mbean, attr in client.calls)


def test_live_nodes_stops_at_first_success(ctx):
    everyone = {"LiveNodes": ["10.0.0.1", "10.0.0.2", "10.0.0.3"]}
    client = FakeManagement({a: everyone for a in ("10.0.0.1", "10.0.0.2", "10.0.0.3")})
    ClusterStatusProber(client, rng=random.Random(3)).live_nodes(ctx)
    assert len(client.calls) == 1


def test_all_nodes_failing_gives_empty_set(ctx):
    client = FakeManagement({
        "10.0.0.1": {"LiveNodes": ManagementError("timeout")},
        "10.0.0.2": {"LiveNodes": ConnectionRefusedError("refused")},
    })
    prober = ClusterStatusProber(client, rng=random.Random(0))
    assert prober.live_nodes(ctx) == set()
    assert prober.joining_nodes(ctx) == set()
    assert len({addr for addr, _, _ in client.calls}) == 3


def test_live_nodes_never_include_joining_or_leaving_members(ctx):
    ctx.membership.mark_bootstrapping("b")
    ctx.membership.mark_decommissioning("c", "10.0.0.3")
    stale = {"LiveNodes": ["10.0.0.1", "10.0.0.2", "10.0.0.3"]}
    client = FakeManagement({"10.0.0.1": stale})

    live = ClusterStatusProber(client, rng=random.Random(0)).live_nodes(ctx)

    assert live == {"10.0.0.1"}
    assert [addr for addr, _, _ in client.calls] == ["10.0.0.1"]


def test_joining_nodes_accumulates_every_answer(ctx):
    client = FakeManagement({
        "10.0.0.1": {"JoiningNodes": ["10.0.0.9"]},
        "10.0.0.2": {"JoiningNodes": []},
        "10.0.0.3": {"JoiningNodes": ["10.0.0.8"]},
    })
    prober = ClusterStatusProber(client, rng=random.Random(5))
    assert prober.joining_nodes(ctx) == {"10.0.0.8", "10.0.0.9"}
    assert len(client.calls) == 3


def test_policy_is_explicit(ctx):
    client = FakeManagement({
        "10.0.0.1": {"X": ["p"]},
        "10.0.0.2": {"X": ["q"]},
        "10.0.0.3": {"X": ["r"]},
    })
    prober = ClusterStatusProber(client, rng=random.Random(2))
    assert len(prober.probe(ctx, "X", ProbePolicy.FIRST_SUCCESS)) == 1
    assert prober.probe(ctx, "X", ProbePolicy.ACCUMULATE) == {"p", "q", "r"}
