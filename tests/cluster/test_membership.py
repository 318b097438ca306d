import threading

from scyllanode.cluster.membership import MembershipTracker


def test_bootstrapping_mark_and_clear():
    m = MembershipTracker()
    assert m.mark_bootstrapping("b") is True
    assert m.mark_bootstrapping("b") is False
    assert m.is_bootstrapping("b")
    assert m.bootstrapping() == frozenset({"b"})

    assert m.clear_bootstrapping("b") is True
    assert m.clear_bootstrapping("b") is False
    assert not m.is_bootstrapping("b")


def test_decommissioning_is_keyed_by_address():
    m = MembershipTracker()
    assert m.decommissioned_address_of("b") is None

    m.mark_decommissioning("b", "10.0.0.2")
    assert m.decommissioned_address_of("b") == "10.0.0.2"
    assert m.decommissioned_addresses() == frozenset({"10.0.0.2"})
    # same address twice is rejected
    assert m.mark_decommissioning("b", "10.0.0.2") is False

    assert m.clear_decommissioning("b") is True
    assert m.decommissioned_address_of("b") is None
    assert m.clear_decommissioning("b") is False


def test_snapshot_is_detached_from_later_writes():
    m = MembershipTracker()
    m.mark_bootstrapping("a")
    m.mark_decommissioning("c", "10.0.0.3")
    snap = m.snapshot()

    m.clear_bootstrapping("a")
    m.clear_decommissioning("c")

    assert snap.is_bootstrapping("a")
    assert snap.is_decommissioned("10.0.0.3")
    assert snap.decommissioned_addresses == frozenset({"10.0.0.3"})


def test_concurrent_marks_are_not_lost():
    m = MembershipTracker()
    nodes = [f"n{i}" for i in range(200)]
    barrier = threading.Barrier(8)

    def worker(chunk):
        barrier.wait()
        for n in chunk:
            m.mark_bootstrapping(n)
            m.mark_decommissioning(n, "addr-" + n)

    threads = [threading.Thread(target=worker, args=(nodes[i::8],)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    snap = m.snapshot()
    assert snap.bootstrapping == frozenset(nodes)
    assert len(snap.decommissioning) == len(nodes)
