import random

import pytest

from neural.errors import OutOfRangeParameter
from neural.neuron import Neuron, Neurotransmitter, RefractoryState


def make_neuron(**params):
    return Neuron(0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, **params)


def test_refractory_scenario():
    a = make_neuron(nrt=Neurotransmitter.EXCITATORY, sw=1.0, tp=1.0, arp=2, rrp=2)
    a.establish_axonal_connection(1)

    a.receive(1.2)
    assert a.detect(0) is True
    assert a.mp == pytest.approx(1.2)
    assert a.last_fired == 0
    assert a.ap == 0.0

    # absolute refractory: no firing regardless of mp
    a.receive(5.0)
    assert a.detect(1) is False
    assert a.mp >= a.tp

    a.receive(1.2)
    assert a.detect(4) is True
    assert a.last_fired == 4


def test_state_machine_transitions():
    n = make_neuron(arp=2, rrp=2)
    assert n.state(0) is RefractoryState.RESTING
    n.receive(10.0)
    assert n.detect(0)
    assert [n.state(t) for t in range(6)] == [
        RefractoryState.ABSOLUTE,
        RefractoryState.ABSOLUTE,
        RefractoryState.RELATIVE,
        RefractoryState.RELATIVE,
        RefractoryState.RESTING,
        RefractoryState.RESTING,
    ]


def test_relative_window_raises_threshold_then_relaxes():
    n = make_neuron(tp=1.0, arp=2, rrp=2)
    n.receive(10.0)
    n.detect(0)
    assert n.effective_threshold(1) == float("inf")
    assert n.effective_threshold(2) == pytest.approx(2.0)
    assert n.effective_threshold(3) == pytest.approx(1.5)
    assert n.effective_threshold(4) == pytest.approx(1.0)


def test_relative_window_makes_firing_harder_not_impossible():
    n = make_neuron(tp=1.0, arp=2, rrp=2)
    n.receive(10.0)
    n.detect(0)
    n.receive(1.6)
    assert n.detect(2) is False

    m = make_neuron(tp=1.0, arp=2, rrp=2)
    m.receive(10.0)
    m.detect(0)
    m.receive(2.5)
    assert m.detect(2) is True


def test_refiring_in_relative_window_restarts_cycle():
    n = make_neuron(tp=1.0, arp=2, rrp=2)
    n.receive(10.0)
    n.detect(0)
    n.receive(10.0)
    assert n.detect(3)
    assert n.prev_fired == 0
    assert n.state(4) is RefractoryState.ABSOLUTE


@pytest.mark.parametrize("seed", range(5))
def test_never_fires_inside_absolute_window(seed):
    rng = random.Random(seed)
    n = make_neuron(tp=1.0, arp=rng.randint(1, 4), rrp=rng.randint(0, 3))
    last = None
    t = 0
    for _ in range(200):
        t += rng.randint(0, 2)
        n.receive(rng.uniform(-1.0, 3.0))
        fired = n.detect(t)
        if fired:
            if last is not None:
                assert t - last >= n.arp
            last = t


def test_potential_leaks_without_input():
    n = make_neuron(tp=1.0)
    n.receive(0.9)
    mps = []
    for t in range(10):
        assert n.detect(t) is False
        mps.append(n.mp)
    assert all(b < a for a, b in zip(mps, mps[1:]))
    assert mps[-1] < 0.2


def test_leftover_potential_stops_firing_after_refractory_period():
    n = make_neuron(tp=1.0, arp=3, rrp=0)
    n.receive(1.0)
    assert n.detect(0)
    n.receive(1.0)
    fired = [n.detect(t) for t in range(1, 10)]
    assert not any(fired)


def test_negative_input_is_clamped():
    n = make_neuron()
    n.receive(-1000.0)
    assert n.ap >= -10.0


def test_firing_rate_follows_spikes():
    n = make_neuron(tp=1.0, arp=0, rrp=0)
    n.receive(2.0)
    n.detect(0)
    after_spike = n.fr
    assert after_spike > 0.0
    n.detect(1)
    assert 0.0 < n.fr < after_spike


def test_tick_must_not_go_backwards():
    n = make_neuron()
    n.detect(5)
    n.detect(5)
    with pytest.raises(OutOfRangeParameter):
        n.detect(4)


def test_quiet_neuron_with_smallest_threshold_stays_silent():
    n = make_neuron(tp=1e-6, arp=1, rrp=0)
    assert [n.detect(t) for t in range(10)] == [False] * 10
