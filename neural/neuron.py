"""
neuron_sim module: neural/neuron.py

Point neuron with threshold firing, refractory windows, neurotransmitter
modulated transmission, Hebbian weight change and connection pruning.

Peers are referenced by integer id only; the network resolves them.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Mapping, Optional, Set
import logging
import math

import config
from neural.errors import (
    ConnectionNotFound,
    DuplicateConnection,
    InvalidConnection,
    OutOfRangeParameter,
)
from neural.synapse import Delivery

logger = logging.getLogger(__name__)


class NeuronType(Enum):
    CONTACT = 0
    SENSORY = 1
    MOTOR = 2


class Neurotransmitter(Enum):
    INHIBITORY = 0
    EXCITATORY = 1

    @property
    def sign(self) -> float:
        return 1.0 if self is Neurotransmitter.EXCITATORY else -1.0


class RefractoryState(Enum):
    RESTING = 0
    ABSOLUTE = 1
    RELATIVE = 2


# parameters that reconfigure() may touch
TUNABLE = ("tp", "sw", "sst", "pr", "arp", "rrp", "sw_max", "nc_max")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_non_negative(name: str, value) -> None:
    if not _is_number(value) or not math.isfinite(value) or value < 0:
        raise OutOfRangeParameter(f"{name} must be a finite non-negative number, got {value!r}")


def _is_valid_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass
class Neuron:
    id: int
    x: float
    y: float
    z: float
    ax: float
    ay: float
    az: float
    nt: NeuronType = NeuronType.CONTACT
    nrt: Neurotransmitter = Neurotransmitter.EXCITATORY

    # baseline parameters
    tp: float = config.BASE_THRESHOLD_POTENTIAL
    sw: float = config.BASE_SYNAPTIC_WEIGHT
    sst: float = config.BASE_SYNAPTIC_STRENGTH_THRESHOLD
    pr: float = config.BASE_PLASTICITY_RATE
    arp: float = config.BASE_ABSOLUTE_REFRACTORY_PERIOD
    rrp: float = config.BASE_RELATIVE_REFRACTORY_PERIOD
    sw_max: float = config.MAX_SYNAPTIC_WEIGHT
    nc_max: float = config.BASE_NEUROTRANSMITTER
    strict: bool = config.STRICT_CONNECTIONS

    # dynamic state
    ap: float = field(default=0.0, init=False)
    mp: float = field(default=config.RESTING_POTENTIAL, init=False)
    fr: float = field(default=0.0, init=False)
    nc: float = field(default=0.0, init=False)
    ltp: float = field(default=0.0, init=False)
    ltd: float = field(default=0.0, init=False)
    ac: Set[int] = field(default_factory=set, init=False)
    dc: Set[int] = field(default_factory=set, init=False)
    last_fired: Optional[int] = field(default=None, init=False)
    prev_fired: Optional[int] = field(default=None, init=False)
    last_tick: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if not _is_valid_id(self.id):
            raise OutOfRangeParameter(f"neuron id must be a non-negative int, got {self.id!r}")
        try:
            self.nt = NeuronType(self.nt)
            self.nrt = Neurotransmitter(self.nrt)
        except ValueError as exc:
            raise OutOfRangeParameter(str(exc)) from exc

        for name in ("tp", "sst", "pr", "arp", "rrp", "sw_max", "nc_max"):
            _require_non_negative(name, getattr(self, name))
        if self.tp <= config.RESTING_POTENTIAL:
            # a threshold at or below rest fires with no input at all
            raise OutOfRangeParameter(f"tp {self.tp} must lie above resting potential {config.RESTING_POTENTIAL}")
        _require_non_negative("sw", self.sw)
        if self.sw > self.sw_max:
            raise OutOfRangeParameter(f"sw {self.sw} exceeds ceiling {self.sw_max}")

        self.nc = self.nc_max

    # ---- geometry ----

    @property
    def soma(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @property
    def axon_terminal(self) -> tuple[float, float, float]:
        return (self.ax, self.ay, self.az)

    def distance_to(self, other: "Neuron") -> float:
        """Distance from this neuron's axon terminal to the other's soma."""
        return math.dist(self.axon_terminal, other.soma)

    # ---- configuration ----

    def reconfigure(self, **params) -> None:
        """
        Change baseline parameters in place. Either every value is applied or,
        on OutOfRangeParameter, none is.
        """
        unknown = set(params) - set(TUNABLE)
        if unknown:
            raise OutOfRangeParameter(f"not reconfigurable: {', '.join(sorted(unknown))}")

        candidate = replace(self, **params)  # validates
        for name in params:
            setattr(self, name, getattr(candidate, name))
        self.nc = min(self.nc, self.nc_max)
        logger.debug("neuron %d reconfigured: %s", self.id, params)

    # ---- connection management ----

    def _check_peer(self, peer_id) -> None:
        if not _is_valid_id(peer_id):
            raise InvalidConnection(f"malformed neuron id: {peer_id!r}")
        if peer_id == self.id:
            raise InvalidConnection(f"neuron {self.id} cannot connect to itself")

    def _establish(self, conns: Set[int], peer_id: int, kind: str) -> None:
        self._check_peer(peer_id)
        if peer_id in conns:
            if self.strict:
                raise DuplicateConnection(f"{kind} connection {self.id}<->{peer_id} already exists")
            return
        conns.add(peer_id)

    def _terminate(self, conns: Set[int], peer_id: int, kind: str) -> None:
        self._check_peer(peer_id)
        if peer_id not in conns:
            raise ConnectionNotFound(f"neuron {self.id} has no {kind} connection with {peer_id}")
        conns.remove(peer_id)

    def establish_axonal_connection(self, target_id: int) -> None:
        self._establish(self.ac, target_id, "axonal")

    def establish_dendritic_connection(self, source_id: int) -> None:
        self._establish(self.dc, source_id, "dendritic")

    def terminate_axonal_connection(self, target_id: int) -> None:
        self._terminate(self.ac, target_id, "axonal")

    def terminate_dendritic_connection(self, source_id: int) -> None:
        self._terminate(self.dc, source_id, "dendritic")

    # ---- pruning ----

    @property
    def effective_strength(self) -> float:
        return self.sw * self.nc

    def prune_axonal_connection(self, target_id: int) -> bool:
        if target_id not in self.ac or self.effective_strength >= self.sst:
            return False
        self.ac.remove(target_id)
        logger.debug("neuron %d pruned axon -> %d (strength %.4f)", self.id, target_id, self.effective_strength)
        return True

    def prune_dendritic_connection(self, source_id: int, strength: float) -> bool:
        """``strength`` is the sender's effective strength, supplied by the network."""
        if source_id not in self.dc or strength >= self.sst:
            return False
        self.dc.remove(source_id)
        logger.debug("neuron %d pruned dendrite <- %d (strength %.4f)", self.id, source_id, strength)
        return True

    def prune_axonal_connections(self) -> List[int]:
        return [t for t in sorted(self.ac) if self.prune_axonal_connection(t)]

    def prune_dendritic_connections(self, strengths: Mapping[int, float]) -> List[int]:
        return [s for s in sorted(self.dc) if s in strengths and self.prune_dendritic_connection(s, strengths[s])]

    # ---- detection ----

    def receive(self, amount: float) -> None:
        self.ap = max(config.MIN_ACCUMULATED_POTENTIAL, self.ap + amount)

    def state(self, now: int) -> RefractoryState:
        if self.last_fired is None:
            return RefractoryState.RESTING
        elapsed = now - self.last_fired
        if elapsed < self.arp:
            return RefractoryState.ABSOLUTE
        if elapsed < self.arp + self.rrp:
            return RefractoryState.RELATIVE
        return RefractoryState.RESTING

    def effective_threshold(self, now: int) -> float:
        state = self.state(now)
        if state is RefractoryState.ABSOLUTE:
            return math.inf
        if state is RefractoryState.RELATIVE:
            # linear fall from tp * (1 + scale) back to tp over the window
            remaining = self.last_fired + self.arp + self.rrp - now
            return self.tp * (1.0 + config.RELATIVE_REFRACTORY_SCALE * remaining / self.rrp)
        return self.tp

    def detect(self, now: int) -> bool:
        """
        Derive mp from ap and decide whether the neuron fires at tick ``now``.

        On firing ap is reset to the post-firing floor; otherwise it leaks
        toward rest. The firing rate moves toward 1 on a spike and toward 0
        on every other call.
        """
        if self.last_tick is not None and now < self.last_tick:
            raise OutOfRangeParameter(f"tick went backwards: {now} < {self.last_tick}")
        self.last_tick = now

        self.mp = config.RESTING_POTENTIAL + self.ap
        fired = self.mp >= self.effective_threshold(now)

        if fired:
            self.prev_fired = self.last_fired
            self.last_fired = now
            self.ap = config.POST_FIRING_POTENTIAL
            logger.debug("neuron %d fired at tick %d (mp %.3f)", self.id, now, self.mp)
        else:
            self.ap *= 1.0 - config.LEAK_RATE

        spike = 1.0 if fired else 0.0
        self.fr += config.FIRING_RATE_SMOOTHING * (spike - self.fr)
        return fired

    # ---- transmission ----

    def transmit(
        self,
        target_id: int,
        now: int,
        target_last_fired: Optional[int] = None,
        signal: float = config.BASE_SIGNAL,
        delay: int = 0,
    ) -> Delivery:
        """
        Produce the signed delivery for one outgoing connection after this
        neuron fired at ``now``. Depletes nc and updates the LTP/LTD pressure
        from the receiver's last firing tick.
        """
        if target_id not in self.ac:
            raise ConnectionNotFound(f"neuron {self.id} has no axonal connection to {target_id}")
        if not isinstance(delay, int) or delay < 0:
            raise OutOfRangeParameter(f"delay must be a non-negative int, got {delay!r}")

        amount = signal * self.sw * self.nc * self.nrt.sign
        self.nc = _clamp(self.nc - self.nc * config.NEUROTRANSMITTER_DEPLETION, 0.0, self.nc_max)
        self._pair(target_last_fired)
        return Delivery(
            source=self.id,
            target=target_id,
            amount=amount,
            nc=self.nc,
            tick=now,
            arrival=now + delay,
        )

    def _pair(self, target_last_fired: Optional[int]) -> None:
        # pairs the previous presynaptic spike with the receiver's latest spike
        if self.prev_fired is None:
            return
        window_end = self.prev_fired + config.PLASTICITY_WINDOW
        if target_last_fired is not None and self.prev_fired < target_last_fired <= window_end:
            self.ltp = min(config.MAX_PLASTICITY_PRESSURE, self.ltp + config.LTP_INCREMENT)
        else:
            self.ltd = min(config.MAX_PLASTICITY_PRESSURE, self.ltd + config.LTD_INCREMENT)

    def recover(self) -> None:
        self.nc = _clamp(self.nc + (self.nc_max - self.nc) * config.NEUROTRANSMITTER_RECOVERY, 0.0, self.nc_max)

    def fold_plasticity(self) -> float:
        self.sw = _clamp(self.sw + self.pr * (self.ltp - self.ltd), 0.0, self.sw_max)
        keep = 1.0 - config.PLASTICITY_DECAY
        self.ltp *= keep
        self.ltd *= keep
        return self.sw
