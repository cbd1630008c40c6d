"""
neuron_sim module: neural/network.py

Registry and tick driver for a population of neurons:
- neurons are owned here and referenced everywhere else by id
- connections are mirrored (src.ac <-> dst.dc) inside one transaction
- each tick runs detect -> transmit -> plasticity/pruning
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import copy
import logging
import random
import threading

import config
from neural.errors import NeuronError
from neural.neuron import Neuron, NeuronType, Neurotransmitter
from neural.synapse import Delivery

logger = logging.getLogger(__name__)

Position = Tuple[float, float, float]


@dataclass
class Network:
    neurons: Dict[int, Neuron] = field(default_factory=dict)
    next_neuron_id: int = 0

    strict: bool = config.STRICT_CONNECTIONS
    delay_per_unit: float = config.SIGNAL_DELAY_PER_UNIT
    prune_interval: int = config.PRUNE_INTERVAL

    # arrival tick -> deliveries waiting to land
    pending: Dict[int, List[Delivery]] = field(default_factory=dict)

    # bookkeeping for the HUD / callers
    last_fired: List[int] = field(default_factory=list)
    pruned_total: int = 0

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def clone(self) -> "Network":
        with self._lock:
            return Network(
                neurons=copy.deepcopy(self.neurons),
                next_neuron_id=self.next_neuron_id,
                strict=self.strict,
                delay_per_unit=self.delay_per_unit,
                prune_interval=self.prune_interval,
                pending=copy.deepcopy(self.pending),
                last_fired=list(self.last_fired),
                pruned_total=self.pruned_total,
            )

    def get(self, nid: int) -> Neuron:
        n = self.neurons.get(nid)
        if n is None:
            raise KeyError(f"Neuron {nid} not found")
        return n

    # ---- population ----

    def add_neuron(
        self,
        soma: Position,
        axon_terminal: Optional[Position] = None,
        nt: NeuronType = NeuronType.CONTACT,
        nrt: Neurotransmitter = Neurotransmitter.EXCITATORY,
        **params,
    ) -> int:
        if axon_terminal is None:
            axon_terminal = soma
        with self._lock:
            nid = self.next_neuron_id
            x, y, z = soma
            ax, ay, az = axon_terminal
            n = Neuron(id=nid, x=x, y=y, z=z, ax=ax, ay=ay, az=az, nt=nt, nrt=nrt, strict=self.strict, **params)
            self.neurons[nid] = n
            self.next_neuron_id += 1
            return nid

    def remove_neuron(self, nid: int) -> None:
        with self._lock:
            n = self.get(nid)
            for target in n.ac:
                peer = self.neurons.get(target)
                if peer is not None:
                    peer.dc.discard(nid)
            for source in n.dc:
                peer = self.neurons.get(source)
                if peer is not None:
                    peer.ac.discard(nid)
            for arrival, deliveries in self.pending.items():
                self.pending[arrival] = [d for d in deliveries if nid not in (d.source, d.target)]
            del self.neurons[nid]
            logger.info("removed neuron %d (%d out, %d in)", nid, len(n.ac), len(n.dc))

    # ---- connections ----

    def connect(self, src: int, dst: int) -> None:
        with self._lock:
            a = self.get(src)
            b = self.get(dst)
            had = dst in a.ac
            a.establish_axonal_connection(dst)
            try:
                b.establish_dendritic_connection(src)
            except NeuronError:
                if not had:
                    a.ac.discard(dst)
                raise
            logger.debug("connected %d -> %d", src, dst)

    def disconnect(self, src: int, dst: int) -> None:
        with self._lock:
            a = self.get(src)
            b = self.get(dst)
            a.terminate_axonal_connection(dst)
            try:
                b.terminate_dendritic_connection(src)
            except NeuronError:
                a.ac.add(dst)
                raise
            logger.debug("disconnected %d -> %d", src, dst)

    def connection_count(self) -> int:
        with self._lock:
            return sum(len(n.ac) for n in self.neurons.values())

    def delay_between(self, src: int, dst: int) -> int:
        if self.delay_per_unit <= 0.0:
            return 0
        return int(round(self.get(src).distance_to(self.get(dst)) * self.delay_per_unit))

    # ---- io ----

    def stimulate(self, nid: int, amount: float) -> None:
        with self._lock:
            n = self.get(nid)
            if n.nt != NeuronType.SENSORY:
                raise ValueError(f"Neuron {nid} is not sensory")
            n.receive(amount)

    def sensory_ids(self) -> List[int]:
        with self._lock:
            return [nid for nid, n in self.neurons.items() if n.nt == NeuronType.SENSORY]

    def motor_outputs(self) -> Dict[int, float]:
        """
        Returns: {motor_neuron_id: firing rate in [0, 1]}
        """
        with self._lock:
            return {nid: n.fr for nid, n in self.neurons.items() if n.nt == NeuronType.MOTOR}

    # ---- simulation ----

    def step(self, now: int) -> List[int]:
        with self._lock:
            # (a) detect against each neuron's own state
            fired = [nid for nid, n in sorted(self.neurons.items()) if n.detect(now)]

            # (b) transmit; deliveries are collected first and committed after the sweep
            for nid in fired:
                n = self.neurons[nid]
                for target in sorted(n.ac):
                    peer = self.get(target)
                    d = n.transmit(
                        target,
                        now,
                        target_last_fired=peer.last_fired,
                        delay=self.delay_between(nid, target),
                    )
                    self.pending.setdefault(d.arrival, []).append(d)
            self._commit(now)

            # (c) plasticity, recovery, pruning
            for n in self.neurons.values():
                n.fold_plasticity()
                n.recover()
            if self.prune_interval > 0 and now % self.prune_interval == 0:
                self.prune()

            self.last_fired = fired
            return fired

    def _commit(self, now: int) -> None:
        due = sorted(t for t in self.pending if t <= now)
        for t in due:
            for d in self.pending.pop(t):
                target = self.neurons.get(d.target)
                if target is not None:
                    target.receive(d.amount)

    def prune(self) -> int:
        """
        Sweep every neuron's axonal and dendritic sets, mirroring each removal
        on the peer. Returns the number of edges removed.
        """
        with self._lock:
            strengths = {nid: n.effective_strength for nid, n in self.neurons.items()}
            removed = 0
            for nid, n in sorted(self.neurons.items()):
                for target in n.prune_axonal_connections():
                    self.neurons[target].dc.discard(nid)
                    removed += 1
            for nid, n in sorted(self.neurons.items()):
                for source in n.prune_dendritic_connections(strengths):
                    self.neurons[source].ac.discard(nid)
                    removed += 1
            if removed:
                logger.debug("pruned %d connection(s)", removed)
            self.pruned_total += removed
            return removed

    # ---- helpers to build a starter network ----

    @staticmethod
    def build_random(
        count: int = config.NEURON_COUNT,
        bounds: Tuple[float, float, float] = (config.SCREEN_W, config.SCREEN_H, config.WORLD_DEPTH),
        connection_probability: float = config.CONNECTION_PROBABILITY,
        seed: int | None = None,
    ) -> "Network":
        """
        Random population:
          - first SENSORY_FRACTION of neurons are sensory, last MOTOR_FRACTION motor
          - INHIBITORY_FRACTION of the rest use an inhibitory transmitter
          - each ordered pair is wired with ``connection_probability``
        """
        rng = random.Random(seed)
        net = Network()
        w, h, d = bounds
        margin = 40.0

        n_sensory = int(count * config.SENSORY_FRACTION)
        n_motor = int(count * config.MOTOR_FRACTION)
        for i in range(count):
            if i < n_sensory:
                nt = NeuronType.SENSORY
            elif i >= count - n_motor:
                nt = NeuronType.MOTOR
            else:
                nt = NeuronType.CONTACT
            inhibitory = nt == NeuronType.CONTACT and rng.random() < config.INHIBITORY_FRACTION
            nrt = Neurotransmitter.INHIBITORY if inhibitory else Neurotransmitter.EXCITATORY

            # sensory on the left, motor on the right
            if nt == NeuronType.SENSORY:
                x = rng.uniform(margin, w * 0.2)
            elif nt == NeuronType.MOTOR:
                x = rng.uniform(w * 0.8, w - margin)
            else:
                x = rng.uniform(w * 0.2, w * 0.8)
            y = rng.uniform(margin, h - margin)
            z = rng.uniform(0.0, d)
            soma = (x, y, z)
            axon = (x + rng.uniform(8.0, 24.0), y + rng.uniform(-12.0, 12.0), z)
            net.add_neuron(soma, axon, nt=nt, nrt=nrt, sw=rng.uniform(0.3, 0.9))

        ids = sorted(net.neurons)
        for src in ids:
            if net.neurons[src].nt == NeuronType.MOTOR:
                continue
            for dst in ids:
                if src == dst or net.neurons[dst].nt == NeuronType.SENSORY:
                    continue
                if rng.random() < connection_probability:
                    net.connect(src, dst)

        logger.info("built network: %d neurons, %d connections", len(net.neurons), net.connection_count())
        return net
