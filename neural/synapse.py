"""
neuron_sim module: neural/synapse.py

Signed delivery along a directed connection, produced by the sender and
applied to the receiver by the network.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Delivery:
    source: int
    target: int
    amount: float
    nc: float     # sender's neurotransmitter concentration after depletion
    tick: int     # tick the sender fired
    arrival: int  # tick the amount lands in the target's ap
