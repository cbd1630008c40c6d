"""
neuron_sim module: neural/errors.py

Errors raised by neuron and network operations. A failing call leaves the
neuron's state untouched.
"""

from __future__ import annotations


class NeuronError(Exception):
    pass


class InvalidConnection(NeuronError, ValueError):
    """Self-loop or malformed identifier."""


class ConnectionNotFound(NeuronError, LookupError):
    """Terminate (or transmit) on an edge that is not recorded."""


class DuplicateConnection(NeuronError):
    """Establish on an existing edge while the strict policy is on."""


class OutOfRangeParameter(NeuronError, ValueError):
    """Negative, NaN or otherwise unusable parameter."""
