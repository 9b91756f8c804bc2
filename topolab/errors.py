"""Exception taxonomy for structural invariant violations."""

from __future__ import annotations


class TopologyError(ValueError):
    """Raised when a topology breaks one of its structural invariants."""


class CycleError(TopologyError):
    """Raised when the connection graph contains a cycle."""


class DanglingLocationError(TopologyError):
    """Raised when a neuron input refers to a neuron that does not exist."""


class SensorInputError(TopologyError):
    """Raised when an input-layer neuron has acquired inputs."""


class InvalidLocationError(TopologyError, IndexError):
    """Raised when a location cannot be resolved inside a topology."""


class CrossoverUnavailableError(NotImplementedError):
    """Raised when two-parent reproduction is requested."""


__all__ = [
    "CrossoverUnavailableError",
    "CycleError",
    "DanglingLocationError",
    "InvalidLocationError",
    "SensorInputError",
    "TopologyError",
]
