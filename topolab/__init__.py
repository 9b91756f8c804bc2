"""Evolvable neural network topologies for NEAT-style neuroevolution."""

from __future__ import annotations

from .config import TopologyConfig, load_topology_config
from .errors import (
    CrossoverUnavailableError,
    CycleError,
    DanglingLocationError,
    InvalidLocationError,
    SensorInputError,
    TopologyError,
)
from .locations import Layer, NeuronLocation
from .neurons import NeuronHandle, NeuronTopology, ReadWriteLock
from .reporters import EventLogger
from .reproduction import (
    CrossoverReproduction,
    DivisionReproduction,
    RandomlyMutable,
    create_random,
    crossover_child,
    generate_population,
    spawn_child,
)
from .topology import (
    MutationPolicy,
    MutationStats,
    NeuralNetworkTopology,
    TopologySnapshot,
    TopologyStats,
)

__all__ = [
    "Layer",
    "NeuronLocation",
    "NeuronTopology",
    "NeuronHandle",
    "ReadWriteLock",
    "NeuralNetworkTopology",
    "MutationPolicy",
    "MutationStats",
    "TopologySnapshot",
    "TopologyStats",
    "TopologyConfig",
    "load_topology_config",
    "EventLogger",
    "RandomlyMutable",
    "DivisionReproduction",
    "CrossoverReproduction",
    "create_random",
    "generate_population",
    "spawn_child",
    "crossover_child",
    "TopologyError",
    "CycleError",
    "DanglingLocationError",
    "InvalidLocationError",
    "SensorInputError",
    "CrossoverUnavailableError",
]
