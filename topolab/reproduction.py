"""Call sites the outer evolutionary loop uses to create and reproduce genomes."""

from __future__ import annotations

from random import Random
from typing import Protocol, runtime_checkable

from .config import TopologyConfig
from .reporters import EventLogger
from .topology import MutationStats, NeuralNetworkTopology


@runtime_checkable
class RandomlyMutable(Protocol):
    """Genome that can mutate itself in place."""

    def mutate(self, rate: float, rng: Random) -> MutationStats: ...


@runtime_checkable
class DivisionReproduction(Protocol):
    """Genome that produces a child from a single parent."""

    def spawn_child(self, rng: Random) -> DivisionReproduction: ...


@runtime_checkable
class CrossoverReproduction(Protocol):
    """Genome that produces a child from two parents."""

    def crossover(
        self,
        other: CrossoverReproduction,
        rng: Random,
    ) -> CrossoverReproduction: ...


def create_random(config: TopologyConfig, rng: Random) -> NeuralNetworkTopology:
    """Build a fresh random genome from the run configuration."""
    return NeuralNetworkTopology.new(
        config.num_inputs,
        config.num_outputs,
        config.mutation_rate,
        config.mutation_passes,
        rng,
        distinct_sources=config.distinct_sources,
        policy=config.mutation_policy(),
    )


def generate_population(
    config: TopologyConfig,
    size: int,
    rng: Random | None = None,
) -> list[NeuralNetworkTopology]:
    """Seed ``size`` random genomes.

    When no generator is supplied one is created from ``config.seed``.
    """
    if size <= 0:
        msg = "size must be positive."
        raise ValueError(msg)
    if rng is None:
        rng = Random(config.seed)
    return [create_random(config, rng) for _ in range(size)]


def spawn_child(
    parent: NeuralNetworkTopology,
    rng: Random,
    *,
    logger: EventLogger | None = None,
) -> NeuralNetworkTopology:
    """Clone ``parent`` and mutate the clone with the parent's settings."""
    child = parent.spawn_child(rng)
    if logger is not None:
        logger.log_mutation("Spawned child", child.last_mutation, child.stats())
    return child


def crossover_child(
    parent_a: NeuralNetworkTopology,
    parent_b: NeuralNetworkTopology,
    rng: Random,
) -> NeuralNetworkTopology:
    """Produce a child from two parents.

    Raises:
        CrossoverUnavailableError: Always; topologies only reproduce by
            division.
    """
    return parent_a.crossover(parent_b, rng)


__all__ = [
    "CrossoverReproduction",
    "DivisionReproduction",
    "RandomlyMutable",
    "create_random",
    "crossover_child",
    "generate_population",
    "spawn_child",
]
