from __future__ import annotations

from pathlib import Path
from random import Random

import pytest
from topolab.config import TopologyConfig
from topolab.errors import CrossoverUnavailableError
from topolab.reporters import EventLogger
from topolab.reproduction import (
    CrossoverReproduction,
    DivisionReproduction,
    RandomlyMutable,
    create_random,
    crossover_child,
    generate_population,
    spawn_child,
)
from topolab.topology import MutationPolicy, NeuralNetworkTopology


def _config(**overrides: object) -> TopologyConfig:
    values: dict[str, object] = {
        "num_inputs": 2,
        "num_outputs": 4,
        "mutation_rate": 0.5,
        "mutation_passes": 3,
        "seed": 7,
    }
    values.update(overrides)
    return TopologyConfig(**values)  # type: ignore[arg-type]


def test_create_random_uses_config() -> None:
    config = _config(sensor_sources=True, max_attempts=4)
    topology = create_random(config, Random(0))

    assert topology.num_inputs == 2
    assert topology.num_outputs == 4
    assert topology.mutation_rate == pytest.approx(0.5)
    assert topology.mutation_passes == 3
    assert topology.policy == MutationPolicy(sensor_sources=True, max_attempts=4)
    assert topology.hidden_layer == []


def test_generate_population_is_seeded_by_config() -> None:
    config = _config()
    first = generate_population(config, 5)
    second = generate_population(config, 5)

    assert len(first) == 5
    assert first == second
    assert all(isinstance(genome, NeuralNetworkTopology) for genome in first)


def test_generate_population_rejects_empty_size() -> None:
    with pytest.raises(ValueError):
        generate_population(_config(), 0, Random(0))


def test_spawn_child_logs_mutation(tmp_path: Path) -> None:
    parent = create_random(_config(mutation_rate=1.0, mutation_passes=1), Random(1))
    log_path = tmp_path / "logs" / "lineage.log"

    with EventLogger(log_path) as logger:
        child = spawn_child(parent, Random(2), logger=logger)

    assert len(child.hidden_layer) == 1
    assert parent.hidden_layer == []
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert "Spawned child: splits=1" in lines[0]
    assert "hidden=1" in lines[0]


def test_spawn_child_without_logger_matches_method() -> None:
    parent = create_random(_config(), Random(3))
    assert spawn_child(parent, Random(4)) == parent.spawn_child(Random(4))


def test_crossover_child_is_unavailable() -> None:
    parent_a = create_random(_config(), Random(5))
    parent_b = create_random(_config(), Random(6))
    with pytest.raises(CrossoverUnavailableError):
        crossover_child(parent_a, parent_b, Random(7))


def test_topology_satisfies_reproduction_protocols() -> None:
    topology = create_random(_config(), Random(8))
    assert isinstance(topology, RandomlyMutable)
    assert isinstance(topology, DivisionReproduction)
    assert isinstance(topology, CrossoverReproduction)
