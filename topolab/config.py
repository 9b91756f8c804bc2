"""Configuration loading utilities for topology genomes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .topology import MutationPolicy


@dataclass(frozen=True, slots=True)
class TopologyConfig:
    """Shape and mutation settings shared by every genome of a run."""

    num_inputs: int
    num_outputs: int
    mutation_rate: float = 0.01
    mutation_passes: int = 3
    distinct_sources: bool = True
    sensor_sources: bool = False
    signed_perturbation: bool = False
    max_attempts: int = 32
    seed: int | None = None

    def __post_init__(self) -> None:
        for label, value in (
            ("num_inputs", self.num_inputs),
            ("num_outputs", self.num_outputs),
        ):
            if value <= 0:
                msg = f"{label} must be positive."
                raise ValueError(msg)
        if not 0.0 <= self.mutation_rate <= 1.0:
            msg = "mutation_rate must be in [0, 1]."
            raise ValueError(msg)
        if self.mutation_passes < 0:
            msg = "mutation_passes must be >= 0."
            raise ValueError(msg)
        if self.max_attempts <= 0:
            msg = "max_attempts must be positive."
            raise ValueError(msg)

    def mutation_policy(self) -> MutationPolicy:
        return MutationPolicy(
            sensor_sources=self.sensor_sources,
            signed_perturbation=self.signed_perturbation,
            max_attempts=self.max_attempts,
        )


def _load_yaml(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        msg = f"Expected mapping in YAML file: {path}"
        raise ValueError(msg)
    return data


def load_topology_config(path: Path) -> TopologyConfig:
    data = _load_yaml(Path(path))
    try:
        num_inputs = int(data["num_inputs"])
        num_outputs = int(data["num_outputs"])
    except KeyError as error:
        msg = f"Topology config is missing required key: {error.args[0]}"
        raise ValueError(msg) from error
    return TopologyConfig(
        num_inputs=num_inputs,
        num_outputs=num_outputs,
        mutation_rate=float(data.get("mutation_rate", 0.01)),
        mutation_passes=int(data.get("mutation_passes", 3)),
        distinct_sources=bool(data.get("distinct_sources", True)),
        sensor_sources=bool(data.get("sensor_sources", False)),
        signed_perturbation=bool(data.get("signed_perturbation", False)),
        max_attempts=int(data.get("max_attempts", 32)),
        seed=(int(data["seed"]) if data.get("seed") is not None else None),
    )


__all__ = ["TopologyConfig", "load_topology_config"]
