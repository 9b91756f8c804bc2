"""Neural network topology genome and its randomized mutation engine."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from random import Random
from typing import Any

from .errors import (
    CrossoverUnavailableError,
    CycleError,
    DanglingLocationError,
    InvalidLocationError,
    SensorInputError,
)
from .locations import Layer, NeuronLocation
from .neurons import NeuronHandle, NeuronTopology

_LAYER_ORDER = {Layer.INPUT: 0, Layer.HIDDEN: 1, Layer.OUTPUT: 2}


def _location_key(location: NeuronLocation) -> tuple[int, int]:
    return _LAYER_ORDER[location.layer], location.index


@dataclass(frozen=True, slots=True)
class MutationPolicy:
    """Behavioural switches for the mutation operators.

    Attributes:
        sensor_sources: Let add-connection pick any neuron, sensors included,
            as the source of the new edge. When false only neurons that
            already have inputs are eligible.
        signed_perturbation: Draw weight perturbations from [-1, 1) instead
            of [0, 1) before scaling by the mutation rate.
        max_attempts: Number of sources add-connection tries before giving up
            when no acyclic destination exists for them.
    """

    sensor_sources: bool = False
    signed_perturbation: bool = False
    max_attempts: int = 32

    def __post_init__(self) -> None:
        if self.max_attempts <= 0:
            msg = "max_attempts must be positive."
            raise ValueError(msg)


@dataclass(slots=True)
class MutationStats:
    """Counters for the operators that fired during a mutation call."""

    splits: int = 0
    connections_added: int = 0
    weights_perturbed: int = 0

    def accumulate(self, other: MutationStats) -> None:
        """Add another set of counters to these totals."""
        self.splits += other.splits
        self.connections_added += other.connections_added
        self.weights_perturbed += other.weights_perturbed

    @property
    def total(self) -> int:
        return self.splits + self.connections_added + self.weights_perturbed


@dataclass(frozen=True, slots=True)
class TopologyStats:
    """Size summary of a topology."""

    input_count: int
    hidden_count: int
    output_count: int
    connection_count: int


@dataclass(frozen=True, slots=True)
class TopologySnapshot:
    """Immutable copy of every neuron plus the mutation settings."""

    input_layer: tuple[NeuronTopology, ...]
    hidden_layer: tuple[NeuronTopology, ...]
    output_layer: tuple[NeuronTopology, ...]
    mutation_rate: float
    mutation_passes: int


def _validate_rate(rate: float, *, label: str = "mutation_rate") -> float:
    rate = float(rate)
    if not 0.0 <= rate <= 1.0:
        msg = f"{label} must be in [0, 1]."
        raise ValueError(msg)
    return rate


class NeuralNetworkTopology:
    """Evolvable DAG of neurons addressed by ``NeuronLocation``.

    The input and output layers have a fixed size. The hidden layer only ever
    grows, so every location handed out stays valid for the lifetime of the
    genome and of all of its clones.
    """

    def __init__(
        self,
        input_layer: Sequence[NeuronHandle],
        hidden_layer: Sequence[NeuronHandle],
        output_layer: Sequence[NeuronHandle],
        mutation_rate: float,
        mutation_passes: int,
        *,
        policy: MutationPolicy | None = None,
    ) -> None:
        if not input_layer:
            msg = "Topology must contain at least one input neuron."
            raise ValueError(msg)
        if not output_layer:
            msg = "Topology must contain at least one output neuron."
            raise ValueError(msg)
        if mutation_passes < 0:
            msg = "mutation_passes must be >= 0."
            raise ValueError(msg)

        self.input_layer: tuple[NeuronHandle, ...] = tuple(input_layer)
        self.hidden_layer: list[NeuronHandle] = list(hidden_layer)
        self.output_layer: tuple[NeuronHandle, ...] = tuple(output_layer)
        self.mutation_rate = _validate_rate(mutation_rate)
        self.mutation_passes = int(mutation_passes)
        self.policy = policy or MutationPolicy()
        self.last_mutation = MutationStats()
        self.validate()

    @classmethod
    def new(
        cls,
        num_inputs: int,
        num_outputs: int,
        mutation_rate: float,
        mutation_passes: int,
        rng: Random,
        *,
        distinct_sources: bool = True,
        policy: MutationPolicy | None = None,
    ) -> NeuralNetworkTopology:
        """Build a random topology wiring every output to the input layer.

        Each output neuron receives between 1 and ``num_inputs`` input-layer
        sources. With ``distinct_sources`` the sources are sampled without
        replacement; otherwise the same sensor may feed an output twice.
        """
        if num_inputs <= 0:
            msg = "num_inputs must be positive."
            raise ValueError(msg)
        if num_outputs <= 0:
            msg = "num_outputs must be positive."
            raise ValueError(msg)

        input_layer = [
            NeuronHandle(NeuronTopology.new((), rng)) for _ in range(num_inputs)
        ]

        output_layer: list[NeuronHandle] = []
        for _ in range(num_outputs):
            count = rng.randint(1, num_inputs)
            if distinct_sources:
                indices = rng.sample(range(num_inputs), count)
            else:
                indices = [rng.randrange(num_inputs) for _ in range(count)]
            sources = [NeuronLocation.input(index) for index in indices]
            output_layer.append(NeuronHandle(NeuronTopology.new(sources, rng)))

        return cls(
            input_layer,
            [],
            output_layer,
            mutation_rate,
            mutation_passes,
            policy=policy,
        )

    @classmethod
    def from_neurons(
        cls,
        inputs: Sequence[NeuronTopology],
        hidden: Sequence[NeuronTopology],
        outputs: Sequence[NeuronTopology],
        mutation_rate: float,
        mutation_passes: int,
        *,
        policy: MutationPolicy | None = None,
    ) -> NeuralNetworkTopology:
        """Wrap plain neuron values in fresh handles and build a topology."""
        return cls(
            [NeuronHandle(neuron.copy()) for neuron in inputs],
            [NeuronHandle(neuron.copy()) for neuron in hidden],
            [NeuronHandle(neuron.copy()) for neuron in outputs],
            mutation_rate,
            mutation_passes,
            policy=policy,
        )

    @property
    def num_inputs(self) -> int:
        return len(self.input_layer)

    @property
    def num_outputs(self) -> int:
        return len(self.output_layer)

    def get_neuron(self, location: NeuronLocation) -> NeuronHandle:
        """Resolve a location to the handle of the neuron it points to."""
        layer = self._layer(location.layer)
        try:
            return layer[location.index]
        except IndexError as error:
            msg = f"{location} is out of range for a layer of size {len(layer)}."
            raise InvalidLocationError(msg) from error

    def rand_neuron(self, rng: Random) -> tuple[NeuronHandle, NeuronLocation]:
        """Pick a random neuron, choosing each layer with probability 1/3."""
        while True:
            choice = rng.randrange(3)
            if choice == 0:
                index = rng.randrange(len(self.input_layer))
                return self.input_layer[index], NeuronLocation.input(index)
            if choice == 1:
                if not self.hidden_layer:
                    continue
                index = rng.randrange(len(self.hidden_layer))
                return self.hidden_layer[index], NeuronLocation.hidden(index)
            index = rng.randrange(len(self.output_layer))
            return self.output_layer[index], NeuronLocation.output(index)

    def is_connection_cyclic(
        self,
        source: NeuronLocation,
        destination: NeuronLocation,
    ) -> bool:
        """Return whether an edge ``source -> destination`` would close a loop.

        That is the case when both are the same neuron or when ``source``
        already depends, directly or transitively, on ``destination``.
        """
        if source == destination:
            return True
        stack = [source]
        visited: set[NeuronLocation] = set()
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            with self.get_neuron(current).read() as neuron:
                for location, _weight in neuron.inputs:
                    if location == destination:
                        return True
                    if location not in visited:
                        stack.append(location)
        return False

    def mutate(self, rate: float, rng: Random) -> MutationStats:
        """Run ``mutation_passes`` rounds of the three mutation operators.

        Every round attempts split-connection, add-connection and
        perturb-weight in that order, each gated by its own ``rate`` draw.
        """
        rate = _validate_rate(rate, label="rate")
        stats = MutationStats()
        for _ in range(self.mutation_passes):
            if rng.random() < rate and self.split_connection(rng) is not None:
                stats.splits += 1
            if rng.random() < rate and self.add_connection(rng) is not None:
                stats.connections_added += 1
            if rng.random() < rate and self.perturb_weight(rate, rng) is not None:
                stats.weights_perturbed += 1
        self.last_mutation = stats
        return stats

    def split_connection(self, rng: Random) -> NeuronLocation | None:
        """Insert a new hidden neuron in the middle of a random connection.

        ``source -> consumer (w)`` becomes ``source -> hidden (w')`` and
        ``hidden -> consumer (w)``. Returns the new hidden location.
        """
        picked = self._rand_neuron_with_inputs(rng)
        if picked is None:
            return None
        handle, _location = picked

        with handle.write() as neuron:
            position = rng.randrange(len(neuron.inputs))
            source, weight = neuron.inputs.pop(position)
            new_location = NeuronLocation.hidden(len(self.hidden_layer))
            self.hidden_layer.append(NeuronHandle(NeuronTopology.new([source], rng)))
            neuron.inputs.insert(position, (new_location, weight))
        return new_location

    def add_connection(
        self,
        rng: Random,
    ) -> tuple[NeuronLocation, NeuronLocation] | None:
        """Connect a random source to a random destination without a cycle.

        Returns the ``(source, destination)`` pair of the new edge, or None
        when no eligible pair was found.
        """
        for _ in range(self.policy.max_attempts):
            if self.policy.sensor_sources:
                _handle, source = self.rand_neuron(rng)
            else:
                picked = self._rand_neuron_with_inputs(rng)
                if picked is None:
                    return None
                _handle, source = picked

            if not self._has_destination_for(source):
                continue

            handle, destination = self.rand_neuron(rng)
            while destination.is_input or self.is_connection_cyclic(
                source, destination
            ):
                handle, destination = self.rand_neuron(rng)

            with handle.write() as neuron:
                neuron.inputs.append((source, rng.random()))
            return source, destination
        return None

    def perturb_weight(
        self,
        rate: float,
        rng: Random,
    ) -> tuple[NeuronLocation, int] | None:
        """Nudge the weight of one random connection by a rate-scaled amount.

        Returns the consumer location and the position of the changed input.
        """
        picked = self._rand_neuron_with_inputs(rng)
        if picked is None:
            return None
        handle, location = picked

        with handle.write() as neuron:
            position = rng.randrange(len(neuron.inputs))
            source, weight = neuron.inputs[position]
            if self.policy.signed_perturbation:
                delta = rng.uniform(-1.0, 1.0) * rate
            else:
                delta = rng.random() * rate
            neuron.inputs[position] = (source, weight + delta)
        return location, position

    def clone(self) -> NeuralNetworkTopology:
        """Return a deep copy that shares no handles with this topology."""
        return NeuralNetworkTopology(
            [NeuronHandle(handle.snapshot()) for handle in self.input_layer],
            [NeuronHandle(handle.snapshot()) for handle in self.hidden_layer],
            [NeuronHandle(handle.snapshot()) for handle in self.output_layer],
            self.mutation_rate,
            self.mutation_passes,
            policy=self.policy,
        )

    def with_mutation(
        self,
        *,
        rate: float | None = None,
        passes: int | None = None,
    ) -> NeuralNetworkTopology:
        """Return a clone whose stored mutation settings are overridden."""
        child = self.clone()
        if rate is not None:
            child.mutation_rate = _validate_rate(rate)
        if passes is not None:
            if passes < 0:
                msg = "mutation_passes must be >= 0."
                raise ValueError(msg)
            child.mutation_passes = int(passes)
        return child

    def spawn_child(self, rng: Random) -> NeuralNetworkTopology:
        """Clone this genome and mutate the clone with the stored rate."""
        child = self.clone()
        child.mutate(self.mutation_rate, rng)
        return child

    def crossover(
        self,
        other: NeuralNetworkTopology,
        rng: Random,
    ) -> NeuralNetworkTopology:
        """Two-parent reproduction is not available for topologies."""
        msg = "Crossover reproduction is not implemented for NeuralNetworkTopology."
        raise CrossoverUnavailableError(msg)

    def locations(self) -> Iterator[NeuronLocation]:
        """Yield every location, input layer first and output layer last."""
        for index in range(len(self.input_layer)):
            yield NeuronLocation.input(index)
        for index in range(len(self.hidden_layer)):
            yield NeuronLocation.hidden(index)
        for index in range(len(self.output_layer)):
            yield NeuronLocation.output(index)

    def iter_neurons(self) -> Iterator[tuple[NeuronLocation, NeuronTopology]]:
        """Yield ``(location, neuron copy)`` pairs for every layer in order."""
        for location in self.locations():
            yield location, self.get_neuron(location).snapshot()

    def snapshot(self) -> TopologySnapshot:
        return TopologySnapshot(
            input_layer=tuple(handle.snapshot() for handle in self.input_layer),
            hidden_layer=tuple(handle.snapshot() for handle in self.hidden_layer),
            output_layer=tuple(handle.snapshot() for handle in self.output_layer),
            mutation_rate=self.mutation_rate,
            mutation_passes=self.mutation_passes,
        )

    def stats(self) -> TopologyStats:
        connections = sum(len(neuron.inputs) for _loc, neuron in self.iter_neurons())
        return TopologyStats(
            input_count=len(self.input_layer),
            hidden_count=len(self.hidden_layer),
            output_count=len(self.output_layer),
            connection_count=connections,
        )

    def evaluation_order(self) -> tuple[tuple[NeuronLocation, ...], ...]:
        """Group locations into layers that can be evaluated front to back.

        Raises:
            DanglingLocationError: An input refers to a missing neuron.
            CycleError: The connection graph is not acyclic.
        """
        indegree: dict[NeuronLocation, int] = dict.fromkeys(self.locations(), 0)
        outgoing: dict[NeuronLocation, list[NeuronLocation]] = defaultdict(list)

        for location, neuron in self.iter_neurons():
            for source, _weight in neuron.inputs:
                if source not in indegree:
                    msg = f"{location} refers to missing neuron {source}."
                    raise DanglingLocationError(msg)
                indegree[location] += 1
                outgoing[source].append(location)

        ready = sorted(
            (location for location, degree in indegree.items() if degree == 0),
            key=_location_key,
        )
        layers: list[tuple[NeuronLocation, ...]] = []
        processed = 0
        while ready:
            layers.append(tuple(ready))
            processed += len(ready)
            next_ready: set[NeuronLocation] = set()
            for location in ready:
                for target in outgoing.get(location, ()):
                    indegree[target] -= 1
                    if indegree[target] == 0:
                        next_ready.add(target)
            ready = sorted(next_ready, key=_location_key)

        if processed != len(indegree):
            msg = "Cycle detected in the connection graph."
            raise CycleError(msg)
        return tuple(layers)

    def validate(self) -> None:
        """Check the structural invariants, raising on the first violation."""
        for index, handle in enumerate(self.input_layer):
            if handle.has_inputs():
                msg = f"Input neuron {index} must not have inputs."
                raise SensorInputError(msg)
        self.evaluation_order()

    def _layer(self, layer: Layer) -> Sequence[NeuronHandle]:
        if layer is Layer.INPUT:
            return self.input_layer
        if layer is Layer.HIDDEN:
            return self.hidden_layer
        return self.output_layer

    def _handles(self) -> Iterator[NeuronHandle]:
        yield from self.input_layer
        yield from self.hidden_layer
        yield from self.output_layer

    def _rand_neuron_with_inputs(
        self,
        rng: Random,
    ) -> tuple[NeuronHandle, NeuronLocation] | None:
        if not any(handle.has_inputs() for handle in self._handles()):
            return None
        handle, location = self.rand_neuron(rng)
        while not handle.has_inputs():
            handle, location = self.rand_neuron(rng)
        return handle, location

    def _ancestors(self, location: NeuronLocation) -> set[NeuronLocation]:
        """Return ``location`` and every neuron it transitively depends on."""
        seen = {location}
        stack = [location]
        while stack:
            current = stack.pop()
            with self.get_neuron(current).read() as neuron:
                for source, _weight in neuron.inputs:
                    if source not in seen:
                        seen.add(source)
                        stack.append(source)
        return seen

    def _has_destination_for(self, source: NeuronLocation) -> bool:
        blocked = self._ancestors(source)
        return any(
            not location.is_input and location not in blocked
            for location in self.locations()
        )

    def __deepcopy__(self, memo: dict[int, Any]) -> NeuralNetworkTopology:
        return self.clone()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NeuralNetworkTopology):
            return NotImplemented
        return self.snapshot() == other.snapshot() and self.policy == other.policy

    def __repr__(self) -> str:
        stats = self.stats()
        return (
            f"NeuralNetworkTopology(inputs={stats.input_count}, "
            f"hidden={stats.hidden_count}, outputs={stats.output_count}, "
            f"connections={stats.connection_count}, "
            f"mutation_rate={self.mutation_rate}, "
            f"mutation_passes={self.mutation_passes})"
        )


__all__ = [
    "MutationPolicy",
    "MutationStats",
    "NeuralNetworkTopology",
    "TopologySnapshot",
    "TopologyStats",
]
