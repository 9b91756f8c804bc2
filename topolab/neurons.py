"""Per-neuron topology state and the shared lockable handles that hold it."""

from __future__ import annotations

import math
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from random import Random

from .locations import NeuronLocation

Connection = tuple[NeuronLocation, float]


@dataclass(slots=True)
class NeuronTopology:
    """Stateless description of a neuron: weighted input locations and a bias."""

    inputs: list[Connection] = field(default_factory=list)
    bias: float = 0.0

    def __post_init__(self) -> None:
        normalized: list[Connection] = []
        for location, weight in self.inputs:
            if not isinstance(location, NeuronLocation):
                msg = f"Expected NeuronLocation, got {location!r}"
                raise TypeError(msg)
            normalized.append((location, _finite(weight, label="weight")))
        self.inputs = normalized
        self.bias = _finite(self.bias, label="bias")

    @classmethod
    def new(cls, sources: Iterable[NeuronLocation], rng: Random) -> NeuronTopology:
        """Create a neuron fed by ``sources`` with uniform [0, 1) weights and bias."""
        inputs = [(location, rng.random()) for location in sources]
        return cls(inputs=inputs, bias=rng.random())

    @property
    def sources(self) -> tuple[NeuronLocation, ...]:
        """Return the input locations in order."""
        return tuple(location for location, _weight in self.inputs)

    def copy(self) -> NeuronTopology:
        """Return an independent value copy."""
        return NeuronTopology(inputs=list(self.inputs), bias=self.bias)


def _finite(value: object, *, label: str) -> float:
    try:
        converted = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as error:
        msg = f"{label} must be convertible to float, got {value!r}"
        raise ValueError(msg) from error
    if not math.isfinite(converted):
        msg = f"{label} must be a finite number."
        raise ValueError(msg)
    return converted


class ReadWriteLock:
    """Writer-preferring reader/writer lock.

    Any number of readers may hold the lock at once; a writer holds it alone.
    Waiting writers block new readers. The lock is not reentrant.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._condition:
            while self._writer or self._waiting_writers:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._condition:
            if self._readers <= 0:
                msg = "release_read called without a matching acquire_read."
                raise RuntimeError(msg)
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._condition:
            if not self._writer:
                msg = "release_write called without a matching acquire_write."
                raise RuntimeError(msg)
            self._writer = False
            self._condition.notify_all()

    @contextmanager
    def reading(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def writing(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class NeuronHandle:
    """Shared, independently lockable handle around one ``NeuronTopology``."""

    __slots__ = ("_neuron", "_lock")

    def __init__(self, neuron: NeuronTopology | None = None) -> None:
        self._neuron = neuron if neuron is not None else NeuronTopology()
        self._lock = ReadWriteLock()

    @contextmanager
    def read(self) -> Iterator[NeuronTopology]:
        """Yield the neuron under a shared lock. Callers must not modify it."""
        with self._lock.reading():
            yield self._neuron

    @contextmanager
    def write(self) -> Iterator[NeuronTopology]:
        """Yield the neuron under an exclusive lock."""
        with self._lock.writing():
            yield self._neuron

    def snapshot(self) -> NeuronTopology:
        """Return a copy of the neuron taken under a shared lock."""
        with self.read() as neuron:
            return neuron.copy()

    def has_inputs(self) -> bool:
        with self.read() as neuron:
            return bool(neuron.inputs)

    def __getstate__(self) -> NeuronTopology:
        return self.snapshot()

    def __setstate__(self, state: NeuronTopology) -> None:
        self._neuron = state
        self._lock = ReadWriteLock()

    def __repr__(self) -> str:
        return f"NeuronHandle({self.snapshot()!r})"


__all__ = ["Connection", "NeuronHandle", "NeuronTopology", "ReadWriteLock"]
