from __future__ import annotations

import pickle
import threading
from random import Random

import pytest
from topolab.locations import NeuronLocation
from topolab.neurons import NeuronHandle, NeuronTopology, ReadWriteLock


def test_new_draws_weights_then_bias() -> None:
    sources = [NeuronLocation.input(0), NeuronLocation.input(1)]
    neuron = NeuronTopology.new(sources, Random(0))

    expected = Random(0)
    first, second, bias = expected.random(), expected.random(), expected.random()
    assert neuron.inputs == [(sources[0], first), (sources[1], second)]
    assert neuron.bias == pytest.approx(bias)
    assert neuron.sources == tuple(sources)


def test_new_values_are_in_unit_interval() -> None:
    rng = Random(1)
    for _ in range(50):
        neuron = NeuronTopology.new([NeuronLocation.hidden(0)] * 3, rng)
        assert 0.0 <= neuron.bias < 1.0
        assert all(0.0 <= weight < 1.0 for _loc, weight in neuron.inputs)


def test_neuron_copy_is_independent() -> None:
    neuron = NeuronTopology([(NeuronLocation.input(0), 0.5)], bias=0.1)
    copied = neuron.copy()
    copied.inputs.append((NeuronLocation.input(1), 0.2))
    copied.bias = 0.9

    assert neuron.inputs == [(NeuronLocation.input(0), 0.5)]
    assert neuron.bias == pytest.approx(0.1)


def test_neuron_rejects_invalid_values() -> None:
    with pytest.raises(ValueError):
        NeuronTopology([(NeuronLocation.input(0), float("nan"))])

    with pytest.raises(ValueError):
        NeuronTopology(bias=float("inf"))

    with pytest.raises(TypeError):
        NeuronTopology([((0, 1), 0.5)])  # type: ignore[list-item]


def test_handle_write_and_snapshot() -> None:
    handle = NeuronHandle(NeuronTopology(bias=0.25))
    with handle.write() as neuron:
        neuron.inputs.append((NeuronLocation.input(0), 0.5))

    snapshot = handle.snapshot()
    assert snapshot.inputs == [(NeuronLocation.input(0), 0.5)]
    assert handle.has_inputs()

    snapshot.inputs.clear()
    assert handle.has_inputs()


def test_handle_pickles_with_fresh_lock() -> None:
    handle = NeuronHandle(NeuronTopology([(NeuronLocation.input(0), 0.5)], 0.3))
    restored = pickle.loads(pickle.dumps(handle))

    assert restored.snapshot() == handle.snapshot()
    with restored.write() as neuron:
        neuron.bias = 0.7
    assert handle.snapshot().bias == pytest.approx(0.3)


def test_lock_allows_concurrent_readers() -> None:
    lock = ReadWriteLock()
    lock.acquire_read()
    lock.acquire_read()
    lock.release_read()
    lock.release_read()

    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()


def test_lock_writer_waits_for_readers() -> None:
    lock = ReadWriteLock()
    lock.acquire_read()
    acquired = threading.Event()

    def writer() -> None:
        with lock.writing():
            acquired.set()

    thread = threading.Thread(target=writer)
    thread.start()
    assert not acquired.wait(0.05)

    lock.release_read()
    assert acquired.wait(2.0)
    thread.join(timeout=2.0)
    assert not thread.is_alive()
