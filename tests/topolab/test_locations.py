from __future__ import annotations

import pytest
from topolab.locations import Layer, NeuronLocation


def test_location_predicates_and_index() -> None:
    location = NeuronLocation.hidden(4)
    assert location.is_hidden
    assert not location.is_input
    assert not location.is_output
    assert location.unwrap() == 4
    assert location.index == 4

    assert NeuronLocation.input(0).is_input
    assert NeuronLocation.output(2).is_output
    assert NeuronLocation.output(2).unwrap() == 2


def test_location_equality_is_structural() -> None:
    assert NeuronLocation.input(1) == NeuronLocation(Layer.INPUT, 1)
    assert NeuronLocation.input(1) != NeuronLocation.output(1)
    assert NeuronLocation.hidden(1) != NeuronLocation.hidden(2)
    assert len({NeuronLocation.input(0), NeuronLocation.input(0)}) == 1


def test_location_accepts_layer_names() -> None:
    location = NeuronLocation("OUTPUT", 3)  # type: ignore[arg-type]
    assert location.layer is Layer.OUTPUT
    assert str(location) == "Output(3)"


def test_location_rejects_invalid_values() -> None:
    with pytest.raises(ValueError):
        NeuronLocation.input(-1)

    with pytest.raises(TypeError):
        NeuronLocation.hidden(True)  # type: ignore[arg-type]

    with pytest.raises(ValueError):
        NeuronLocation("bias", 0)  # type: ignore[arg-type]

    with pytest.raises(TypeError):
        Layer.coerce(3)  # type: ignore[arg-type]
