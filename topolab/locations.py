"""Layer-tagged neuron addresses that stay valid across clones and growth."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Layer(str, Enum):
    """Enumeration of the three topology layers."""

    INPUT = "input"
    HIDDEN = "hidden"
    OUTPUT = "output"

    @classmethod
    def coerce(cls, value: Layer | str) -> Layer:
        """Coerce a string or Layer into a Layer instance."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            msg = f"Unsupported layer value: {value!r}"
            raise TypeError(msg)
        try:
            return cls(value.lower())
        except ValueError as error:
            valid = ", ".join(member.value for member in cls)
            msg = f"Invalid layer {value!r}. Expected one of: {valid}"
            raise ValueError(msg) from error


@dataclass(frozen=True, slots=True)
class NeuronLocation:
    """Points to a neuron by layer and index instead of by reference."""

    layer: Layer
    index: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "layer", Layer.coerce(self.layer))
        if isinstance(self.index, bool) or not isinstance(self.index, int):
            msg = f"index must be an int, got {self.index!r}"
            raise TypeError(msg)
        if self.index < 0:
            msg = "index must be non-negative."
            raise ValueError(msg)

    @classmethod
    def input(cls, index: int) -> NeuronLocation:
        return cls(Layer.INPUT, index)

    @classmethod
    def hidden(cls, index: int) -> NeuronLocation:
        return cls(Layer.HIDDEN, index)

    @classmethod
    def output(cls, index: int) -> NeuronLocation:
        return cls(Layer.OUTPUT, index)

    @property
    def is_input(self) -> bool:
        return self.layer is Layer.INPUT

    @property
    def is_hidden(self) -> bool:
        return self.layer is Layer.HIDDEN

    @property
    def is_output(self) -> bool:
        return self.layer is Layer.OUTPUT

    def unwrap(self) -> int:
        """Return the index value, regardless of layer."""
        return self.index

    def __str__(self) -> str:
        return f"{self.layer.value.capitalize()}({self.index})"


__all__ = ["Layer", "NeuronLocation"]
