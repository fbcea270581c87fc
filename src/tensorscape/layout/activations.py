"""Where the front-layer activation values come from.

There is no backing dataset by default: ``RandomActivations`` draws a fresh
batch on every rebuild. ``TensorActivations`` shows the batch-0 slice of a real
4D array instead.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from tensorscape.state.store import TensorShape


class ActivationSource(Protocol):
    def __call__(self, shape: TensorShape) -> np.ndarray: ...


class RandomActivations:
    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def __call__(self, shape: TensorShape) -> np.ndarray:
        return self._rng.random((shape.H, shape.S, shape.D))


class TensorActivations:
    def __init__(self, data: np.ndarray) -> None:
        array = np.asarray(data, dtype=float)
        if array.ndim != 4:
            msg = f"activation tensor must be 4D (H, B, S, D), got ndim={array.ndim}"
            raise ValueError(msg)
        if 0 in array.shape:
            msg = "activation tensor must not have empty axes"
            raise ValueError(msg)
        self.data = array

    @property
    def shape(self) -> TensorShape:
        return TensorShape(*(int(size) for size in self.data.shape))

    def __call__(self, shape: TensorShape) -> np.ndarray:
        if shape.as_tuple() != self.data.shape:
            msg = f"tensor shape {self.data.shape} does not match requested {shape.display}"
            raise ValueError(msg)
        return self.data[:, 0, :, :]


__all__ = ["ActivationSource", "RandomActivations", "TensorActivations"]
