"""
Value Readers.

A value reader hands the interpolation layer one sample at a time,
addressed by a time step and a linear grid index. The index follows the
scan mode of the stored field; the reader itself knows nothing about
grid geometry.

Adapters
--------
- `ArrayValueReader` serves a 2-D numpy array shaped (time, index).
- `XarrayValueReader` serves an `xarray.DataArray` with a time dimension
  and one or more grid dimensions. Several grid dimensions are flattened
  in C order, so a (latitude, longitude) array stored north to south
  matches scan mode 0.

Both raise `DataUnavailableError` for a time step or index that is not
present. Negative positions are rejected rather than counted from the end.
"""

from typing import Optional, Protocol, Sequence, runtime_checkable

import numpy as np
from numpy.typing import NDArray
import xarray as xr

from common.errors import DataUnavailableError
from common.logging_config import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ValueReader(Protocol):
    """Source of field samples."""

    def read_value_at(self, time_step: int, grid_index: int) -> float:
        """Value at (time_step, grid_index).

        Raises
        ------
        DataUnavailableError
            If no sample exists for that position.
        """
        ...


class ArrayValueReader:
    """Value reader over an in-memory array.

    Parameters
    ----------
    values : array_like
        Samples shaped (time, index). A 1-D array is treated as a single
        time step.

    Examples
    --------
    >>> reader = ArrayValueReader([[10.0, 20.0, 30.0]])
    >>> reader.read_value_at(0, 2)
    30.0
    """

    def __init__(self, values):
        values = np.asarray(values, dtype=np.float64)
        if values.ndim == 1:
            values = values[np.newaxis, :]
        if values.ndim != 2:
            raise ValueError(f"Expected a (time, index) array, got shape {values.shape}")
        self._values: NDArray[np.float64] = values

    @property
    def shape(self):
        return self._values.shape

    def read_value_at(self, time_step: int, grid_index: int) -> float:
        steps, points = self._values.shape
        if not 0 <= time_step < steps:
            raise DataUnavailableError(time_step, grid_index, f"time step outside [0, {steps})")
        if not 0 <= grid_index < points:
            raise DataUnavailableError(time_step, grid_index, f"index outside [0, {points})")
        return float(self._values[time_step, grid_index])


class XarrayValueReader:
    """Value reader over an `xarray.DataArray`.

    Parameters
    ----------
    data : xr.DataArray
        Field with a time dimension and at least one grid dimension.
    time_dim : str
        Name of the time dimension.
    grid_dims : sequence of str, optional
        Grid dimensions in flattening order. Defaults to the remaining
        dimensions in their stored order.

    Notes
    -----
    Only the requested sample is selected, so lazily loaded (dask backed)
    arrays are not read in full.
    """

    def __init__(
        self,
        data: xr.DataArray,
        time_dim: str = "time",
        grid_dims: Optional[Sequence[str]] = None
    ):
        if time_dim not in data.dims:
            raise ValueError(f"DataArray has no {time_dim!r} dimension; dims are {data.dims}")

        if grid_dims is None:
            grid_dims = [dim for dim in data.dims if dim != time_dim]
        grid_dims = list(grid_dims)
        missing = [dim for dim in grid_dims if dim not in data.dims]
        extra = set(data.dims) - set(grid_dims) - {time_dim}
        if missing or extra or not grid_dims:
            raise ValueError(f"Invalid grid dimensions {grid_dims} for dims {data.dims}")

        self._data = data
        self.time_dim = time_dim
        self.grid_dims = grid_dims
        self._grid_shape = tuple(data.sizes[dim] for dim in grid_dims)
        self._size = int(np.prod(self._grid_shape))
        self._steps = data.sizes[time_dim]
        self._logger = logger
        self._logger.debug(
            f"Reading {data.name or 'unnamed'} with {self._steps} time steps "
            f"over {dict(zip(grid_dims, self._grid_shape))}"
        )

    def read_value_at(self, time_step: int, grid_index: int) -> float:
        if not 0 <= time_step < self._steps:
            raise DataUnavailableError(
                time_step, grid_index, f"time step outside [0, {self._steps})"
            )
        if not 0 <= grid_index < self._size:
            raise DataUnavailableError(
                time_step, grid_index, f"index outside [0, {self._size})"
            )

        position = np.unravel_index(grid_index, self._grid_shape)
        selection = {self.time_dim: time_step}
        selection.update({dim: int(pos) for dim, pos in zip(self.grid_dims, position)})
        return float(self._data.isel(selection).values)
