"""
Scanning Mode Flags.

A scanning mode is the 8-bit flag table that meteorological grid files use
to describe how a 2-D field is serialized into a 1-D array. Bit 1 is the
most significant bit of the table as published, which is value 128 here;
the values below follow the conventional mapping used by decoders where
the i-direction flag is the lowest bit.

Flag Table
----------
========  =====  ===============================================
value     name   meaning when set
========  =====  ===============================================
1         -i     points scan in the -i (east to west) direction
2         +j     points scan in the +j (south to north) direction
4         J      adjacent points in j are consecutive (column major)
8         boust  adjacent rows scan in opposite directions
16        odd    points within odd rows are offset by Di/2
32        even   points within even rows are offset by Di/2
64        joff   points are offset by Dj/2 in the j direction
128       red    row point counts may be reduced by the offsets
========  =====  ===============================================

Only the first four flags change the index algebra. The offset flags are
decoded so callers can inspect them but are otherwise informational.
"""

from enum import IntFlag
from typing import List


class ScanMode(IntFlag):
    """Bit flags of a grid scanning mode.

    The all-clear value ``ScanMode(0)`` is the common default:
    +i, -j (north to south), consecutive i, same direction on every row.

    Examples
    --------
    >>> mode = ScanMode.NEGATIVE_I | ScanMode.POSITIVE_J
    >>> mode.is_negative_i, mode.is_consecutive_j
    (True, False)
    """

    NEGATIVE_I = 1
    POSITIVE_J = 2
    CONSECUTIVE_J = 4
    OPPOSITE_ROWS = 8
    ODD_OFFSET = 16
    EVEN_OFFSET = 32
    J_OFFSET = 64
    OFFSET_POINTS = 128

    @classmethod
    def from_value(cls, value: int) -> "ScanMode":
        """Build a scan mode from a raw table value in [0, 255]."""
        if isinstance(value, bool) or not 0 <= int(value) <= 0xFF:
            raise ValueError(f"Scan mode must be an 8-bit value, got {value!r}")
        return cls(int(value))

    def _has(self, flag: "ScanMode") -> bool:
        return (int(self) & int(flag)) == int(flag)

    @property
    def is_negative_i(self) -> bool:
        return self._has(ScanMode.NEGATIVE_I)

    @property
    def is_positive_j(self) -> bool:
        return self._has(ScanMode.POSITIVE_J)

    @property
    def is_consecutive_j(self) -> bool:
        return self._has(ScanMode.CONSECUTIVE_J)

    @property
    def has_opposite_rows(self) -> bool:
        return self._has(ScanMode.OPPOSITE_ROWS)

    @property
    def has_odd_offset(self) -> bool:
        return self._has(ScanMode.ODD_OFFSET)

    @property
    def has_even_offset(self) -> bool:
        return self._has(ScanMode.EVEN_OFFSET)

    @property
    def has_j_offset(self) -> bool:
        return self._has(ScanMode.J_OFFSET)

    @property
    def has_offset_points(self) -> bool:
        return self._has(ScanMode.OFFSET_POINTS)

    def describe(self) -> str:
        """Human readable summary, e.g. ``"+i scanning, -j scanning, consecutive i"``."""
        desc: List[str] = [
            "-i scanning" if self.is_negative_i else "+i scanning",
            "+j scanning" if self.is_positive_j else "-j scanning",
            "consecutive j" if self.is_consecutive_j else "consecutive i",
        ]
        if self.has_opposite_rows:
            desc.append("opposite rows")
        if self.has_odd_offset:
            desc.append("odd rows offset")
        if self.has_even_offset:
            desc.append("even rows offset")
        if self.has_j_offset:
            desc.append("j offset")
        if self.has_offset_points:
            desc.append("reduced points")
        return ", ".join(desc)


# The four flags that affect index encoding; their 16 combinations are
# the practically used scanning modes.
INDEX_FLAGS = (
    ScanMode.NEGATIVE_I,
    ScanMode.POSITIVE_J,
    ScanMode.CONSECUTIVE_J,
    ScanMode.OPPOSITE_ROWS,
)


def index_scan_modes() -> List[ScanMode]:
    """All 16 combinations of the index-affecting flags."""
    mask = 0
    for flag in INDEX_FLAGS:
        mask |= int(flag)
    return [ScanMode(value) for value in range(mask + 1) if value & ~mask == 0]
