###############################################################################
# Copyright (C) 2023 Oliver Michael Kamperis
# Email: olliekampo@gmail.com
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation, either version 3 of the License, or any later version.
#
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE. See the GNU General Public License for details.
#
# You should have received a copy of the GNU General Public License along with
# this program. If not, see <https://www.gnu.org/licenses/>.

"""Module for all partition data structure related errors."""

__copyright__ = "Copyright (C) 2023 Oliver Michael Kamperis"
__license__ = "GPL-3.0"
__version__ = "1.0.0"

__all__ = (
    "PartitionError",
    "PartitionIndexError",
    "CapacityExceededError"
)


def __dir__() -> tuple[str, ...]:
    """Get the names of module attributes."""
    return __all__


class PartitionError(Exception):
    """Base class for all errors raised by partition data structures."""
    pass


class PartitionIndexError(PartitionError, IndexError):
    """Raised when an element index is outside of the live range."""

    def __init__(self, index: object, length: int) -> None:
        """Create a new index error for the given index and length."""
        super().__init__(
            f"Index {index!r} is out of range for a partition "
            f"of length {length}."
        )
        self.index = index
        self.length = length


class CapacityExceededError(PartitionError, OverflowError):
    """
    Raised when a compact metadata store would exceed the maximum number of
    elements its bit-packed words can address.
    """
    pass
