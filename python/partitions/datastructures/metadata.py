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

"""
Module containing the metadata stores of indexed disjoint-sets.

Every element of an indexed disjoint-set has three pieces of metadata;
- the index of its parent in its sub-set's tree,
- the index of the next element in its sub-set's circular linked list,
- and the rank of its tree (only meaningful if the element is a root).

The standard store keeps these in three separate arrays. The compact store
keeps them in two arrays of unsigned words, by packing half of the rank into
the low-order bits of each of the parent and link words. This saves one third
of the memory per element, at the cost of reducing the maximum number of
elements that can be stored, and a shift and mask on every access.
"""

import enum
import logging
from abc import ABCMeta, abstractmethod
from typing import Literal, Optional, TypeAlias

import numpy as np

from partitions.datastructures._partition_errors import CapacityExceededError

__copyright__ = "Copyright (C) 2023 Oliver Michael Kamperis"
__license__ = "GPL-3.0"
__version__ = "1.0.0"

__all__ = (
    "StorageMode",
    "MetadataStore",
    "StandardMetadata",
    "CompactMetadata",
    "create_store",
    "get_storage_mode"
)


def __dir__() -> tuple[str, ...]:
    """Get the names of module attributes."""
    return __all__


StorageModeNames: TypeAlias = Literal[
    "standard",
    "compact"
]


class StorageMode(enum.Enum):
    """
    The storage layouts that can be passed as argument to the constructor of
    a partition data structure.

    Items
    -----
    `STANDARD` - Store parent, link and rank in three separate arrays.

    `COMPACT` - Store parent and link in two arrays of unsigned words, with
    the rank bit-packed into the low-order bits of both words.
    """

    STANDARD = "standard"
    COMPACT = "compact"


def _reallocate(
    array: np.ndarray,
    capacity: int,
    length: int
) -> np.ndarray:
    """Copy the live part of an array into a new array of the given size."""
    new_array = np.empty(capacity, dtype=array.dtype)
    keep = min(length, capacity)
    new_array[:keep] = array[:keep]
    return new_array


class MetadataStore(metaclass=ABCMeta):
    """
    Abstract base class for disjoint-set metadata stores.

    A store is a growable array of element slots, each of which has a parent,
    a link and a rank. The store knows nothing about the disjoint-set
    algorithms, it only provides fast access to the slots and manages their
    allocation (geometric growth, like a dynamic array).
    """

    __slots__ = {
        "__length": "The number of live element slots.",
        "__capacity": "The number of allocated element slots.",
        "__logger": "Optional logger for allocation changes."
    }

    def __init__(
        self,
        capacity: int = 0,
        logger: Optional[logging.Logger] = None
    ) -> None:
        """Create a new empty store with at least the given capacity."""
        if not isinstance(capacity, int):
            raise TypeError(f"capacity must be an integer. Got; {capacity!r}.")
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative. Got; {capacity}.")
        if capacity > self.max_len:
            raise CapacityExceededError(
                f"Cannot allocate {capacity} elements, the store can hold "
                f"at most {self.max_len} elements."
            )
        self.__length: int = 0
        self.__capacity: int = 0
        self.__logger: Optional[logging.Logger] = logger
        if capacity > 0:
            self.__reallocate(capacity)

    def __len__(self) -> int:
        """Get the number of live element slots."""
        return self.__length

    def __repr__(self) -> str:
        """Get a string representation of the store."""
        return (f"{self.__class__.__name__}(length={self.__length}, "
                f"capacity={self.__capacity})")

    @property
    def capacity(self) -> int:
        """Get the number of slots that are allocated."""
        return self.__capacity

    @property
    @abstractmethod
    def max_len(self) -> int:
        """Get the maximum number of element slots the store can hold."""
        ...

    @property
    @abstractmethod
    def bytes_per_element(self) -> int:
        """Get the number of bytes of metadata stored for each element."""
        ...

    @abstractmethod
    def parent(self, index: int, /) -> int:
        """Get the parent of the element at the given index."""
        ...

    @abstractmethod
    def set_parent(self, index: int, parent: int, /) -> None:
        """Set the parent of the element at the given index."""
        ...

    @abstractmethod
    def link(self, index: int, /) -> int:
        """Get the next element in the circular list of the given index."""
        ...

    @abstractmethod
    def set_link(self, index: int, link: int, /) -> None:
        """Set the next element in the circular list of the given index."""
        ...

    @abstractmethod
    def rank(self, index: int, /) -> int:
        """Get the rank of the element at the given index."""
        ...

    @abstractmethod
    def set_rank(self, index: int, rank: int, /) -> None:
        """Set the rank of the element at the given index."""
        ...

    @abstractmethod
    def copy(self) -> "MetadataStore":
        """Get a deep copy of this store."""
        ...

    @abstractmethod
    def _resize(self, capacity: int, length: int, /) -> None:
        """
        Reallocate the underlying arrays to the given capacity, keeping the
        first `length` slots.
        """
        ...

    @abstractmethod
    def _write_singletons(self, start: int, stop: int, /) -> None:
        """Initialise the slots in the given range as singletons."""
        ...

    def _copy_into(self, other: "MetadataStore") -> "MetadataStore":
        """Copy the length and capacity of this store into another."""
        other.__length = self.__length
        other.__capacity = self.__capacity
        other.__logger = self.__logger
        return other

    def __reallocate(self, capacity: int) -> None:
        """Reallocate the store to exactly the given capacity."""
        if self.__logger is not None:
            self.__logger.debug(
                "Reallocating %s from capacity %s to %s (length %s)",
                self.__class__.__name__, self.__capacity, capacity,
                self.__length
            )
        self._resize(capacity, self.__length)
        self.__capacity = capacity

    def __check_room(self, additional: int) -> int:
        """Get the required length, or raise if the store would be full."""
        required: int = self.__length + additional
        if required > self.max_len:
            raise CapacityExceededError(
                f"Cannot add {additional} elements to a store of length "
                f"{self.__length}, the store can hold at most "
                f"{self.max_len} elements."
            )
        return required

    def reserve(self, additional: int, /) -> None:
        """
        Reserve capacity for at least `additional` more elements.

        Raises
        ------
        `CapacityExceededError` - If the store cannot hold that many elements.
        """
        if additional < 0:
            raise ValueError(
                f"additional must be non-negative. Got; {additional}.")
        required: int = self.__check_room(additional)
        if required > self.__capacity:
            self.__reallocate(
                min(max(required, 2 * self.__capacity), self.max_len)
            )

    def shrink_to_fit(self) -> None:
        """Release all unused capacity."""
        if self.__capacity != self.__length:
            self.__reallocate(self.__length)

    def push(self) -> int:
        """
        Append a new singleton slot and return its index.

        Raises
        ------
        `CapacityExceededError` - If the store is full.
        """
        index: int = self.__length
        self.reserve(1)
        self._write_singletons(index, index + 1)
        self.__length = index + 1
        return index

    def extend(self, count: int, /) -> range:
        """
        Append `count` new singleton slots and return their indices.

        Either all slots are added, or the store is left unchanged.
        """
        start: int = self.__length
        self.reserve(count)
        self._write_singletons(start, start + count)
        self.__length = start + count
        return range(start, start + count)

    def reset(self, index: int, /) -> None:
        """Reset the slot at the given index to be a singleton."""
        self._write_singletons(index, index + 1)

    def truncate(self, length: int, /) -> None:
        """
        Drop all slots with index greater than or equal to the given length.

        The caller is responsible for ensuring no remaining slot refers to a
        dropped slot.
        """
        if length < self.__length:
            self.__length = length

    def clear(self) -> None:
        """Drop all slots, keeping the allocated capacity."""
        self.__length = 0


class StandardMetadata(MetadataStore):
    """
    Metadata store that keeps parent, link and rank in separate arrays.

    Each field is a native sized signed integer (`numpy.intp`).
    """

    __slots__ = {
        "__parents": "The parent of each element.",
        "__links": "The next element in each element's circular list.",
        "__ranks": "The rank of each element's tree."
    }

    def __init__(
        self,
        capacity: int = 0,
        logger: Optional[logging.Logger] = None
    ) -> None:
        """Create a new standard metadata store."""
        self.__parents: np.ndarray = np.empty(0, dtype=np.intp)
        self.__links: np.ndarray = np.empty(0, dtype=np.intp)
        self.__ranks: np.ndarray = np.empty(0, dtype=np.intp)
        super().__init__(capacity, logger)

    @property
    def max_len(self) -> int:
        return int(np.iinfo(np.intp).max)

    @property
    def bytes_per_element(self) -> int:
        return 3 * np.dtype(np.intp).itemsize

    def parent(self, index: int, /) -> int:
        return int(self.__parents[index])

    def set_parent(self, index: int, parent: int, /) -> None:
        self.__parents[index] = parent

    def link(self, index: int, /) -> int:
        return int(self.__links[index])

    def set_link(self, index: int, link: int, /) -> None:
        self.__links[index] = link

    def rank(self, index: int, /) -> int:
        return int(self.__ranks[index])

    def set_rank(self, index: int, rank: int, /) -> None:
        self.__ranks[index] = rank

    def copy(self) -> "StandardMetadata":
        other = StandardMetadata()
        other.__parents = self.__parents.copy()
        other.__links = self.__links.copy()
        other.__ranks = self.__ranks.copy()
        return self._copy_into(other)  # type: ignore[return-value]

    def _resize(self, capacity: int, length: int, /) -> None:
        self.__parents = _reallocate(self.__parents, capacity, length)
        self.__links = _reallocate(self.__links, capacity, length)
        self.__ranks = _reallocate(self.__ranks, capacity, length)

    def _write_singletons(self, start: int, stop: int, /) -> None:
        indices = np.arange(start, stop, dtype=np.intp)
        self.__parents[start:stop] = indices
        self.__links[start:stop] = indices
        self.__ranks[start:stop] = 0


# Number of rank bits packed into each word, for each supported word size.
# The minimum number of elements needed to build a tree of rank n is 2 ** n,
# so the rank never exceeds the number of bits used to address elements.
# Twice the number of bits given here (half in the parent word and half in
# the link word) is always enough to hold that rank.
_RANK_BITS: dict[int, int] = {8: 2, 16: 2, 32: 3, 64: 3}
_WORD_DTYPES: dict[int, type] = {
    8: np.uint8,
    16: np.uint16,
    32: np.uint32,
    64: np.uint64
}


class CompactMetadata(MetadataStore):
    """
    Metadata store that bit-packs the rank into the parent and link words.

    Each word is laid out as `[index bits | rank bits]`. The parent word
    holds the high half of the rank and the link word holds the low half.
    The largest index value (all index bits set) is reserved, so a store
    with `w` bit words and `r` rank bits can hold at most `2 ** (w - r) - 1`
    elements.
    """

    __slots__ = {
        "__word_bits": "The number of bits in each word.",
        "__rank_bits": "The number of rank bits in each word.",
        "__mask": "Mask selecting the rank bits of a word.",
        "__max_len": "The maximum number of elements.",
        "__dtype": "The numpy dtype of the words.",
        "__parents": "Packed parent and high rank bits of each element.",
        "__links": "Packed link and low rank bits of each element."
    }

    def __init__(
        self,
        capacity: int = 0,
        logger: Optional[logging.Logger] = None,
        word_bits: int = 64
    ) -> None:
        """
        Create a new compact metadata store.

        Parameters
        ----------
        `capacity: int = 0` - The number of elements to pre-allocate.

        `logger: logging.Logger | None = None` - Logger for allocation
        changes, or None to disable logging.

        `word_bits: int = 64` - The number of bits in each packed word, one of
        8, 16, 32 or 64. Smaller words use less memory but can hold fewer
        elements.

        Raises
        ------
        `TypeError` - If `word_bits` is not an integer.

        `ValueError` - If `word_bits` is not a supported word size.
        """
        if not isinstance(word_bits, int):
            raise TypeError(
                f"word_bits must be an integer. Got; {word_bits!r}.")
        if word_bits not in _RANK_BITS:
            raise ValueError(
                f"word_bits must be one of {tuple(_RANK_BITS)}. "
                f"Got; {word_bits}.")
        self.__word_bits: int = word_bits
        self.__rank_bits: int = _RANK_BITS[word_bits]
        self.__mask: int = (1 << self.__rank_bits) - 1
        self.__max_len: int = (1 << (word_bits - self.__rank_bits)) - 1
        self.__dtype: type = _WORD_DTYPES[word_bits]
        self.__parents: np.ndarray = np.empty(0, dtype=self.__dtype)
        self.__links: np.ndarray = np.empty(0, dtype=self.__dtype)
        super().__init__(capacity, logger)

    @property
    def word_bits(self) -> int:
        """Get the number of bits in each packed word."""
        return self.__word_bits

    @property
    def rank_bits(self) -> int:
        """Get the number of rank bits packed into each word."""
        return self.__rank_bits

    @property
    def max_len(self) -> int:
        return self.__max_len

    @property
    def bytes_per_element(self) -> int:
        return 2 * np.dtype(self.__dtype).itemsize

    def parent(self, index: int, /) -> int:
        return int(self.__parents[index]) >> self.__rank_bits

    def set_parent(self, index: int, parent: int, /) -> None:
        old = int(self.__parents[index])
        self.__parents[index] = (old & self.__mask) | (parent << self.__rank_bits)

    def link(self, index: int, /) -> int:
        return int(self.__links[index]) >> self.__rank_bits

    def set_link(self, index: int, link: int, /) -> None:
        old = int(self.__links[index])
        self.__links[index] = (old & self.__mask) | (link << self.__rank_bits)

    def rank(self, index: int, /) -> int:
        high = int(self.__parents[index]) & self.__mask
        low = int(self.__links[index]) & self.__mask
        return (high << self.__rank_bits) | low

    def set_rank(self, index: int, rank: int, /) -> None:
        if rank >> (2 * self.__rank_bits):
            raise CapacityExceededError(
                f"Rank {rank} cannot be packed into "
                f"{2 * self.__rank_bits} bits.")
        old = int(self.__parents[index])
        self.__parents[index] = (old & ~self.__mask) | (rank >> self.__rank_bits)
        old = int(self.__links[index])
        self.__links[index] = (old & ~self.__mask) | (rank & self.__mask)

    def copy(self) -> "CompactMetadata":
        other = CompactMetadata(word_bits=self.__word_bits)
        other.__parents = self.__parents.copy()
        other.__links = self.__links.copy()
        return self._copy_into(other)  # type: ignore[return-value]

    def _resize(self, capacity: int, length: int, /) -> None:
        self.__parents = _reallocate(self.__parents, capacity, length)
        self.__links = _reallocate(self.__links, capacity, length)

    def _write_singletons(self, start: int, stop: int, /) -> None:
        words = np.arange(start, stop, dtype=self.__dtype)
        words <<= self.__dtype(self.__rank_bits)
        self.__parents[start:stop] = words
        self.__links[start:stop] = words


def create_store(
    storage: StorageMode | StorageModeNames = "standard",
    capacity: int = 0,
    word_bits: int = 64,
    logger: Optional[logging.Logger] = None
) -> MetadataStore:
    """
    Create a metadata store with the given storage layout.

    Parameters
    ----------
    `storage: StorageMode | "standard" | "compact" = "standard"` - The
    storage layout, either a `StorageMode` or its case-insensitive name.

    `capacity: int = 0` - The number of elements to pre-allocate.

    `word_bits: int = 64` - The word size of the compact layout, ignored by
    the standard layout.

    `logger: logging.Logger | None = None` - Logger for allocation changes.

    Raises
    ------
    `ValueError` - If the storage name is not recognised.

    `TypeError` - If `storage` is neither a `StorageMode` nor a string.
    """
    mode = get_storage_mode(storage)
    if mode is StorageMode.COMPACT:
        return CompactMetadata(capacity, logger, word_bits)
    return StandardMetadata(capacity, logger)


def get_storage_mode(
    storage: StorageMode | StorageModeNames
) -> StorageMode:
    """Get the storage mode for the given mode or mode name."""
    if isinstance(storage, StorageMode):
        return storage
    if not isinstance(storage, str):
        raise TypeError(
            f"storage must be a StorageMode or a string. Got; {storage!r}.")
    try:
        return StorageMode[storage.upper()]
    except KeyError as exc:
        raise ValueError(
            f"Unknown storage mode {storage!r}. Choose from; "
            f"{[mode.value for mode in StorageMode]}.") from exc
