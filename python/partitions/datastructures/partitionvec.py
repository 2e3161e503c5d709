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

"""Module containing a list structure partitioned into disjoint sets."""

import collections.abc
import logging
from typing import (Any, Generic, Hashable, Iterable, Iterator, Optional,
                    Sequence, TypeVar, overload)

from partitions.datastructures._partition_errors import PartitionIndexError
from partitions.datastructures.disjointset import IndexedDisjointSet
from partitions.datastructures.metadata import StorageMode, StorageModeNames

__copyright__ = "Copyright (C) 2023 Oliver Michael Kamperis"
__license__ = "GPL-3.0"
__version__ = "1.0.0"

__all__ = (
    "PartitionVec",
    "from_sets"
)


def __dir__() -> tuple[str, ...]:
    """Get the names of module attributes."""
    return __all__


LT = TypeVar("LT")


class PartitionVec(collections.abc.Sequence, Generic[LT]):
    """
    A list structure whose elements are partitioned into disjoint sets.

    A partition vector behaves like a list of values, except that every index
    is also a member of exactly one disjoint set. Each appended value starts
    in its own set, and sets are merged with `union`. Sets can be tested with
    `same_set` in amortised `O(a(n))` time, and the members of a set are
    iterated with `set` in `O(1)` time per member. An index can be removed
    from its set with `make_singleton` in `O(m)` time, where `m` is the size
    of its set.

    Indices double as set labels, so values can only be added and removed at
    the end of the vector. Values can be replaced by index without changing
    the partition.

    All set operations only accept indices in the range `[0, len)`, and raise
    `PartitionIndexError` otherwise. Reading and writing values follows
    normal list indexing, including negative indices.

    Example Usage
    -------------
    ```
    from partitions.datastructures.partitionvec import PartitionVec

    >>> pvec = PartitionVec("abcde")
    >>> pvec.union(0, 1)
    True
    >>> pvec.union(2, 3)
    True
    >>> pvec.union(1, 2)
    True
    >>> pvec.same_set(0, 3)
    True
    >>> pvec.same_set(0, 4)
    False
    >>> sorted(pvec.set(0))
    [(0, 'a'), (1, 'b'), (2, 'c'), (3, 'd')]
    >>> list(pvec.set(4))
    [(4, 'e')]
    >>> pvec
    PartitionVec(['a', 'b', 'c', 'd', 'e'], labels=[0, 0, 0, 0, 1])
    ```
    """

    __PARTITION_VEC_LOGGER = logging.getLogger("PartitionVec")

    __slots__ = {
        "__values": "The values of the elements.",
        "__dset": "The disjoint-set over the element indices.",
        "__debug": "Whether to log debug messages."
    }

    def __init__(
        self,
        values: Iterable[LT] = (), /,
        labels: Optional[Iterable[Hashable]] = None,
        storage: StorageMode | StorageModeNames = "standard",
        word_bits: int = 64,
        capacity: int = 0,
        debug: bool = False
    ) -> None:
        """
        Create a new partition vector.

        Parameters
        ----------
        `values: Iterable[LT] = ()` - The initial values. Each is in its own
        set unless labels are given.

        `labels: Iterable[Hashable] | None = None` - A set label for each
        value. Values with equal labels are placed in the same set. The labels
        are only used during construction and are not stored.

        `storage: StorageMode | "standard" | "compact" = "standard"` - The
        metadata storage layout. Both layouts behave identically, the compact
        layout uses less memory but can hold fewer elements.

        `word_bits: int = 64` - The word size of the compact storage layout,
        one of 8, 16, 32 or 64. Ignored by the standard layout.

        `capacity: int = 0` - The number of elements to pre-allocate.

        `debug: bool = False` - Whether to log debug messages.

        Raises
        ------
        `ValueError` - If the number of labels differs from the number of
        values, or the storage mode is not recognised.

        `CapacityExceededError` - If there are more values than the compact
        storage layout can hold.
        """
        self.__debug: bool = debug
        self.__values: list[LT] = list(values)
        labels_: Optional[list[Hashable]] = None
        if labels is not None:
            labels_ = list(labels)
            if len(labels_) != len(self.__values):
                raise ValueError(
                    f"Got {len(labels_)} labels for "
                    f"{len(self.__values)} values.")
        self.__dset: IndexedDisjointSet = IndexedDisjointSet(
            len(self.__values),
            storage=storage,
            word_bits=word_bits,
            capacity=capacity,
            debug=debug
        )

        if self.__debug:
            self.__PARTITION_VEC_LOGGER.debug(
                "Creating new partition vector with: "
                "length=%s, labelled=%s, storage=%s",
                len(self.__values), labels_ is not None,
                self.__dset.storage_mode.value
            )

        if labels_ is not None:
            first_of_label: dict[Hashable, int] = {}
            for index, label in enumerate(labels_):
                first: int = first_of_label.setdefault(label, index)
                if first != index:
                    self.__dset.union(first, index)

    @classmethod
    def with_capacity(
        cls,
        capacity: int,
        storage: StorageMode | StorageModeNames = "standard",
        word_bits: int = 64,
        debug: bool = False
    ) -> "PartitionVec[LT]":
        """Create an empty partition vector with the given capacity."""
        return cls(
            storage=storage,
            word_bits=word_bits,
            capacity=capacity,
            debug=debug
        )

    def __str__(self) -> str:
        """
        Return string summary representation describing number of elements and
        disjoint sets.
        """
        return (f"Partition-Vector: total elements = {len(self)}, "
                f"total disjoint sets = {self.count_sets()}")

    def __repr__(self) -> str:
        """
        Return an instantiable string representation of the partition vector.

        The labels are numbered in order of the first index of each set.
        """
        labels: list[int] = []
        names: dict[int, int] = {}
        for index in range(len(self)):
            root: int = self.__dset.find_root(index)
            labels.append(names.setdefault(root, len(names)))
        extra: str = ""
        if self.__dset.storage_mode is StorageMode.COMPACT:
            extra = (f", storage='compact', "
                     f"word_bits={self.__dset.store.word_bits}")  # type: ignore
        return (f"{self.__class__.__name__}({self.__values!r}, "
                f"labels={labels!r}{extra})")

    def __eq__(self, other: object) -> bool:
        """
        Whether two partition vectors have equal values and the same
        partition of their indices.

        The roots of the sets do not need to be the same.
        """
        if not isinstance(other, PartitionVec):
            return NotImplemented
        if len(self) != len(other):
            return False
        roots: dict[int, int] = {}
        for index in range(len(self)):
            if self.__values[index] != other.__values[index]:
                return False
            self_root: int = self.__dset.find_root(index)
            other_root: int = other.__dset.find_root(index)
            if roots.setdefault(self_root, other_root) != other_root:
                return False
        # Two different roots of this vector mapping to the same root of the
        # other means the other has merged sets that this vector has not.
        return len(set(roots.values())) == len(roots)

    __hash__ = None  # type: ignore

    @overload
    def __getitem__(self, index: int, /) -> LT:
        """Get the value at the given index."""
        ...

    @overload
    def __getitem__(self, index: slice, /) -> list[LT]:
        """Get the values in the given slice."""
        ...

    def __getitem__(self, index: int | slice, /) -> LT | list[LT]:
        """Get the value or values at the given index or slice."""
        return self.__values[index]

    def __setitem__(self, index: int, value: LT, /) -> None:
        """
        Replace the value at the given index.

        The set membership of the index does not change.
        """
        if isinstance(index, slice):
            raise TypeError("Partition vectors do not support slice "
                            "assignment, as it could change the length.")
        self.__values[index] = value

    def __iter__(self) -> Iterator[LT]:
        """Iterate over the values."""
        return iter(self.__values)

    def __len__(self) -> int:
        """Get the number of elements."""
        return len(self.__values)

    def __copy__(self) -> "PartitionVec[LT]":
        return self.copy()

    @property
    def storage_mode(self) -> StorageMode:
        """Get the storage mode of the set metadata."""
        return self.__dset.storage_mode

    @property
    def capacity(self) -> int:
        """Get the number of elements that can be held without reallocating."""
        return self.__dset.capacity

    @property
    def max_len(self) -> int:
        """Get the maximum number of elements that can be held."""
        return self.__dset.max_len

    @property
    def disjoint_set(self) -> IndexedDisjointSet:
        """Get the disjoint-set over the element indices."""
        return self.__dset

    def copy(self) -> "PartitionVec[LT]":
        """
        Get a copy of this partition vector.

        The values themselves are not copied.
        """
        other: PartitionVec[LT] = PartitionVec.__new__(PartitionVec)
        other.__debug = self.__debug
        other.__values = self.__values.copy()
        other.__dset = self.__dset.copy()
        return other

    def union(self, first_index: int, second_index: int, /) -> bool:
        """
        Join the sets of the two indices.

        This is amortised `O(a(n))` time, where `a` is the inverse Ackermann
        function. When both sets have the same rank, the representative of the
        combined set is the representative of the second index's set.

        Returns
        -------
        `bool` - True if the sets were merged, False if the indices were
        already in the same set.

        Raises
        ------
        `PartitionIndexError` - If either index is out of range.
        """
        return self.__dset.union(first_index, second_index)

    def same_set(self, first_index: int, second_index: int, /) -> bool:
        """
        Whether the two indices are in the same set.

        This is amortised `O(a(n))` time.
        """
        return self.__dset.same_set(first_index, second_index)

    def other_sets(self, first_index: int, second_index: int, /) -> bool:
        """Whether the two indices are in different sets."""
        return self.__dset.other_sets(first_index, second_index)

    def find_label(self, index: int, /) -> int:
        """
        Get the representative index of the set containing the given index.

        Every index of a set gives the same label, but the label is only
        stable until the set is next modified (by `union`, `make_singleton`,
        `pop` or `truncate`).
        """
        return self.__dset.find_root(index)

    def set(
        self,
        index: int, /,
        compress: bool = False
    ) -> Iterator[tuple[int, LT]]:
        """
        Iterate over the `(index, value)` pairs of the set containing the
        given index.

        Iteration starts at the given index, each following pair is found in
        `O(1)` time. The partition vector must not be modified while the
        iterator is in use.

        Parameters
        ----------
        `index: int` - Any index of the set.

        `compress: bool = False` - Whether to flatten the set's tree while
        iterating, which speeds up later look-ups.
        """
        values: list[LT] = self.__values
        return (
            (member, values[member])
            for member in self.__dset.iter_set(index, compress)
        )

    def all_sets(self) -> Iterator[Iterator[tuple[int, LT]]]:
        """
        Iterate over all sets.

        Yields an iterator of `(index, value)` pairs for each set, in order
        of the smallest index of each set. Each set's iteration starts at its
        smallest index.
        """
        values: list[LT] = self.__values
        for set_ in self.__dset.all_sets():
            yield ((member, values[member]) for member in set_)

    def make_singleton(self, index: int, /) -> None:
        """
        Remove the index from its set, giving it a set of its own. The other
        members of its set stay in the same set.

        This is `O(m)` time, where `m` is the size of the set, and does
        nothing if the index is already the only member of its set.
        """
        self.__dset.make_singleton(index)

    def is_singleton(self, index: int, /) -> bool:
        """Whether the index is the only member of its set, in `O(1)` time."""
        return self.__dset.is_singleton(index)

    def len_of_set(self, index: int, /) -> int:
        """Get the number of members of the set of the index, in `O(m)`."""
        return self.__dset.len_of_set(index)

    def count_sets(self) -> int:
        """Get the number of sets, in `O(n a(n))` time."""
        return self.__dset.count_sets()

    def append(self, value: LT, /) -> int:
        """
        Append a value in a new set of its own, and return its index.

        Raises
        ------
        `CapacityExceededError` - If the compact storage layout is full, in
        which case nothing changes.
        """
        index: int = self.__dset.push()
        self.__values.append(value)
        return index

    def extend(self, values: Iterable[LT], /) -> range:
        """
        Append the values, each in a new set of its own, and return their
        indices. Either all values are appended or none are.

        If the values are another partition vector, its sets are kept, such
        that the appended indices are partitioned exactly as they were in the
        other vector (shifted by the original length of this vector).
        """
        values_: list[LT] = list(values)
        groups: list[list[int]] = []
        if isinstance(values, PartitionVec):
            groups = [[index for index, _ in set_]
                      for set_ in values.all_sets()]
        indices: range = self.__dset.extend(len(values_))
        self.__values.extend(values_)
        for group in groups:
            first: int = indices[group[0]]
            for index in group[1:]:
                self.__dset.union(first, indices[index])
        if groups and self.__debug:
            self.__PARTITION_VEC_LOGGER.debug(
                "Extended partition vector with %s elements in %s sets",
                len(values_), len(groups)
            )
        return indices

    def __iadd__(self, values: Iterable[LT]) -> "PartitionVec[LT]":
        self.extend(values)
        return self

    def pop(self) -> LT:
        """
        Remove and return the last value.

        The other members of its set stay in the same set.

        Raises
        ------
        `PartitionIndexError` - If the partition vector is empty.
        """
        if not self.__values:
            raise PartitionIndexError(-1, 0)
        self.__dset.pop()
        return self.__values.pop()

    def truncate(self, length: int, /) -> None:
        """
        Shorten the vector to the given length, removing the values at the
        end. The partition of the remaining indices does not change. Does
        nothing if the length is not less than the current length.
        """
        if length >= len(self):
            return
        self.__dset.truncate(length)
        del self.__values[length:]

    def resize(self, length: int, value: Any = None, /) -> None:
        """
        Resize the vector to the given length.

        If the length increases, the new indices each get their own set and
        hold the given value. If it decreases, the vector is truncated.
        """
        if length < 0:
            raise ValueError(f"length must be non-negative. Got; {length}.")
        if length < len(self):
            self.truncate(length)
        elif length > len(self):
            self.extend([value] * (length - len(self)))

    def clear(self) -> None:
        """Remove all values, keeping the allocated capacity."""
        self.__dset.clear()
        self.__values.clear()

    def reserve(self, additional: int, /) -> None:
        """Reserve capacity for at least `additional` more values."""
        self.__dset.reserve(additional)

    def shrink_to_fit(self) -> None:
        """Release all unused capacity of the set metadata."""
        self.__dset.shrink_to_fit()

    def as_list(self) -> list[LT]:
        """Get a new list of the values."""
        return self.__values.copy()

    def as_sets(self) -> list[list[LT]]:
        """Get a list of the values of each set, ordered as `all_sets`."""
        return [[value for _, value in set_] for set_ in self.all_sets()]


def from_sets(
    sets: Iterable[Sequence[LT]], /,
    storage: StorageMode | StorageModeNames = "standard",
    word_bits: int = 64
) -> PartitionVec[LT]:
    """
    Create a partition vector from a sequence of sets of values.

    The values of each set are appended in order, such that the values of
    the first set have the lowest indices.
    """
    pvec: PartitionVec[LT] = PartitionVec(storage=storage, word_bits=word_bits)
    for set_ in sets:
        indices: range = pvec.extend(set_)
        for index in indices[1:]:
            pvec.union(indices[0], index)
    return pvec
