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

"""Module containing a dictionary structure partitioned into disjoint sets."""

import collections.abc
import logging
from typing import (Generic, Hashable, Iterable, Iterator, Mapping, Optional,
                    TypeVar)

from partitions.datastructures.disjointset import IndexedDisjointSet
from partitions.datastructures.metadata import StorageMode, StorageModeNames

__copyright__ = "Copyright (C) 2023 Oliver Michael Kamperis"
__license__ = "GPL-3.0"
__version__ = "1.0.0"

__all__ = (
    "PartitionDict",
)


def __dir__() -> tuple[str, ...]:
    """Get the names of module attributes."""
    return __all__


KT = TypeVar("KT", bound=Hashable)
VT = TypeVar("VT")


class PartitionDict(collections.abc.MutableMapping, Generic[KT, VT]):
    """
    A dictionary whose keys are partitioned into disjoint sets.

    Each key is stored in a slot of an indexed disjoint-set. Inserting a new
    key places it in a set of its own, and sets are merged with `union` and
    split with `make_singleton`, exactly as for `PartitionVec`. Deleting a key
    first removes it from its set, and its slot is then reused by the next
    inserted key.

    Example Usage
    -------------
    ```
    from partitions.datastructures.partitiondict import PartitionDict

    >>> pdict = PartitionDict({"a": 1, "b": 2, "c": 3})
    >>> pdict.union("a", "c")
    True
    >>> pdict.same_set("a", "c")
    True
    >>> sorted(pdict.set("c"))
    [('a', 1), ('c', 3)]
    >>> del pdict["c"]
    >>> pdict.is_singleton("a")
    True
    ```
    """

    __PARTITION_DICT_LOGGER = logging.getLogger("PartitionDict")

    __slots__ = {
        "__index_of": "Maps: key -> slot index.",
        "__keys": "The key in each slot, None if the slot is free.",
        "__values": "The value in each slot, None if the slot is free.",
        "__free": "Stack of free slot indices.",
        "__dset": "The disjoint-set over the slot indices.",
        "__debug": "Whether to log debug messages."
    }

    def __init__(
        self,
        items: Mapping[KT, VT] | Iterable[tuple[KT, VT]] | None = None, /,
        sets: Optional[Iterable[Iterable[KT]]] = None,
        storage: StorageMode | StorageModeNames = "standard",
        word_bits: int = 64,
        debug: bool = False
    ) -> None:
        """
        Create a new partition dictionary.

        Parameters
        ----------
        `items: Mapping[KT, VT] | Iterable[tuple[KT, VT]] | None = None` -
        The initial items, each key is placed in a set of its own.

        `sets: Iterable[Iterable[KT]] | None = None` - Groups of keys to union
        together after construction.

        `storage: StorageMode | "standard" | "compact" = "standard"` - The
        metadata storage layout.

        `word_bits: int = 64` - The word size of the compact storage layout.

        `debug: bool = False` - Whether to log debug messages.

        Raises
        ------
        `KeyError` - If `sets` contains a key that is not in `items`. The keys
        of each group are all checked before the group is unioned.
        """
        self.__debug: bool = debug
        self.__index_of: dict[KT, int] = {}
        self.__keys: list[Optional[KT]] = []
        self.__values: list[Optional[VT]] = []
        self.__free: list[int] = []
        self.__dset: IndexedDisjointSet = IndexedDisjointSet(
            storage=storage,
            word_bits=word_bits,
            debug=debug
        )

        if self.__debug:
            self.__PARTITION_DICT_LOGGER.debug(
                "Creating new partition dictionary with: storage=%s",
                self.__dset.storage_mode.value
            )

        if items is not None:
            self.update(items)
        if sets is not None:
            for set_ in sets:
                indices = [self.__index_of[key] for key in set_]
                if indices:
                    self.__dset.union_many(indices)

    def __str__(self) -> str:
        """
        Return string summary representation describing number of items and
        disjoint sets.
        """
        return (f"Partition-Dictionary: total items = {len(self)}, "
                f"total disjoint sets = {self.count_sets()}")

    def __repr__(self) -> str:
        """Return an instantiable string representation of the dictionary."""
        items = dict(self.items())
        sets_ = [[key for key, _ in set_] for set_ in self.all_sets()]
        return f"{self.__class__.__name__}({items!r}, sets={sets_!r})"

    def __eq__(self, other: object) -> bool:
        """
        Whether two partition dictionaries have equal items and the same
        partition of their keys.

        Only partition dictionaries are compared, the representative keys of
        the sets do not need to be the same.
        """
        if not isinstance(other, PartitionDict):
            return NotImplemented
        if len(self) != len(other):
            return False
        labels: dict[KT, KT] = {}
        for key, value in self.items():
            if key not in other or other[key] != value:
                return False
            self_label: KT = self.find_label(key)
            other_label: KT = other.find_label(key)
            if labels.setdefault(self_label, other_label) != other_label:
                return False
        return len(set(labels.values())) == len(labels)

    __hash__ = None  # type: ignore

    def __getitem__(self, key: KT, /) -> VT:
        """Get the value of the given key."""
        return self.__values[self.__index_of[key]]  # type: ignore

    def __setitem__(self, key: KT, value: VT, /) -> None:
        """
        Set the value of the given key.

        If the key is new, it is placed in a set of its own, otherwise its
        set membership does not change.
        """
        index: Optional[int] = self.__index_of.get(key)
        if index is not None:
            self.__values[index] = value
            return
        if self.__free:
            index = self.__free.pop()
            self.__keys[index] = key
            self.__values[index] = value
            if self.__debug:
                self.__PARTITION_DICT_LOGGER.debug(
                    "Reusing free slot %s for key %r", index, key
                )
        else:
            index = self.__dset.push()
            self.__keys.append(key)
            self.__values.append(value)
        self.__index_of[key] = index

    def __delitem__(self, key: KT, /) -> None:
        """
        Delete the given key.

        The other keys of its set stay in the same set. This is `O(m)` time,
        where `m` is the size of its set.
        """
        index: int = self.__index_of.pop(key)
        self.__dset.make_singleton(index)
        self.__keys[index] = None
        self.__values[index] = None
        self.__free.append(index)

    def __contains__(self, key: object, /) -> bool:
        """Whether the key is in the dictionary."""
        return key in self.__index_of

    def __iter__(self) -> Iterator[KT]:
        """Iterate over the keys."""
        return iter(self.__index_of)

    def __len__(self) -> int:
        """Get the number of items."""
        return len(self.__index_of)

    @property
    def storage_mode(self) -> StorageMode:
        """Get the storage mode of the set metadata."""
        return self.__dset.storage_mode

    def clear(self) -> None:
        """Remove all items."""
        self.__index_of.clear()
        self.__keys.clear()
        self.__values.clear()
        self.__free.clear()
        self.__dset.clear()

    def union(self, first_key: KT, second_key: KT, /) -> bool:
        """
        Join the sets of the two keys.

        Returns
        -------
        `bool` - True if the sets were merged, False if the keys were already
        in the same set.

        Raises
        ------
        `KeyError` - If either key is not in the dictionary.
        """
        return self.__dset.union(
            self.__index_of[first_key],
            self.__index_of[second_key]
        )

    def same_set(self, first_key: KT, second_key: KT, /) -> bool:
        """Whether the two keys are in the same set."""
        return self.__dset.same_set(
            self.__index_of[first_key],
            self.__index_of[second_key]
        )

    def other_sets(self, first_key: KT, second_key: KT, /) -> bool:
        """Whether the two keys are in different sets."""
        return not self.same_set(first_key, second_key)

    def find_label(self, key: KT, /) -> KT:
        """
        Get the representative key of the set containing the given key.

        The representative is only stable until the set is next modified.
        """
        root: int = self.__dset.find_root(self.__index_of[key])
        return self.__keys[root]  # type: ignore

    def make_singleton(self, key: KT, /) -> None:
        """Remove the key from its set, giving it a set of its own."""
        self.__dset.make_singleton(self.__index_of[key])

    def is_singleton(self, key: KT, /) -> bool:
        """Whether the key is the only member of its set."""
        return self.__dset.is_singleton(self.__index_of[key])

    def len_of_set(self, key: KT, /) -> int:
        """Get the number of keys in the set of the given key."""
        return self.__dset.len_of_set(self.__index_of[key])

    def count_sets(self) -> int:
        """Get the number of sets."""
        dset: IndexedDisjointSet = self.__dset
        return len({dset.find_root(index)
                    for index in self.__index_of.values()})

    def set(self, key: KT, /) -> Iterator[tuple[KT, VT]]:
        """
        Iterate over the `(key, value)` pairs of the set containing the given
        key, starting with the given key.

        The dictionary must not be modified while the iterator is in use.
        """
        keys: list[Optional[KT]] = self.__keys
        values: list[Optional[VT]] = self.__values
        return (
            (keys[index], values[index])  # type: ignore
            for index in self.__dset.iter_set(self.__index_of[key])
        )

    def all_sets(self) -> Iterator[Iterator[tuple[KT, VT]]]:
        """
        Iterate over all sets.

        Yields an iterator of `(key, value)` pairs for each set, in insertion
        order of the first key of each set.
        """
        done: set[int] = set()
        dset: IndexedDisjointSet = self.__dset
        for key, index in self.__index_of.items():
            root: int = dset.find_root(index)
            if root not in done:
                done.add(root)
                yield self.set(key)
