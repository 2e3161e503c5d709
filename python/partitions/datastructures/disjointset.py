###########################################################################
###########################################################################
## An indexed disjoint-set data structure with iterable sub-sets.        ##
##                                                                       ##
## Copyright (C)  2022  Oliver Michael Kamperis                          ##
## Email: o.m.kamperis@gmail.com                                         ##
##                                                                       ##
## This program is free software: you can redistribute it and/or modify  ##
## it under the terms of the GNU General Public License as published by  ##
## the Free Software Foundation, either version 3 of the License, or     ##
## any later version.                                                    ##
##                                                                       ##
## This program is distributed in the hope that it will be useful,       ##
## but WITHOUT ANY WARRANTY; without even the implied warranty of        ##
## MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the          ##
## GNU General Public License for more details.                          ##
##                                                                       ##
## You should have received a copy of the GNU General Public License     ##
## along with this program. If not, see <https://www.gnu.org/licenses/>. ##
###########################################################################
###########################################################################

"""Module containing an indexed disjoint-set data structure."""

import collections.abc
import logging
import numbers
from typing import Iterable, Iterator, Optional, overload

import numpy as np

from partitions.datastructures._partition_errors import PartitionIndexError
from partitions.datastructures.metadata import (MetadataStore, StorageMode,
                                                StorageModeNames,
                                                create_store,
                                                get_storage_mode)

__copyright__ = "Copyright (C) 2022 Oliver Michael Kamperis"
__license__ = "GPL-3.0"

__all__ = (
    "IndexedDisjointSet",
)


def __dir__() -> tuple[str, ...]:
    """Get the names of module attributes."""
    return __all__


class IndexedDisjointSet(collections.abc.Sequence):
    """
    An indexed disjoint-set data structure, also called union-find, which
    additionally allows efficient iteration over the elements of a sub-set.

    The elements of an indexed disjoint-set are the integers `0` to `n - 1`,
    each of which is a member of exactly one disjoint sub-set. Initially each
    element is in its own (singleton) sub-set, and sub-sets can be merged with
    `union` and split with `make_singleton`.

    Each disjoint sub-set is represented by its root, and all other elements
    in the same sub-set are stored in a tree structure that connects them to
    their root. Finding an element's root iterates up the tree and then fully
    compresses the path, so that subsequent look-ups are constant time. Union
    operations attach the root of the tree with the lower rank to the root of
    the tree with the higher rank, which keeps trees shallow. Together, these
    give amortised `O(a(n))` time for `find_root` and `union`, where `a` is
    the inverse Ackermann function.

    The tree structure only points from children to parents, so on its own it
    cannot answer "which elements are in this sub-set" in better than `O(n)`.
    Therefore, each element also stores a link to another element of the same
    sub-set, such that the links of every sub-set form a single circular list.
    Two circular lists are merged in constant time on union by swapping the
    links of the two roots, and a sub-set is iterated in `O(1)` time per
    element by following the links.

    The metadata (parent, link and rank) of each element is kept in a
    `MetadataStore`, either the standard store with three arrays, or the
    compact store which bit-packs the rank into the parent and link words.
    Both stores behave identically.

    This structure is not thread-safe. Modifying it while iterating over one
    of its sub-sets with `iter_set` is undefined.

    Example Usage
    -------------
    ```
    from partitions.datastructures.disjointset import IndexedDisjointSet

    >>> dset = IndexedDisjointSet(5)
    >>> dset
    IndexedDisjointSet(5, sets=[[0], [1], [2], [3], [4]])

    # Unioning returns whether the sub-sets were previously disjoint.
    >>> dset.union(0, 1)
    True
    >>> dset.union(2, 3)
    True
    >>> dset.union(1, 2)
    True
    >>> dset.union(3, 0)
    False
    >>> dset.same_set(0, 3)
    True
    >>> sorted(dset.iter_set(0))
    [0, 1, 2, 3]
    >>> list(dset.iter_set(4))
    [4]
    ```
    """

    __DISJOINT_SET_LOGGER = logging.getLogger("IndexedDisjointSet")

    __slots__ = {
        "__store": "The metadata store holding parents, links and ranks.",
        "__storage": "The storage mode of the metadata store.",
        "__debug": "Whether to log debug messages."
    }

    def __init__(
        self,
        length: int = 0, /,
        sets: Optional[Iterable[Iterable[int]]] = None,
        storage: StorageMode | StorageModeNames = "standard",
        word_bits: int = 64,
        capacity: int = 0,
        debug: bool = False
    ) -> None:
        """
        Create a new indexed disjoint-set.

        Parameters
        ----------
        `length: int = 0` - The number of elements, each initially in its own
        sub-set.

        `sets: Iterable[Iterable[int]] | None = None` - Groups of elements to
        union together after construction. An element that appears in more
        than one group joins the groups together.

        `storage: StorageMode | "standard" | "compact" = "standard"` - The
        metadata storage layout.

        `word_bits: int = 64` - The word size of the compact storage layout,
        one of 8, 16, 32 or 64. Ignored by the standard layout.

        `capacity: int = 0` - The number of elements to pre-allocate storage
        for, the actual capacity is at least the length.

        `debug: bool = False` - Whether to log debug messages.

        Raises
        ------
        `ValueError` - If the length is negative or the storage mode name is
        not recognised.

        `CapacityExceededError` - If the length exceeds the maximum number of
        elements of the compact storage layout.

        `PartitionIndexError` - If any element of `sets` is out of range.
        """
        if not isinstance(length, int):
            raise TypeError(f"length must be an integer. Got; {length!r}.")
        if length < 0:
            raise ValueError(f"length must be non-negative. Got; {length}.")
        self.__debug: bool = debug
        self.__storage: StorageMode = get_storage_mode(storage)
        self.__store: MetadataStore = create_store(
            self.__storage,
            capacity=max(capacity, length),
            word_bits=word_bits,
            logger=self.__DISJOINT_SET_LOGGER if debug else None
        )
        self.__store.extend(length)

        if self.__debug:
            self.__DISJOINT_SET_LOGGER.debug(
                "Creating new indexed disjoint-set with: "
                "length=%s, storage=%s, word_bits=%s, capacity=%s",
                length, self.__storage.value, word_bits, capacity
            )

        if sets is not None:
            for set_ in sets:
                set_ = list(set_)
                if set_:
                    self.union_many(set_)

    def __str__(self) -> str:
        """
        Return string summary representation describing number of elements and
        disjoint sub-sets.
        """
        return (f"Indexed Disjoint-Set: total elements = {len(self)}, "
                f"total disjoint sub-sets = {self.count_sets()}")

    def __repr__(self) -> str:
        """Return an instantiable string representation of the disjoint-set."""
        sets_ = [sorted(set_) for set_ in self.all_sets()]
        if self.__storage is StorageMode.STANDARD:
            return f"{self.__class__.__name__}({len(self)}, sets={sets_!r})"
        return (f"{self.__class__.__name__}({len(self)}, sets={sets_!r}, "
                f"storage={self.__storage.value!r}, "
                f"word_bits={self.__store.word_bits!r})")  # type: ignore

    @overload
    def __getitem__(self, index: int, /) -> int:
        """Find the root of the sub-set containing the given element."""
        ...

    @overload
    def __getitem__(self, index: slice, /) -> list[int]:
        """Find the roots of the sub-sets containing the sliced elements."""
        ...

    def __getitem__(self, index: int | slice, /) -> int | list[int]:
        """Find the root of the sub-set(s) containing the given element(s)."""
        if isinstance(index, slice):
            return [self.__find_root(i)
                    for i in range(*index.indices(len(self)))]
        return self.find_root(index)

    def __len__(self) -> int:
        """Get the number of elements in the disjoint-set."""
        return len(self.__store)

    def __copy__(self) -> "IndexedDisjointSet":
        return self.copy()

    @property
    def storage_mode(self) -> StorageMode:
        """Get the storage mode of the metadata."""
        return self.__storage

    @property
    def store(self) -> MetadataStore:
        """Get the metadata store."""
        return self.__store

    @property
    def capacity(self) -> int:
        """Get the number of elements that can be held without reallocating."""
        return self.__store.capacity

    @property
    def max_len(self) -> int:
        """Get the maximum number of elements the disjoint-set can hold."""
        return self.__store.max_len

    def copy(self) -> "IndexedDisjointSet":
        """Get a deep copy of this disjoint-set."""
        other = IndexedDisjointSet.__new__(IndexedDisjointSet)
        other.__debug = self.__debug
        other.__storage = self.__storage
        other.__store = self.__store.copy()
        return other

    def check_index(self, index: object, /) -> int:
        """
        Check that the given index is an element of the disjoint-set.

        Returns
        -------
        `int` - The index as a plain integer.

        Raises
        ------
        `PartitionIndexError` - If the index is not an integer in the range
        `[0, len)`. Negative indices are not accepted.
        """
        if (isinstance(index, bool)
                or not isinstance(index, numbers.Integral)
                or not 0 <= index < len(self.__store)):
            raise PartitionIndexError(index, len(self.__store))
        return int(index)

    def push(self) -> int:
        """
        Add a new element in its own sub-set and return its index.

        Raises
        ------
        `CapacityExceededError` - If the compact store is full.
        """
        return self.__store.push()

    def extend(self, count: int, /) -> range:
        """
        Add `count` new elements each in their own sub-set and return their
        indices. Either all elements are added or none are.
        """
        if count < 0:
            raise ValueError(f"count must be non-negative. Got; {count}.")
        return self.__store.extend(count)

    def reserve(self, additional: int, /) -> None:
        """Reserve capacity for at least `additional` more elements."""
        self.__store.reserve(additional)

    def shrink_to_fit(self) -> None:
        """Release all unused capacity."""
        self.__store.shrink_to_fit()

    def clear(self) -> None:
        """Remove all elements."""
        self.__store.clear()

    def pop(self) -> int:
        """
        Remove the last element and return its index.

        The remaining elements of its sub-set stay in the same sub-set.

        Raises
        ------
        `PartitionIndexError` - If the disjoint-set is empty.
        """
        if not len(self.__store):
            raise PartitionIndexError(-1, 0)
        index: int = len(self.__store) - 1
        self.make_singleton(index)
        self.__store.truncate(index)
        return index

    def truncate(self, length: int, /) -> None:
        """
        Remove all elements with index greater than or equal to `length`.

        The partition of the remaining elements is unchanged, i.e. any two
        remaining elements are in the same sub-set after truncation if and
        only if they were before. Does nothing if `length` is not less than
        the current length.

        This is `O(n)` in the number of remaining elements, plus the size of
        all sub-sets that contained removed elements.
        """
        if length < 0:
            raise ValueError(f"length must be non-negative. Got; {length}.")
        if length >= len(self.__store):
            return
        if self.__debug:
            self.__DISJOINT_SET_LOGGER.debug(
                "Truncating indexed disjoint-set from %s to %s elements",
                len(self.__store), length
            )

        store: MetadataStore = self.__store
        for index in range(length):
            if store.parent(index) >= length:
                # The path to the root leaves the kept elements, so rebuild
                # the kept part of the sub-set as a flat tree rooted here.
                kept: list[int] = [
                    member for member in self.__iter_set(index)
                    if member < length
                ]
                for member, next_ in zip(kept, kept[1:] + kept[:1]):
                    store.set_parent(member, index)
                    store.set_link(member, next_)
                store.set_rank(index, 0 if len(kept) == 1 else 1)
            elif (current := store.link(index)) >= length:
                # Skip over the run of removed elements in the circular list.
                while current >= length:
                    current = store.link(current)
                store.set_link(index, current)

        store.truncate(length)

    def find_root(
        self,
        element: int, /,
        compress: bool = True
    ) -> int:
        """
        Find the root of the sub-set containing the given element.

        A root, is a set element, whose parent is itself.

        This method finds roots via an iterative search, and if
        compression is enabled, iteratively compresses the path
        from the given element to the root, such that the parents
        of all non-root elements on the path, will be the root.

        Parameters
        ----------
        `element: int` - The element whose root to find.

        `compress: bool = True` - Whether to fully compress the path
        from the given node to its root. This more expensive operation
        will speed up future lookups for elements on the same path.

        Returns
        -------
        `int` - The root of the sub-set containing the given element.
        The root is only stable until the sub-set is next modified.

        Raises
        ------
        `PartitionIndexError` - If the given element is out of range.
        """
        element = self.check_index(element)
        if compress:
            return self.__find_root(element)
        store: MetadataStore = self.__store
        while (parent := store.parent(element)) != element:
            element = parent
        return element

    def __find_root(self, element: int, /) -> int:
        """Unchecked root finding with full path compression."""
        # To find the root of the sub-set containing the given element,
        # simply iterate up the element's tree until a root is found.
        # An element is a root if its parent is itself.
        store: MetadataStore = self.__store
        _element: int = element
        while (parent := store.parent(_element)) != _element:
            _element = parent
        root: int = parent

        # Compression performed by a seperate loop,
        # achieves maximum possible level of compression.
        # Simply set the parent of all other elements on the path
        # from the given element to its root to the root.
        while (parent := store.parent(element)) != root:
            store.set_parent(element, root)
            element = parent

        return root

    def find_path(self, element: int, /) -> list[int]:
        """
        Find the current path from the given element to the root element of
        its disjoint sub-set.

        Parameters
        ----------
        `element: int` - The element whose path to its sub-set's root element
        to find.

        Returns
        -------
        `list[int]` - A list of elements on the path from the given element,
        to the root element of its disjoint sub-set. The list will contain
        only the given element if and only if the given element is the root
        of its own sub-set.
        """
        element = self.check_index(element)
        path: list[int] = [element]
        store: MetadataStore = self.__store
        while (parent := store.parent(element)) != element:
            path.append(parent)
            element = parent
        return path

    def union(
        self,
        element_1: int,
        element_2: int, /
    ) -> bool:
        """
        Union the sub-sets containing the given elements together,
        using the union-by-rank algorithm.

        This ensures that the shallower tree is unioned onto the deeper tree.
        If both trees have the same rank, the tree of the first element is
        unioned onto the tree of the second element, such that the root of
        the new combined set is the root of the original sub-set containing
        the second element, and its rank increases by one.

        The circular lists of the two sub-sets are spliced together in
        constant time by swapping the links of the two roots.

        Parameters
        ----------
        `element_1: int` - Any element of the disjoint-set.

        `element_2: int` - Any element of the disjoint-set.

        Returns
        -------
        `bool` - True if the sub-sets were merged, False if the elements were
        already in the same sub-set (in which case nothing changes).

        Raises
        ------
        `PartitionIndexError` - If either element is out of range, in which
        case nothing changes.
        """
        element_1 = self.check_index(element_1)
        element_2 = self.check_index(element_2)
        root_1: int = self.__find_root(element_1)
        root_2: int = self.__find_root(element_2)
        if root_1 == root_2:
            return False

        store: MetadataStore = self.__store

        # Splice the two circular lists into one.
        link_1: int = store.link(root_1)
        store.set_link(root_1, store.link(root_2))
        store.set_link(root_2, link_1)

        # Union by rank - Always union the shorter tree into the longer tree;
        #       - root_1 should always be the smaller rank,
        #       - With this method, we always get log(n) complexity.
        rank_1: int = store.rank(root_1)
        rank_2: int = store.rank(root_2)
        if rank_1 > rank_2:
            root_1, root_2 = root_2, root_1
        store.set_parent(root_1, root_2)

        # If the ranks of the roots are the same then the tree whose root was
        # unioned onto has now grown, and therefore its rank must increase.
        if rank_1 == rank_2:
            store.set_rank(root_2, rank_2 + 1)

        return True

    def union_many(self, elements: Iterable[int], /) -> int:
        """
        Union all elements in the given iterable of elements and return the
        root of the resulting sub-set.

        All elements are checked before any union is performed.
        """
        elements_ = [self.check_index(element) for element in elements]
        if not elements_:
            message: str = "Cannot union an empty iterable of elements."
            raise ValueError(message)
        first: int = elements_[0]
        for element in elements_[1:]:
            self.union(first, element)
        return self.__find_root(first)

    def is_connected(
        self,
        element_1: int, /,
        *elements: int
    ) -> bool:
        """
        Determine whether the elements are all in the same disjoint sub-set.

        If two elements are given, equivalent to:
            `self.find_root(element_1) == self.find_root(element_2)`.

        If more than two elements are given, equivalent to:
            `all(self.find_root(element_1) == self.find_root(other)
             for other in elements)`.
        """
        element_1 = self.check_index(element_1)
        elements_ = [self.check_index(element) for element in elements]
        root_1: int = self.__find_root(element_1)
        return all(
            root_1 == self.__find_root(element)
            for element in elements_
        )

    def same_set(self, element_1: int, element_2: int, /) -> bool:
        """Determine whether the two elements are in the same sub-set."""
        return self.is_connected(element_1, element_2)

    def other_sets(self, element_1: int, element_2: int, /) -> bool:
        """Determine whether the two elements are in different sub-sets."""
        return not self.is_connected(element_1, element_2)

    def iter_set(
        self,
        element: int, /,
        compress: bool = False
    ) -> Iterator[int]:
        """
        Iterate over all elements in the same sub-set as the given element.

        The iteration starts at the given element, and follows the circular
        list of the sub-set until it would return to the given element. Each
        step is constant time. The order of the other elements depends on the
        history of unions.

        The disjoint-set must not be modified while the iterator is in use.

        Parameters
        ----------
        `element: int` - Any element of the disjoint-set.

        `compress: bool = False` - Whether to set the parent of every element
        visited to the root of the sub-set, flattening its tree. Once the
        iteration is exhausted, the rank of the root is reset to match the
        flat tree (0 if it is alone, otherwise 1).

        Raises
        ------
        `PartitionIndexError` - If the element is out of range. Raised when
        this method is called, not when iteration starts.
        """
        element = self.check_index(element)
        return self.__iter_set(element, compress)

    def __iter_set(
        self,
        element: int,
        compress: bool = False
    ) -> Iterator[int]:
        """Unchecked iteration over the circular list of an element."""
        store: MetadataStore = self.__store
        root: int = self.__find_root(element) if compress else -1
        current: int = element
        size: int = 0
        while True:
            if compress:
                store.set_parent(current, root)
            yield current
            size += 1
            current = store.link(current)
            if current == element:
                break

        # Every member now points directly at the root, so the tree is flat.
        if compress:
            store.set_rank(root, 0 if size == 1 else 1)

    def is_singleton(self, element: int, /) -> bool:
        """Determine whether the element is the only element of its sub-set."""
        element = self.check_index(element)
        return self.__store.link(element) == element

    def len_of_set(self, element: int, /) -> int:
        """
        Get the number of elements in the sub-set of the given element.

        This is `O(m)` where `m` is the size of the sub-set.
        """
        store: MetadataStore = self.__store
        element = self.check_index(element)
        current: int = store.link(element)
        count: int = 1
        while current != element:
            current = store.link(current)
            count += 1
        return count

    def make_singleton(self, element: int, /) -> None:
        """
        Remove the element from its sub-set, and place it in a new sub-set on
        its own. All other elements of its original sub-set remain in the same
        sub-set as each other.

        Union-find trees cannot be split, so the remaining elements are
        rebuilt into a new flat tree, whose root is the element after the given
        element in the circular list. This is `O(m)` where `m` is the size of
        the original sub-set, unlike `union` and `find_root`. Does nothing if
        the element is already a singleton.

        Raises
        ------
        `PartitionIndexError` - If the element is out of range, in which case
        nothing changes.
        """
        element = self.check_index(element)
        store: MetadataStore = self.__store
        current: int = store.link(element)
        if current == element:
            return

        # The element after the given one becomes the new root.
        root: int = current
        size: int = 1

        # All parents except for the last are updated.
        while (next_ := store.link(current)) != element:
            store.set_parent(current, root)
            current = next_
            size += 1

        # The last element is the predecessor of the given element,
        # linking it to the new root removes the given element from the list.
        store.set_parent(current, root)
        store.set_link(current, root)
        store.set_rank(root, 0 if size == 1 else 1)
        store.reset(element)

        if self.__debug:
            self.__DISJOINT_SET_LOGGER.debug(
                "Made %s a singleton, rebuilt %s remaining elements under "
                "new root %s", element, size, root
            )

    def count_sets(self) -> int:
        """
        Get the number of disjoint sub-sets.

        This is `O(n a(n))` in the number of elements.
        """
        done = np.zeros(len(self.__store), dtype=bool)
        count: int = 0
        for element in range(len(self.__store)):
            root: int = self.__find_root(element)
            if not done[root]:
                done[root] = True
                count += 1
        return count

    def all_sets(self) -> Iterator[Iterator[int]]:
        """
        Iterate over all disjoint sub-sets.

        Yields an iterator over each sub-set, see `iter_set`. The sub-sets
        are yielded in order of their smallest element, and each iteration
        starts at that element.
        """
        done = np.zeros(len(self.__store), dtype=bool)
        for element in range(len(self.__store)):
            root: int = self.__find_root(element)
            if not done[root]:
                done[root] = True
                yield self.__iter_set(element)

    def find_all_sets(self) -> dict[int, list[int]]:
        """
        Find all distinct sub-sets in this disjoint-set.

        Returns
        -------
        `dict[int, list[int]]` - A dictionary, whose keys are the roots of
        each distinct sub-set, and the values are the sorted elements of the
        sub-sets themselves.
        """
        sets: dict[int, list[int]] = {}
        for element in range(len(self.__store)):
            sets.setdefault(self.__find_root(element), []).append(element)
        return sets
