import random
import unittest

from partitions.datastructures._partition_errors import PartitionIndexError
from partitions.datastructures.disjointset import IndexedDisjointSet


def assert_valid(test: unittest.TestCase, dset: IndexedDisjointSet) -> None:
    """Check the forest and circular lists describe the same partition."""
    length = len(dset)
    roots = [dset.find_root(i, compress=False) for i in range(length)]
    for i in range(length):
        test.assertLessEqual(len(dset.find_path(i)), length)
        members = list(dset.iter_set(i))
        test.assertEqual(len(members), len(set(members)))
        test.assertEqual(
            set(members),
            {k for k in range(length) if roots[k] == roots[i]}
        )
        test.assertEqual(members[0], i)


class TestIndexedDisjointSet(unittest.TestCase):
    def test_initially_disjoint(self):
        dset = IndexedDisjointSet(5)
        self.assertEqual(len(dset), 5)
        self.assertEqual(list(dset), [0, 1, 2, 3, 4])
        self.assertEqual(dset.count_sets(), 5)
        self.assertTrue(all(dset.is_singleton(i) for i in range(5)))

    def test_scenario(self):
        dset = IndexedDisjointSet(5)
        self.assertTrue(dset.union(0, 1))
        self.assertTrue(dset.union(2, 3))
        self.assertTrue(dset.union(1, 2))
        self.assertTrue(dset.same_set(0, 3))
        self.assertFalse(dset.same_set(0, 4))
        self.assertEqual(sorted(dset.iter_set(0)), [0, 1, 2, 3])
        self.assertEqual(list(dset.iter_set(4)), [4])
        self.assertEqual(dset.count_sets(), 2)
        assert_valid(self, dset)

    def test_reflexive(self):
        dset = IndexedDisjointSet(3)
        dset.union(0, 1)
        for i in range(3):
            self.assertTrue(dset.same_set(i, i))
            self.assertFalse(dset.union(i, i))
        self.assertFalse(dset.union(1, 0))
        self.assertEqual(dset.find_all_sets(), {1: [0, 1], 2: [2]})

    def test_union_tie_break_keeps_second_root(self):
        dset = IndexedDisjointSet(4)
        dset.union(0, 1)
        self.assertEqual(dset.find_root(0), 1)
        dset.union(3, 2)
        self.assertEqual(dset.find_root(3), 2)
        # Equal ranks, the root of the second argument survives.
        dset.union(1, 2)
        self.assertEqual(dset[0], 2)

    def test_union_by_rank_attaches_shallower_tree(self):
        dset = IndexedDisjointSet(4)
        dset.union(0, 1)
        dset.union(1, 2)
        # The singleton 3 is attached under root 1, whichever side it is on.
        dset.union(1, 3)
        self.assertEqual(dset.find_root(3), 1)

    def test_path_compression(self):
        dset = IndexedDisjointSet(4)
        dset.union(0, 1)
        dset.union(2, 3)
        dset.union(1, 3)
        self.assertEqual(dset.find_path(0), [0, 1, 3])
        self.assertEqual(dset.find_root(0, compress=False), 3)
        self.assertEqual(dset.find_path(0), [0, 1, 3])
        self.assertEqual(dset.find_root(0), 3)
        self.assertEqual(dset.find_path(0), [0, 3])

    def test_union_closure(self):
        dset = IndexedDisjointSet(6)
        dset.union(0, 1)
        dset.union(2, 3)
        dset.union(4, 5)
        dset.union(3, 5)
        self.assertTrue(dset.same_set(0, 1))
        self.assertTrue(dset.is_connected(2, 3, 4, 5))
        self.assertFalse(dset.is_connected(0, 2, 3))
        self.assertTrue(dset.other_sets(1, 4))

    def test_make_singleton(self):
        dset = IndexedDisjointSet(5)
        for i in range(4):
            dset.union(i, i + 1)
        dset.make_singleton(2)
        self.assertTrue(dset.is_singleton(2))
        self.assertEqual(dset.len_of_set(2), 1)
        for i in (0, 1, 3, 4):
            self.assertFalse(dset.same_set(i, 2))
        self.assertTrue(dset.is_connected(0, 1, 3, 4))
        self.assertEqual(dset.len_of_set(0), 4)
        assert_valid(self, dset)

    def test_make_singleton_flattens_remaining_tree(self):
        dset = IndexedDisjointSet(6)
        for i in range(5):
            dset.union(i, i + 1)
        dset.make_singleton(0)
        for i in range(1, 6):
            self.assertLessEqual(len(dset.find_path(i)), 2)

    def test_make_singleton_of_singleton_is_no_op(self):
        dset = IndexedDisjointSet(3)
        dset.union(0, 1)
        dset.make_singleton(2)
        self.assertTrue(dset.same_set(0, 1))
        self.assertTrue(dset.is_singleton(2))

    def test_union_then_split_round_trip(self):
        dset = IndexedDisjointSet(3)
        dset.union(0, 1)
        dset.union(1, 2)
        dset.make_singleton(1)
        self.assertTrue(dset.same_set(0, 2))
        self.assertTrue(dset.is_singleton(1))
        assert_valid(self, dset)

    def test_make_singleton_of_pair(self):
        dset = IndexedDisjointSet(2)
        dset.union(0, 1)
        dset.make_singleton(1)
        self.assertTrue(dset.is_singleton(0))
        self.assertTrue(dset.is_singleton(1))
        self.assertEqual(dset.find_root(0), 0)

    def test_iter_set_with_compress_flattens_tree(self):
        dset = IndexedDisjointSet(8)
        for i in range(0, 8, 2):
            dset.union(i, i + 1)
        dset.union(0, 2)
        dset.union(4, 6)
        dset.union(0, 4)
        root = dset.find_root(0, compress=False)
        self.assertEqual(sorted(dset.iter_set(3, compress=True)), list(range(8)))
        for i in range(8):
            self.assertEqual(dset.find_path(i)[-1], root)
            self.assertLessEqual(len(dset.find_path(i)), 2)

    def test_exhausted_compress_iteration_resets_root_rank(self):
        dset = IndexedDisjointSet(9)
        for i in range(0, 8, 2):
            dset.union(i, i + 1)
        dset.union(1, 3)
        dset.union(5, 7)
        dset.union(3, 7)
        root = dset.find_root(0)
        self.assertEqual(root, 7)
        self.assertEqual(dset.store.rank(root), 3)

        # A partially consumed iteration leaves the rank unchanged.
        members = dset.iter_set(0, compress=True)
        next(members)
        self.assertEqual(dset.store.rank(root), 3)

        self.assertEqual(len(list(dset.iter_set(0, compress=True))), 8)
        self.assertEqual(dset.store.rank(root), 1)
        self.assertEqual(list(dset.iter_set(8, compress=True)), [8])
        self.assertEqual(dset.store.rank(8), 0)

        # The flattened tree still unions by rank against a deeper tree.
        dset.union(8, 0)
        self.assertEqual(dset.find_root(8), root)
        self.assertEqual(dset.store.rank(root), 1)

    def test_all_sets(self):
        dset = IndexedDisjointSet(5, sets=[[0, 3], [1, 4]])
        sets_ = [list(set_) for set_ in dset.all_sets()]
        self.assertEqual([sorted(set_) for set_ in sets_], [[0, 3], [1, 4], [2]])
        self.assertEqual([set_[0] for set_ in sets_], [0, 1, 2])

    def test_repr_is_instantiable(self):
        dset = IndexedDisjointSet(4, sets=[[0, 2]])
        self.assertEqual(repr(dset), "IndexedDisjointSet(4, sets=[[0, 2], [1], [3]])")
        compact = IndexedDisjointSet(2, storage="compact", word_bits=16)
        self.assertEqual(
            repr(compact),
            "IndexedDisjointSet(2, sets=[[0], [1]], storage='compact', word_bits=16)"
        )
        self.assertEqual(
            str(dset),
            "Indexed Disjoint-Set: total elements = 4, total disjoint sub-sets = 3"
        )

    def test_union_many(self):
        dset = IndexedDisjointSet(5)
        root = dset.union_many([1, 2, 3])
        self.assertTrue(dset.is_connected(1, 2, 3))
        self.assertEqual(dset.find_root(2), root)
        with self.assertRaises(ValueError):
            dset.union_many([])

    def test_out_of_range_indices_raise_without_change(self):
        dset = IndexedDisjointSet(3)
        for bad in (3, -1, 1.0, True, "0"):
            with self.assertRaises(PartitionIndexError):
                dset.union(0, bad)
            with self.assertRaises(PartitionIndexError):
                dset.make_singleton(bad)
            with self.assertRaises(PartitionIndexError):
                dset.iter_set(bad)
        with self.assertRaises(IndexError):
            dset.same_set(5, 0)
        with self.assertRaises(PartitionIndexError):
            dset.union_many([0, 1, 7])
        self.assertEqual(dset.count_sets(), 3)

    def test_push_and_extend(self):
        dset = IndexedDisjointSet()
        self.assertEqual(dset.push(), 0)
        self.assertEqual(dset.extend(3), range(1, 4))
        dset.union(0, 3)
        self.assertEqual(dset.push(), 4)
        self.assertTrue(dset.is_singleton(4))
        self.assertTrue(dset.same_set(0, 3))

    def test_pop_keeps_remaining_set(self):
        dset = IndexedDisjointSet(4)
        dset.union(0, 3)
        dset.union(1, 3)
        self.assertEqual(dset.pop(), 3)
        self.assertEqual(len(dset), 3)
        self.assertTrue(dset.same_set(0, 1))
        assert_valid(self, dset)
        dset.clear()
        with self.assertRaises(PartitionIndexError):
            dset.pop()

    def test_truncate(self):
        dset = IndexedDisjointSet(6)
        dset.union(0, 5)
        dset.union(1, 5)
        dset.union(2, 3)
        dset.union(3, 4)
        dset.truncate(4)
        self.assertEqual(len(dset), 4)
        self.assertTrue(dset.same_set(0, 1))
        self.assertTrue(dset.same_set(2, 3))
        self.assertFalse(dset.same_set(0, 2))
        self.assertEqual(dset.count_sets(), 2)
        assert_valid(self, dset)

    def test_truncate_matches_restricted_partition(self):
        rng = random.Random(7)
        for _ in range(20):
            dset = IndexedDisjointSet(30)
            for _ in range(25):
                dset.union(rng.randrange(30), rng.randrange(30))
            roots = [dset.find_root(i) for i in range(30)]
            length = rng.randrange(31)
            dset.truncate(length)
            self.assertEqual(len(dset), length)
            assert_valid(self, dset)
            for i in range(length):
                for j in range(length):
                    self.assertEqual(dset.same_set(i, j), roots[i] == roots[j])

    def test_copy_is_independent(self):
        dset = IndexedDisjointSet(3)
        dset.union(0, 1)
        other = dset.copy()
        other.union(1, 2)
        other.push()
        self.assertFalse(dset.same_set(0, 2))
        self.assertTrue(other.same_set(0, 2))
        self.assertEqual(len(dset), 3)

    def test_debug_logging(self):
        dset = IndexedDisjointSet(3, debug=True)
        dset.union(0, 1)
        with self.assertLogs("IndexedDisjointSet", level="DEBUG") as logs:
            dset.make_singleton(0)
        self.assertIn("Made 0 a singleton", logs.output[0])


class TestStorageEquivalence(unittest.TestCase):
    def replay(self, storage: str, word_bits: int, seed: int):
        rng = random.Random(seed)
        dset = IndexedDisjointSet(40, storage=storage, word_bits=word_bits)
        labels = list(range(40))
        next_label = 40
        observed = []
        for _ in range(300):
            i, j = rng.randrange(40), rng.randrange(40)
            if rng.random() < 0.7:
                merged = dset.union(i, j)
                self.assertEqual(merged, labels[i] != labels[j])
                old, new = labels[i], labels[j]
                labels = [new if label == old else label for label in labels]
            else:
                dset.make_singleton(i)
                labels[i] = next_label
                next_label += 1
            observed.append((
                dset.same_set(i, j),
                list(dset.iter_set(i)),
                dset.len_of_set(j),
                dset.find_root(j)
            ))
            self.assertEqual(dset.same_set(i, j), labels[i] == labels[j])
            self.assertEqual(
                set(dset.iter_set(j)),
                {k for k in range(40) if labels[k] == labels[j]}
            )
        assert_valid(self, dset)
        self.assertEqual(dset.count_sets(), len(set(labels)))
        return observed

    def test_standard_and_compact_are_indistinguishable(self):
        for seed in range(5):
            standard = self.replay("standard", 64, seed)
            for word_bits in (8, 16, 64):
                self.assertEqual(standard, self.replay("compact", word_bits, seed))


if __name__ == "__main__":
    unittest.main()
