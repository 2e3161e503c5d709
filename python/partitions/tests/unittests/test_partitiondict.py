import unittest

from partitions.datastructures.metadata import StorageMode
from partitions.datastructures.partitiondict import PartitionDict


class TestPartitionDict(unittest.TestCase):
    def test_mapping_behaviour(self):
        pdict = PartitionDict({"a": 1, "b": 2})
        pdict["c"] = 3
        pdict["a"] = 10
        self.assertEqual(len(pdict), 3)
        self.assertEqual(dict(pdict), {"a": 10, "b": 2, "c": 3})
        self.assertIn("b", pdict)
        self.assertNotIn("z", pdict)
        self.assertEqual(pdict.get("z", 0), 0)
        with self.assertRaises(KeyError):
            pdict["z"]

    def test_union_and_sets(self):
        pdict = PartitionDict({"a": 1, "b": 2, "c": 3, "d": 4})
        self.assertTrue(pdict.union("a", "c"))
        self.assertFalse(pdict.union("c", "a"))
        self.assertTrue(pdict.same_set("a", "c"))
        self.assertTrue(pdict.other_sets("a", "b"))
        self.assertEqual(sorted(pdict.set("c")), [("a", 1), ("c", 3)])
        self.assertEqual(next(pdict.set("c")), ("c", 3))
        self.assertEqual(pdict.len_of_set("a"), 2)
        self.assertEqual(pdict.count_sets(), 3)
        self.assertTrue(pdict.is_singleton("d"))

    def test_setting_value_keeps_set(self):
        pdict = PartitionDict({"a": 1, "b": 2})
        pdict.union("a", "b")
        pdict["a"] = 5
        self.assertTrue(pdict.same_set("a", "b"))

    def test_find_label(self):
        pdict = PartitionDict({"a": 1, "b": 2, "c": 3})
        pdict.union("a", "b")
        self.assertEqual(pdict.find_label("a"), "b")
        self.assertEqual(pdict.find_label("b"), "b")
        self.assertEqual(pdict.find_label("c"), "c")

    def test_delete_keeps_other_members_together(self):
        pdict = PartitionDict({"a": 1, "b": 2, "c": 3})
        pdict.union("a", "b")
        pdict.union("b", "c")
        del pdict["b"]
        self.assertNotIn("b", pdict)
        self.assertTrue(pdict.same_set("a", "c"))
        self.assertEqual(pdict.len_of_set("a"), 2)
        self.assertEqual(pdict.count_sets(), 1)
        with self.assertRaises(KeyError):
            del pdict["b"]

    def test_deleted_slot_is_reused_as_singleton(self):
        pdict = PartitionDict({"a": 1, "b": 2, "c": 3})
        pdict.union("a", "b")
        pdict.union("b", "c")
        del pdict["a"]
        pdict["d"] = 4
        self.assertTrue(pdict.is_singleton("d"))
        self.assertFalse(pdict.same_set("d", "b"))
        self.assertTrue(pdict.same_set("b", "c"))
        self.assertEqual(pdict.count_sets(), 2)

    def test_pop_and_popitem(self):
        pdict = PartitionDict({"a": 1, "b": 2})
        pdict.union("a", "b")
        self.assertEqual(pdict.pop("a"), 1)
        self.assertTrue(pdict.is_singleton("b"))
        self.assertEqual(pdict.popitem(), ("b", 2))
        self.assertEqual(len(pdict), 0)

    def test_missing_key_raises(self):
        pdict = PartitionDict({"a": 1})
        with self.assertRaises(KeyError):
            pdict.union("a", "b")
        with self.assertRaises(KeyError):
            pdict.set("b")
        with self.assertRaises(KeyError):
            pdict.make_singleton("b")

    def test_sets_with_missing_key_raise(self):
        with self.assertRaises(KeyError):
            PartitionDict({"a": 1}, sets=[["z"]])
        with self.assertRaises(KeyError):
            PartitionDict({"a": 1, "b": 2}, sets=[["a", "b", "z"]])

    def test_equality_includes_partition(self):
        first = PartitionDict({"a": 1, "b": 2, "c": 3}, sets=[["a", "b"]])
        second = PartitionDict({"c": 3, "b": 2, "a": 1}, sets=[["b", "a"]])
        self.assertEqual(first, second)
        split = PartitionDict({"a": 1, "b": 2, "c": 3})
        self.assertNotEqual(first, split)
        self.assertNotEqual(split, first)
        merged = PartitionDict({"a": 1, "b": 2, "c": 3}, sets=[["a", "b", "c"]])
        self.assertNotEqual(first, merged)
        self.assertNotEqual(merged, first)
        self.assertNotEqual(
            first,
            PartitionDict({"a": 1, "b": 2, "c": 4}, sets=[["a", "b"]])
        )
        self.assertNotEqual(first, {"a": 1, "b": 2, "c": 3})

    def test_make_singleton(self):
        pdict = PartitionDict({"a": 1, "b": 2, "c": 3}, sets=[["a", "b", "c"]])
        pdict.make_singleton("a")
        self.assertTrue(pdict.is_singleton("a"))
        self.assertTrue(pdict.same_set("b", "c"))
        self.assertEqual(pdict["a"], 1)

    def test_all_sets(self):
        pdict = PartitionDict(
            [("a", 1), ("b", 2), ("c", 3), ("d", 4)],
            sets=[["b", "d"]]
        )
        sets_ = [sorted(key for key, _ in set_) for set_ in pdict.all_sets()]
        self.assertEqual(sets_, [["a"], ["b", "d"], ["c"]])

    def test_repr_round_trips(self):
        pdict = PartitionDict({"a": 1, "b": 2, "c": 3}, sets=[["a", "c"]])
        self.assertEqual(
            repr(pdict),
            "PartitionDict({'a': 1, 'b': 2, 'c': 3}, sets=[['a', 'c'], ['b']])"
        )
        other = eval(repr(pdict))
        self.assertTrue(other.same_set("a", "c"))
        self.assertEqual(str(pdict), "Partition-Dictionary: total items = 3, "
                                     "total disjoint sets = 2")

    def test_clear(self):
        pdict = PartitionDict({"a": 1, "b": 2}, sets=[["a", "b"]])
        pdict.clear()
        self.assertEqual(len(pdict), 0)
        pdict["a"] = 1
        self.assertTrue(pdict.is_singleton("a"))

    def test_compact_storage(self):
        pdict = PartitionDict(storage="compact", word_bits=8)
        for key in range(20):
            pdict[key] = str(key)
        for key in range(0, 20, 2):
            pdict.union(0, key)
        del pdict[4]
        self.assertEqual(pdict.storage_mode, StorageMode.COMPACT)
        self.assertEqual(pdict.len_of_set(0), 9)
        self.assertEqual(pdict.count_sets(), 11)

    def test_debug_logging(self):
        pdict = PartitionDict({"a": 1}, debug=True)
        del pdict["a"]
        with self.assertLogs("PartitionDict", level="DEBUG") as logs:
            pdict["b"] = 2
        self.assertIn("Reusing free slot 0", logs.output[0])


if __name__ == "__main__":
    unittest.main()
