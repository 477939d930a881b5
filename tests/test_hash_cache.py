"""Tests for the sparse hash cache, sibling paths and root binding."""

import unittest

from indexed_merkle.base import IMTNode
from indexed_merkle.factory import create_imt
from indexed_merkle.hashing import keccak256, sha256
from indexed_merkle.utils import combine, compute_root, encode_size, sibling_index
from tests.test_base import IMTTestCase


class TestHelpers(unittest.TestCase):

    def test_sibling_index(self):
        cases = [(0, 1), (1, 0), (2, 3), (3, 2), (10, 11), (11, 10)]
        for index, expected in cases:
            with self.subTest(index=index):
                self.assertEqual(sibling_index(index), expected)

    def test_encode_size_is_fixed_width_big_endian(self):
        self.assertEqual(encode_size(0), b"\x00" * 8)
        self.assertEqual(encode_size(1), b"\x00" * 7 + b"\x01")
        self.assertEqual(encode_size(258), b"\x00" * 6 + b"\x01\x02")

    def test_combine_absent_sibling_hashes_present_child_alone(self):
        left = keccak256(b"left")
        right = keccak256(b"right")
        self.assertEqual(combine(keccak256, left, None), keccak256(left))
        self.assertEqual(combine(keccak256, None, right), keccak256(right))
        self.assertEqual(combine(keccak256, left, right), keccak256(left + right))
        with self.assertRaises(ValueError):
            combine(keccak256, None, None)

    def test_absent_is_not_zero(self):
        leaf = keccak256(b"leaf")
        self.assertNotEqual(combine(keccak256, leaf, None), combine(keccak256, leaf, b"\x00" * 32))


class TestInitialRoot(unittest.TestCase):

    def test_depth_one_sentinel_root(self):
        tree = create_imt(1)
        leaf = keccak256(IMTNode(0, 0, 0, 0).to_bytes())
        top = keccak256(leaf)
        expected = keccak256(top + (0).to_bytes(8, "big"))
        self.assertEqual(tree.root, expected)
        self.assertEqual(tree.cached_digest(1, 0), leaf)
        self.assertEqual(tree.cached_digest(0, 0), top)

    def test_depth_one_full_tree(self):
        tree = create_imt(1)
        tree.insert(3, 4)
        sentinel = IMTNode(0, 0, 0, 3).hash(keccak256)
        node = IMTNode(1, 3, 4, 0).hash(keccak256)
        expected = keccak256(keccak256(sentinel + node) + (1).to_bytes(8, "big"))
        self.assertEqual(tree.root, expected)

    def test_hasher_is_used_everywhere(self):
        tree = create_imt(2, sha256)
        leaf = sha256(IMTNode(0, 0, 0, 0).to_bytes())
        expected = sha256(sha256(sha256(leaf)) + (0).to_bytes(8, "big"))
        self.assertEqual(tree.root, expected)
        self.assertNotEqual(tree.root, create_imt(2).root)


class TestRootBinding(unittest.TestCase):
    """The node count is bound into the root."""

    def test_same_nodes_different_size_differ(self):
        nodes = [IMTNode(0, 0, 0, 5), IMTNode(1, 5, "A", 0)]
        root_1 = compute_root(nodes, 3, 1, keccak256)
        root_2 = compute_root(nodes, 3, 2, keccak256)
        self.assertNotEqual(root_1, root_2)

    def test_tree_root_binds_current_size(self):
        tree = create_imt(3)
        tree.insert(5, "A")
        self.assertEqual(compute_root(tree.nodes(), 3, 1, tree.hasher), tree.root)
        self.assertNotEqual(compute_root(tree.nodes(), 3, 2, tree.hasher), tree.root)

    def test_compute_root_requires_nodes(self):
        with self.assertRaises(ValueError):
            compute_root([], 3, 0, keccak256)


class TestSiblings(IMTTestCase):

    depth = 5

    def setUp(self):
        super().setUp()
        self.insert_keys([8, 3, 14, 6, 1])
        self.expected_keys = [1, 3, 6, 8, 14]

    def test_siblings_is_read_only(self):
        before = {level: self.tree.cached_positions(level) for level in range(self.tree.depth + 1)}
        root = self.tree.root
        for node in self.tree:
            self.tree.siblings(node.key)
        after = {level: self.tree.cached_positions(level) for level in range(self.tree.depth + 1)}
        self.assertEqual(before, after)
        self.assertEqual(self.tree.root, root)

    def test_siblings_match_cache(self):
        for node in self.tree:
            with self.subTest(key=node.key):
                path = self.tree.siblings(node.key)
                self.assertEqual(len(path), self.tree.depth)
                index = node.index
                for offset, sibling in enumerate(path):
                    level = self.tree.depth - offset
                    self.assertEqual(sibling, self.tree.cached_digest(level, index ^ 1))
                    index //= 2

    def test_upper_siblings_absent_in_sparse_tree(self):
        # Six nodes occupy leaves 0..5, so only the lowest levels have right siblings.
        path = self.tree.siblings(0)
        self.assertIsNotNone(path[0])
        self.assertIsNotNone(path[1])
        self.assertIsNotNone(path[2])
        self.assertIsNone(path[3])
        self.assertIsNone(path[4])

    def test_cache_is_sparse(self):
        self.assertEqual(self.tree.cached_positions(self.tree.depth), [0, 1, 2, 3, 4, 5])
        self.assertEqual(self.tree.cached_positions(self.tree.depth - 1), [0, 1, 2])
        self.assertEqual(self.tree.cached_positions(self.tree.depth - 2), [0, 1])
        for level in range(self.tree.depth - 2):
            self.assertEqual(self.tree.cached_positions(level), [0])
        self.assertIsNone(self.tree.cached_digest(self.tree.depth, 6))
        self.assertIsNone(self.tree.cached_digest(self.tree.depth + 3, 0))


class TestLargeDepth(unittest.TestCase):

    def test_depth_64_stays_sparse(self):
        tree = create_imt(64)
        self.assertEqual(tree.capacity, (1 << 64) - 1)
        for key in (1 << 255, 17, 99):
            tree.insert(key, key)
        total = sum(len(tree.cached_positions(level)) for level in range(65))
        self.assertLessEqual(total, 4 * 65)
        self.assertEqual(compute_root(tree.nodes(), 64, 3, tree.hasher), tree.root)


if __name__ == "__main__":
    unittest.main()
