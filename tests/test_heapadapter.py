import os, unittest
import pytest

pytest.importorskip('wx')
pytest.importorskip('squaremap')

from reap import dominators, heaploader
from reap.heapadapter import HeapAdapter

HERE = os.path.dirname(__file__)
SAMPLE_FILE = os.path.join(HERE, 'heap.json')


class TestHeapAdapter(unittest.TestCase):
    def setUp(self):
        self.graph = heaploader.load(SAMPLE_FILE)
        tree = dominators.DominatorTree(self.graph)
        self.retained = dominators.retained_stats(self.graph, tree)
        self.adapter = HeapAdapter(self.graph, tree, self.retained)

    def node(self, address):
        return self.graph.node(self.graph.index_of(address))

    def test_children_by_retained_size(self):
        children = self.adapter.children(self.graph.root)
        assert [obj.address for obj in children] == [0x200, 0x100, 0x210, 0x300, 0x130], children
        assert self.adapter.children(self.node(0x250)) == []

    def test_parents(self):
        assert self.adapter.parents(self.graph.root) == []
        assert self.adapter.parents(self.node(0x250)) == [self.node(0x230)]
        assert self.adapter.parents(self.node(0x240)) == [self.node(0x210)]

    def test_sizes(self):
        widget = self.node(0x100)
        assert self.adapter.value(widget) == 740
        assert self.adapter.overall(widget) == 740
        assert self.adapter.children_sum(self.adapter.children(widget), widget) == 240
        assert self.adapter.empty(widget) == 500 / 740.0
        assert self.adapter.empty(self.graph.root) == 0

    def test_label(self):
        assert self.adapter.label(self.node(0x200)) == 'Kernel[MODULE]: 1300 bytes (2 objects)'
        self.adapter.SetPercentage(True, 2438)
        assert self.adapter.label(self.node(0x200)) == 'Kernel[MODULE] [53.32%]', self.adapter.label(self.node(0x200))
