import os, unittest
from reap import dominators, heaploader, relevance
from reap.heaploader import ReferenceGraph
from reap.heapobject import MemoryObject

HERE = os.path.dirname(__file__)
SAMPLE_FILE = os.path.join(HERE, 'heap.json')


class TestRelevantSubgraph(unittest.TestCase):
    def setUp(self):
        self.graph = heaploader.load(SAMPLE_FILE)
        self.retained = dominators.retained_stats(self.graph)

    def prune(self, threshold=relevance.DEFAULT_RELEVANCE_THRESHOLD):
        return relevance.relevant_subgraph(self.graph, self.retained, threshold)

    def addresses(self, subgraph):
        return sorted([obj.address for obj in subgraph])

    def test_default_threshold(self):
        subgraph = self.prune()
        assert subgraph.node_count() == 12, subgraph.node_count()
        assert subgraph.edge_count() == 15, subgraph.edge_count()
        # retains 8 bytes, below floor(2438 * 0.005) == 12
        assert 0x250 not in self.addresses(subgraph)
        # unreachable
        assert 0x600 not in self.addresses(subgraph)

    def test_larger_threshold(self):
        subgraph = self.prune(0.1)
        assert self.addresses(subgraph) == [0, 0x100, 0x200, 0x210, 0x500], self.addresses(subgraph)
        assert subgraph.edge_count() == 4, list(subgraph.edges())

    def test_zero_keeps_reachable(self):
        subgraph = self.prune(0.0)
        assert subgraph.node_count() == len(self.retained) == 13
        assert subgraph.edge_count() == 16, subgraph.edge_count()

    def test_whole_threshold_keeps_root(self):
        for threshold in (1.0, 5.0):
            subgraph = self.prune(threshold)
            assert self.addresses(subgraph) == [0]
            assert subgraph.edge_count() == 0

    def test_negative_threshold(self):
        with self.assertRaises(ValueError):
            self.prune(-0.5)

    def test_no_self_loops_or_duplicates(self):
        for threshold in (0.0, 0.005, 0.1):
            edges = list(self.prune(threshold).edges())
            assert len(edges) == len(set(edges)), edges
            for source, target in edges:
                assert source != target, edges

    def test_labels(self):
        subgraph = self.prune()
        labels = dict((obj.address, str(obj)) for obj in subgraph)
        assert labels[0] == 'root: 0b self, 2438b refs, 13 objects', labels[0]
        assert labels[0x100] == 'Widget[CLASS]: 500b self, 240b refs, 3 objects'
        assert labels[0x200] == 'Kernel[MODULE]: 1000b self, 300b refs, 2 objects'
        assert labels[0x210] == 'Widget[528]: 80b self, 228b refs, 5 objects'
        assert labels[0x220] == 'Array[len=3]: 120b self, 0b refs, 1 objects'

    def test_source_untouched(self):
        before = [str(obj) for obj in self.graph]
        edges = self.graph.edge_count()
        self.prune()
        assert [str(obj) for obj in self.graph] == before
        assert self.graph.edge_count() == edges

    def test_parallel_edges_collapsed(self):
        graph = ReferenceGraph()
        graph.add_node(MemoryObject.root())
        graph.add_node(MemoryObject(1, 10, 'OBJECT'))
        for _ in range(3):
            graph.add_edge(0, 1)
        graph.add_edge(1, 1)
        retained = dominators.retained_stats(graph)
        subgraph = relevance.relevant_subgraph(graph, retained, 0)
        assert list(subgraph.edges()) == [(0, 1)]
