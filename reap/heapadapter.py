"""Adapter for displaying a heap dominator tree in a SquareMap"""
import wx, logging

log = logging.getLogger(__name__)
from squaremap import squaremap
from reap import reports


class HeapAdapter(squaremap.DefaultAdapter):
    """Adapts a ReferenceGraph + DominatorTree into a Squaremap-compatible structure

    Each square is a MemoryObject sized by its retained bytes, its children
    are the objects it immediately dominates.
    """

    percentageView = False
    total = 0
    color_mapping = None

    def __init__(self, graph, tree, retained):
        self.graph = graph
        self.tree = tree
        self.retained = retained

    def _index(self, node):
        return self.graph.index_of(node.address)

    def children(self, node):
        kids = [
            self.graph.node(index)
            for index in self.tree.children(self._index(node))
        ]
        kids.sort(key=self.overall, reverse=True)
        return kids

    def parents(self, node):
        parent = self.tree.immediate_dominator(self._index(node))
        if parent is None:
            return []
        return [self.graph.node(parent)]

    def value(self, node, parent=None):
        return self.retained[node].bytes

    def overall(self, node):
        return self.retained[node].bytes

    def children_sum(self, children, node):
        return sum([self.overall(child) for child in children], 0)

    def empty(self, node):
        """Fraction of the square which is the object's own memory"""
        overall = self.overall(node)
        if overall:
            return node.bytes / float(overall)
        return 0

    def filename(self, node):
        return None

    def background_color(self, node, depth):
        """Create a (unique-ish) background color for each object kind"""
        if self.color_mapping is None:
            self.color_mapping = {}
        color = self.color_mapping.get(node.kind)
        if color is None:
            depth = len(self.color_mapping)
            red = (depth * 10) % 255
            green = 200 - ((depth * 5) % 200)
            blue = (depth * 25) % 200
            self.color_mapping[node.kind] = color = wx.Colour(red, green, blue)
        return color

    def SetPercentage(self, percent, total):
        """Set whether to display percentage values (and total for doing so)"""
        self.percentageView = percent
        self.total = total

    def label(self, node):
        stats = self.retained[node]
        if self.percentageView and self.total:
            return '%s [%0.2f%%]' % (node, round(stats.bytes * 100.0 / self.total, 2))
        return reports.format_row(node, stats)
