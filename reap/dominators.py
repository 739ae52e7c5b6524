"""Dominator tree and retained-size aggregation over a ReferenceGraph

Node D dominates node N if every path from the root to N passes through D.
The retained size of D is the memory which would become unreachable if D
were removed: D's own stats plus those of everything it dominates.

Immediate dominators are computed with the iterative algorithm from
Cooper, Harvey and Kennedy, "A Simple, Fast Dominance Algorithm" (2001).
"""
import logging
from reap.heapobject import Stats

log = logging.getLogger(__name__)


def reverse_postorder(successors, root):
    """Iterative depth-first search returning reachable indices in RPO"""
    visited = set([root])
    finished = []
    stack = [(root, iter(successors[root]))]
    while stack:
        node, children = stack[-1]
        for child in children:
            if child not in visited:
                visited.add(child)
                stack.append((child, iter(successors[child])))
                break
        else:
            stack.pop()
            finished.append(node)
    finished.reverse()
    return finished


class DominatorTree(object):
    """Immediate dominators of every node reachable from root

    graph -- ReferenceGraph to analyse
    root -- index of the entry node (the synthetic dump root by default)
    """

    def __init__(self, graph, root=None):
        self.graph = graph
        self.root = graph.ROOT_INDEX if root is None else root
        self.order = reverse_postorder(graph.successors, self.root)
        self.idom = self._compute_idom()
        self._children = None

    def _compute_idom(self):
        order = self.order
        number = dict((node, i) for i, node in enumerate(order))
        predecessors = self.graph.predecessors()
        idom = {self.root: self.root}

        def intersect(first, second):
            while first != second:
                while number[first] > number[second]:
                    first = idom[first]
                while number[second] > number[first]:
                    second = idom[second]
            return first

        changed = True
        passes = 0
        while changed:
            changed = False
            passes += 1
            for node in order[1:]:
                new_idom = None
                for pred in predecessors[node]:
                    # unreachable referrers and unprocessed nodes are skipped
                    if pred not in idom:
                        continue
                    if new_idom is None:
                        new_idom = pred
                    else:
                        new_idom = intersect(pred, new_idom)
                if idom.get(node) != new_idom:
                    idom[node] = new_idom
                    changed = True
        log.debug(
            'Dominators for %s reachable nodes converged in %s passes',
            len(order), passes,
        )
        return idom

    def immediate_dominator(self, index):
        """Return the idom index of index, None for the root or unreachable"""
        if index == self.root:
            return None
        return self.idom.get(index)

    def reachable(self, index):
        return index in self.idom

    def dominates(self, dominator, index):
        """Does dominator lie on every root path to index? (reflexive)"""
        if not self.reachable(index):
            return False
        current = index
        while current is not None:
            if current == dominator:
                return True
            current = self.immediate_dominator(current)
        return False

    def children(self, index):
        """Indices immediately dominated by index"""
        if self._children is None:
            children = {}
            for node in self.order:
                parent = self.immediate_dominator(node)
                if parent is not None:
                    children.setdefault(parent, []).append(node)
            self._children = children
        return self._children.get(index, [])

    def __len__(self):
        return len(self.order)


def retained_stats(graph, tree=None):
    """Compute the retained Stats of every root-reachable object

    Each object's own stats are charged to itself and to every object on
    its chain of immediate dominators.  Walking the reverse post-order
    backwards visits every node before its immediate dominator, so a
    single accumulation pass covers the whole chain.

    returns {MemoryObject: Stats}, unreachable objects are absent
    """
    if tree is None:
        tree = DominatorTree(graph)
    totals = {}
    for index in reversed(tree.order):
        total = totals.get(index, Stats()) + graph.node(index).stats()
        totals[index] = total
        parent = tree.immediate_dominator(index)
        if parent is not None:
            totals[parent] = totals.get(parent, Stats()) + total
    unreachable = graph.node_count() - len(totals)
    if unreachable:
        log.info('%s objects are unreachable from the root', unreachable)
    return dict((graph.node(index), stats) for index, stats in totals.items())
