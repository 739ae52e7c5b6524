"""Reduce a reference graph to the objects retaining a relevant share of memory"""
import logging, math
from reap.heaploader import ReferenceGraph

log = logging.getLogger(__name__)

DEFAULT_RELEVANCE_THRESHOLD = 0.005


def retained_label(obj, stats):
    return '%s: %sb self, %sb refs, %s objects' % (
        obj, obj.bytes, stats.bytes - obj.bytes, stats.count,
    )


def threshold_bytes(graph, retained, threshold):
    """Minimum retained bytes to survive, never more than the root retains"""
    total = retained[graph.root].bytes
    return min(int(math.floor(total * threshold)), total)


def relevant_subgraph(graph, retained, threshold=DEFAULT_RELEVANCE_THRESHOLD):
    """Produce the subgraph of objects retaining at least threshold of the root

    graph -- the full ReferenceGraph (not modified)
    retained -- {MemoryObject: Stats} from dominators.retained_stats
    threshold -- fraction of the root's retained bytes an object must retain

    Surviving objects are relabelled with their self/retained sizes, the
    result is intended for rendering rather than further analysis.
    """
    if threshold < 0:
        raise ValueError('Relevance threshold must be non-negative, got %r' % (threshold,))
    minimum = threshold_bytes(graph, retained, threshold)
    log.debug('Keeping objects retaining at least %s bytes', minimum)

    subgraph = ReferenceGraph()
    mapping = {}  # full graph index: subgraph index
    for index, obj in enumerate(graph.nodes):
        stats = retained.get(obj)
        if stats is None or stats.bytes < minimum:
            continue
        mapping[index] = subgraph.add_node(obj.relabel(retained_label(obj, stats)))

    for source, target in graph.edges():
        if source in mapping and target in mapping:
            subgraph.add_edge(mapping[source], mapping[target])

    # filtering can leave self-references and repeated edges behind
    seen = set()
    for source, targets in enumerate(subgraph.successors):
        kept = []
        for target in targets:
            if target == source or (source, target) in seen:
                continue
            seen.add((source, target))
            kept.append(target)
        targets[:] = kept

    log.info(
        'Relevant subgraph: %s of %s nodes, %s edges',
        subgraph.node_count(), graph.node_count(), subgraph.edge_count(),
    )
    return subgraph
