"""Write a ReferenceGraph in Graphviz dot format"""
import logging

log = logging.getLogger(__name__)


def escape(label):
    return label.replace('\\', '\\\\').replace('"', '\\"')


def dot_lines(graph):
    """Yield the lines of a dot description of graph (unlabelled edges)"""
    yield 'digraph {'
    for index, obj in enumerate(graph.nodes):
        yield '    %s [ label = "%s" ]' % (index, escape(str(obj)))
    for source, target in graph.edges():
        yield '    %s -> %s [ ]' % (source, target)
    yield '}'


def write_dot(graph, filename):
    """Write graph to filename, I/O errors propagate to the caller"""
    with open(filename, 'w', encoding='utf-8') as fh:
        for line in dot_lines(graph):
            fh.write(line + '\n')
    log.info('Wrote %s nodes to %s', graph.node_count(), filename)
