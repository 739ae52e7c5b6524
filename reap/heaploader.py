"""Module to load Ruby heap dumps into an address-keyed reference graph

The graph is built in three passes:

    * nodes -- one node per valid record, all ROOT records merged into a
      single synthetic root at address 0 (node index 0)
    * edges -- references resolved to nodes, references to addresses which
      were never declared (outside the dump) are dropped
    * kinds -- instances whose class record declares a name take that name
      as their kind, so objects show "Widget" rather than "OBJECT"

Once build() returns the graph is read-only.
"""
import logging
from reap.heapobject import MemoryObject, ROOT_ADDRESS
from reap.records import MalformedRecord, parse_line

log = logging.getLogger(__name__)


class ReferenceGraph(object):
    """Arena of MemoryObjects with per-node successor lists

    Nodes are referred to by their index in the arena, the root is always
    index 0.  Parallel edges are permitted.
    """
    ROOT_INDEX = 0

    def __init__(self):
        self.nodes = []
        self.successors = []
        self.indices = {}  # address: node index

    def add_node(self, obj):
        index = len(self.nodes)
        self.nodes.append(obj)
        self.successors.append([])
        self.indices[obj.address] = index
        return index

    def add_edge(self, source, target):
        self.successors[source].append(target)

    @property
    def root(self):
        return self.nodes[self.ROOT_INDEX]

    def node(self, index):
        return self.nodes[index]

    def index_of(self, address):
        return self.indices.get(address)

    def node_count(self):
        return len(self.nodes)

    def edge_count(self):
        return sum([len(targets) for targets in self.successors], 0)

    def edges(self):
        """Yield all (source, target) index pairs"""
        for source, targets in enumerate(self.successors):
            for target in targets:
                yield source, target

    def predecessors(self):
        """Produce per-node lists of referring node indices"""
        result = [[] for _ in self.nodes]
        for source, target in self.edges():
            result[target].append(source)
        return result

    def __len__(self):
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __repr__(self):
        return '<ReferenceGraph nodes=%s edges=%s>' % (
            self.node_count(), self.edge_count()
        )


def build(records):
    """Build a ReferenceGraph from ParsedRecords (None entries are skipped)"""
    graph = ReferenceGraph()
    root = MemoryObject.root()
    graph.add_node(root)

    # the three per-address tables used during construction
    references = {ROOT_ADDRESS: []}
    instances = {}  # address: class/module address
    names = {}  # address: declared name

    dropped = 0
    for record in records:
        if record is None:
            dropped += 1
            continue
        if record.is_root:
            references[ROOT_ADDRESS].extend(record.references)
            continue
        obj = record.object
        address = obj.address
        existing = graph.index_of(address)
        if existing is None:
            graph.add_node(obj)
        else:
            log.warning('Duplicate record for address 0x%x, keeping the later one', address)
            graph.nodes[existing] = obj
            references.pop(address, None)
            instances.pop(address, None)
            names.pop(address, None)
        if record.references:
            references[address] = record.references
        if record.module is not None:
            instances[address] = record.module
        if record.name is not None:
            names[address] = record.name

    dangling = 0
    for address, targets in references.items():
        source = graph.index_of(address)
        for target_address in targets:
            target = graph.index_of(target_address)
            if target is None:
                dangling += 1
                continue
            graph.add_edge(source, target)

    for obj in graph.nodes:
        module = instances.get(obj.address)
        if module is not None:
            name = names.get(module)
            if name is not None:
                obj.kind = name

    log.info(
        'Built graph: %s nodes, %s edges (%s records dropped, %s dangling references)',
        graph.node_count(), graph.edge_count(), dropped, dangling,
    )
    return graph


def decode_line(raw):
    """Decode one raw dump line, undecodable bytes make it malformed"""
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as err:
        raise MalformedRecord('Invalid UTF-8 (%s)' % (err,), raw)


def iterrecords(lines):
    """Parse dump lines (bytes or text), annotating failures with their line number"""
    for lineno, line in enumerate(lines, 1):
        try:
            line = decode_line(line).strip()
            if not line:
                continue
            record = parse_line(line)
        except MalformedRecord as err:
            err.lineno = lineno
            err.args = err.args + ('line %s' % (lineno,),)
            raise
        yield record


def load(filename):
    """Load a heap dump file into a ReferenceGraph"""
    log.debug('Loading heap dump %s', filename)
    with open(filename, 'rb') as fh:
        try:
            return build(iterrecords(fh))
        except MalformedRecord as err:
            err.args = err.args + (filename,)
            raise
