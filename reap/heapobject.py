"""Node and statistic types shared by the heap analyses"""
import collections

ROOT_KIND = 'ROOT'
ROOT_ADDRESS = 0


class Stats(collections.namedtuple('Stats', ('count', 'bytes'))):
    """(object count, total bytes) pair, summed pointwise

    Stats() is the identity, so sum(seq, Stats()) folds a sequence.
    """
    __slots__ = ()

    def __new__(cls, count=0, bytes=0):
        return super(Stats, cls).__new__(cls, count, bytes)

    def add(self, other):
        return Stats(self.count + other.count, self.bytes + other.bytes)

    __add__ = add

    def __radd__(self, other):
        # lets plain sum() start from 0
        if other == 0:
            return self
        return NotImplemented


class MemoryObject(object):
    """A single object from the dump, identified purely by address

    kind and label may be rewritten while the graph is built, so they
    never take part in equality, hashing or ordering.
    """
    __slots__ = ('address', 'bytes', 'kind', 'label')

    def __init__(self, address, bytes=0, kind=None, label=None):
        self.address = address
        self.bytes = bytes
        self.kind = kind
        self.label = label

    @classmethod
    def root(cls):
        return cls(ROOT_ADDRESS, 0, ROOT_KIND, 'root')

    def is_root(self):
        return self.address == ROOT_ADDRESS

    def stats(self):
        return Stats(1, self.bytes)

    def relabel(self, label):
        """Return a copy of this object carrying a new label"""
        return MemoryObject(self.address, self.bytes, self.kind, label)

    def __eq__(self, other):
        if not isinstance(other, MemoryObject):
            return NotImplemented
        return self.address == other.address

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other):
        if not isinstance(other, MemoryObject):
            return NotImplemented
        return self.address < other.address

    def __hash__(self):
        return hash(self.address)

    def __str__(self):
        if self.label is not None:
            return self.label
        return '%s[%s]' % (self.kind, self.address)

    def __repr__(self):
        return '<%s %s %sb>' % (self.__class__.__name__, self, self.bytes)
