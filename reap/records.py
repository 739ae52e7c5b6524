"""Decode single lines of a Ruby heap dump (ObjectSpace.dump_all)

Each line is a JSON object describing either a heap object or a GC root:

    {"type":"ROOT", "root":"vm", "references":["0x7f..."]}
    {"address":"0x7f...", "type":"STRING", "class":"0x7f...", "value":"abc", "memsize":40}

All schema assumptions live here, so the graph builder can treat every
record which survives parse_line as structurally sound.
"""
import json, logging, re, unicodedata
from reap.heapobject import MemoryObject, ROOT_KIND, ROOT_ADDRESS

log = logging.getLogger(__name__)

ADDRESS_PREFIX = '0x'
HEX_DIGITS = re.compile(r'[0-9a-fA-F]+\Z')
STRING_LABEL_LENGTH = 40
# stands in for backslash so dot labels stay well-formed
BACKSLASH_GLYPH = '﹨'

NAMED_KINDS = ('CLASS', 'MODULE', 'ICLASS')

# field name: accepted JSON type, anything else present is ignored
FIELDS = {
    'address': str,
    'memsize': int,
    'references': list,
    'type': str,
    'class': str,
    'root': str,
    'name': str,
    'length': int,
    'size': int,
    'value': str,
}


class MalformedRecord(ValueError):
    """A dump line which does not decode into a valid record"""

    def __init__(self, message, line, lineno=None):
        super(MalformedRecord, self).__init__('%s: %r' % (message, line))
        self.line = line
        self.lineno = lineno


class ParsedRecord(object):
    """A decoded dump line: the object plus its unresolved relations"""

    def __init__(self, object, references=(), module=None, name=None, is_root=False):
        self.object = object
        self.references = list(references)
        self.module = module
        self.name = name
        self.is_root = is_root

    def __repr__(self):
        return '<ParsedRecord %r refs=%s>' % (self.object, len(self.references))


def parse_address(text, line=None):
    """Convert a dump address (0x-prefixed hex) into an integer"""
    if not text.startswith(ADDRESS_PREFIX):
        raise MalformedRecord('Address %r lacks %r prefix' % (text, ADDRESS_PREFIX), line)
    digits = text[len(ADDRESS_PREFIX):]
    # int() alone would also accept signs, whitespace and underscores
    if not HEX_DIGITS.match(digits):
        raise MalformedRecord('Address %r is not hexadecimal' % (text,), line)
    return int(digits, 16)


def decode(line):
    """Decode and type-check the JSON structure of a line

    returns dict of the recognised fields, with JSON nulls removed
    """
    try:
        struct = json.loads(line)
    except ValueError as err:
        raise MalformedRecord('Invalid JSON (%s)' % (err,), line)
    if not isinstance(struct, dict):
        raise MalformedRecord('Expected a JSON object', line)
    fields = {}
    for key, expected in FIELDS.items():
        value = struct.get(key)
        if value is None:
            continue
        # bool is an int subclass in Python, but never a valid size
        if not isinstance(value, expected) or isinstance(value, bool):
            raise MalformedRecord(
                'Field %r should be %s, not %r' % (key, expected.__name__, value),
                line,
            )
        fields[key] = value
    if 'type' not in fields:
        raise MalformedRecord('Missing "type" field', line)
    for key in ('memsize', 'length', 'size'):
        if fields.get(key, 0) < 0:
            raise MalformedRecord('Field %r is negative' % (key,), line)
    for ref in fields.get('references', ()):
        if not isinstance(ref, str):
            raise MalformedRecord('Reference %r is not an address' % (ref,), line)
    for key, value in fields.items():
        texts = value if key == 'references' else [value]
        for text in texts:
            if isinstance(text, str) and not is_encodable(text):
                raise MalformedRecord('Field %r is not valid unicode' % (key,), line)
    return fields


def is_encodable(text):
    """Does text survive UTF-8 encoding? (JSON permits lone surrogates)"""
    try:
        text.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True


def string_label(value, length=STRING_LABEL_LENGTH):
    """Render the start of a string value without control characters"""
    return ''.join([
        BACKSLASH_GLYPH if char == '\\' else char
        for char in value[:length]
        if unicodedata.category(char) != 'Cc'
    ])


def derive_label(kind, fields):
    """Produce the kind-specific label for a record

    returns (keep, label), keep is False when a required field is missing
    """
    if kind in NAMED_KINDS:
        name = fields.get('name')
        if name is None:
            return True, None
        return True, '%s[%s]' % (name, kind)
    elif kind == 'ARRAY':
        if 'length' not in fields:
            return False, None
        return True, 'Array[len=%s]' % (fields['length'],)
    elif kind == 'HASH':
        if 'size' not in fields:
            return False, None
        return True, 'Hash[size=%s]' % (fields['size'],)
    elif kind == 'STRING':
        value = fields.get('value')
        if value is None:
            return True, None
        return True, string_label(value)
    return True, None


def parse_line(line):
    """Parse a single dump line

    returns ParsedRecord, or None for records which should be dropped
    raises MalformedRecord for lines which are not valid records
    """
    fields = decode(line)
    kind = fields['type']
    references = [parse_address(ref, line) for ref in fields.get('references', ())]
    if kind == ROOT_KIND:
        return ParsedRecord(MemoryObject.root(), references, is_root=True)

    if 'address' in fields:
        address = parse_address(fields['address'], line)
    else:
        address = ROOT_ADDRESS
    if address == ROOT_ADDRESS:
        log.debug('Dropping %s record without address', kind)
        return None

    keep, label = derive_label(kind, fields)
    if not keep:
        log.debug('Dropping %s record at 0x%x, missing required field', kind, address)
        return None

    module = fields.get('class')
    if module is not None:
        module = parse_address(module, line)
    return ParsedRecord(
        MemoryObject(address, fields.get('memsize', 0), kind, label),
        references,
        module=module,
        name=fields.get('name'),
    )
