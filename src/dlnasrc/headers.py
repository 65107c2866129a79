'''
Splits a raw HEAD response into the header fields the engine understands.

Matching is by substring over the upper cased line and the first catalog
entry found wins, so the order of HEAD_RESPONSE_HEADERS matters: a name that
could also match inside another header's line must come after it.
'''

import logging
import re

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r'\r?\n')

STATUS_LINE = 'HTTP/'
VARY = 'VARY'
TIMESEEKRANGE = 'TIMESEEKRANGE.DLNA.ORG'
TRANSFERMODE = 'TRANSFERMODE.DLNA.ORG'
DATE = 'DATE'
CONTENT_TYPE = 'CONTENT-TYPE'
SERVER = 'SERVER'
TRANSFER_ENCODING = 'TRANSFER-ENCODING'
CONTENTFEATURES = 'CONTENTFEATURES.DLNA.ORG'
DTCP_RANGE = 'CONTENT-RANGE.DTCP.COM'
PRAGMA = 'PRAGMA'
CACHE_CONTROL = 'CACHE-CONTROL'
CONTENT_LENGTH = 'CONTENT-LENGTH'
ACCEPT_RANGES = 'ACCEPT-RANGES'

HEAD_RESPONSE_HEADERS = (
    STATUS_LINE,
    VARY,
    TIMESEEKRANGE,
    TRANSFERMODE,
    DATE,
    CONTENT_TYPE,
    SERVER,
    TRANSFER_ENCODING,
    CONTENTFEATURES,
    DTCP_RANGE,
    PRAGMA,
    CACHE_CONTROL,
    CONTENT_LENGTH,
    ACCEPT_RANGES,
)


def header_kind(line):
    '''Returns the first catalog entry contained in line, or None'''
    for kind in HEAD_RESPONSE_HEADERS:
        if kind in line:
            return kind
    return None


def field_value(kind, line):
    if kind == STATUS_LINE:
        return line.strip()
    return line.partition(':')[2].strip()


def tokenize(raw):
    '''
    Returns [(kind, value), ...] in catalog order. Header matching is case
    insensitive because the whole response is upper cased first; a header
    seen more than once keeps its last value.
    '''
    if isinstance(raw, bytes):
        raw = raw.decode('iso-8859-1')
    fields = {}
    for line in _LINE_BREAK.split(raw.upper()):
        if not line.strip():
            continue
        kind = header_kind(line)
        if kind is None:
            logger.info('No known header found in line: %r', line)
            continue
        fields[kind] = field_value(kind, line)
    return [(kind, fields[kind]) for kind in HEAD_RESPONSE_HEADERS if kind in fields]
