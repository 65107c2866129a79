import collections
import logging
import math
import re

from .http import HTTPRange, HTTPRangeField, HTTPRequest, parse_unsigned

logger = logging.getLogger(__name__)

TIMESEEKRANGE_DLNA_ORG = 'TimeSeekRange.dlna.org'
CONTENTFEATURES_DLNA_ORG = 'contentFeatures.dlna.org'
TRANSFERMODE_DLNA_ORG = 'transferMode.dlna.org'
PLAYSPEED_DLNA_ORG = 'PlaySpeed.dlna.org'
GETCONTENTFEATURES_DLNA_ORG = 'getcontentFeatures.dlna.org'
GETAVAILABLESEEKRANGE_DLNA_ORG = 'getAvailableSeekRange.dlna.org'

TRANSFER_MODE_STREAMING = 'Streaming'

# content features sub fields, matched against the upper cased header value
PROFILE_FIELD = 'DLNA.ORG_PN'
OPERATIONS_FIELD = 'DLNA.ORG_OP'
PLAYSPEEDS_FIELD = 'DLNA.ORG_PS'
FLAGS_FIELD = 'DLNA.ORG_FLAGS'

# content type sub fields for DTCP link protected content
DTCP_HOST_FIELD = 'DTCP1HOST'
DTCP_PORT_FIELD = 'DTCP1PORT'
CONTENT_FORMAT_FIELD = 'CONTENTFORMAT'
DTCP_MIME_TYPE = 'APPLICATION/X-DTCP1'
DTCP_MARKER = 'DTCP'

PLAYSPEEDS_MAX_CNT = 64

# flags are in hex: 8 primary digits followed by 24 reserved digits
RESERVED_FLAGS_LENGTH = 24

FLAG_MASKS = collections.OrderedDict([
    ('sender_paced', 1 << 31),
    ('limited_time_seek', 1 << 30),
    ('limited_byte_seek', 1 << 29),
    ('play_container', 1 << 28),
    ('s0_increasing', 1 << 27),
    ('sn_increasing', 1 << 26),
    ('rtsp_pause', 1 << 25),
    ('streaming_mode', 1 << 24),
    ('interactive_mode', 1 << 23),
    ('background_mode', 1 << 22),
    ('http_stalling', 1 << 21),
    ('dlna_v15', 1 << 20),
    ('link_protected', 1 << 16),
    ('full_clear_text_seek', 1 << 15),
    ('limited_clear_text_seek', 1 << 14),
])

ContentFlags = collections.namedtuple('ContentFlags', list(FLAG_MASKS))
NO_FLAGS = ContentFlags(**{name: False for name in FLAG_MASKS})

Playspeed = collections.namedtuple('Playspeed', 'value text')

ContentFeatures = collections.namedtuple(
    'ContentFeatures',
    'profile time_seek_supported byte_range_supported playspeeds flags')
NO_CONTENT_FEATURES = ContentFeatures(None, False, False, (), NO_FLAGS)

ContentType = collections.namedtuple('ContentType', 'mime_type dtcp_host dtcp_port')

_DECIMAL = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$')
_FRACTION = re.compile(r'^([+-]?\d+)/(\d+)$')
_HEX = re.compile(r'^[0-9A-Fa-f]+$')
_CONTENT_FORMAT = re.compile(r'=\s*"([^"]*)"')


def sub_field_value(sub_field):
    '''Returns the text after "=" in a NAME=VALUE sub field, or None'''
    name, sep, value = sub_field.partition('=')
    if not sep or not value.strip():
        return None
    return value.strip()


def parse_operations(value):
    '''Decodes the two digit DLNA.ORG_OP code into (time seek, byte range)'''
    if len(value) != 2:
        logger.warning('%s value %r is not of the expected length 2', OPERATIONS_FIELD, value)
        return False, False
    supported = []
    for name, digit in zip(('time seek', 'range'), value):
        if digit not in '01':
            logger.warning('%s %s flag in %r is not 0 or 1', OPERATIONS_FIELD, name, value)
        supported.append(digit == '1')
    return tuple(supported)


def parse_playspeed(text):
    '''Returns the numeric rate of a decimal or n/d playspeed'''
    match = _FRACTION.match(text)
    try:
        if _DECIMAL.match(text):
            value = float(text)
        elif match and int(match.group(2)) != 0:
            value = int(match.group(1)) / int(match.group(2))
        else:
            value = None
    except OverflowError:
        value = None
    if value is None or not math.isfinite(value):
        raise ValueError('malformed playspeed: {!r}'.format(text))
    return value


def parse_playspeeds(value, max_count=PLAYSPEEDS_MAX_CNT):
    '''
    Parses a comma separated playspeed list in header order. Entries past
    max_count are dropped. A malformed entry yields an empty list.
    '''
    playspeeds = []
    for text in value.split(',')[:max_count]:
        text = text.strip()
        try:
            playspeeds.append(Playspeed(parse_playspeed(text), text))
        except ValueError:
            logger.warning('Problems converting playspeed %r into numeric value', text)
            return ()
    return tuple(playspeeds)


def flags_value(value):
    '''Strips the reserved digits and returns the primary flags as an integer'''
    if len(value) <= RESERVED_FLAGS_LENGTH or not _HEX.match(value):
        raise ValueError('{} value malformed or too short: {!r}'.format(FLAGS_FIELD, value))
    return int(value[:-RESERVED_FLAGS_LENGTH], 16)


def is_flag_set(value, mask):
    return (value & mask) == mask


def parse_flags(value):
    try:
        primary = flags_value(value)
    except ValueError as exc:
        logger.warning('%s', exc)
        return NO_FLAGS
    return ContentFlags(**{
        name: is_flag_set(primary, mask) for name, mask in FLAG_MASKS.items()})


class DLNAContentFeatures:
    '''Accumulates the sub fields of a contentFeatures.dlna.org value'''

    def __init__(self, **initial):
        self.profile = None
        self.support_time_seek = False
        self.support_range = False
        self.playspeeds = ()
        self.flags = NO_FLAGS
        self.__dict__.update(initial)

    @classmethod
    def from_string(class_, str_, max_playspeeds=PLAYSPEEDS_MAX_CNT):
        instance = class_()
        for sub_field in str_.split(';'):
            sub_field = sub_field.strip()
            if not sub_field:
                continue
            name = sub_field.upper()
            value = sub_field_value(sub_field)
            if PROFILE_FIELD in name:
                if value is None:
                    logger.warning('Problems parsing %s: %r', PROFILE_FIELD, sub_field)
                else:
                    instance.profile = value
            elif OPERATIONS_FIELD in name:
                if value is None:
                    logger.warning('Problems parsing %s: %r', OPERATIONS_FIELD, sub_field)
                else:
                    instance.support_time_seek, instance.support_range = parse_operations(value)
            elif PLAYSPEEDS_FIELD in name:
                if value is None:
                    logger.warning('Problems parsing %s: %r', PLAYSPEEDS_FIELD, sub_field)
                else:
                    instance.playspeeds = parse_playspeeds(value, max_playspeeds)
            elif FLAGS_FIELD in name:
                if value is None:
                    logger.warning('Problems parsing %s: %r', FLAGS_FIELD, sub_field)
                else:
                    instance.flags = parse_flags(value)
            else:
                logger.warning('Unrecognized content features sub field: %r', sub_field)
        return instance

    def freeze(self):
        return ContentFeatures(
            self.profile,
            self.support_time_seek,
            self.support_range,
            tuple(self.playspeeds),
            self.flags)


def parse_content_type(value):
    '''
    Returns the ContentType of a CONTENT-TYPE value. Link protected content
    carries the real mime type in the CONTENTFORMAT sub field, e.g.

        APPLICATION/X-DTCP1;DTCP1HOST=10.0.0.1;DTCP1PORT=8999;CONTENTFORMAT="VIDEO/MPEG"
    '''
    if DTCP_MARKER not in value.upper():
        return ContentType(value.strip(), None, -1)

    mime_type = None
    dtcp_host = None
    dtcp_port = -1
    for sub_field in value.split(';'):
        sub_field = sub_field.strip()
        if not sub_field:
            continue
        if DTCP_HOST_FIELD in sub_field.upper():
            dtcp_host = sub_field_value(sub_field)
            if dtcp_host is None:
                logger.warning('Problems parsing DTCP host: %r', sub_field)
        elif DTCP_PORT_FIELD in sub_field.upper():
            port = sub_field_value(sub_field)
            try:
                dtcp_port = parse_unsigned(port or '')
            except ValueError:
                logger.warning('Problems parsing DTCP port: %r', sub_field)
        elif CONTENT_FORMAT_FIELD in sub_field.upper():
            match = _CONTENT_FORMAT.search(sub_field)
            if match:
                mime_type = match.group(1)
            else:
                logger.warning('Problems parsing DTCP content format: %r', sub_field)
        elif DTCP_MIME_TYPE in sub_field.upper():
            pass
        else:
            logger.warning('Unrecognized content type sub field: %r', sub_field)
    return ContentType(mime_type, dtcp_host, dtcp_port)


class DLNAHeadRequest(HTTPRequest):
    '''DLNA vendor headers are sent with a spaced " : " field separator'''

    def format_header(self, key, value):
        if key.lower().endswith('.dlna.org'):
            return '{} : {}'.format(key, value)
        return super(DLNAHeadRequest, self).format_header(key, value)


def build_head_request(target, host, port, start_npt=0, start_byte=0):
    '''
    Returns the HEAD request text asking for content features and the
    available seek range. A nonzero start_byte takes precedence over start_npt.
    '''
    if start_byte:
        seek_range = HTTPRangeField(bytes=HTTPRange(start=str(start_byte)))
    else:
        seek_range = HTTPRangeField(npt=HTTPRange(start=str(start_npt)))
    request = DLNAHeadRequest('HEAD', target, [
        ('HOST', '{}:{:d}'.format(host, port)),
        (GETCONTENTFEATURES_DLNA_ORG, '1'),
        (GETAVAILABLESEEKRANGE_DLNA_ORG, '1'),
        (TIMESEEKRANGE_DLNA_ORG, str(seek_range)),
    ])
    text = request.to_string()
    logger.debug('HEAD request: %r', text)
    return text
