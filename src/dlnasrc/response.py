'''
Builds the immutable HeadResponse capability snapshot from a raw HEAD
response. A malformed field is logged and left at its default; it never
stops the remaining fields from being parsed.
'''

import collections
import logging
import re

from . import headers
from .dlna import (DLNAContentFeatures, NO_CONTENT_FEATURES, PLAYSPEEDS_MAX_CNT,
                   parse_content_type)
from .http import HTTPRangeField, parse_unsigned
from .npt import MalformedTimeError, parse_npt

logger = logging.getLogger(__name__)

OK_STATUS_CODES = frozenset((200, 201))
ACCEPT_RANGES_NONE = 'NONE'
UNKNOWN_DURATION = '*'

NPT_UNITS = 'NPT'
BYTES_UNITS = 'BYTES'

_STATUS_LINE = re.compile(r'^(HTTP/\S+)\s+(\d{3})(?:\s+(.*))?$')
_DTCP_RANGE = re.compile(r'BYTES\s*[=\s]\s*(\S+)')

ByteRange = collections.namedtuple('ByteRange', 'start end total')
NO_BYTE_RANGE = ByteRange(0, 0, 0)

TimeSeekRange = collections.namedtuple(
    'TimeSeekRange',
    'start end duration start_text end_text duration_text')


def parse_status_line(value):
    '''Returns (version, code, message) of an HTTP status line'''
    match = _STATUS_LINE.match(value.strip())
    if not match:
        raise ValueError('malformed status line: {!r}'.format(value))
    version, code, message = match.groups()
    return version, int(code), message or ''


def parse_byte_range(range_):
    start, end, total = range_.integers()
    return ByteRange(start, end, total)


def parse_npt_range(range_):
    '''Converts an NPT HTTPRange into a TimeSeekRange; the duration may be "*"'''
    if range_.size == UNKNOWN_DURATION:
        duration = None
    else:
        duration = parse_npt(range_.size)
    return TimeSeekRange(
        parse_npt(range_.start), parse_npt(range_.end), duration,
        range_.start, range_.end, range_.size)


def parse_time_seek_range(value):
    '''
    Returns (time_seek, byte_seek) from a TimeSeekRange.dlna.org value, e.g.

        NPT=335.1-336.1/40445.4 BYTES=1539686400-1540210688/304857907200

    Either form may be absent: time_seek is then None and byte_seek is zero.
    '''
    ranges = HTTPRangeField.from_string(value)

    time_seek = None
    if NPT_UNITS in ranges:
        try:
            time_seek = parse_npt_range(ranges[NPT_UNITS])
        except (MalformedTimeError, ValueError) as exc:
            logger.warning('Problems parsing NPT from time seek range %r: %s', value, exc)
    else:
        logger.warning('No NPT found in time seek range %r', value)

    byte_seek = NO_BYTE_RANGE
    if BYTES_UNITS in ranges:
        try:
            byte_seek = parse_byte_range(ranges[BYTES_UNITS])
        except ValueError as exc:
            logger.warning('Problems parsing BYTES from time seek range %r: %s', value, exc)
    else:
        logger.warning('No BYTES found in time seek range %r', value)

    return time_seek, byte_seek


def parse_dtcp_range(value):
    '''Returns the ByteRange of a Content-Range.dtcp.com value, or None'''
    match = _DTCP_RANGE.search(value)
    if not match:
        logger.warning('No BYTES found in DTCP range %r', value)
        return None
    try:
        return parse_byte_range(HTTPRangeField.from_string('BYTES=' + match.group(1))[BYTES_UNITS])
    except (KeyError, ValueError) as exc:
        logger.warning('Problems parsing DTCP range %r: %s', value, exc)
        return None


class HeadResponse(collections.namedtuple('HeadResponse', (
        'http_version status_code status_message '
        'transfer_mode transfer_encoding server date '
        'content_length accept_ranges accepts_byte_ranges '
        'content_type dtcp_host dtcp_port '
        'time_seek byte_seek dtcp_range content_features'))):
    '''Capability snapshot of one HEAD exchange'''

    __slots__ = ()

    @property
    def ok(self):
        return self.status_code in OK_STATUS_CODES

    @property
    def link_protected(self):
        return self.content_features.flags.link_protected

    @classmethod
    def from_bytes(cls, raw, max_playspeeds=PLAYSPEEDS_MAX_CNT):
        builder = HeadResponseBuilder(max_playspeeds)
        for kind, value in headers.tokenize(raw):
            builder.assign(kind, value)
        return builder.build()

    def describe(self):
        '''Multi line summary for the logs'''
        features = self.content_features

        def yes_no(value):
            return 'TRUE' if value else 'FALSE'

        lines = [
            ('HTTP Version', self.http_version or ''),
            ('HEAD Ret Code', self.status_code),
            ('HEAD Ret Msg', self.status_message or ''),
            ('Server', self.server or ''),
            ('Date', self.date or ''),
            ('Content Length', self.content_length or ''),
            ('Accept Ranges', self.accept_ranges or ''),
            ('Content Type', self.content_type or ''),
        ]
        if self.dtcp_host is not None:
            lines += [('DTCP Host', self.dtcp_host), ('DTCP Port', self.dtcp_port)]
        lines += [
            ('HTTP Transfer Encoding', self.transfer_encoding or ''),
            ('DLNA Transfer Mode', self.transfer_mode or ''),
        ]
        if self.time_seek is not None:
            lines += [
                ('Time Seek NPT Start', '{} - {}'.format(self.time_seek.start_text, self.time_seek.start)),
                ('Time Seek NPT End', '{} - {}'.format(self.time_seek.end_text, self.time_seek.end)),
                ('Time Seek NPT Duration', '{} - {}'.format(self.time_seek.duration_text, self.time_seek.duration)),
            ]
        lines += [
            ('Byte Seek Start', self.byte_seek.start),
            ('Byte Seek End', self.byte_seek.end),
            ('Byte Seek Total', self.byte_seek.total),
        ]
        if self.dtcp_range is not None:
            lines += [
                ('DTCP Range Start', self.dtcp_range.start),
                ('DTCP Range End', self.dtcp_range.end),
                ('DTCP Range Total', self.dtcp_range.total),
            ]
        lines += [
            ('DLNA Profile', features.profile or ''),
            ('Supported Playspeed Cnt', len(features.playspeeds)),
            ('Playspeeds', ', '.join(p.text for p in features.playspeeds)),
            ('Time Seek Supported?', yes_no(features.time_seek_supported)),
            ('Range Supported?', yes_no(features.byte_range_supported)),
        ]
        lines += [(name, yes_no(value)) for name, value in features.flags._asdict().items()]
        return '\n'.join('{}: {}'.format(name, value) for name, value in lines)


class HeadResponseBuilder:
    '''Mutable accumulator; nothing is visible to readers until build()'''

    def __init__(self, max_playspeeds=PLAYSPEEDS_MAX_CNT):
        self.max_playspeeds = max_playspeeds
        self.fields = dict(
            http_version=None,
            status_code=0,
            status_message=None,
            transfer_mode=None,
            transfer_encoding=None,
            server=None,
            date=None,
            content_length=0,
            accept_ranges=None,
            accepts_byte_ranges=True,
            content_type=None,
            dtcp_host=None,
            dtcp_port=-1,
            time_seek=None,
            byte_seek=NO_BYTE_RANGE,
            dtcp_range=None,
            content_features=NO_CONTENT_FEATURES)
        self.handlers = {
            headers.STATUS_LINE: self.assign_status_line,
            headers.TIMESEEKRANGE: self.assign_time_seek_range,
            headers.TRANSFERMODE: self.assign_text('transfer_mode'),
            headers.DATE: self.assign_text('date'),
            headers.CONTENT_TYPE: self.assign_content_type,
            headers.SERVER: self.assign_text('server'),
            headers.TRANSFER_ENCODING: self.assign_text('transfer_encoding'),
            headers.CONTENTFEATURES: self.assign_content_features,
            headers.DTCP_RANGE: self.assign_dtcp_range,
            headers.CONTENT_LENGTH: self.assign_content_length,
            headers.ACCEPT_RANGES: self.assign_accept_ranges,
            headers.VARY: None,
            headers.PRAGMA: None,
            headers.CACHE_CONTROL: None,
        }

    def assign(self, kind, value):
        try:
            handler = self.handlers[kind]
        except KeyError:
            logger.warning('Unsupported HEAD response field %s: %r', kind, value)
            return
        if handler is not None:
            handler(value)

    def assign_text(self, name):
        def assign(value):
            self.fields[name] = value
        return assign

    def assign_status_line(self, value):
        try:
            version, code, message = parse_status_line(value)
        except ValueError as exc:
            logger.warning('Problems with HEAD response status line: %s', exc)
            return
        self.fields.update(http_version=version, status_code=code, status_message=message)

    def assign_content_length(self, value):
        try:
            self.fields['content_length'] = parse_unsigned(value)
        except ValueError:
            logger.warning('Problems parsing Content Length %r', value)

    def assign_accept_ranges(self, value):
        self.fields['accept_ranges'] = value
        self.fields['accepts_byte_ranges'] = value != ACCEPT_RANGES_NONE

    def assign_content_type(self, value):
        content_type = parse_content_type(value)
        self.fields.update(
            content_type=content_type.mime_type,
            dtcp_host=content_type.dtcp_host,
            dtcp_port=content_type.dtcp_port)

    def assign_time_seek_range(self, value):
        time_seek, byte_seek = parse_time_seek_range(value)
        self.fields.update(time_seek=time_seek, byte_seek=byte_seek)

    def assign_dtcp_range(self, value):
        self.fields['dtcp_range'] = parse_dtcp_range(value)

    def assign_content_features(self, value):
        self.fields['content_features'] = DLNAContentFeatures.from_string(
            value, self.max_playspeeds).freeze()

    def build(self):
        return HeadResponse(**self.fields)
