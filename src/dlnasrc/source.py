'''
DLNASource ties the HEAD exchange to the current capability snapshot.

The snapshot is replaced as a unit, and only by a successful exchange, so
queries and seek validation always read one complete HeadResponse.
'''

import collections
import logging
import threading
import urllib.parse

from .dlna import PLAYSPEEDS_MAX_CNT, build_head_request
from .network import SocketTransport, TransportError, head_exchange
from .npt import format_npt
from .response import HeadResponse
from .seek import (FORMAT_BYTES, FORMAT_TIME, NO_CAPABILITIES, NORMAL_RATE, Verdict,
                   formulate_extra_headers, validate)

logger = logging.getLogger(__name__)

DEFAULT_HTTP_PORT = 80

DecryptionConfig = collections.namedtuple('DecryptionConfig', 'required dtcp_host dtcp_port')
NO_DECRYPTION = DecryptionConfig(False, None, -1)

SeekingInfo = collections.namedtuple('SeekingInfo', 'format seekable start end')
Segment = collections.namedtuple('Segment', 'rate format start end')


def parse_uri(uri):
    '''Returns (host, port) of an http URI, raising ValueError otherwise'''
    split_result = urllib.parse.urlsplit(uri)
    if split_result.scheme != 'http':
        raise ValueError('protocol is not http: {!r}'.format(uri))
    if not split_result.hostname:
        raise ValueError('no host in {!r}'.format(uri))
    return split_result.hostname, split_result.port or DEFAULT_HTTP_PORT


class DLNASource:

    def __init__(self, transport_factory=SocketTransport, max_playspeeds=PLAYSPEEDS_MAX_CNT):
        self.transport_factory = transport_factory
        self.max_playspeeds = max_playspeeds
        self.uri = None
        self.host = None
        self.port = None
        self.rate = NORMAL_RATE
        self.extra_headers = None
        self.reset_requested()
        self._head_response = None
        self._snapshot_lock = threading.Lock()
        self._exchange_lock = threading.Lock()

    @property
    def head_response(self):
        with self._snapshot_lock:
            return self._head_response

    def install(self, head_response):
        with self._snapshot_lock:
            self._head_response = head_response

    def reset_requested(self):
        self.requested_rate = NORMAL_RATE
        self.requested_format = FORMAT_BYTES
        self.requested_start = 0
        self.requested_stop = -1

    def set_uri(self, uri):
        '''
        Points the source at uri. A new URI triggers a HEAD exchange; the
        decryption decision is refreshed either way.
        '''
        if uri != self.uri:
            if self.uri is None:
                logger.debug('Need to initialize due to no URI')
            else:
                logger.info('Need to initialize due to new URI, current: %s, new: %s', self.uri, uri)
            if not self.init_uri(uri):
                logger.error('Problems initializing URI %s', uri)
                return False
            logger.info('Successfully initialized URI: %s', self.uri)

        self.reset_requested()

        decryption = self.decryption
        if decryption.required:
            logger.info('Content is link protected, decrypter needed for %s:%d',
                        decryption.dtcp_host, decryption.dtcp_port)
        else:
            logger.info('No DTCP setup required')
        return True

    def init_uri(self, uri):
        try:
            host, port = parse_uri(uri)
        except ValueError as exc:
            logger.error('Problems parsing URI: %s', exc)
            self.uri = None
            return False
        self.uri, self.host, self.port = uri, host, port
        # capabilities of the previous resource no longer apply
        self.install(None)
        if not self.head_request():
            logger.warning('Unable to issue HEAD request & get HEAD response')
        return True

    def head_request(self, start_npt=0, start_byte=0):
        '''
        Runs one HEAD exchange starting at start_npt nanoseconds or, when
        nonzero, start_byte. Returns True when a new snapshot was installed;
        on failure the previous snapshot is kept.
        '''
        with self._exchange_lock:
            if self.uri is None:
                logger.warning('No URI set, unable to issue HEAD request')
                return False
            request = build_head_request(
                self.uri, self.host, self.port, format_npt(start_npt), start_byte)
            try:
                raw = head_exchange(self.transport_factory(), self.host, self.port, request)
            except TransportError as exc:
                logger.warning('Problems sending and receiving HEAD request: %s', exc)
                return False

            head_response = HeadResponse.from_bytes(raw, self.max_playspeeds)
            logger.info('Parsed HEAD Response into struct:\n%s', head_response.describe())
            if not head_response.ok:
                logger.warning('Error code received in HEAD response: %d %s',
                               head_response.status_code, head_response.status_message)
                return False
            self.install(head_response)
            return True

    @property
    def decryption(self):
        head_response = self.head_response
        if head_response is None or not head_response.link_protected:
            return NO_DECRYPTION
        return DecryptionConfig(True, head_response.dtcp_host, head_response.dtcp_port)

    @property
    def supported_rates(self):
        head_response = self.head_response
        if head_response is None:
            return ()
        return tuple(p.value for p in head_response.content_features.playspeeds)

    def _snapshot_for_query(self, name):
        head_response = self.head_response
        if head_response is None:
            logger.info('No URI and/or HEAD response info, unable to handle %s query', name)
        return head_response

    def query_duration(self, format):
        '''Total bytes or nanoseconds of the content, or None when unknown'''
        head_response = self._snapshot_for_query('duration')
        if head_response is None:
            return None
        features = head_response.content_features
        if format == FORMAT_BYTES:
            if features.byte_range_supported:
                return head_response.byte_seek.total
            logger.info('Duration in bytes not available for content item')
        elif format == FORMAT_TIME:
            time_seek = head_response.time_seek
            if features.time_seek_supported and time_seek is not None and time_seek.duration is not None:
                return time_seek.duration
            logger.info('Duration in media time not available for content item')
        else:
            logger.info('Got duration query with non-supported format type: %r', format)
        return None

    def _seek_range(self, head_response, format, name):
        features = head_response.content_features
        if format == FORMAT_BYTES:
            if features.byte_range_supported:
                return head_response.byte_seek.start, head_response.byte_seek.end
            logger.info('%s in bytes not available for content item', name)
        elif format == FORMAT_TIME:
            if features.time_seek_supported and head_response.time_seek is not None:
                return head_response.time_seek.start, head_response.time_seek.end
            logger.info('%s in media time not available for content item', name)
        else:
            logger.info('Got %s query with non-supported format type: %r', name.lower(), format)
        return None

    def query_seeking(self, format):
        head_response = self._snapshot_for_query('seeking')
        if head_response is None:
            return None
        seek_range = self._seek_range(head_response, format, 'Seeking')
        if seek_range is None:
            return None
        return SeekingInfo(format, True, *seek_range)

    def query_segment(self, format):
        head_response = self._snapshot_for_query('segment')
        if head_response is None:
            return None
        seek_range = self._seek_range(head_response, format, 'Segment')
        if seek_range is None:
            return None
        return Segment(self.rate, format, *seek_range)

    def query_convert(self, src_format, src_value, dest_format):
        '''
        Converts a position by asking the server for content starting there;
        the answer is the start of the range it reports in dest_format.
        '''
        if self._snapshot_for_query('convert') is None:
            return None
        if src_format == FORMAT_BYTES:
            converted = self.head_request(start_byte=src_value)
        elif src_format == FORMAT_TIME:
            converted = self.head_request(start_npt=src_value)
        else:
            logger.warning('Got convert query with non-supported format type: %r', src_format)
            return None
        if not converted:
            logger.warning('Problems with HEAD request')
            return None

        head_response = self.head_response
        if dest_format == FORMAT_BYTES:
            return head_response.byte_seek.start
        if dest_format == FORMAT_TIME and head_response.time_seek is not None:
            return head_response.time_seek.start
        logger.info('Unable to convert into format %r', dest_format)
        return None

    def handle_seek(self, request):
        '''
        Validates request and records it as the requested position and rate.
        A rate other than 1.0 also sets extra_headers for the next request.
        '''
        head_response = self.head_response
        if head_response is None:
            logger.info('No URI and/or HEAD response info, ignoring seek')
            return Verdict(NO_CAPABILITIES, 'no HEAD response available')

        logger.info('Got seek: %r', request)
        verdict = validate(request, head_response)
        if not verdict:
            logger.warning('Requested change is invalid: %s', verdict.detail)
            return verdict

        self.rate = request.rate
        self.requested_rate = request.rate
        self.requested_format = request.format
        self.requested_start = request.start
        self.requested_stop = request.stop
        if request.rate != NORMAL_RATE:
            self.extra_headers = formulate_extra_headers(request.rate, head_response)
        else:
            self.extra_headers = None
        return verdict
