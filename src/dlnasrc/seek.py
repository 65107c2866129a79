'''
Checks a requested seek or rate change against the current HeadResponse.

Seek types are ignored: DLNA requests always carry an absolute start
position, zero being assumed when none is sent.
'''

import collections
import logging

from .dlna import PLAYSPEED_DLNA_ORG, TRANSFER_MODE_STREAMING, TRANSFERMODE_DLNA_ORG

logger = logging.getLogger(__name__)

FORMAT_BYTES = 'bytes'
FORMAT_TIME = 'time'

SEEK_TYPE_NONE = 'none'
SEEK_TYPE_SET = 'set'

NORMAL_RATE = 1.0

UNSUPPORTED_RATE = 'UnsupportedRate'
OUT_OF_RANGE = 'OutOfRange'
UNSUPPORTED_FORMAT = 'UnsupportedFormat'
NO_CAPABILITIES = 'NoCapabilities'

SeekRequest = collections.namedtuple(
    'SeekRequest', 'rate format start stop start_type stop_type')


def seek_request(rate=NORMAL_RATE, format=FORMAT_BYTES, start=0, stop=-1,
                 start_type=SEEK_TYPE_SET, stop_type=SEEK_TYPE_NONE):
    return SeekRequest(rate, format, start, stop, start_type, stop_type)


class Verdict(collections.namedtuple('Verdict', 'reason detail')):
    '''Outcome of a validation; true when the change may proceed'''

    __slots__ = ()

    def __bool__(self):
        return self.reason is None


ACCEPTED = Verdict(None, '')


def find_playspeed(rate, content_features):
    for playspeed in content_features.playspeeds:
        if playspeed.value == rate:
            return playspeed
    return None


def validate(request, snapshot):
    rate = request.rate
    if rate != NORMAL_RATE and find_playspeed(rate, snapshot.content_features) is None:
        detail = 'rate {} is not supported by server'.format(rate)
        logger.warning('%s', detail.capitalize())
        return Verdict(UNSUPPORTED_RATE, detail)

    start = request.start
    if request.format == FORMAT_BYTES:
        low, high = snapshot.byte_seek.start, snapshot.byte_seek.end
        units = 'byte'
    elif request.format == FORMAT_TIME:
        if snapshot.time_seek is None:
            logger.warning('Start time %s requested but server gave no time seek range', start)
            return Verdict(OUT_OF_RANGE, 'no time seek range available')
        low, high = snapshot.time_seek.start, snapshot.time_seek.end
        units = 'time'
    else:
        logger.warning('Supplied format type is not supported: %r', request.format)
        return Verdict(UNSUPPORTED_FORMAT, 'format {!r} is not supported'.format(request.format))

    if not low <= start <= high:
        detail = 'start {} {} is not within valid range {} to {}'.format(units, start, low, high)
        logger.warning('Specified %s', detail)
        return Verdict(OUT_OF_RANGE, detail)

    logger.debug('Requested change is valid: %r', request)
    return ACCEPTED


def formulate_extra_headers(rate, snapshot):
    '''
    Headers to send with a rate change, or None when the rate is not one of
    the server's playspeeds. The playspeed's own text is used so fractions
    such as 1/3 reach the server as written.
    '''
    playspeed = find_playspeed(rate, snapshot.content_features)
    if playspeed is None:
        logger.error('Unable to get string representation of rate: %r', rate)
        return None
    speed = 'speed={}'.format(playspeed.text)
    logger.info('Set playspeed header value: %s', speed)
    return [
        (TRANSFERMODE_DLNA_ORG, TRANSFER_MODE_STREAMING),
        (PLAYSPEED_DLNA_ORG, speed),
    ]
