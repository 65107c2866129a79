'''
Normal play time (NPT) conversions.

    npt time  = npt sec | npt hhmmss
    npt sec   = 1*DIGIT [ "." 1*3DIGIT ]
    npthhmmss = npthh ":" nptmm ":" nptss [ "." 1*3DIGIT ]
'''

import math
import re

NANOS_PER_MILLI = 1000000

_HHMMSS = re.compile(r'^(\d+):(\d{1,2}):(\d{1,2}(?:\.\d+)?)$')
_SECONDS = re.compile(r'^\d+(?:\.\d+)?$')


class MalformedTimeError(ValueError):

    def __init__(self, text):
        super(MalformedTimeError, self).__init__(text)
        self.text = text

    def __str__(self):
        return 'Malformed normal play time: {!r}'.format(self.text)


def _millis_to_nanos(text, seconds):
    if not math.isfinite(seconds):
        raise MalformedTimeError(text)
    return int(round(seconds * 1000)) * NANOS_PER_MILLI


def parse_npt(text):
    '''Returns the nanosecond value of an NPT string'''
    stripped = text.strip()
    match = _HHMMSS.match(stripped)
    try:
        if match:
            hours, mins, secs = match.groups()
            return _millis_to_nanos(text, (int(hours) * 60 + int(mins)) * 60 + float(secs))
        if _SECONDS.match(stripped):
            return _millis_to_nanos(text, float(stripped))
    except (OverflowError, ValueError):
        raise MalformedTimeError(text)
    raise MalformedTimeError(text)


def format_npt(nanos, hhmmss=False):
    '''Renders nanoseconds as NPT text, truncated to milliseconds'''
    millis = nanos // NANOS_PER_MILLI
    secs, millis = divmod(millis, 1000)
    if hhmmss:
        mins, secs = divmod(secs, 60)
        hours, mins = divmod(mins, 60)
        return '{:d}:{:02d}:{:02d}.{:03d}'.format(hours, mins, secs, millis)
    if millis:
        return '{:d}.{:03d}'.format(secs, millis).rstrip('0')
    return '{:d}'.format(secs)
