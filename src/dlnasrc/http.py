import itertools
import logging
import re

logger = logging.getLogger(__name__)

CRLF = '\r\n'
HTTP_BODY_SEPARATOR = b'\r\n' * 2

UINT64_MAX = (1 << 64) - 1

_UNSIGNED = re.compile(r'^[0-9]{1,20}$')


def parse_unsigned(text):
    '''Returns text as an unsigned 64 bit integer, raising ValueError otherwise'''
    if not _UNSIGNED.match(text) or int(text) > UINT64_MAX:
        raise ValueError('not an unsigned 64 bit integer: {!r}'.format(text))
    return int(text)


class HTTPMessage:

    def __init__(self, first_line, headers):
        self.first_line = first_line
        self.headers = headers

    def format_header(self, key, value):
        return '{}: {}'.format(key, value)

    def httpify_headers(self):
        '''Build HTTP headers string, including the trailing CRLF's for each header'''
        def lines():
            for key, value in self.headers:
                assert key, key
                if value:
                    yield self.format_header(key, value)
                else:
                    yield key + ':'
        return CRLF.join(itertools.chain(lines(), ['']))

    def to_string(self):
        return self.first_line + CRLF + self.httpify_headers() + CRLF


class HTTPRequest(HTTPMessage):

    def __init__(self, method, target, headers=None):
        super(HTTPRequest, self).__init__(
            ' '.join((method, target, 'HTTP/1.1')),
            list(headers or []))


class HTTPRange:
    '''One ``start-end/size`` range, fields kept as text'''

    def __init__(self, start='0', end='', size=''):
        self.start = start
        self.end = end
        self.size = size

    @classmethod
    def from_string(class_, str_):
        instance = class_()
        if '/' in str_:
            range_, instance.size = str_.split('/')
        else:
            range_ = str_
        instance.start, instance.end = range_.split('-')
        return instance

    def integers(self):
        '''Returns (start, end, size) as unsigned integers, raising ValueError otherwise'''
        return tuple(parse_unsigned(field) for field in (self.start, self.end, self.size))

    def __str__(self):
        s = self.start + '-' + self.end
        if self.size:
            s += '/' + str(self.size)
        return s


class HTTPRangeField(dict):
    '''Space separated ``units=range`` forms, as in TimeSeekRange.dlna.org'''

    @classmethod
    def from_string(class_, str_):
        instance = class_()
        for forms_ in str_.split():
            if '=' not in forms_:
                logger.debug('Ignoring range form without units: %r', forms_)
                continue
            units, range_ = forms_.split('=', 1)
            try:
                instance[units] = HTTPRange.from_string(range_)
            except ValueError:
                logger.warning('Malformed %s range: %r', units, range_)
        return instance

    def __str__(self):
        return ' '.join('{}={}'.format(units, range) for units, range in self.items())
