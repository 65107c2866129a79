'''DLNA HTTP HEAD negotiation of seek ranges and playspeeds'''

from .dlna import build_head_request
from .headers import tokenize
from .network import SocketTransport, TransportError
from .npt import MalformedTimeError, format_npt, parse_npt
from .response import HeadResponse
from .seek import (FORMAT_BYTES, FORMAT_TIME, OUT_OF_RANGE, UNSUPPORTED_FORMAT,
                   UNSUPPORTED_RATE, SeekRequest, Verdict, formulate_extra_headers,
                   seek_request, validate)
from .source import DLNASource
