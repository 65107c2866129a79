import errno
import logging
import socket

from .http import HTTP_BODY_SEPARATOR

logger = logging.getLogger(__name__)

RECV_BUFSIZE = 0x1000


class TransportError(Exception):

    def __init__(self, message, cause=None):
        super(TransportError, self).__init__(message)
        self.cause = cause


def pretty_sockaddr(addr):
    '''Converts a standard Python sockaddr tuple and returns it in the normal text representation'''
    return '{}:{:d}'.format(addr[0], addr[1])


class SocketTransport:
    '''
    One blocking TCP connection per HEAD exchange. Any failure, including a
    short send or a read that returns nothing, raises TransportError.
    '''

    def __init__(self, timeout=None, buffer_size=RECV_BUFSIZE):
        self.timeout = timeout
        self.buffer_size = buffer_size
        self.socket = None

    def connect(self, host, port):
        try:
            addrinfo = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM)
        except socket.gaierror as exc:
            raise TransportError('getaddrinfo failed for {}:{}'.format(host, port), exc)

        last_error = None
        for family, socktype, proto, canonname, sockaddr in addrinfo:
            try:
                sock = socket.socket(family, socktype, proto)
            except OSError as exc:
                last_error = exc
                continue
            sock.settimeout(self.timeout)
            try:
                sock.connect(sockaddr)
            except OSError as exc:
                logger.debug('Connect to %s failed: %s', pretty_sockaddr(sockaddr), exc)
                sock.close()
                last_error = exc
                continue
            logger.debug('Connected to %s', pretty_sockaddr(sockaddr))
            self.socket = sock
            return
        raise TransportError('unable to connect to {}:{}'.format(host, port), last_error)

    def send(self, data):
        try:
            sent = self.socket.send(data)
        except OSError as exc:
            raise TransportError('problems sending on socket', exc)
        if sent != len(data):
            raise TransportError('sent {:d} bytes instead of {:d}'.format(sent, len(data)))

    def receive(self):
        '''Reads until the end of the response header or until the server closes'''
        buffer = b''
        while HTTP_BODY_SEPARATOR not in buffer:
            try:
                data = self.socket.recv(self.buffer_size)
            except OSError as exc:
                if exc.errno == errno.ECONNRESET and buffer:
                    break
                raise TransportError('HEAD response recv() failed', exc)
            if not data:
                break
            buffer += data
        if not buffer:
            raise TransportError('connection closed before any HEAD response was received')
        return buffer

    def close(self):
        if self.socket is not None:
            self.socket.close()
            self.socket = None


def head_exchange(transport, host, port, request):
    '''Sends request and returns the raw response; the connection is always closed'''
    if isinstance(request, str):
        request = request.encode('utf-8')
    transport.connect(host, port)
    try:
        transport.send(request)
        response = transport.receive()
    finally:
        transport.close()
    logger.debug('HEAD response received: %r', response)
    return response
