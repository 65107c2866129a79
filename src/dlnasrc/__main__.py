#!/usr/bin/env python3

import argparse
import logging
import logging.config
import sys

from .http import parse_unsigned
from .npt import MalformedTimeError, parse_npt
from .network import SocketTransport
from .source import DLNASource

logger = logging.getLogger('dlnasrc.main')


def init_logging(logging_conf=None, level=logging.INFO):
    if logging_conf is not None:
        logging.config.fileConfig(logging_conf, disable_existing_loggers=False)
        return
    formatter = logging.Formatter(
        '%(asctime)s.%(msecs)03d;%(levelname)s;%(name)s;%(message)s',
        datefmt='%H:%M:%S')
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def byte_argument(text):
    try:
        return parse_unsigned(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def npt_argument(text):
    try:
        return parse_npt(text)
    except MalformedTimeError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        prog='dlnasrc-probe',
        description='Sends a DLNA HEAD request and prints the seek and playspeed capabilities.')
    parser.add_argument('uri', help='http URI of the media resource')
    parser.add_argument(
        '--start-npt', type=npt_argument, default=0,
        help='request content starting at this normal play time')
    parser.add_argument(
        '--start-byte', type=byte_argument, default=0,
        help='request content starting at this byte, takes precedence over --start-npt')
    parser.add_argument(
        '--timeout', type=float, default=None,
        help='socket timeout in seconds, blocks indefinitely when not given')
    parser.add_argument(
        '--logging_conf', '--logging-conf',
        help='Path of Python logging configuration file')
    parser.add_argument('-v', '--verbose', action='store_true', help='log the wire traffic')
    return parser.parse_args(argv)


def main(argv=None):
    namespace = parse_arguments(argv)
    init_logging(namespace.logging_conf, logging.DEBUG if namespace.verbose else logging.INFO)

    source = DLNASource(lambda: SocketTransport(timeout=namespace.timeout))
    if not source.set_uri(namespace.uri):
        return 2
    if namespace.start_npt or namespace.start_byte:
        if not source.head_request(namespace.start_npt, namespace.start_byte):
            logger.error('No usable HEAD response from %s at the requested start', namespace.uri)
            return 1

    head_response = source.head_response
    if head_response is None:
        logger.error('No usable HEAD response from %s', namespace.uri)
        return 1
    print(head_response.describe())
    decryption = source.decryption
    if decryption.required:
        print('Decrypter needed: {}:{:d}'.format(decryption.dtcp_host, decryption.dtcp_port))
    return 0


if __name__ == '__main__':
    sys.exit(main())
