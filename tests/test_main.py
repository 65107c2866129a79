import contextlib
import io
import unittest
from unittest import TestCase, mock

from dlnasrc.__main__ import main, parse_arguments

from canned import DTCP_RESPONSE, OneShotServer


class ArgumentsTest(TestCase):

    def test_defaults(self):
        namespace = parse_arguments(['http://10.0.0.1/rec'])
        self.assertEqual(namespace.start_npt, 0)
        self.assertEqual(namespace.start_byte, 0)
        self.assertIsNone(namespace.timeout)
        self.assertIsNone(namespace.logging_conf)

    def test_start_npt(self):
        namespace = parse_arguments(['http://10.0.0.1/rec', '--start-npt', '00:00:10'])
        self.assertEqual(namespace.start_npt, 10000000000)

    def test_bad_start_npt(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                parse_arguments(['http://10.0.0.1/rec', '--start-npt', 'soon'])

    def test_negative_start_byte(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                parse_arguments(['http://10.0.0.1/rec', '--start-byte=-5'])

    def test_start_byte(self):
        self.assertEqual(parse_arguments(['http://10.0.0.1/rec', '--start-byte', '500']).start_byte, 500)


@mock.patch('dlnasrc.__main__.init_logging')
class MainTest(TestCase):

    def test_probe(self, init_logging):
        server = OneShotServer(DTCP_RESPONSE)
        server.start()
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            status = main(['http://127.0.0.1:{:d}/rec'.format(server.port), '--timeout', '5'])
        server.join(5)
        self.assertEqual(status, 0)
        self.assertIn('HEAD Ret Code: 200', out.getvalue())
        self.assertIn('Decrypter needed: 192.168.0.10:8999', out.getvalue())
        request_line = 'HEAD http://127.0.0.1:{:d}/rec HTTP/1.1\r\n'.format(server.port)
        self.assertIn(request_line.encode('ascii'), server.request)

    def test_failed_start_exchange(self, init_logging):
        # only the first exchange is answered
        server = OneShotServer(DTCP_RESPONSE)
        server.start()
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            status = main([
                'http://127.0.0.1:{:d}/rec'.format(server.port),
                '--timeout', '5', '--start-byte', '500'])
        server.join(5)
        self.assertEqual(status, 1)
        self.assertEqual(out.getvalue(), '')

    def test_not_http(self, init_logging):
        self.assertEqual(main(['rtsp://127.0.0.1/rec']), 2)


if __name__ == '__main__':
    unittest.main()
