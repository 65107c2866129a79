import unittest
from unittest import TestCase

from dlnasrc import headers
from dlnasrc.headers import header_kind, tokenize

from canned import STREAMING_RESPONSE


class HeaderKindTest(TestCase):

    def test_first_catalog_entry_wins(self):
        # DATE precedes SERVER in the catalog
        self.assertEqual(header_kind('SERVER: UPDATE-SERVICE'), headers.DATE)

    def test_status_line(self):
        self.assertEqual(header_kind('HTTP/1.1 200 OK'), headers.STATUS_LINE)

    def test_unknown(self):
        self.assertIsNone(header_kind('X-FOO: BAR'))


class TokenizeTest(TestCase):

    def test_catalog_order(self):
        kinds = [kind for kind, value in tokenize(STREAMING_RESPONSE)]
        self.assertEqual(kinds, [
            headers.STATUS_LINE,
            headers.VARY,
            headers.TIMESEEKRANGE,
            headers.TRANSFERMODE,
            headers.DATE,
            headers.CONTENT_TYPE,
            headers.SERVER,
            headers.CONTENTFEATURES,
            headers.CONTENT_LENGTH,
            headers.ACCEPT_RANGES,
        ])

    def test_values_upper_cased(self):
        fields = dict(tokenize(STREAMING_RESPONSE))
        self.assertEqual(fields[headers.STATUS_LINE], 'HTTP/1.1 200 OK')
        self.assertEqual(fields[headers.TRANSFERMODE], 'STREAMING')
        self.assertEqual(fields[headers.CONTENT_TYPE], 'VIDEO/MPEG')
        self.assertEqual(fields[headers.DATE], 'MON, 19 OCT 2026 10:00:00 GMT')

    def test_value_after_first_colon(self):
        fields = dict(tokenize('Date: Mon, 19 Oct 2026 10:00:00 GMT\r\n'))
        self.assertEqual(fields[headers.DATE], 'MON, 19 OCT 2026 10:00:00 GMT')

    def test_last_duplicate_wins(self):
        raw = 'HTTP/1.1 200 OK\r\nContent-Length: 1\r\nContent-Length: 2\r\n\r\n'
        self.assertEqual(dict(tokenize(raw))[headers.CONTENT_LENGTH], '2')

    def test_unknown_lines_dropped(self):
        with self.assertLogs('dlnasrc.headers', 'INFO'):
            fields = tokenize('HTTP/1.1 200 OK\r\nX-Foo: bar\r\n\r\n')
        self.assertEqual(fields, [(headers.STATUS_LINE, 'HTTP/1.1 200 OK')])

    def test_bare_line_feeds(self):
        fields = dict(tokenize(b'HTTP/1.1 200 OK\nAccept-Ranges: none\n\n'))
        self.assertEqual(fields[headers.ACCEPT_RANGES], 'NONE')

    def test_empty(self):
        self.assertEqual(tokenize(b''), [])


if __name__ == '__main__':
    unittest.main()
