import unittest
from unittest import TestCase

from dlnasrc.dlna import NO_CONTENT_FEATURES, Playspeed, parse_playspeed
from dlnasrc.response import ByteRange, HeadResponseBuilder, TimeSeekRange
from dlnasrc.seek import (ACCEPTED, FORMAT_BYTES, FORMAT_TIME, OUT_OF_RANGE, UNSUPPORTED_FORMAT,
                          UNSUPPORTED_RATE, formulate_extra_headers, seek_request, validate)

SECOND = 1000000000


def snapshot(playspeeds=('1', '2'), time_seek=True):
    return HeadResponseBuilder().build()._replace(
        status_code=200,
        byte_seek=ByteRange(50, 1000, 1001),
        time_seek=TimeSeekRange(0, 300 * SECOND, 300 * SECOND, '0', '300', '300') if time_seek else None,
        content_features=NO_CONTENT_FEATURES._replace(
            playspeeds=tuple(Playspeed(parse_playspeed(text), text) for text in playspeeds)))


class ValidateTest(TestCase):

    def test_normal_rate_always_supported(self):
        self.assertEqual(validate(seek_request(start=100), snapshot(playspeeds=())), ACCEPTED)

    def test_listed_rate(self):
        verdict = validate(seek_request(rate=2.0, start=100), snapshot())
        self.assertTrue(verdict)

    def test_unlisted_rate(self):
        with self.assertLogs('dlnasrc.seek', 'WARNING'):
            verdict = validate(seek_request(rate=0.5), snapshot())
        self.assertFalse(verdict)
        self.assertEqual(verdict.reason, UNSUPPORTED_RATE)

    def test_rate_checked_before_range(self):
        with self.assertLogs('dlnasrc.seek', 'WARNING'):
            verdict = validate(seek_request(rate=0.5, start=2000), snapshot())
        self.assertEqual(verdict.reason, UNSUPPORTED_RATE)

    def test_byte_range_inclusive(self):
        self.assertTrue(validate(seek_request(start=50), snapshot()))
        self.assertTrue(validate(seek_request(start=1000), snapshot()))
        for start in (49, 1001, 2000):
            with self.assertLogs('dlnasrc.seek', 'WARNING'):
                verdict = validate(seek_request(start=start), snapshot())
            self.assertEqual(verdict.reason, OUT_OF_RANGE)

    def test_time_range(self):
        self.assertTrue(validate(seek_request(format=FORMAT_TIME, start=10 * SECOND), snapshot()))
        with self.assertLogs('dlnasrc.seek', 'WARNING'):
            verdict = validate(seek_request(format=FORMAT_TIME, start=301 * SECOND), snapshot())
        self.assertEqual(verdict.reason, OUT_OF_RANGE)

    def test_time_without_time_seek_range(self):
        with self.assertLogs('dlnasrc.seek', 'WARNING'):
            verdict = validate(seek_request(format=FORMAT_TIME), snapshot(time_seek=False))
        self.assertEqual(verdict.reason, OUT_OF_RANGE)

    def test_unsupported_format(self):
        with self.assertLogs('dlnasrc.seek', 'WARNING'):
            verdict = validate(seek_request(format='percent'), snapshot())
        self.assertEqual(verdict.reason, UNSUPPORTED_FORMAT)

    def test_seek_type_ignored(self):
        self.assertTrue(validate(seek_request(start=100, start_type='end'), snapshot()))

    def test_format_constants(self):
        self.assertEqual(seek_request().format, FORMAT_BYTES)


class ExtraHeadersTest(TestCase):

    def test_fraction_text_kept(self):
        headers = formulate_extra_headers(1 / 3, snapshot(playspeeds=('1/3', '2')))
        self.assertEqual(headers, [
            ('transferMode.dlna.org', 'Streaming'),
            ('PlaySpeed.dlna.org', 'speed=1/3'),
        ])

    def test_unknown_rate(self):
        with self.assertLogs('dlnasrc.seek', 'ERROR'):
            self.assertIsNone(formulate_extra_headers(4.0, snapshot()))


if __name__ == '__main__':
    unittest.main()
