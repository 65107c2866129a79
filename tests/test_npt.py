import unittest
from unittest import TestCase

from dlnasrc.npt import MalformedTimeError, format_npt, parse_npt

SECOND = 1000000000


class ParseNPTTest(TestCase):

    def test_hhmmss(self):
        self.assertEqual(parse_npt('00:01:05.500'), 65500000000)
        self.assertEqual(parse_npt('1:2:3'), 3723 * SECOND)
        self.assertEqual(parse_npt('100:00:00'), 360000 * SECOND)

    def test_seconds(self):
        self.assertEqual(parse_npt('5.25'), 5250000000)
        self.assertEqual(parse_npt('0'), 0)
        self.assertEqual(parse_npt('0.001'), 1000000)
        self.assertEqual(parse_npt(' 335.1 '), 335100000000)

    def test_rounds_to_milliseconds(self):
        self.assertEqual(parse_npt('5.2504'), 5250000000)
        self.assertEqual(parse_npt('5.2506'), 5251000000)

    def test_malformed(self):
        for text in ('', 'abc', '1:2', '1:234:5', '-5', '1,5', '1:2:3:4', '.5'):
            with self.subTest(text=text):
                with self.assertRaises(MalformedTimeError) as cm:
                    parse_npt(text)
                self.assertEqual(cm.exception.text, text)

    def test_malformed_is_value_error(self):
        self.assertRaises(ValueError, parse_npt, 'later')

    def test_too_large(self):
        huge = '9' * 400
        for text in (huge, huge + '.5', huge + ':00:00'):
            with self.subTest(text=text[:12]):
                with self.assertRaises(MalformedTimeError):
                    parse_npt(text)


class FormatNPTTest(TestCase):

    def test_seconds(self):
        self.assertEqual(format_npt(65500000000), '65.5')
        self.assertEqual(format_npt(10 * SECOND), '10')
        self.assertEqual(format_npt(0), '0')
        self.assertEqual(format_npt(1000000), '0.001')

    def test_hhmmss(self):
        self.assertEqual(format_npt(65500000000, hhmmss=True), '0:01:05.500')
        self.assertEqual(format_npt(3723 * SECOND, hhmmss=True), '1:02:03.000')

    def test_parses_back(self):
        for nanos in (0, 1000000, 65500000000, 333500000000, 3723 * SECOND):
            self.assertEqual(parse_npt(format_npt(nanos)), nanos)
            self.assertEqual(parse_npt(format_npt(nanos, hhmmss=True)), nanos)


if __name__ == '__main__':
    unittest.main()
