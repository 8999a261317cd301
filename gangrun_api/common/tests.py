# common/tests.py

from decimal import Decimal

from django.test import SimpleTestCase

from common.formatting import format_currency, format_percentage, format_rate, format_volume


class FormattingTests(SimpleTestCase):

    def test_format_currency(self):
        self.assertEqual(format_currency(Decimal("5")), "$5.00")
        self.assertEqual(format_currency(Decimal("1234.5")), "$1,234.50")

    def test_format_rate_keeps_precision(self):
        self.assertEqual(format_rate(Decimal("0.239")), "$0.239")
        self.assertEqual(format_rate(Decimal("0.7500")), "$0.75")
        self.assertEqual(format_rate(Decimal("20")), "$20.00")

    def test_format_percentage(self):
        self.assertEqual(format_percentage(Decimal("12.5")), "12.5%")
        self.assertEqual(format_percentage(Decimal("20"), decimals=0), "20%")

    def test_format_volume(self):
        self.assertEqual(format_volume(1500000), "1.5M")
        self.assertEqual(format_volume(50000), "50.0K")
        self.assertEqual(format_volume(999), "999")
