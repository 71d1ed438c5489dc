import unittest

from storefront.core import cart_rules
from storefront.core.errors import InvalidQuantity


class CartRulesTestCase(unittest.TestCase):
    def test_add_accumulates_existing_line(self):
        lines = cart_rules.add_line({}, "P1", 2)
        lines = cart_rules.add_line(lines, "P1", 3)
        self.assertEqual(lines, {"P1": 5})

    def test_add_distinct_products_gives_separate_lines(self):
        lines = cart_rules.add_line({}, "P1", 1)
        lines = cart_rules.add_line(lines, "P2", 1)
        self.assertEqual(lines, {"P1": 1, "P2": 1})

    def test_input_is_not_mutated(self):
        before = {"P1": 1}
        cart_rules.add_line(before, "P1", 4)
        cart_rules.set_line_quantity(before, "P1", 9)
        cart_rules.remove_line(before, "P1")
        cart_rules.merge_lines(before, {"P1": 2})
        self.assertEqual(before, {"P1": 1})

    def test_invalid_quantity_is_rejected_not_clamped(self):
        for quantity in (0, -3, 2.5, "1"):
            with self.subTest(quantity=quantity):
                with self.assertRaises(InvalidQuantity):
                    cart_rules.add_line({"P1": 1}, "P1", quantity)
                with self.assertRaises(InvalidQuantity):
                    cart_rules.set_line_quantity({"P1": 1}, "P1", quantity)

    def test_set_quantity_replaces(self):
        self.assertEqual(cart_rules.set_line_quantity({"P1": 5}, "P1", 2), {"P1": 2})

    def test_set_quantity_of_missing_line(self):
        with self.assertRaises(KeyError):
            cart_rules.set_line_quantity({"P1": 5}, "P2", 2)

    def test_remove_line(self):
        self.assertEqual(cart_rules.remove_line({"P1": 5, "P2": 1}, "P1"), {"P2": 1})
        with self.assertRaises(KeyError):
            cart_rules.remove_line({"P1": 5}, "P2")

    def test_clear(self):
        self.assertEqual(cart_rules.clear_lines({"P1": 5, "P2": 1}), {})

    def test_merge_uses_add_semantics(self):
        merged = cart_rules.merge_lines({"P1": 1, "P3": 4}, {"P1": 2, "P2": 1})
        self.assertEqual(merged, {"P1": 3, "P2": 1, "P3": 4})

    def test_merge_empty_source(self):
        self.assertEqual(cart_rules.merge_lines({"P1": 1}, {}), {"P1": 1})


if __name__ == "__main__":
    unittest.main()
