import unittest
from dataclasses import replace

from shopdesk.records import Product
from shopdesk.services.cart_service import CartAggregator, CartError


COCA = Product(id="1", name="Coca Cola 2L", price_cents=1200, cost_cents=750, stock=24, unit="un", barcode="7894900011517")
BREAD = Product(id="2", name="Pão Francês (kg)", price_cents=1590, cost_cents=800, stock=50, unit="kg")


class CartAggregatorTests(unittest.TestCase):
    def setUp(self):
        self.cart = CartAggregator()

    def test_adding_same_product_merges_into_one_line(self):
        self.cart.add_item(COCA, 1)
        self.cart.add_item(COCA, 2)

        items = self.cart.items()
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].quantity, 3)
        self.assertEqual(items[0].subtotal_cents, 3600)
        self.assertEqual(self.cart.total(), 3600)

    def test_line_keeps_price_from_first_insertion(self):
        self.cart.add_item(COCA, 1)
        repriced = replace(COCA, price_cents=1500)
        self.cart.add_item(repriced, 1)

        line = self.cart.items()[0]
        self.assertEqual(line.price_cents, 1200)
        self.assertEqual(line.subtotal_cents, 2400)

    def test_fractional_kg_quantity_rounds_to_cents(self):
        line = self.cart.add_item(BREAD, 0.35)
        # 1590 * 0.35 = 556.5 -> 557
        self.assertEqual(line.subtotal_cents, 557)
        self.assertEqual(self.cart.total(), 557)

    def test_total_is_sum_of_lines(self):
        self.cart.add_item(COCA, 2)
        self.cart.add_item(BREAD, 1)
        self.assertEqual(self.cart.total(), 2400 + 1590)

    def test_non_positive_quantity_rejected(self):
        for quantity in (0, -1):
            with self.assertRaises(CartError):
                self.cart.add_item(COCA, quantity)
        self.assertTrue(self.cart.is_empty())

    def test_remove_and_clear(self):
        self.cart.add_item(COCA, 1)
        self.cart.add_item(BREAD, 1)

        self.cart.remove_item("1")
        self.assertEqual([line.product_id for line in self.cart.items()], ["2"])

        self.cart.clear()
        self.assertTrue(self.cart.is_empty())
        self.assertEqual(self.cart.total(), 0)

    def test_to_dict(self):
        self.cart.add_item(COCA, 2)
        data = self.cart.to_dict()
        self.assertEqual(data["total_cents"], 2400)
        self.assertEqual(data["items"][0]["product_id"], "1")
        self.assertEqual(data["items"][0]["barcode"], "7894900011517")


if __name__ == "__main__":
    unittest.main()
