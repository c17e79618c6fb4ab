import random

import pytest

from cart import Cart
from catalog import PRODUCTS, get_product


def test_add_new_product_copies_name_and_price():
    cart = Cart()
    cart.add("2")

    [item] = cart.items
    assert item.product_id == "2"
    assert item.name == "Latte Vainilla"
    assert item.price == 4.50
    assert item.quantity == 1


def test_add_existing_product_increments():
    cart = Cart()
    cart.add("1")
    cart.add("1")

    assert len(cart) == 1
    assert cart.quantity_of("1") == 2


def test_unknown_product_is_ignored():
    cart = Cart()
    cart.add("999")
    assert not cart
    assert cart.total() == 0


def test_remove_decrements_then_deletes():
    cart = Cart()
    cart.add("3")
    cart.add("3")

    cart.remove("3")
    assert cart.quantity_of("3") == 1
    cart.remove("3")
    assert len(cart) == 0


def test_remove_absent_is_noop():
    cart = Cart()
    cart.add("1")
    cart.remove("5")
    assert cart.quantity_of("1") == 1


def test_items_are_copies():
    cart = Cart()
    cart.add("1")
    cart.items[0].quantity = 10
    assert cart.quantity_of("1") == 1


def test_scenario_total():
    cart = Cart()
    cart.add("1")
    cart.add("2")
    cart.add("2")

    assert cart.total() == pytest.approx(11.50)
    assert [(i.name, i.quantity) for i in cart.to_order_items()] == [
        ("Espresso Simple", 1),
        ("Latte Vainilla", 2),
    ]


@pytest.mark.parametrize("seed", range(10))
def test_total_matches_entries_after_random_actions(seed):
    rng = random.Random(seed)
    ids = [p.id for p in PRODUCTS] + ["missing"]
    cart = Cart()
    for _ in range(200):
        product_id = rng.choice(ids)
        if rng.random() < 0.6:
            cart.add(product_id)
        else:
            cart.remove(product_id)

        items = cart.items
        assert all(i.quantity >= 1 for i in items)
        assert len({i.product_id for i in items}) == len(items)
        assert cart.total() == pytest.approx(sum(i.price * i.quantity for i in items))
        assert cart.total() == pytest.approx(
            sum(get_product(i.product_id).price * cart.quantity_of(i.product_id) for i in items)
        )
