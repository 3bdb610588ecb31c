import json
from decimal import Decimal

from rasvia_backend.payments.metadata import (
    METADATA_VALUE_LIMIT,
    decode_checkout_intent,
    encode_cart_items,
    make_metadata,
)
from rasvia_backend.payments.models import OrderType


def test_decode_full_metadata():
    metadata = {
        "restaurant_id": "7",
        "restaurant_name": "Saffron House",
        "user_id": "user-1",
        "customer_name": "Priya",
        "order_type": "takeout",
        "party_session_id": "party-9",
        "cart_items": json.dumps([
            {"name": "Paneer Tikka", "price": 12.5, "quantity": 2, "menu_item_id": 31, "is_vegetarian": True, "added_by": "Priya"},
            {"name": "Lassi", "price": "4.25", "menu_item_id": "32"},
        ]),
    }
    intent, defaulted = decode_checkout_intent(metadata)

    assert intent.restaurant_id == 7
    assert intent.restaurant_name == "Saffron House"
    assert intent.order_type == OrderType.TAKEOUT
    assert intent.party_session_id == "party-9"
    assert len(intent.cart_items) == 2
    first, second = intent.cart_items
    assert first.menu_item_id == 31 and first.is_vegetarian and first.added_by == "Priya"
    # quantity absente -> 1, sans être signalée comme remplacée
    assert second.quantity == 1 and second.menu_item_id == 32
    assert intent.subtotal == Decimal("29.25")
    assert defaulted == []


def test_decode_empty_metadata_defaults_everything():
    intent, defaulted = decode_checkout_intent({})
    assert intent.restaurant_id == 0
    assert intent.restaurant_name == "Restaurant"
    assert intent.user_id == "" and intent.customer_name == ""
    assert intent.order_type == OrderType.DINE_IN
    assert intent.cart_items == []
    assert intent.party_session_id == ""
    assert intent.subtotal == Decimal("0.00")
    assert not intent.can_materialize
    for field in ("restaurant_id", "restaurant_name", "order_type", "cart_items", "user_id", "customer_name", "party_session_id"):
        assert field in defaulted


def test_decode_none_metadata_never_raises():
    intent, defaulted = decode_checkout_intent(None)
    assert intent.restaurant_id == 0
    assert "cart_items" in defaulted


def test_decode_malformed_cart_json_defaults_to_empty():
    intent, defaulted = decode_checkout_intent({"restaurant_id": "7", "cart_items": '[{"name": "Dal", "price": 9'})
    assert intent.cart_items == []
    assert "cart_items" in defaulted
    assert intent.restaurant_id == 7


def test_decode_cart_not_a_list_defaults_to_empty():
    intent, defaulted = decode_checkout_intent({"cart_items": '{"name": "Dal"}'})
    assert intent.cart_items == []
    assert "cart_items" in defaulted


def test_decode_skips_non_object_entries_and_fixes_bad_values():
    cart = json.dumps([
        "garbage",
        {"name": "Naan", "price": "abc", "quantity": "x"},
        {"name": "Chai", "price": 3, "quantity": -2},
    ])
    intent, defaulted = decode_checkout_intent({"cart_items": cart})

    assert [line.name for line in intent.cart_items] == ["Naan", "Chai"]
    naan, chai = intent.cart_items
    assert naan.price == Decimal("0") and naan.quantity == 1
    assert chai.quantity == 0
    assert "cart_items[0]" in defaulted
    assert "cart_items[1].price" in defaulted
    assert "cart_items[1].quantity" in defaulted
    assert "cart_items[2].quantity" in defaulted


def test_decode_invalid_restaurant_and_order_type():
    intent, defaulted = decode_checkout_intent({"restaurant_id": "abc", "order_type": "delivery"})
    assert intent.restaurant_id == 0
    assert intent.order_type == OrderType.DINE_IN
    assert "restaurant_id" in defaulted and "order_type" in defaulted


def test_subtotal_rounds_once_to_cents():
    cart = json.dumps([{"price": 0.1, "quantity": 3}, {"price": "19.999", "quantity": 1}])
    intent, _ = decode_checkout_intent({"cart_items": cart})
    assert intent.subtotal == Decimal("20.30")


def test_encode_cart_items_truncates_fields():
    encoded = encode_cart_items([{"name": "N" * 60, "price": 5, "added_by": "A" * 30}])
    items = json.loads(encoded)
    assert items == [{
        "name": "N" * 40,
        "price": 5,
        "quantity": 1,
        "menu_item_id": None,
        "is_vegetarian": False,
        "added_by": "A" * 20,
    }]


def test_encode_cart_items_falls_back_to_minimal_format():
    cart = [{"name": f"Dish {i}", "price": 10, "quantity": 1, "menu_item_id": i, "added_by": "Guest"} for i in range(6)]
    encoded = encode_cart_items(cart)
    items = json.loads(encoded)
    # Le format complet dépasse 500 caractères, le minimal tient
    assert len(encoded) <= METADATA_VALUE_LIMIT
    assert set(items[0]) == {"name", "price", "quantity", "menu_item_id"}


def test_encode_cart_items_too_long_is_truncated_and_decodes_empty():
    cart = [{"name": f"Very long dish name {i:02d}", "price": 10, "menu_item_id": i} for i in range(20)]
    encoded = encode_cart_items(cart)
    assert len(encoded) == METADATA_VALUE_LIMIT

    intent, defaulted = decode_checkout_intent({"cart_items": encoded})
    assert intent.cart_items == []
    assert "cart_items" in defaulted


def test_make_metadata_round_trips_through_decoder():
    metadata = make_metadata(
        restaurant_id=7,
        restaurant_name="Saffron House",
        customer_name="Priya",
        user_id="user-1",
        order_type=None,
        party_session_id=None,
        cart_items=[{"name": "Dal", "price": 9.5, "quantity": 2}],
    )
    assert metadata["restaurant_id"] == "7"
    assert metadata["order_type"] == "dine_in"
    assert metadata["party_session_id"] == ""
    assert all(isinstance(v, str) for v in metadata.values())

    intent, _ = decode_checkout_intent(metadata)
    assert intent.restaurant_id == 7
    assert intent.subtotal == Decimal("19.00")


def test_integral_float_quantity_survives_encode_and_decode():
    metadata = make_metadata(restaurant_id=7, cart_items=[{"name": "Dal", "price": 10, "quantity": 2.0}])

    intent, defaulted = decode_checkout_intent(metadata)

    assert intent.cart_items[0].quantity == 2
    assert intent.subtotal == Decimal("20.00")
    assert "cart_items[0].quantity" not in defaulted


def test_fractional_quantity_is_defaulted():
    cart = json.dumps([{"price": 4, "quantity": "2.5"}, {"price": 4, "quantity": "3.0"}])
    intent, defaulted = decode_checkout_intent({"cart_items": cart})

    assert [line.quantity for line in intent.cart_items] == [1, 3]
    assert defaulted.count("cart_items[0].quantity") == 1
    assert "cart_items[1].quantity" not in defaulted


def test_out_of_range_price_and_quantity_are_defaulted():
    cart = json.dumps([
        {"name": "Huge", "price": 1e30, "quantity": 1},
        {"name": "Many", "price": 2, "quantity": 1e20},
    ])
    intent, defaulted = decode_checkout_intent({"cart_items": cart})

    huge, many = intent.cart_items
    assert huge.price == Decimal("0")
    assert many.quantity == 1
    assert "cart_items[0].price" in defaulted
    assert "cart_items[1].quantity" in defaulted
    assert intent.subtotal == Decimal("2.00")
