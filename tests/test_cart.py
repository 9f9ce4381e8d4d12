"""
Tests for cart models and the transition function
"""

from decimal import Decimal

from mall.cart import (
    AddItem,
    CartItem,
    CartState,
    ClearCart,
    DEFAULT_MAX_QUANTITY,
    LoadItems,
    RemoveItem,
    SetError,
    SetLoading,
    SetOpen,
    SetQuantity,
    ToggleOpen,
    apply,
    make_cart_item,
)


def line(item_id, quantity=1, unit_price=100, max_quantity=None):
    return make_cart_item(
        product_id=item_id,
        name=f"Product {item_id}",
        unit_price=unit_price,
        quantity=quantity,
        max_quantity=max_quantity,
    )


def assert_invariants(state: CartState):
    ids = [item.id for item in state.items]
    assert len(ids) == len(set(ids))
    assert state.item_count == sum(item.quantity for item in state.items)
    assert state.total_amount == sum(
        (item.unit_price * item.quantity for item in state.items), Decimal("0")
    )
    for item in state.items:
        assert 1 <= item.quantity <= item.effective_max


class TestCartItem:
    """Tests for CartItem dataclass."""

    def test_id_prefers_variant(self):
        """Test line id is the variant id when present."""
        item = make_cart_item("prod-1", "Shirt", 100, variant_id="var-9")

        assert item.id == "var-9"
        assert item.product_id == "prod-1"

    def test_id_falls_back_to_product(self):
        item = make_cart_item("prod-1", "Shirt", 100)

        assert item.id == "prod-1"
        assert item.variant_id is None

    def test_price_normalized_to_decimal(self):
        """Test float and string prices become Decimal."""
        assert make_cart_item("p", "x", 19.99).unit_price == Decimal("19.99")
        assert make_cart_item("p", "x", "۱۲۰۰۰").unit_price == Decimal("12000")

    def test_effective_max_default(self):
        item = line("a")
        assert item.effective_max == DEFAULT_MAX_QUANTITY == 999

    def test_effective_max_from_stock(self):
        assert line("a", max_quantity=4).effective_max == 4

    def test_line_total(self):
        assert line("a", quantity=3, unit_price=250).line_total == Decimal("750")

    def test_dict_round_trip(self, sample_variant_item):
        """Test serialization keeps every field."""
        data = sample_variant_item.to_dict()

        assert data["unit_price"] == "350000"
        assert data["attributes"] == {"size": "L", "color": "red"}
        assert CartItem.from_dict(data) == sample_variant_item


class TestCartState:
    """Tests for CartState derived values and lookups."""

    def test_empty_state(self, empty_state):
        assert empty_state.items == ()
        assert empty_state.item_count == 0
        assert empty_state.total_amount == 0
        assert empty_state.is_open is False
        assert empty_state.is_empty

    def test_lookup_by_product_and_variant(self, sample_item, sample_variant_item):
        state = apply(apply(CartState(), AddItem(sample_item)), AddItem(sample_variant_item))

        assert state.is_in_cart("p1")
        assert state.is_in_cart("p2", "v1")
        assert not state.is_in_cart("p2")
        assert state.get_item("p2", "v1").sku == "TS-L-RED"
        assert state.find("v1") is state.get_item("p2", "v1")

    def test_summary(self, sample_item):
        state = apply(CartState(), AddItem(sample_item))
        summary = state.summary()

        assert summary["is_empty"] is False
        assert summary["item_count"] == 1
        assert summary["total_amount"] == 100000.0
        assert summary["total_display"] == "۱۰۰,۰۰۰ تومان"
        assert summary["items"][0]["name"] == "ماگ سرامیکی"

    def test_summary_empty(self, empty_state):
        summary = empty_state.summary()
        assert summary["is_empty"] is True
        assert summary["items"] == []


class TestAddItem:
    """Tests for AddItem transitions."""

    def test_add_new_line(self, empty_state, sample_item):
        state = apply(empty_state, AddItem(sample_item))

        assert len(state.items) == 1
        assert state.item_count == 1
        assert state.total_amount == 100000
        assert_invariants(state)

    def test_merge_same_id(self, empty_state, sample_item):
        """Test adding the same line twice merges quantities."""
        state = apply(empty_state, AddItem(sample_item))
        state = apply(state, AddItem(sample_item))

        assert len(state.items) == 1
        assert state.items[0].quantity == 2
        assert state.total_amount == 200000

    def test_merge_clamped_at_ceiling(self):
        """Test 4 + 2 with a ceiling of 5 yields 5."""
        state = apply(CartState(), AddItem(line("x", quantity=4, max_quantity=5)))
        state = apply(state, AddItem(line("x", quantity=2, max_quantity=5)))

        assert state.items[0].quantity == 5
        assert_invariants(state)

    def test_merge_adopts_incoming_ceiling(self):
        """Test a ceiling on the second add caps the merged line and is kept."""
        state = apply(CartState(), AddItem(line("x", quantity=4)))
        state = apply(state, AddItem(line("x", quantity=2, max_quantity=5)))

        assert state.items[0].quantity == 5
        assert state.items[0].max_quantity == 5
        assert_invariants(state)

        state = apply(state, SetQuantity("x", 50))
        assert state.items[0].quantity == 5

    def test_merge_keeps_tighter_existing_ceiling(self):
        state = apply(CartState(), AddItem(line("x", quantity=2, max_quantity=3)))
        state = apply(state, AddItem(line("x", quantity=2, max_quantity=10)))

        assert state.items[0].quantity == 3
        assert state.items[0].max_quantity == 3

    def test_merge_with_zero_ceiling_removes_line(self):
        """Test an incoming ceiling of 0 (sold out) drops the line."""
        state = apply(CartState(), AddItem(line("x", quantity=2)))
        state = apply(state, AddItem(line("x", quantity=1, max_quantity=0)))

        assert state.items == ()

    def test_new_line_clamped_at_ceiling(self):
        state = apply(CartState(), AddItem(line("x", quantity=8, max_quantity=3)))

        assert state.items[0].quantity == 3

    def test_new_line_clamped_at_default_ceiling(self):
        state = apply(CartState(), AddItem(line("x", quantity=5000)))

        assert state.items[0].quantity == 999

    def test_variant_at_ceiling_drops_excess(self):
        state = apply(CartState(), AddItem(line("v1", quantity=3, max_quantity=3)))
        state = apply(state, AddItem(line("v1", quantity=1, max_quantity=3)))

        assert state.items[0].quantity == 3
        assert state.error is None

    def test_non_positive_quantity_ignored(self, empty_state):
        state = apply(empty_state, AddItem(line("x", quantity=0)))
        assert state is empty_state

    def test_zero_stock_ceiling_not_added(self, empty_state):
        state = apply(empty_state, AddItem(line("x", quantity=1, max_quantity=0)))
        assert state.items == ()

    def test_preserves_insertion_order(self):
        state = CartState()
        for item_id in ("a", "b", "c"):
            state = apply(state, AddItem(line(item_id)))
        state = apply(state, AddItem(line("a")))

        assert [item.id for item in state.items] == ["a", "b", "c"]
        assert state.items[0].quantity == 2

    def test_does_not_mutate_input(self, empty_state, sample_item):
        first = apply(empty_state, AddItem(sample_item))
        apply(first, AddItem(sample_item))

        assert sample_item.quantity == 1
        assert first.items[0].quantity == 1

    def test_clears_error(self, sample_item):
        state = apply(CartState(), SetError("network down"))
        state = apply(state, AddItem(sample_item))

        assert state.error is None


class TestRemoveAndQuantity:
    """Tests for RemoveItem and SetQuantity transitions."""

    def test_remove_line(self, sample_item):
        state = apply(CartState(), AddItem(sample_item))
        state = apply(state, RemoveItem("p1"))

        assert state.items == ()
        assert state.item_count == 0
        assert state.total_amount == 0

    def test_remove_missing_is_noop(self, empty_state):
        assert apply(empty_state, RemoveItem("nope")) is empty_state

    def test_set_quantity_zero_removes(self):
        state = apply(CartState(), AddItem(line("x", quantity=2, unit_price=50)))
        state = apply(state, AddItem(line("y", quantity=1, unit_price=10)))
        state = apply(state, SetQuantity("x", 0))

        assert state.find("x") is None
        assert state.item_count == 1
        assert state.total_amount == 10

    def test_set_quantity_negative_removes(self):
        state = apply(CartState(), AddItem(line("x")))
        state = apply(state, SetQuantity("x", -4))

        assert state.items == ()

    def test_set_quantity_clamped(self):
        state = apply(CartState(), AddItem(line("x", max_quantity=5)))
        state = apply(state, SetQuantity("x", 50))

        assert state.items[0].quantity == 5

    def test_set_quantity_missing_is_noop(self, empty_state):
        assert apply(empty_state, SetQuantity("x", 3)) is empty_state

    def test_set_quantity_garbage_is_noop(self):
        state = apply(CartState(), AddItem(line("x")))
        assert apply(state, SetQuantity("x", "lots")) is state


class TestClearOpenLoad:
    """Tests for ClearCart, visibility and LoadItems."""

    def test_clear_idempotent(self, sample_item, sample_variant_item):
        state = apply(CartState(), AddItem(sample_item))
        state = apply(state, AddItem(sample_variant_item))

        once = apply(state, ClearCart())
        twice = apply(once, ClearCart())

        assert once == twice
        assert once.items == ()
        assert once.total_amount == 0

    def test_toggle_and_set_open(self, empty_state):
        state = apply(empty_state, ToggleOpen())
        assert state.is_open is True
        assert apply(state, ToggleOpen()).is_open is False
        assert apply(empty_state, SetOpen(True)).is_open is True
        assert apply(state, SetOpen(True)) is state

    def test_open_flag_independent_of_items(self, sample_item):
        state = apply(CartState(), SetOpen(True))
        state = apply(state, AddItem(sample_item))
        state = apply(state, ClearCart())

        assert state.is_open is True

    def test_load_round_trip(self, sample_item, sample_variant_item):
        items = [sample_variant_item, sample_item]
        state = apply(CartState(), LoadItems(items))

        assert list(state.items) == items
        assert state.item_count == 2
        assert state.total_amount == 450000

    def test_load_replaces_wholesale(self, sample_item, sample_variant_item):
        state = apply(CartState(), AddItem(sample_item))
        state = apply(state, LoadItems([sample_variant_item]))

        assert [item.id for item in state.items] == ["v1"]

    def test_load_normalizes_invalid_lines(self):
        items = [
            line("a", quantity=2, max_quantity=3),
            line("b", quantity=0),
            line("a", quantity=5, max_quantity=3),
            line("c", quantity=10, max_quantity=4),
        ]
        state = apply(CartState(), LoadItems(items))

        assert [(item.id, item.quantity) for item in state.items] == [("a", 3), ("c", 4)]
        assert_invariants(state)

    def test_loading_and_error_flags(self, empty_state):
        state = apply(empty_state, SetLoading(True))
        assert state.is_loading is True

        state = apply(state, SetError("checkout failed"))
        assert state.error == "checkout failed"
        assert state.is_loading is False

        state = apply(apply(state, SetLoading(True)), LoadItems([]))
        assert state.is_loading is False

    def test_unknown_action_returns_same_state(self, empty_state):
        assert apply(empty_state, object()) is empty_state
        assert apply(empty_state, None) is empty_state


class TestScenarios:
    """End-to-end transition sequences."""

    def test_add_merge_set_remove(self):
        item = make_cart_item("p1", "Lamp", 100000)

        state = apply(CartState(), AddItem(item))
        assert (state.item_count, state.total_amount) == (1, 100000)

        state = apply(state, AddItem(item))
        assert (state.item_count, state.total_amount) == (2, 200000)
        assert len(state.items) == 1

        state = apply(state, SetQuantity("p1", 10))
        assert state.items[0].quantity == 10

        state = apply(state, RemoveItem("p1"))
        assert state.items == ()
        assert (state.item_count, state.total_amount) == (0, 0)

    def test_invariants_hold_over_mixed_sequence(self):
        actions = [
            AddItem(line("a", 2, 100, 5)),
            AddItem(line("b", 1, 30)),
            AddItem(line("a", 9, 100, 5)),
            SetQuantity("b", 1200),
            ToggleOpen(),
            SetQuantity("a", 0),
            AddItem(line("c", 4, 7, 2)),
            RemoveItem("zzz"),
            SetQuantity("c", -1),
            AddItem(line("a", 1, 100, 5)),
        ]
        state = CartState()
        for action in actions:
            state = apply(state, action)
            assert_invariants(state)

        assert [(item.id, item.quantity) for item in state.items] == [("b", 999), ("a", 1)]
