from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import make_order, make_product
from shoplens.core.errors import InvalidPrecondition
from shoplens.domain.services.top_products import (
    ProductSales,
    aggregate_top_products_by_category,
    filter_orders_in_window,
    flatten_order_lines,
    group_by_category,
    rank_within_category,
    sum_quantities_by_product,
)


def _lookup(*products):
    return {p.id: p for p in products}


def _totals(leaderboards):
    return {
        e.product_id: e.total_purchased
        for lb in leaderboards
        for e in lb.top_products
    }


def test_single_order_single_category(now, window_start):
    orders = [make_order(("p1", 3))]
    products = _lookup(make_product("p1", category="Books"))

    result = aggregate_top_products_by_category(orders, products, window_start, now)

    assert len(result) == 1
    assert result[0].category == "Books"
    assert [(e.product_id, e.total_purchased) for e in result[0].top_products] == [("p1", 3)]
    assert result[0].top_products[0].name == "Product p1"


def test_unknown_product_lines_are_dropped(now, window_start):
    orders = [make_order(("p1", 2), ("ghost", 50)), make_order(("ghost", 1))]
    products = _lookup(make_product("p1"))

    result = aggregate_top_products_by_category(orders, products, window_start, now)

    assert _totals(result) == {"p1": 2}


def test_category_with_only_unknown_products_has_no_leaderboard(now, window_start):
    orders = [make_order(("ghost", 4))]
    result = aggregate_top_products_by_category(orders, {}, window_start, now)
    assert result == []


def test_empty_orders_give_empty_report(now, window_start):
    assert aggregate_top_products_by_category([], _lookup(make_product("p1")), window_start, now) == []


def test_quantities_are_conserved_across_orders(now, window_start):
    orders = [
        make_order(("p1", 1), ("p2", 4)),
        make_order(("p1", 2)),
        make_order(("p2", 1), ("p1", 5)),
    ]
    products = _lookup(make_product("p1", category="Books"), make_product("p2", category="Toys"))

    result = aggregate_top_products_by_category(orders, products, window_start, now)

    assert _totals(result) == {"p1": 8, "p2": 5}


def test_leaderboard_sorted_desc_and_capped_at_five(now, window_start):
    products = _lookup(*[make_product(f"p{i}", category="Electronics") for i in range(8)])
    orders = [make_order((f"p{i}", i + 1)) for i in range(8)]

    result = aggregate_top_products_by_category(orders, products, window_start, now)

    top = result[0].top_products
    assert len(top) == 5
    assert [e.total_purchased for e in top] == [8, 7, 6, 5, 4]


def test_limit_per_category_is_configurable(now, window_start):
    products = _lookup(*[make_product(f"p{i}") for i in range(4)])
    orders = [make_order((f"p{i}", i + 1)) for i in range(4)]

    result = aggregate_top_products_by_category(orders, products, window_start, now, limit_per_category=2)

    assert [e.product_id for e in result[0].top_products] == ["p3", "p2"]


def test_leaderboards_sorted_by_category_name(now, window_start):
    products = _lookup(
        make_product("a", category="Toys"),
        make_product("b", category="Books"),
        make_product("c", category="Electronics"),
    )
    orders = [make_order(("a", 1), ("b", 1), ("c", 1))]

    result = aggregate_top_products_by_category(orders, products, window_start, now)

    assert [lb.category for lb in result] == ["Books", "Electronics", "Toys"]


def test_categories_without_sales_are_omitted(now, window_start):
    products = _lookup(make_product("a", category="Toys"), make_product("b", category="Books"))
    result = aggregate_top_products_by_category([make_order(("a", 2))], products, window_start, now)
    assert [lb.category for lb in result] == ["Toys"]


def test_orders_outside_window_do_not_count(now, window_start):
    products = _lookup(make_product("p1"))
    orders = [
        make_order(("p1", 1), created_at=window_start),                       # inclusive lower bound
        make_order(("p1", 10), created_at=window_start - timedelta(seconds=1)),
        make_order(("p1", 100), created_at=now + timedelta(minutes=1)),
        make_order(("p1", 2), created_at=now),                                # inclusive upper bound
    ]

    result = aggregate_top_products_by_category(orders, products, window_start, now)

    assert _totals(result) == {"p1": 3}


def test_naive_timestamps_are_treated_as_utc(now, window_start):
    products = _lookup(make_product("p1"))
    naive = (now - timedelta(days=2)).replace(tzinfo=None)
    result = aggregate_top_products_by_category([make_order(("p1", 1), created_at=naive)], products, window_start, now)
    assert _totals(result) == {"p1": 1}


def test_ties_keep_discovery_order(now, window_start):
    products = _lookup(make_product("z"), make_product("a"), make_product("m"))
    orders = [make_order(("z", 2)), make_order(("a", 2)), make_order(("m", 2))]

    result = aggregate_top_products_by_category(orders, products, window_start, now)

    assert [e.product_id for e in result[0].top_products] == ["z", "a", "m"]


def test_tie_break_key_orders_equal_totals(now, window_start):
    products = _lookup(make_product("z"), make_product("a"), make_product("m"), make_product("b"))
    orders = [make_order(("z", 2), ("a", 2), ("m", 2), ("b", 5))]

    result = aggregate_top_products_by_category(
        orders, products, window_start, now, tie_break=lambda r: r.product_id
    )

    assert [e.product_id for e in result[0].top_products] == ["b", "a", "m", "z"]


def test_products_without_category_are_skipped(now, window_start):
    products = _lookup(make_product("p1", category=None), make_product("p2", category="Books"))
    result = aggregate_top_products_by_category([make_order(("p1", 9), ("p2", 1))], products, window_start, now)
    assert _totals(result) == {"p2": 1}


def test_same_input_same_output(now, window_start):
    products = _lookup(*[make_product(f"p{i}", category="AB"[i % 2]) for i in range(10)])
    orders = [make_order((f"p{i}", (i * 7) % 4 + 1), (f"p{(i + 3) % 10}", 2)) for i in range(10)]

    first = aggregate_top_products_by_category(orders, products, window_start, now)
    second = aggregate_top_products_by_category(orders, products, window_start, now)

    assert [lb.model_dump() for lb in first] == [lb.model_dump() for lb in second]


def test_inverted_window_is_rejected(now):
    with pytest.raises(InvalidPrecondition):
        aggregate_top_products_by_category([], {}, now + timedelta(days=1), now)


def test_non_positive_limit_is_rejected(now, window_start):
    with pytest.raises(InvalidPrecondition):
        aggregate_top_products_by_category([], {}, window_start, now, limit_per_category=0)


# --- individual stages ---------------------------------------------------


def test_filter_orders_in_window(now, window_start):
    inside = make_order(("p1", 1), created_at=now - timedelta(days=3))
    outside = make_order(("p1", 1), created_at=now - timedelta(days=31))
    assert filter_orders_in_window([inside, outside], window_start, now) == [inside]


def test_flatten_order_lines():
    orders = [make_order(("p1", 1), ("p2", 2)), make_order(("p1", 3))]
    assert list(flatten_order_lines(orders)) == [("p1", 1), ("p2", 2), ("p1", 3)]


def test_sum_quantities_keeps_discovery_order():
    products = _lookup(make_product("p2"), make_product("p1"))
    totals = sum_quantities_by_product([("p2", 1), ("x", 5), ("p1", 2), ("p2", 3)], products)
    assert list(totals.items()) == [("p2", 4), ("p1", 2)]


def test_group_and_rank():
    records = [
        ProductSales("p1", "One", "Books", 1),
        ProductSales("p2", "Two", "Toys", 3),
        ProductSales("p3", "Three", "Books", 5),
    ]
    groups = group_by_category(records)

    assert set(groups) == {"Books", "Toys"}
    assert [r.product_id for r in rank_within_category(groups["Books"])] == ["p3", "p1"]
