"""
Name: Query Engine Tests

Responsibilities:
  - Validate product/user filters (conjunction, case-insensitivity)
  - Validate stable sort keys and locale-aware name ordering
  - Validate pagination arithmetic and filter validation messages
"""

from datetime import datetime, timedelta, timezone

import pytest

from tienda_api.domain.entities import Product, Rating
from tienda_api.domain.query import (
    ProductQuery,
    UserQuery,
    collation_key,
    filter_products,
    filter_users,
    paginate,
    sort_products,
    sort_users,
)
from tienda_api.identity.users import User

pytestmark = pytest.mark.unit

BASE = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _product(
    pid: int,
    title: str,
    price: float,
    *,
    category: str = "electronics",
    brand: str | None = "Acme",
    stock: int = 10,
    rate: float = 4.0,
    tags: list[str] | None = None,
    description: str = "",
    created_offset: int = 0,
) -> Product:
    created = BASE + timedelta(days=created_offset)
    return Product(
        id=pid,
        title=title,
        price=price,
        description=description,
        category=category,
        image="",
        created_at=created,
        updated_at=created,
        rating=Rating(rate=rate, count=1),
        stock=stock,
        tags=tags or [],
        brand=brand,
    )


def _user(
    uid: int,
    username: str,
    *,
    role: str = "user",
    is_active: bool = True,
    is_locked: bool = False,
    last_login: datetime | None = None,
    email: str | None = None,
) -> User:
    return User(
        id=uid,
        username=username,
        email=email or f"{username}@example.com",
        password_hash="x",
        role=role,
        created_at=BASE + timedelta(days=uid),
        updated_at=BASE + timedelta(days=uid),
        is_active=is_active,
        is_locked=is_locked,
        last_login=last_login,
    )


@pytest.fixture
def catalog() -> list[Product]:
    return [
        _product(1, "Laptop", 1200.0, brand="TechPro", rate=4.7, tags=["gaming"]),
        _product(2, "Mouse", 25.0, brand="techpro", stock=0, rate=4.1),
        _product(3, "Camiseta", 30.0, category="clothing", brand=None, rate=4.1),
        _product(4, "Árbol de juguete", 30.0, category="Toys", created_offset=3),
        _product(
            5, "Zapatillas", 99.0, category="footwear", description="para Running"
        ),
    ]


# ============================================================
# Filtros de productos
# ============================================================


def test_empty_query_keeps_everything_in_order(catalog):
    assert [p.id for p in filter_products(catalog, ProductQuery())] == [1, 2, 3, 4, 5]


def test_category_filter_is_case_insensitive(catalog):
    result = filter_products(catalog, ProductQuery(category="toys"))
    assert [p.id for p in result] == [4]


def test_brand_filter_is_case_insensitive_and_skips_missing_brand(catalog):
    result = filter_products(catalog, ProductQuery(brand="TECHPRO"))
    assert [p.id for p in result] == [1, 2]


def test_price_bounds_are_inclusive(catalog):
    result = filter_products(catalog, ProductQuery(min_price=30.0, max_price=99.0))
    assert [p.id for p in result] == [3, 4, 5]


def test_zero_min_price_still_applies(catalog):
    result = filter_products(catalog, ProductQuery(min_price=0))
    assert len(result) == len(catalog)


def test_in_stock_only_filters_when_true(catalog):
    assert 2 not in [p.id for p in filter_products(catalog, ProductQuery(in_stock=True))]
    assert len(filter_products(catalog, ProductQuery(in_stock=False))) == len(catalog)


def test_search_matches_title_description_and_tags(catalog):
    assert [p.id for p in filter_products(catalog, ProductQuery(search="GAMING"))] == [1]
    assert [p.id for p in filter_products(catalog, ProductQuery(search="running"))] == [5]
    assert [p.id for p in filter_products(catalog, ProductQuery(search="lap"))] == [1]


def test_filters_are_a_conjunction(catalog):
    query = ProductQuery(category="electronics", in_stock=True, max_price=2000)
    assert [p.id for p in filter_products(catalog, query)] == [1]


# ============================================================
# Orden de productos
# ============================================================


def test_sort_by_price(catalog):
    asc = [p.id for p in sort_products(catalog, "price_asc")]
    desc = [p.id for p in sort_products(catalog, "price_desc")]
    assert asc == [2, 3, 4, 5, 1]
    # R: empates (3 y 4 a 30.0) conservan el orden original
    assert desc == [1, 5, 3, 4, 2]


def test_sort_by_rating_is_stable_for_ties(catalog):
    ids = [p.id for p in sort_products(catalog, "rating")]
    assert ids[0] == 1
    assert ids.index(2) < ids.index(3)


def test_sort_by_name_ignores_accents_and_case(catalog):
    ids = [p.id for p in sort_products(catalog, "name_asc")]
    assert ids == [4, 3, 1, 2, 5]
    assert [p.id for p in sort_products(catalog, "name_desc")] == [5, 2, 1, 3, 4]


def test_sort_newest_first(catalog):
    assert sort_products(catalog, "newest")[0].id == 4


def test_no_sort_key_preserves_natural_order(catalog):
    assert [p.id for p in sort_products(catalog, None)] == [1, 2, 3, 4, 5]


def test_collation_key_folds_accents():
    assert collation_key("Árbol")[0] == collation_key("arbol")[0]
    assert collation_key("Árbol") != collation_key("arbol")


# ============================================================
# Paginación
# ============================================================


def test_paginate_slices_and_reports_metadata():
    items, pagination = paginate(list(range(23)), page=3, limit=10)
    assert items == [20, 21, 22]
    assert pagination.total == 23
    assert pagination.total_pages == 3
    assert pagination.page == 3
    assert pagination.limit == 10


def test_paginate_out_of_range_returns_empty_slice():
    items, pagination = paginate([1, 2, 3], page=5, limit=2)
    assert items == []
    assert pagination.total_pages == 2


def test_paginate_empty_input():
    items, pagination = paginate([], page=1, limit=10)
    assert items == []
    assert pagination.total == 0
    assert pagination.total_pages == 0


def test_pagination_requires_page_and_limit():
    assert ProductQuery(page=1, limit=5).wants_pagination
    assert not ProductQuery(page=1).wants_pagination
    assert not ProductQuery(limit=5).wants_pagination


@pytest.mark.parametrize(
    "query",
    [
        ProductQuery(page=0, limit=10),
        ProductQuery(page=1, limit=0),
        ProductQuery(page=1, limit=-3),
        ProductQuery(page="x", limit=10),
        ProductQuery(min_price=float("nan")),
        ProductQuery(max_price="cien"),
        ProductQuery(sort_by="popularity"),
    ],
)
def test_invalid_product_queries_report_errors(query):
    assert query.validate()


def test_validate_reports_every_violation():
    errors = ProductQuery(page=0, limit=0, sort_by="nope").validate()
    assert len(errors) == 3


# ============================================================
# Usuarios
# ============================================================


@pytest.fixture
def people() -> list[User]:
    return [
        _user(1, "zoe", role="admin", last_login=BASE),
        _user(2, "Ana", is_active=False, last_login=None),
        _user(3, "bruno", is_locked=True, last_login=BASE + timedelta(hours=5)),
        _user(4, "carla", role="seller", last_login=None),
    ]


def test_user_filters(people):
    assert [u.id for u in filter_users(people, UserQuery(role="admin"))] == [1]
    assert [u.id for u in filter_users(people, UserQuery(is_active=False))] == [2]
    assert [u.id for u in filter_users(people, UserQuery(is_locked=True))] == [3]
    assert [u.id for u in filter_users(people, UserQuery(search="ANA"))] == [2]


def test_user_list_includes_inactive_and_locked_by_default(people):
    assert len(filter_users(people, UserQuery())) == 4


def test_sort_users_by_username_is_case_insensitive(people):
    assert [u.username for u in sort_users(people, "username")] == [
        "Ana",
        "bruno",
        "carla",
        "zoe",
    ]


def test_sort_users_last_login_puts_never_logged_in_last(people):
    assert [u.id for u in sort_users(people, "last_login")] == [3, 1, 2, 4]


def test_sort_users_created_newest_first(people):
    assert [u.id for u in sort_users(people, "created")] == [4, 3, 2, 1]


def test_unknown_user_sort_key_is_rejected():
    assert UserQuery(sort_by="age").validate() == ["sort_by desconocido: age"]
