"""
Unit Tests - Query Service
"""
import polars as pl
import pytest

from ecommerce_dashboard.serving.errors import InvalidArgumentError, NotFoundError
from ecommerce_dashboard.serving.queries import QueryService, parse_id

from conftest import MISSING_PRODUCT_ID, NUM_USERS


class TestParseId:
    """Tests for path id parsing"""

    @pytest.mark.parametrize("value,expected", [("1", 1), ("42", 42), ("-3", -3), ("007", 7), (5, 5)])
    def test_numeric_values(self, value, expected):
        assert parse_id(value, "user id") == expected

    @pytest.mark.parametrize("value", ["abc", "1.5", "", " 1", "1e3", "+1", "1_000", "٣", True])
    def test_non_numeric_values(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_id(value, "user id")

    def test_out_of_range(self):
        with pytest.raises(InvalidArgumentError):
            parse_id("9" * 30, "order id")


class TestListUsers:
    """Tests for QueryService.list_users"""

    async def test_default_page(self, loaded_database):
        """Test the first page holds the lowest ids"""
        users = await QueryService(loaded_database).list_users()

        assert [u["id"] for u in users] == list(range(1, 21))

    async def test_pages_are_disjoint(self, loaded_database):
        """Test page 2 follows page 1 without overlap"""
        service = QueryService(loaded_database)

        first = await service.list_users(page=1, limit=10)
        second = await service.list_users(page=2, limit=10)

        assert [u["id"] for u in second] == list(range(11, 21))
        assert not {u["id"] for u in first} & {u["id"] for u in second}

    async def test_page_past_end_is_empty(self, loaded_database):
        users = await QueryService(loaded_database).list_users(page=10, limit=10)
        assert users == []

    async def test_order_counts(self, loaded_database, dataset):
        """Test each user carries the true number of orders, zero included"""
        users = await QueryService(loaded_database).list_users(limit=NUM_USERS)
        expected = dict(
            dataset["orders"].group_by("user_id").agg(pl.len().alias("n")).iter_rows()
        )

        for user in users:
            assert user["order_count"] == expected.get(user["id"], 0)
        assert any(user["order_count"] == 0 for user in users)

    async def test_without_order_counts(self, loaded_database):
        users = await QueryService(loaded_database).list_users(with_order_count=False)

        assert "order_count" not in users[0]
        assert set(users[0]) == {"id", "first_name", "last_name", "email", "gender", "country", "city"}

    async def test_capped_mode_ignores_page(self, loaded_database):
        """Test capped mode returns the first rows regardless of page"""
        users = await QueryService(loaded_database).list_users(page=3, limit=2, mode="capped", cap=5)

        assert [u["id"] for u in users] == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize("kwargs", [{"page": 0}, {"limit": 0}, {"mode": "everything"}])
    async def test_invalid_arguments(self, loaded_database, kwargs):
        with pytest.raises(InvalidArgumentError):
            await QueryService(loaded_database).list_users(**kwargs)


class TestGetUser:
    """Tests for QueryService.get_user"""

    async def test_every_user_has_true_order_count(self, loaded_database, dataset):
        service = QueryService(loaded_database)
        orders = dataset["orders"]

        for user_id in range(1, NUM_USERS + 1):
            user = await service.get_user(str(user_id))
            assert user["order_count"] == orders.filter(pl.col("user_id") == user_id).height

    async def test_full_record(self, loaded_database):
        user = await QueryService(loaded_database).get_user("3")

        assert user["email"] == "user3@example.com"
        assert user["age"] == 23
        assert user["city"] == "San Diego"
        assert user["traffic_source"] == "Search"

    async def test_missing_user(self, loaded_database):
        with pytest.raises(NotFoundError):
            await QueryService(loaded_database).get_user("9999")

    async def test_non_numeric_id(self, loaded_database):
        with pytest.raises(InvalidArgumentError):
            await QueryService(loaded_database).get_user("abc")


class TestListUserOrders:
    """Tests for QueryService.list_user_orders"""

    async def test_most_recent_first(self, loaded_database):
        orders = await QueryService(loaded_database).list_user_orders("3")

        created = [o["created_at"] for o in orders]
        assert len(orders) == 3
        assert created == sorted(created, reverse=True)
        assert all(o["user_id"] == 3 for o in orders)

    async def test_user_without_orders(self, loaded_database):
        assert await QueryService(loaded_database).list_user_orders("4") == []

    async def test_unknown_user(self, loaded_database):
        assert await QueryService(loaded_database).list_user_orders("9999") == []

    async def test_non_numeric_id(self, loaded_database):
        with pytest.raises(InvalidArgumentError):
            await QueryService(loaded_database).list_user_orders("three")


class TestGetOrder:
    """Tests for QueryService.get_order"""

    async def test_items_match_order_items(self, loaded_database, dataset):
        """Test every order lists all of its lines with product details"""
        service = QueryService(loaded_database)
        items = dataset["order_items"]
        products = {p["id"]: p for p in dataset["products"].iter_rows(named=True)}

        for order_id in dataset["orders"]["order_id"].to_list():
            order = await service.get_order(str(order_id))
            expected = items.filter(pl.col("order_id") == order_id)

            assert order["order_id"] == order_id
            assert len(order["items"]) == expected.height
            assert [i["id"] for i in order["items"]] == sorted(expected["id"].to_list())
            for item in order["items"]:
                product = products.get(item["product_id"])
                if product is None:
                    continue
                assert item["product_name"] == product["name"]
                assert item["product_brand"] == product["brand"]
                assert item["product_category"] == product["category"]

    async def test_item_with_missing_product(self, loaded_database, dataset):
        """Test an orphaned line is kept with empty product fields"""
        last_item = dataset["order_items"].row(-1, named=True)
        assert last_item["product_id"] == MISSING_PRODUCT_ID

        order = await QueryService(loaded_database).get_order(last_item["order_id"])
        orphan = [i for i in order["items"] if i["id"] == last_item["id"]][0]

        assert orphan["product_name"] is None
        assert orphan["product_brand"] is None
        assert orphan["product_category"] is None

    async def test_missing_order(self, loaded_database):
        with pytest.raises(NotFoundError):
            await QueryService(loaded_database).get_order("1")

    async def test_non_numeric_id(self, loaded_database):
        with pytest.raises(InvalidArgumentError):
            await QueryService(loaded_database).get_order("ord-1")


class TestStatsAndReadiness:
    """Tests for QueryService.get_stats and check_ready"""

    async def test_stats(self, loaded_database, dataset):
        stats = await QueryService(loaded_database).get_stats()

        assert stats["total_users"] == NUM_USERS
        assert stats["total_orders"] == dataset["orders"].height
        assert stats["total_revenue"] == pytest.approx(dataset["order_items"]["sale_price"].sum())

    async def test_stats_on_empty_tables(self, database):
        await database.recreate_schema()

        stats = await QueryService(database).get_stats()

        assert stats == {"total_users": 0, "total_orders": 0, "total_revenue": 0.0}

    async def test_not_ready_before_etl(self, database):
        readiness = await QueryService(database).check_ready()

        assert readiness["ready"] is False
        assert readiness["missing_tables"] == ["order_items", "orders", "products", "users"]

    async def test_not_ready_with_empty_tables(self, database):
        await database.recreate_schema()

        readiness = await QueryService(database).check_ready()

        assert readiness == {"ready": False, "missing_tables": [], "users": 0}

    async def test_ready_after_etl(self, loaded_database):
        readiness = await QueryService(loaded_database).check_ready()

        assert readiness == {"ready": True, "missing_tables": [], "users": NUM_USERS}
