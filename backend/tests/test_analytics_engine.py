"""
Tests for the analytics engine: revenue rollups, distributions and top products.
"""
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
import pytest_asyncio

from backoffice.core.timestamps import as_utc
from backoffice.models import OrderStatus
from backoffice.services.analytics_engine import (
    DAILY,
    HALF_YEARLY,
    MONTHLY,
    WEEKLY,
    AnalyticsEngine,
    bucket_revenue,
    canonical_category,
    shift_months,
)
from backoffice.services.order_ingestion import OrderIngestionService
from backoffice.services.order_state import OrderStateMachine

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def line(product, quantity: int, price: float) -> dict:
    return {
        "product": str(product.id) if hasattr(product, "id") else str(product),
        "title": getattr(product, "name", "Gone"),
        "image": None,
        "quantity": quantity,
        "price": price,
        "orderName": getattr(product, "name", "Gone"),
        "category": getattr(product, "category", ""),
    }


class TestCalendarHelpers:
    def test_shift_months_clamps_day(self):
        assert shift_months(datetime(2024, 3, 31), 1) == datetime(2024, 2, 29)
        assert shift_months(datetime(2024, 2, 29), 12) == datetime(2023, 2, 28)

    def test_shift_months_across_years(self):
        assert shift_months(datetime(2024, 1, 15, 8, 30), 12) == datetime(2023, 1, 15, 8, 30)
        assert shift_months(datetime(2024, 6, 15), 24) == datetime(2022, 6, 15)
        assert shift_months(datetime(2024, 2, 10), 3) == datetime(2023, 11, 10)

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Mens Fashion", "Men's Fashion"),
            ("Womens Fashion", "Women's Fashion"),
            ("Home and Living", "Home & Living"),
            ("Men's Fashion", "Men's Fashion"),
            ("Electronics", "Electronics"),
            (None, "Uncategorized"),
            ("", "Uncategorized"),
        ],
    )
    def test_canonical_category(self, name, expected):
        assert canonical_category(name) == expected


class TestBucketRevenue:
    """Pure bucketing over (created_at, amount) rows."""

    def test_same_day_orders_share_a_bucket(self):
        rows = [(days_ago(1), 180.0), (days_ago(1) + timedelta(hours=2), 320.0)]

        points = bucket_revenue(rows, DAILY, NOW)

        assert [p.model_dump() for p in points] == [
            {"year": 2024, "month": 6, "day": 14, "revenue": 500.0, "orders": 2}
        ]

    def test_buckets_are_sparse_and_sorted(self):
        rows = [(days_ago(1), 10.0), (days_ago(5), 20.0), (days_ago(5), 5.0)]

        points = bucket_revenue(rows, DAILY, NOW)

        assert [(p.day, p.revenue, p.orders) for p in points] == [(10, 25.0, 2), (14, 10.0, 1)]

    def test_no_rows_no_buckets(self):
        assert bucket_revenue([], WEEKLY, NOW) == []

    def test_naive_rows_are_utc(self):
        rows = [(datetime(2024, 6, 14, 23, 30), 99.999)]

        points = bucket_revenue(rows, DAILY, NOW)

        assert (points[0].day, points[0].revenue) == (14, 100.0)

    def test_weekly_uses_iso_year(self):
        now = datetime(2025, 1, 2, tzinfo=timezone.utc)
        rows = [(datetime(2024, 12, 30, 9, 0, tzinfo=timezone.utc), 40.0)]

        points = bucket_revenue(rows, WEEKLY, now)

        assert (points[0].year, points[0].week) == (2025, 1)

    def test_half_year_keys(self):
        rows = [
            (datetime(2024, 6, 30, 23, 0, tzinfo=timezone.utc), 1.0),
            (datetime(2024, 7, 1, 0, 0, tzinfo=timezone.utc), 2.0),
            (datetime(2023, 12, 31, tzinfo=timezone.utc), 4.0),
        ]

        points = bucket_revenue(rows, HALF_YEARLY, datetime(2024, 8, 1, tzinfo=timezone.utc))

        assert [(p.year, p.half, p.revenue) for p in points] == [
            (2023, "H2", 4.0),
            (2024, "H1", 1.0),
            (2024, "H2", 2.0),
        ]

    def test_daily_and_weekly_agree(self):
        rows = [(days_ago(d / 2), 10.0 * (d + 1)) for d in range(12)]

        daily = bucket_revenue(rows, DAILY, NOW)
        weekly = bucket_revenue(rows, WEEKLY, NOW)

        assert sum(p.revenue for p in daily) == pytest.approx(sum(p.revenue for p in weekly))
        assert sum(p.orders for p in daily) == sum(p.orders for p in weekly) == 12


class TestRevenueRollups:
    """Rollups against the order store."""

    async def test_same_day_delivered_orders(self, session, make_order):
        await make_order(total_amount=180, status="Delivered", created_at=days_ago(1))
        await make_order(total_amount=320, status="Delivered", created_at=days_ago(1))

        daily = await AnalyticsEngine(session).revenue_rollup(DAILY, NOW)

        assert [(p.year, p.month, p.day, p.revenue, p.orders) for p in daily] == [
            (2024, 6, 14, 500.0, 2)
        ]

    async def test_only_recognized_revenue_counts(self, session, make_order):
        await make_order(total_amount=100, status="Delivered", payment_method="UPI", created_at=days_ago(1))
        await make_order(total_amount=999, status="Shipped", created_at=days_ago(1))
        await make_order(total_amount=999, status="Pending", created_at=days_ago(1))
        await make_order(total_amount=999, status="Delivered", payment_method="PAYPAL", created_at=days_ago(1))

        daily = await AnalyticsEngine(session).revenue_rollup(DAILY, NOW)

        assert [(p.revenue, p.orders) for p in daily] == [(100.0, 1)]

    async def test_windows_per_granularity(self, session, make_order):
        for created_at in (
            days_ago(8),
            days_ago(29),
            datetime(2023, 5, 15, tzinfo=timezone.utc),
            datetime(2022, 5, 15, tzinfo=timezone.utc),
        ):
            await make_order(total_amount=10, status="Delivered", created_at=created_at)

        rollups = await AnalyticsEngine(session).revenue_rollups(NOW)

        assert sum(p.orders for p in rollups["daily"]) == 0
        assert sum(p.orders for p in rollups["weekly"]) == 1
        assert sum(p.orders for p in rollups["monthly"]) == 2
        assert sum(p.orders for p in rollups["half_yearly"]) == 3
        assert (2022, "H1") not in [(p.year, p.half) for p in rollups["half_yearly"]]

    async def test_single_and_combined_rollups_match(self, session, make_order):
        for days in (0.5, 3, 10, 40, 200, 500):
            await make_order(total_amount=days * 2, status="Delivered", created_at=days_ago(days))
        engine = AnalyticsEngine(session)

        combined = await engine.revenue_rollups(NOW)

        for granularity in (DAILY, WEEKLY, MONTHLY, HALF_YEARLY):
            assert combined[granularity.name] == await engine.revenue_rollup(granularity, NOW)

    async def test_ingested_order_lands_in_todays_bucket(self, session, make_product):
        product = await make_product(price=100, discount=10)
        order = await OrderIngestionService(session).place_order(
            user_id=uuid4(),
            items=[{"product": str(product.id), "quantity": 2}],
            total_amount=180,
            shipping_address={"city": "Pune"},
            payment_method="COD",
        )
        await OrderStateMachine(session).update_status(order.id, "Delivered")
        await session.commit()

        daily = await AnalyticsEngine(session).revenue_rollup(DAILY)

        created = as_utc(order.created_at)
        bucket = next(
            p for p in daily if (p.year, p.month, p.day) == (created.year, created.month, created.day)
        )
        assert (bucket.revenue, bucket.orders) == (180.0, 1)


class TestDistributions:
    async def test_status_distribution_counts_everything(self, session, make_order):
        for status in ("Pending", "Cancelled", "Delivered", "Pending"):
            await make_order(status=status, payment_method="CARD")

        stats = await AnalyticsEngine(session).status_distribution()

        assert [(s.status, s.count) for s in stats] == [
            ("Pending", 2),
            ("Delivered", 1),
            ("Cancelled", 1),
        ]

    async def test_payment_method_breakdown(self, session, make_order):
        await make_order(total_amount=100, status="Delivered", payment_method="COD")
        await make_order(total_amount=50, status="Delivered", payment_method="UPI")
        await make_order(total_amount=25.5, status="Delivered", payment_method="UPI")
        await make_order(total_amount=999, status="Pending", payment_method="CARD")

        breakdown = await AnalyticsEngine(session).payment_method_breakdown()

        assert [(b.payment_method, b.total_amount, b.order_count) for b in breakdown] == [
            ("COD", 100.0, 1),
            ("UPI", 75.5, 2),
        ]

    async def test_totals(self, session, make_order):
        await make_order(total_amount=100, status="Delivered", payment_method="COD")
        await make_order(total_amount=75, status="Delivered", payment_method="CARD")
        await make_order(total_amount=1000, status="Delivered", payment_method="PAYPAL")
        await make_order(total_amount=40, status="Shipped")
        await make_order(total_amount=40, status="Pending")
        engine = AnalyticsEngine(session)

        assert await engine.total_revenue() == 175.0
        assert await engine.completed_orders() == 4

    async def test_empty_store(self, session):
        engine = AnalyticsEngine(session)

        assert await engine.total_revenue() == 0
        assert await engine.status_distribution() == []
        assert await engine.top_products() == []

    async def test_order_stats_overview(self, session, make_order):
        await make_order(total_amount=100, status="Delivered")
        await make_order(total_amount=50, status="Shipped")
        await make_order(total_amount=30, status="Pending")

        overview = await AnalyticsEngine(session).order_stats_overview()

        assert overview.total_orders == 3
        assert overview.total_revenue == 150.0
        assert [(s.status, s.count, s.total_amount) for s in overview.stats] == [
            ("Delivered", 1, 100.0),
            ("Pending", 1, 30.0),
            ("Shipped", 1, 50.0),
        ]


class TestTopProducts:
    @pytest_asyncio.fixture
    async def catalog(self, make_product, make_category):
        mens = await make_category("Mens Fashion")
        await make_category("Womens Fashion")
        shirt = await make_product(name="Shirt", category=str(mens.id))
        dress = await make_product(name="Dress", category="Womens Fashion")
        mug = await make_product(name="Mug", category="Kitchen Misc")
        return shirt, dress, mug

    async def test_ranking_with_category_names(self, session, make_order, catalog):
        shirt, dress, mug = catalog
        await make_order(status="Delivered", items=[line(shirt, 3, 90.0), line(dress, 2, 20.0)])
        await make_order(status="Delivered", items=[line(dress, 3, 20.0), line(mug, 1, 10.0)])
        await make_order(status="Delivered", items=[line(uuid4(), 100, 1.0)])
        await make_order(status="Pending", items=[line(shirt, 50, 90.0)])

        top = await AnalyticsEngine(session).top_products()

        assert [
            (p.name, p.total_sold, p.total_revenue, p.category) for p in top
        ] == [
            ("Dress", 5, 100.0, "Women's Fashion"),
            ("Shirt", 3, 270.0, "Men's Fashion"),
            ("Mug", 1, 10.0, "Uncategorized"),
        ]
        assert top[1].product_id == str(shirt.id)

    async def test_status_filter_and_limit(self, session, make_order, catalog):
        shirt, dress, mug = catalog
        await make_order(status="Pending", items=[line(shirt, 50, 90.0)])
        await make_order(status="Delivered", items=[line(dress, 2, 20.0), line(mug, 1, 10.0)])
        engine = AnalyticsEngine(session)

        pending = await engine.top_products(status=OrderStatus.PENDING)
        limited = await engine.top_products(limit=1)

        assert [(p.name, p.total_sold) for p in pending] == [("Shirt", 50)]
        assert [p.name for p in limited] == ["Dress"]


class TestDashboard:
    async def test_dashboard_payload(self, session, make_order, make_user, make_product):
        user = await make_user(name="Ravi Kumar")
        product = await make_product()
        await make_order(
            user_id=user.id,
            total_amount=200,
            status="Delivered",
            created_at=days_ago(1),
            items=[line(product, 2, 100.0)],
        )
        await make_order(total_amount=50, status="Pending", created_at=days_ago(2))

        dashboard = await AnalyticsEngine(session).dashboard(now=NOW)

        assert dashboard.stats.total_orders == 2
        assert dashboard.stats.total_users == 1
        assert dashboard.stats.total_products == 1
        assert dashboard.stats.total_revenue == 200.0
        assert dashboard.stats.completed_orders == 1
        assert [o.user_id.name for o in dashboard.recent_orders if hasattr(o.user_id, "name")] == [
            "Ravi Kumar"
        ]
        assert [(p.day, p.revenue) for p in dashboard.daily_revenue] == [(14, 200.0)]
        assert [p.total_sold for p in dashboard.top_products] == [2]

        payload = dashboard.model_dump(by_alias=True)
        assert set(payload) == {
            "stats",
            "recentOrders",
            "orderStatusStats",
            "dailyRevenue",
            "weeklyRevenue",
            "monthlyRevenue",
            "halfYearlyRevenue",
            "topProducts",
        }
        assert set(payload["stats"]) == {
            "totalProducts",
            "totalOrders",
            "totalUsers",
            "totalCategories",
            "totalRevenue",
            "completedOrders",
            "paymentMethods",
        }
