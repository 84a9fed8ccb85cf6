"""
Analytics engine - revenue rollups and sales rankings for the dashboard.

Everything is computed from the order table on each call; nothing is
cached or materialized. Revenue figures are recognized revenue: delivered
orders paid by one of the accepted methods. Calendar keys use the UTC
calendar of ``created_at``.

Buckets are sparse: a period with no matching order produces no point.
Consumers that need a fixed-length series fill the gaps themselves.
"""
import calendar
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.logging import get_logger
from backoffice.core.timestamps import as_utc, utcnow
from backoffice.models.order import Order, OrderStatus, PaymentMethod
from backoffice.repositories.catalog import (
    CategoryRepository,
    ProductRepository,
    parse_uuid,
)
from backoffice.repositories.order import OrderRepository
from backoffice.repositories.user import UserRepository
from backoffice.schemas.dashboard import (
    DailyRevenuePoint,
    DashboardResponse,
    DashboardStats,
    HalfYearlyRevenuePoint,
    MonthlyRevenuePoint,
    OrderStatsOverview,
    PaymentMethodStat,
    StatusCount,
    StatusOverview,
    TopProduct,
    WeeklyRevenuePoint,
)
from backoffice.schemas.order import AdminOrderResponse

logger = get_logger(__name__)

RECOGNIZED_PAYMENT_METHODS = tuple(method.value for method in PaymentMethod)
COMPLETED_STATUSES = (OrderStatus.DELIVERED.value, OrderStatus.SHIPPED.value)
UNCATEGORIZED = "Uncategorized"

# Known spelling variants of category names and their display form
CATEGORY_SYNONYMS: dict[str, str] = {
    "Mens Fashion": "Men's Fashion",
    "Womens Fashion": "Women's Fashion",
    "Home and Living": "Home & Living",
    "Beauty and Care": "Beauty & Care",
    "Sports and Fitness": "Sports & Fitness",
}


def canonical_category(name: Optional[str]) -> str:
    if not name:
        return UNCATEGORIZED
    return CATEGORY_SYNONYMS.get(name, name)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move back ``months`` calendar months, clamping the day to the target month."""
    total = moment.year * 12 + (moment.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _half(moment: datetime) -> str:
    return "H1" if moment.month <= 6 else "H2"


@dataclass(frozen=True)
class Granularity:
    """How one rollup windows and keys its orders."""

    name: str
    cutoff: Callable[[datetime], datetime]
    key: Callable[[datetime], tuple]
    fields: tuple[str, ...]
    point: type[BaseModel]


DAILY = Granularity(
    name="daily",
    cutoff=lambda now: now - timedelta(days=7),
    key=lambda t: (t.year, t.month, t.day),
    fields=("year", "month", "day"),
    point=DailyRevenuePoint,
)
WEEKLY = Granularity(
    name="weekly",
    cutoff=lambda now: now - timedelta(days=28),
    key=lambda t: tuple(t.isocalendar())[:2],
    fields=("year", "week"),
    point=WeeklyRevenuePoint,
)
MONTHLY = Granularity(
    name="monthly",
    cutoff=lambda now: shift_months(now, 12),
    key=lambda t: (t.year, t.month),
    fields=("year", "month"),
    point=MonthlyRevenuePoint,
)
HALF_YEARLY = Granularity(
    name="half_yearly",
    cutoff=lambda now: shift_months(now, 24),
    key=lambda t: (t.year, _half(t)),
    fields=("year", "half"),
    point=HalfYearlyRevenuePoint,
)

GRANULARITIES = (DAILY, WEEKLY, MONTHLY, HALF_YEARLY)


def bucket_revenue(
    rows: Iterable[tuple[datetime, float]],
    granularity: Granularity,
    now: datetime,
) -> list[Any]:
    """
    Group (created_at, amount) rows into the granularity's calendar buckets.

    Rows before the granularity's cutoff are ignored. Only buckets holding
    at least one row are returned, ascending by key.
    """
    cutoff = granularity.cutoff(now)
    buckets: dict[tuple, list[float]] = {}
    for created_at, amount in rows:
        created_at = as_utc(created_at)
        if created_at < cutoff:
            continue
        bucket = buckets.setdefault(granularity.key(created_at), [0.0, 0])
        bucket[0] += float(amount)
        bucket[1] += 1

    return [
        granularity.point(
            **dict(zip(granularity.fields, key)),
            revenue=round(revenue, 2),
            orders=orders,
        )
        for key, (revenue, orders) in sorted(buckets.items())
    ]


class AnalyticsEngine:
    """Read-only aggregations over the order store."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.orders = OrderRepository(session)
        self.products = ProductRepository(session)
        self.categories = CategoryRepository(session)
        self.users = UserRepository(session)

    @staticmethod
    def _recognized():
        return (
            Order.status == OrderStatus.DELIVERED.value,
            Order.payment_method.in_(RECOGNIZED_PAYMENT_METHODS),
        )

    async def _recognized_rows(self, since: datetime) -> list[tuple[datetime, float]]:
        stmt = select(Order.created_at, Order.total_amount).where(
            *self._recognized(),
            Order.created_at >= since,
        )
        result = await self.session.execute(stmt)
        return [(row.created_at, float(row.total_amount)) for row in result.all()]

    async def revenue_rollup(
        self,
        granularity: Granularity,
        now: Optional[datetime] = None,
    ) -> list[Any]:
        """One rollup series, windowed relative to ``now``."""
        now = as_utc(now or utcnow())
        rows = await self._recognized_rows(granularity.cutoff(now))
        return bucket_revenue(rows, granularity, now)

    async def revenue_rollups(self, now: Optional[datetime] = None) -> dict[str, list[Any]]:
        """All rollup series from a single scan of the widest window."""
        now = as_utc(now or utcnow())
        since = min(granularity.cutoff(now) for granularity in GRANULARITIES)
        rows = await self._recognized_rows(since)
        return {
            granularity.name: bucket_revenue(rows, granularity, now)
            for granularity in GRANULARITIES
        }

    async def status_distribution(self) -> list[StatusCount]:
        """Count of every order per status."""
        stmt = select(Order.status, func.count()).group_by(Order.status)
        result = await self.session.execute(stmt)
        counts = dict(result.all())
        order = [status.value for status in OrderStatus]
        return [
            StatusCount(status=status, count=counts[status])
            for status in sorted(counts, key=lambda s: order.index(s) if s in order else len(order))
        ]

    async def payment_method_breakdown(self) -> list[PaymentMethodStat]:
        """Delivered orders grouped by payment method."""
        stmt = (
            select(
                Order.payment_method,
                func.sum(Order.total_amount).label("total_amount"),
                func.count().label("order_count"),
            )
            .where(Order.status == OrderStatus.DELIVERED.value)
            .group_by(Order.payment_method)
            .order_by(Order.payment_method)
        )
        result = await self.session.execute(stmt)
        return [
            PaymentMethodStat(
                payment_method=row.payment_method,
                total_amount=round(float(row.total_amount or 0), 2),
                order_count=row.order_count,
            )
            for row in result.all()
        ]

    async def total_revenue(self) -> float:
        """Recognized revenue over the whole store."""
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0)).where(*self._recognized())
        result = await self.session.execute(stmt)
        return round(float(result.scalar() or 0), 2)

    async def completed_orders(self) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.status.in_(COMPLETED_STATUSES))
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def top_products(
        self,
        status: OrderStatus = OrderStatus.DELIVERED,
        limit: Optional[int] = None,
    ) -> list[TopProduct]:
        """
        Best sellers by quantity among orders in ``status``.

        Products that have left the catalog are dropped. Category names are
        resolved by id, then by name, and canonicalized once through
        ``CATEGORY_SYNONYMS``.
        """
        limit = limit or settings.top_products_limit

        stmt = select(Order.items).where(Order.status == status.value)
        result = await self.session.execute(stmt)

        totals: dict[str, list[float]] = {}
        for items in result.scalars().all():
            for item in items or []:
                ref = item.get("product")
                if not ref:
                    continue
                quantity = int(item.get("quantity") or 0)
                entry = totals.setdefault(str(ref), [0, 0.0])
                entry[0] += quantity
                entry[1] += float(item.get("price") or 0) * quantity

        refs_by_id = {parse_uuid(ref): ref for ref in totals}
        refs_by_id.pop(None, None)
        products = await self.products.get_many(refs_by_id)
        category_names = await self.categories.display_names(
            product.category for product in products.values()
        )

        ranked = [
            TopProduct(
                product_id=str(product_id),
                name=product.name,
                image=product.image,
                category=canonical_category(category_names.get(product.category)),
                total_sold=int(totals[refs_by_id[product_id]][0]),
                total_revenue=round(totals[refs_by_id[product_id]][1], 2),
            )
            for product_id, product in products.items()
        ]
        ranked.sort(key=lambda p: (-p.total_sold, p.product_id))
        return ranked[:limit]

    async def order_stats_overview(self) -> OrderStatsOverview:
        """Per-status counts and totals for the admin order screen."""
        stmt = (
            select(
                Order.status,
                func.count().label("count"),
                func.sum(Order.total_amount).label("total_amount"),
            )
            .group_by(Order.status)
            .order_by(Order.status)
        )
        result = await self.session.execute(stmt)
        stats = [
            StatusOverview(
                status=row.status,
                count=row.count,
                total_amount=round(float(row.total_amount or 0), 2),
            )
            for row in result.all()
        ]

        revenue_stmt = select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.status.in_(COMPLETED_STATUSES)
        )
        revenue = (await self.session.execute(revenue_stmt)).scalar() or 0

        return OrderStatsOverview(
            stats=stats,
            total_orders=sum(s.count for s in stats),
            total_revenue=round(float(revenue), 2),
        )

    async def dashboard(
        self,
        top_status: OrderStatus = OrderStatus.DELIVERED,
        now: Optional[datetime] = None,
    ) -> DashboardResponse:
        """
        Complete dashboard payload.

        Queries run one after another on the request session; any failure
        aborts the whole read.
        """
        total_products = await self.products.count()
        total_orders = await self.orders.count()
        total_users = await self.users.count()
        total_categories = await self.categories.count()

        stats = DashboardStats(
            total_products=total_products,
            total_orders=total_orders,
            total_users=total_users,
            total_categories=total_categories,
            total_revenue=await self.total_revenue(),
            completed_orders=await self.completed_orders(),
            payment_methods=await self.payment_method_breakdown(),
        )

        recent = await self.orders.recent(settings.recent_orders_limit)
        rollups = await self.revenue_rollups(now)

        response = DashboardResponse(
            stats=stats,
            recent_orders=[AdminOrderResponse.from_order(order) for order in recent],
            order_status_stats=await self.status_distribution(),
            daily_revenue=rollups[DAILY.name],
            weekly_revenue=rollups[WEEKLY.name],
            monthly_revenue=rollups[MONTHLY.name],
            half_yearly_revenue=rollups[HALF_YEARLY.name],
            top_products=await self.top_products(top_status),
        )

        logger.info(
            "Dashboard computed",
            total_orders=total_orders,
            total_revenue=stats.total_revenue,
            top_status=top_status.value,
        )
        return response
