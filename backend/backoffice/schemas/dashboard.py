"""
Dashboard Pydantic schemas for analytics data.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from backoffice.schemas.order import AdminOrderResponse


class RevenueBucket(BaseModel):
    """Revenue and order count of one calendar bucket."""

    revenue: float
    orders: int


class DailyRevenuePoint(RevenueBucket):
    year: int
    month: int
    day: int


class WeeklyRevenuePoint(RevenueBucket):
    year: int
    week: int


class MonthlyRevenuePoint(RevenueBucket):
    year: int
    month: int


class HalfYearlyRevenuePoint(RevenueBucket):
    year: int
    half: str


class StatusCount(BaseModel):
    status: str
    count: int


class PaymentMethodStat(BaseModel):
    """Delivered-order totals for one payment method."""

    payment_method: str = Field(alias="paymentMethod")
    total_amount: float = Field(alias="totalAmount")
    order_count: int = Field(alias="orderCount")

    model_config = ConfigDict(populate_by_name=True)


class TopProduct(BaseModel):
    """Top selling product."""

    product_id: str = Field(alias="productId")
    name: str
    image: Optional[str] = None
    category: str
    total_sold: int = Field(alias="totalSold")
    total_revenue: float = Field(alias="totalRevenue")

    model_config = ConfigDict(populate_by_name=True)


class DashboardStats(BaseModel):
    """Headline numbers of the dashboard."""

    total_products: int = Field(alias="totalProducts")
    total_orders: int = Field(alias="totalOrders")
    total_users: int = Field(alias="totalUsers")
    total_categories: int = Field(alias="totalCategories")
    total_revenue: float = Field(alias="totalRevenue")
    completed_orders: int = Field(alias="completedOrders")
    payment_methods: list[PaymentMethodStat] = Field(alias="paymentMethods")

    model_config = ConfigDict(populate_by_name=True)


class DashboardResponse(BaseModel):
    """Complete dashboard payload."""

    stats: DashboardStats
    recent_orders: list[AdminOrderResponse] = Field(alias="recentOrders")
    order_status_stats: list[StatusCount] = Field(alias="orderStatusStats")
    daily_revenue: list[DailyRevenuePoint] = Field(alias="dailyRevenue")
    weekly_revenue: list[WeeklyRevenuePoint] = Field(alias="weeklyRevenue")
    monthly_revenue: list[MonthlyRevenuePoint] = Field(alias="monthlyRevenue")
    half_yearly_revenue: list[HalfYearlyRevenuePoint] = Field(alias="halfYearlyRevenue")
    top_products: list[TopProduct] = Field(alias="topProducts")

    model_config = ConfigDict(populate_by_name=True)


class StatusOverview(BaseModel):
    status: str
    count: int
    total_amount: float = Field(alias="totalAmount")

    model_config = ConfigDict(populate_by_name=True)


class OrderStatsOverview(BaseModel):
    """Admin order statistics."""

    stats: list[StatusOverview]
    total_orders: int = Field(alias="totalOrders")
    total_revenue: float = Field(alias="totalRevenue")

    model_config = ConfigDict(populate_by_name=True)
