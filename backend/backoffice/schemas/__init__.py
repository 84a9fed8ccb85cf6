"""
Pydantic schemas package.
"""
from backoffice.schemas.dashboard import (
    DailyRevenuePoint,
    DashboardResponse,
    DashboardStats,
    HalfYearlyRevenuePoint,
    MonthlyRevenuePoint,
    OrderStatsOverview,
    PaymentMethodStat,
    RevenueBucket,
    StatusCount,
    StatusOverview,
    TopProduct,
    WeeklyRevenuePoint,
)
from backoffice.schemas.order import (
    AdminOrderResponse,
    OrderCreate,
    OrderDetailResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderPlacedResponse,
    OrderResponse,
    PaginatedOrdersResponse,
    PaymentStatusUpdate,
    ReviewCreate,
    ReviewResponse,
    StatusUpdate,
    UserSummary,
)

__all__ = [
    # Orders
    "OrderCreate",
    "StatusUpdate",
    "PaymentStatusUpdate",
    "ReviewCreate",
    "OrderItemResponse",
    "OrderResponse",
    "AdminOrderResponse",
    "UserSummary",
    "OrderPlacedResponse",
    "OrderDetailResponse",
    "OrderListResponse",
    "PaginatedOrdersResponse",
    "ReviewResponse",
    # Dashboard
    "RevenueBucket",
    "DailyRevenuePoint",
    "WeeklyRevenuePoint",
    "MonthlyRevenuePoint",
    "HalfYearlyRevenuePoint",
    "StatusCount",
    "PaymentMethodStat",
    "TopProduct",
    "DashboardStats",
    "DashboardResponse",
    "StatusOverview",
    "OrderStatsOverview",
]
