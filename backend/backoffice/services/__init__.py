"""
Services package for business logic layer.
"""
from backoffice.services.analytics_engine import AnalyticsEngine
from backoffice.services.order_ingestion import OrderIngestionService
from backoffice.services.order_state import OrderStateMachine

__all__ = [
    "OrderIngestionService",
    "OrderStateMachine",
    "AnalyticsEngine",
]
