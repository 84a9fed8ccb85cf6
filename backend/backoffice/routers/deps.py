"""
Shared router dependencies: identity resolution and service wiring.
"""
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backoffice.core.database import DbSession
from backoffice.core.exceptions import ForbiddenError, UnauthorizedError
from backoffice.core.security import Identity, identity_from_token
from backoffice.services.analytics_engine import AnalyticsEngine
from backoffice.services.order_ingestion import OrderIngestionService
from backoffice.services.order_state import OrderStateMachine

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Identity:
    """Identity of the caller, from the bearer token issued by the auth service."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("No token provided")
    return identity_from_token(credentials.credentials)


async def require_admin(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError("Admin access only")
    return identity


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
AdminIdentity = Annotated[Identity, Depends(require_admin)]


async def get_ingestion_service(session: DbSession) -> OrderIngestionService:
    return OrderIngestionService(session)


async def get_state_machine(session: DbSession) -> OrderStateMachine:
    return OrderStateMachine(session)


async def get_analytics_engine(session: DbSession) -> AnalyticsEngine:
    return AnalyticsEngine(session)
