from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from libs.result import Error
from logify.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from logify.api.error import ClientError
from logify.api.utils.jwt import verify_jwt
from logify.app.services.access_control import ActorPolicy
from logify.app.services.location import LocationResolver

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer()


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_location_resolver() -> LocationResolver:
    return LocationResolver()


def get_actor_policy() -> ActorPolicy:
    return ActorPolicy()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Decoded JWT payload containing user_id and role

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    token = credentials.credentials
    payload = verify_jwt(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return payload


async def require_log_access(
    current_user: dict = Depends(get_current_user),
    policy: ActorPolicy = Depends(get_actor_policy),
) -> dict:
    """The current user, if one of their roles may read the log"""
    if not policy.can_access_log(current_user.get("role")):
        raise ClientError(
            Error("INSUFFICIENT_ROLE", "You do not have permission to view the log"),
            status_code=status.HTTP_403_FORBIDDEN,
        )
    return current_user
