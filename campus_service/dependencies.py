"""
FastAPI dependencies for authentication and service wiring
"""
import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import logging

from .application.services import (
    FeedService,
    GroupRegistryService,
    MembershipService,
    MessagingService,
    RelationshipService,
    UserService,
)
from .config import settings
from .infrastructure import Repositories
from .kafka_producer import KafkaProducerManager, get_kafka_producer
from .schemas import Viewer

logger = logging.getLogger(__name__)

security = HTTPBearer()

_repositories: Optional[Repositories] = None


def set_repositories(repositories: Optional[Repositories]) -> None:
    """Install the storage backend chosen at startup"""
    global _repositories
    _repositories = repositories


async def get_repositories() -> Repositories:
    """Dependency for getting the active repositories"""
    if _repositories is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is not initialized",
        )
    return _repositories


async def verify_token_with_auth_service(token: str) -> Optional[dict]:
    """
    Verify a bearer token with the Auth Service

    Args:
        token: Access token from the Authorization header

    Returns:
        User data if token is valid, None otherwise
    """
    try:
        async with httpx.AsyncClient(timeout=settings.AUTH_TIMEOUT_SECONDS) as client:
            response = await client.get(
                f"{settings.AUTH_SERVICE_URL}/api/v1/auth/me",
                headers={"Authorization": f"Bearer {token}"},
            )

            if response.status_code == 200:
                return response.json()
            else:
                logger.warning(
                    f"Token verification failed: {response.status_code} - {response.text}"
                )
                return None

    except httpx.TimeoutException:
        logger.error("Auth service timeout during token verification")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service is temporarily unavailable",
        )
    except httpx.HTTPError as e:
        logger.error(f"Failed to reach auth service: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service is unavailable",
        )


async def get_authenticated_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Viewer:
    """
    Resolve the identity the auth service vouches for

    Raises:
        HTTPException: If the token is invalid or the account inactive
    """
    user_data = await verify_token_with_auth_service(credentials.credentials)

    if not user_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        viewer = Viewer(**user_data)
    except (TypeError, ValueError) as e:
        logger.error(f"Error parsing user data: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user data",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not viewer.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    return viewer


async def get_current_user(
    identity: Viewer = Depends(get_authenticated_identity),
    repos: Repositories = Depends(get_repositories),
) -> Viewer:
    """
    Resolve the viewer for this request

    A first-time identity gets its campus profile here, so every viewer has a
    users row. The returned id is the campus user id.
    """
    if not identity.email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Identity has no email",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await UserService(repos.users).provision(
        identity.email, identity.name, identity.course, identity.batch
    )
    return identity.model_copy(update={"id": user.id, "name": user.name})


def get_relationship_service(
    repos: Repositories = Depends(get_repositories),
    kafka: KafkaProducerManager = Depends(get_kafka_producer),
) -> RelationshipService:
    return RelationshipService(repos.follows, kafka)


def get_group_registry_service(
    repos: Repositories = Depends(get_repositories),
) -> GroupRegistryService:
    return GroupRegistryService(repos.groups)


def get_membership_service(
    repos: Repositories = Depends(get_repositories),
    kafka: KafkaProducerManager = Depends(get_kafka_producer),
) -> MembershipService:
    return MembershipService(repos.groups, repos.memberships, repos.follows, kafka)


def get_feed_service(
    repos: Repositories = Depends(get_repositories),
    kafka: KafkaProducerManager = Depends(get_kafka_producer),
) -> FeedService:
    return FeedService(repos.posts, kafka)


def get_messaging_service(
    repos: Repositories = Depends(get_repositories),
    kafka: KafkaProducerManager = Depends(get_kafka_producer),
) -> MessagingService:
    return MessagingService(repos.messages, kafka)


def get_user_service(repos: Repositories = Depends(get_repositories)) -> UserService:
    return UserService(repos.users)
