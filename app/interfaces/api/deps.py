"""FastAPI dependencies — repositories, services and bearer-token auth."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.application.services.auth_service import AuthService
from app.application.services.profile_service import ProfileService
from app.config import SigningKeys, get_settings
from app.domain.models.user import User
from app.domain.repositories.address_repository import AddressRepository
from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.database import get_db
from app.infrastructure.repositories.address_repository import SQLAlchemyAddressRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

security = HTTPBearer()


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return SQLAlchemyUserRepository(db, User)


def get_address_repository(db: Session = Depends(get_db)) -> AddressRepository:
    """Get address repository instance."""
    return SQLAlchemyAddressRepository(db)


def get_auth_service(users: UserRepository = Depends(get_user_repository)) -> AuthService:
    settings = get_settings()
    return AuthService(users, SigningKeys.from_settings(settings), settings)


def get_profile_service(
    users: UserRepository = Depends(get_user_repository),
    addresses: AddressRepository = Depends(get_address_repository),
) -> ProfileService:
    return ProfileService(users, addresses, get_settings())


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Extract and validate the current user from the bearer token."""
    return auth.authenticate(credentials.credentials)
