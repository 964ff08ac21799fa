from fastapi import Depends, Request, Response, status
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.cookies import set_session_cookie
from src.api.utils.identity import IdentityProvider
from src.app.services.domain_policy import DomainPolicy
from src.app.services.session_manager import SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import AuthenticateSessionUseCase
from src.domain.entities import Account

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_config(request: Request):
    return request.app.state.config


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_domain_policy(config=Depends(get_config)) -> DomainPolicy:
    return DomainPolicy.from_config(config)


def get_session_settings(config=Depends(get_config)) -> SessionSettings:
    return SessionSettings.from_config(config)


async def get_current_account(
    request: Request,
    response: Response,
    config=Depends(get_config),
    settings: SessionSettings = Depends(get_session_settings),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> Account:
    """
    Dependency to authenticate the request from its session cookie.

    A valid session gets its idle window extended and the cookie re-issued
    with a fresh Max-Age.

    Returns:
        The active Account behind the session

    Raises:
        ClientError: 401 SESSION_INVALID, whatever the underlying reason
    """
    handle = request.cookies.get(config.SESSION_COOKIE_NAME)

    use_case = AuthenticateSessionUseCase(uow, settings)
    result = await use_case.execute(handle)

    if result.is_err():
        raise ClientError(result.err_value, status_code=status.HTTP_401_UNAUTHORIZED)

    set_session_cookie(response, config, handle)
    return result.ok_value
