import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.adapter.services.jwt_token_issuer import JwtTokenIssuer
from src.adapter.services.pyotp_two_factor_provider import PyOTPTwoFactorProvider
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.auth import AccountDependencies, AuthPolicy
from src.depends import get_account_dependencies, get_token_issuer

TEST_SECRET = "integration-test-secret-0123456789abcdef"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
def token_issuer():
    return JwtTokenIssuer(secret=TEST_SECRET, issuer="account-service")


@pytest_asyncio.fixture
async def client(db_session, code_store, rate_limiter, dispatcher, token_issuer):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_account_dependencies():
        yield AccountDependencies(
            uow=SqlAlchemyUnitOfWork(db_session),
            code_store=code_store,
            token_issuer=token_issuer,
            rate_limiter=rate_limiter,
            dispatcher=dispatcher,
            password_hasher=BcryptPasswordHasher(rounds=4),
            two_factor=PyOTPTwoFactorProvider(issuer="account-service"),
            policy=AuthPolicy(),
        )

    app.dependency_overrides[get_account_dependencies] = override_get_account_dependencies
    app.dependency_overrides[get_token_issuer] = lambda: token_issuer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


PASSWORD = "Abcd12!@"


class AccountFlows:
    """Multi-request flows shared by the API tests"""

    def __init__(self, client: AsyncClient, dispatcher):
        self.client = client
        self.dispatcher = dispatcher

    async def register(self, email="ann@example.com", password=PASSWORD):
        return await self.client.post(
            "/auth/register",
            json={"email": email, "first_name": "Ann", "last_name": "Lee", "password": password},
        )

    async def register_verified(self, email="ann@example.com", password=PASSWORD):
        """Register and verify the email; returns the user profile"""
        await self.register(email, password)
        response = await self.client.post(
            "/auth/verify-otp", json={"email": email, "code": self.dispatcher.last_code()}
        )
        assert response.status_code == 200
        return response.json()["user"]

    async def login(self, email="ann@example.com", password=PASSWORD, remember=False):
        return await self.client.post(
            "/auth/login", json={"email": email, "password": password, "remember": remember}
        )


@pytest_asyncio.fixture
def accounts(client, dispatcher):
    return AccountFlows(client, dispatcher)
