"""
Pytest configuration and fixtures.

Every test gets its own SQLite database file in a temporary directory, so
separate sessions are isolated the way they are on a real server.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import bidproxy.audit.models  # noqa: F401
import bidproxy.auth.models  # noqa: F401
import bidproxy.bids.models  # noqa: F401
from bidproxy.audit.recorder import AuditTrailRecorder
from bidproxy.auth.documents import LocalDocumentStore, get_document_store
from bidproxy.auth.jwt import JWTService
from bidproxy.auth.models import User, UserRole
from bidproxy.auth.schemas import CurrentUser
from bidproxy.bids.models import Bid, BidStatus, compute_bid_amounts
from bidproxy.bids.repository import BidRepository
from bidproxy.bids.service import BidLifecycleService
from bidproxy.config import Settings
from bidproxy.payments.config import PaymentConfig, ProviderType
from bidproxy.payments.factory import get_payment_gateway
from bidproxy.payments.mock_adapter import MockPaymentGateway
from bidproxy.payments.service import PaymentService
from bidproxy.shared.database import DatabaseManager, get_db_session

TEST_JWT_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", TEST_JWT_SECRET)
    monkeypatch.setenv("PAYMENTS_PROVIDER_TYPE", "mock")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings."""
    return Settings(
        app_env="dev",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'bidproxy.db'}",
        jwt_secret_key=TEST_JWT_SECRET,
        jwt_access_token_expire_minutes=60,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_bytes=1024,
    )


@pytest.fixture
def payment_config() -> PaymentConfig:
    return PaymentConfig(provider_type=ProviderType.MOCK, currency="usd")


# ============================================================================
# Database
# ============================================================================


@pytest_asyncio.fixture
async def db_manager(test_settings: Settings) -> AsyncGenerator[DatabaseManager, None]:
    """Database manager bound to a fresh schema."""
    manager = DatabaseManager(test_settings.database_url)
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def session_factory(db_manager: DatabaseManager) -> async_sessionmaker[AsyncSession]:
    return db_manager.session_factory


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ============================================================================
# Accounts
# ============================================================================


async def _add_user(
    factory: async_sessionmaker[AsyncSession],
    user_id: str,
    role: UserRole,
    *,
    is_active: bool = True,
    is_verified: bool = True,
) -> User:
    async with factory() as session:
        user = User(
            id=user_id,
            email=f"{user_id}@example.com",
            first_name=user_id.split("-")[0].capitalize(),
            role=role.value,
            is_active=is_active,
            is_verified=is_verified,
        )
        session.add(user)
        await session.commit()
        return user


def _context(user: User) -> CurrentUser:
    return CurrentUser(id=user.id, email=user.email, role=UserRole(user.role), is_active=user.is_active)


@pytest_asyncio.fixture
async def customer(session_factory: async_sessionmaker[AsyncSession]) -> CurrentUser:
    return _context(await _add_user(session_factory, "customer-a", UserRole.CUSTOMER))


@pytest_asyncio.fixture
async def other_customer(session_factory: async_sessionmaker[AsyncSession]) -> CurrentUser:
    return _context(await _add_user(session_factory, "customer-b", UserRole.CUSTOMER))


@pytest_asyncio.fixture
async def employee(session_factory: async_sessionmaker[AsyncSession]) -> CurrentUser:
    return _context(await _add_user(session_factory, "employee-1", UserRole.EMPLOYEE))


@pytest_asyncio.fixture
async def super_admin(session_factory: async_sessionmaker[AsyncSession]) -> CurrentUser:
    return _context(await _add_user(session_factory, "admin-1", UserRole.SUPER_ADMIN))


@pytest.fixture
def add_user(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[User]]:
    """Factory fixture for extra accounts."""

    async def _factory(user_id: str, role: UserRole, **kwargs: bool) -> User:
        return await _add_user(session_factory, user_id, role, **kwargs)

    return _factory


# ============================================================================
# Bids and payments
# ============================================================================


@pytest.fixture
def gateway() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest.fixture
def payment_service(gateway: MockPaymentGateway, payment_config: PaymentConfig) -> PaymentService:
    return PaymentService(gateway, payment_config)


@pytest.fixture
def bid_repository(db_session: AsyncSession) -> BidRepository:
    return BidRepository(db_session, AuditTrailRecorder(db_session))


@pytest.fixture
def bid_service(
    bid_repository: BidRepository,
    payment_service: PaymentService,
    test_settings: Settings,
) -> BidLifecycleService:
    return BidLifecycleService(bid_repository, payment_service, test_settings)


@pytest.fixture
def make_bid(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Bid]]:
    """Insert a committed bid in any state, bypassing the lifecycle rules."""

    async def _factory(
        customer_id: str,
        *,
        status: BidStatus = BidStatus.PENDING,
        max_bid_amount: str = "1000.00",
        lot_number: str = "LOT-1",
        payment_intent_id: str | None = None,
        is_refunded: bool = False,
    ) -> Bid:
        amounts = compute_bid_amounts(Decimal(max_bid_amount))
        async with session_factory() as session:
            bid = Bid(
                customer_id=customer_id,
                lot_number=lot_number,
                max_bid_amount=amounts.max_bid_amount,
                service_fee=amounts.service_fee,
                deposit_amount=amounts.deposit_amount,
                total_paid=amounts.total_paid,
                status=status.value,
                stripe_payment_intent_id=payment_intent_id,
                is_refunded=is_refunded,
            )
            session.add(bid)
            await session.commit()
            return bid

    return _factory


# ============================================================================
# HTTP
# ============================================================================


@pytest.fixture
def jwt_service(test_settings: Settings) -> JWTService:
    return JWTService(test_settings)


@pytest.fixture
def auth_headers(jwt_service: JWTService) -> Callable[..., dict[str, str]]:
    """Bearer headers for a user id, as the identity provider would issue them."""

    def _headers(user_id: str, **claims: str) -> dict[str, str]:
        token = jwt_service.create_access_token(user_id, additional_claims=claims or None)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def async_client(
    db_manager: DatabaseManager,
    gateway: MockPaymentGateway,
    test_settings: Settings,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with database and gateway overridden."""
    from bidproxy.main import app

    app.dependency_overrides[get_db_session] = db_manager.get_session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_document_store] = lambda: LocalDocumentStore(test_settings)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
