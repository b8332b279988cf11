from datetime import date
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from src.depends import get_session, get_session_factory
from src.adapter.repositories import SqlAlchemySubscriptionRepository
from src.domain.address import Address
from src.domain.base import generate_uuid
from src.domain.ledger_entry import LedgerEntry, EntryDirection, EntryStatus
from src.domain.product import Product, ProductVariant
from src.domain.subscription import (
    Frequency,
    Subscription,
    SubscriptionItem,
    SubscriptionStatus,
)
from src.domain.wallet import Wallet

USER_ID = "user_42"


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create test database engine on a throwaway SQLite file"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'subscriptions_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def catalog(db_session):
    """
    Basmati Rice: base 100, 1kg variant 120
    Green Tea: 9.99, no variants

    Returns product IDs by key.
    """
    rice = Product(name="Basmati Rice", price=Decimal("100"))
    tea = Product(name="Green Tea", price=Decimal("9.99"))
    db_session.add(rice)
    db_session.add(tea)
    await db_session.flush()

    db_session.add(ProductVariant(product_id=rice.id, weight="1kg", price=Decimal("120")))
    await db_session.commit()

    return {"rice": rice.id, "tea": tea.id}


@pytest_asyncio.fixture
async def address_id(db_session):
    address = Address(user_id=USER_ID, label="Home", line1="12 Market Road", city="Pune", postal_code="411001")
    db_session.add(address)
    await db_session.commit()
    return address.id


@pytest_asyncio.fixture
async def fund_wallet(db_session):
    """Open a wallet through a credit entry so the ledger and balance agree"""

    async def _fund(amount, user_id: str = USER_ID) -> int:
        wallet = Wallet(user_id=user_id, balance=Decimal(str(amount)))
        db_session.add(wallet)
        await db_session.flush()
        db_session.add(
            LedgerEntry(
                user_id=user_id,
                wallet_id=wallet.id,
                direction=EntryDirection.CREDIT,
                status=EntryStatus.SUCCESS,
                amount=Decimal(str(amount)),
                balance_before=Decimal("0"),
                balance_after=Decimal(str(amount)),
                description="Wallet top-up",
                reference_type="top_up",
                idempotency_key=f"top_up:{generate_uuid()}",
            )
        )
        await db_session.commit()
        return wallet.id

    return _fund


@pytest_asyncio.fixture
async def make_subscription(db_session):
    """Insert an ACTIVE subscription with one line"""

    async def _make(
        address_id: int,
        product_id: int,
        next_delivery_date: date,
        frequency: Frequency = Frequency.WEEKLY,
        quantity: int = 1,
        variant_weight=None,
        variant_price=None,
        user_id: str = USER_ID,
    ) -> int:
        subscription = await SqlAlchemySubscriptionRepository(db_session).create(
            Subscription(
                user_id=user_id,
                delivery_address_id=address_id,
                frequency=frequency,
                status=SubscriptionStatus.ACTIVE,
                next_delivery_date=next_delivery_date,
                payment_method="wallet",
            ),
            [
                SubscriptionItem(
                    product_id=product_id,
                    quantity=quantity,
                    variant_weight=variant_weight,
                    variant_price=variant_price,
                )
            ],
        )
        await db_session.commit()
        return subscription.id

    return _make


@pytest_asyncio.fixture
async def client(session_factory):
    """Create test client with database session override"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # A fresh session per request, so reads see what other requests committed
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
