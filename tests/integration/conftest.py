import pytest
import pytest_asyncio
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.ledger_service import LoggingLedgerService
from src.app.services.fiscal_authority_service import FiscalAuthorityService, TransmissionResult
from src.depends import get_session, get_fiscal_settings, get_ledger_service, get_fiscal_authority_service
from src.domain.client import Client
from src.domain.fiscal_settings import FiscalSettings


class AcceptingFiscalAuthority(FiscalAuthorityService):
    """Authority double that accepts every document"""

    def __init__(self):
        self.sent = []

    async def transmit(self, document, lines):
        self.sent.append(document.iud)
        return TransmissionResult(success=True)


class IntegrationTestConfig(ApplicationConfig):
    API_PREFIX = ""
    ENABLE_SENTRY = 0
    ENABLE_LOGGING_MIDDLEWARE = True
    LOG_LEVEL = "WARNING"


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite database, one per test, so several sessions can share it"""
    database_path = tmp_path / "fiscal_test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{database_path}",
        echo=False,
        future=True,
        connect_args={"timeout": 5},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def accepting_fiscal_authority():
    return AcceptingFiscalAuthority()


@pytest.fixture
def fiscal_settings():
    return FiscalSettings(
        country_code="CV",
        repository_code="1",
        issuer_tax_id="123456789",
        led_code="1",
        series="A",
        withholding_rate=Decimal("4"),
        default_tax_rate=Decimal("15"),
    )


@pytest_asyncio.fixture
async def sample_client(db_session):
    """Client directory entry with a valid NIF"""
    client = Client(name="Loja Central Lda", tax_id="123456789", address="Rua 5 de Julho, Praia")
    db_session.add(client)
    await db_session.commit()
    await db_session.refresh(client)
    return client


@pytest_asyncio.fixture
async def client(db_session, fiscal_settings, accepting_fiscal_authority):
    """Create test client with database session and collaborator overrides"""
    from src.api.app import create_app

    app = create_app(IntegrationTestConfig)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_fiscal_settings] = lambda: fiscal_settings
    app.dependency_overrides[get_ledger_service] = lambda: LoggingLedgerService()
    app.dependency_overrides[get_fiscal_authority_service] = lambda: accepting_fiscal_authority

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
