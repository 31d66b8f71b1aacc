from decimal import Decimal
from functools import lru_cache
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.ledger_service import create_ledger_service
from src.adapter.services.fiscal_authority_service import create_fiscal_authority_service
from src.app.services.ledger_service import LedgerService
from src.app.services.fiscal_authority_service import FiscalAuthorityService
from src.domain.fiscal_settings import FiscalSettings

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def build_fiscal_settings(config=ApplicationConfig) -> FiscalSettings:
    return FiscalSettings(
        country_code=config.FISCAL_COUNTRY_CODE,
        repository_code=config.FISCAL_REPOSITORY_CODE,
        issuer_tax_id=config.FISCAL_ISSUER_TAX_ID,
        led_code=config.FISCAL_LED_CODE,
        series=config.FISCAL_DEFAULT_SERIES,
        withholding_rate=Decimal(str(config.FISCAL_WITHHOLDING_RATE)),
        default_tax_rate=Decimal(str(config.FISCAL_DEFAULT_TAX_RATE)),
        tax_id_checksum_enabled=config.FISCAL_TAX_ID_CHECKSUM_ENABLED,
        qr_base_url=config.FISCAL_QR_BASE_URL,
    )


@lru_cache
def get_fiscal_settings() -> FiscalSettings:
    return build_fiscal_settings()


def get_ledger_service() -> LedgerService:
    return create_ledger_service(ApplicationConfig.LEDGER_WEBHOOK_URL)


def get_fiscal_authority_service() -> FiscalAuthorityService:
    return create_fiscal_authority_service(
        ApplicationConfig.FISCAL_AUTHORITY_URL,
        api_key=ApplicationConfig.FISCAL_AUTHORITY_API_KEY,
    )
