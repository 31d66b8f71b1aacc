"""Issuer settings needed to number and identify documents"""

from decimal import Decimal
from pydantic import BaseModel, Field, field_validator


class FiscalSettings(BaseModel):
    """
    Issuer configuration injected into the document use cases

    Built from ApplicationConfig in src.depends; the domain never reads
    configuration directly.
    """

    country_code: str = Field(default="CV", description="ISO country code (2 letters)")
    repository_code: str = Field(default="1", description="1 principal, 2 homologation, 3 test")
    issuer_tax_id: str = Field(..., description="Issuer NIF (9 digits)")
    led_code: str = Field(..., description="Emission device/location code (up to 5 digits)")
    series: str = Field(default="A", min_length=1, max_length=10, description="Default numbering series")
    withholding_rate: Decimal = Field(default=Decimal("4"), ge=0, le=100, description="Withholding rate in percent")
    default_tax_rate: Decimal = Field(default=Decimal("15"), ge=0, le=100, description="VAT rate for lines without one")
    tax_id_checksum_enabled: bool = Field(default=True, description="Verify the NIF check digit")
    qr_base_url: str = Field(default="https://pe.efatura.cv/dfe/view/", description="Public verification URL prefix")

    @field_validator("country_code")
    @classmethod
    def _country_code(cls, value: str) -> str:
        if len(value) != 2 or not value.isalpha():
            raise ValueError("country_code must be 2 letters")
        return value.upper()

    @field_validator("repository_code")
    @classmethod
    def _repository_code(cls, value: str) -> str:
        value = str(value)
        if value not in ("1", "2", "3"):
            raise ValueError("repository_code must be 1, 2 or 3")
        return value

    @field_validator("issuer_tax_id")
    @classmethod
    def _issuer_tax_id(cls, value: str) -> str:
        value = str(value).strip()
        if len(value) != 9 or not value.isdigit():
            raise ValueError("issuer_tax_id must be 9 digits")
        return value

    @field_validator("led_code")
    @classmethod
    def _led_code(cls, value: str) -> str:
        value = str(value).strip()
        if not value.isdigit() or len(value) > 5:
            raise ValueError("led_code must be up to 5 digits")
        return value
