"""
Pydantic models for ProPublica Nonprofit Explorer API responses.

Only the fields the analysis uses are declared; any other upstream keys
are ignored so API additions never break parsing.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from funder_fit.schemas.grants import FormType


def _ein_digits(v: Any) -> Any:
    """ProPublica returns EINs as integers (leading zeros dropped)."""
    if isinstance(v, int):
        return f"{v:09d}"
    if isinstance(v, str):
        return v.replace("-", "").strip()
    return v


class Organization(BaseModel):
    """Organization-level metadata."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    ein: str
    name: str = "Unknown"
    careofname: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    ntee_code: Optional[str] = None
    subseccd: Optional[int] = None
    ruling_date: Optional[str] = None
    tax_period: Optional[int] = None
    asset_amt: Optional[float] = None
    income_amt: Optional[float] = None
    revenue_amt: Optional[float] = None

    @field_validator("ein", mode="before")
    @classmethod
    def normalize_ein(cls, v: Any) -> Any:
        return _ein_digits(v)


class Filing(BaseModel):
    """One filing with structured (extracted) financial data."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    ein: Optional[str] = None
    tax_prd: Optional[int] = None
    tax_prd_yr: Optional[int] = None
    formtype: int = FormType.FORM_990.value
    pdf_url: Optional[str] = None
    totrevenue: Optional[float] = None
    totfuncexpns: Optional[float] = None
    totassetsend: Optional[float] = None
    totliabend: Optional[float] = None
    totcntrbgfts: Optional[float] = None
    totnetassetend: Optional[float] = None

    @field_validator("ein", mode="before")
    @classmethod
    def normalize_ein(cls, v: Any) -> Any:
        return _ein_digits(v)

    @property
    def form_type(self) -> FormType:
        """Form type discriminator; unknown codes are treated as a standard 990."""
        try:
            return FormType(self.formtype)
        except ValueError:
            return FormType.FORM_990


class FilingWithoutData(BaseModel):
    """Filing known to ProPublica with only a PDF (no extracted financials)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    tax_prd: Optional[int] = None
    tax_prd_yr: Optional[int] = None
    formtype: Optional[int] = None
    pdf_url: Optional[str] = None


class OrganizationProfile(BaseModel):
    """Response of the organization endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    organization: Organization
    filings_with_data: list[Filing] = Field(default_factory=list)
    filings_without_data: list[FilingWithoutData] = Field(default_factory=list)

    @property
    def latest_filing(self) -> Optional[Filing]:
        """Most recent filing with data (ProPublica sorts by tax year desc)."""
        return self.filings_with_data[0] if self.filings_with_data else None


class SearchHit(BaseModel):
    """One organization in a search response."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    ein: str
    name: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    ntee_code: Optional[str] = None
    subseccd: Optional[int] = None
    score: Optional[float] = None

    @field_validator("ein", mode="before")
    @classmethod
    def normalize_ein(cls, v: Any) -> Any:
        return _ein_digits(v)


class SearchResult(BaseModel):
    """Response of the search endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    total_results: int = 0
    organizations: list[SearchHit] = Field(default_factory=list)
