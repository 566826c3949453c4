# schemas/lease.py
"""
Pydantic schemas for lease request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


INITIALS_MAX_LENGTH = 10


def clean_initials(value: Optional[str]) -> Optional[str]:
     """Upper-case signer initials; letters, dots and hyphens only."""
     if value is None:
          return value
     value = value.strip().upper()
     if not value or len(value) > INITIALS_MAX_LENGTH:
          raise ValueError(f"Initials must be 1 to {INITIALS_MAX_LENGTH} characters")
     if not all(c.isalpha() or c in ".-" for c in value):
          raise ValueError("Initials may only contain letters, dots and hyphens")
     return value


class LeaseStatusEnum(str, Enum):
     """Lease lifecycle options."""
     DRAFT = "DRAFT"
     TENANT_SIGNED = "TENANT_SIGNED"
     OWNER_SIGNED = "OWNER_SIGNED"
     FINALIZED = "FINALIZED"


class SignerRoleEnum(str, Enum):
     TENANT = "TENANT"
     OWNER = "OWNER"


class LeaseOriginEnum(str, Enum):
     APPLICATION = "APPLICATION"
     MANUAL = "MANUAL"


class LandlordInfo(BaseModel):
     """Section 1 of the lease, authored by the landlord at acceptance."""
     name: str = Field(..., min_length=1)
     address: str = Field(..., min_length=1)
     city: str = Field(..., min_length=1)
     postalCode: Optional[str] = None
     phone: Optional[str] = None
     email: Optional[str] = None


class PropertyInfo(BaseModel):
     """Section 3 of the lease."""
     address: str = Field(..., min_length=1)
     city: str = Field(..., min_length=1)
     postalCode: Optional[str] = None
     type: Optional[str] = None
     rooms: Optional[str] = None
     heating: Optional[str] = None
     parking: Optional[bool] = None
     parkingDetails: Optional[str] = None
     storage: Optional[bool] = None
     storageDetails: Optional[str] = None


class LeaseTermsInfo(BaseModel):
     """Section 4 of the lease."""
     utilities: Optional[str] = None
     pets: Optional[bool] = None
     petsDetails: Optional[str] = None
     smoking: Optional[bool] = None
     repairs: Optional[str] = None
     rules: Optional[str] = None


class AcceptApplicationRequest(BaseModel):
     """Landlord accepts a submitted application; the lease is drafted from it."""
     start_date: date = Field(..., alias="startDate")
     landlord_info: LandlordInfo = Field(..., alias="landlordInfo")
     property_info: PropertyInfo = Field(..., alias="propertyInfo")
     lease_terms: LeaseTermsInfo = Field(..., alias="leaseTerms")
     additional_conditions: Optional[str] = Field(None, alias="additionalConditions")

     model_config = ConfigDict(populate_by_name=True)


class _LeaseTermsBase(BaseModel):
     start_date: date = Field(..., alias="startDate")
     end_date: date = Field(..., alias="endDate")
     monthly_rent: Decimal = Field(..., alias="monthlyRent", gt=0, max_digits=12, decimal_places=2)
     deposit: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     terms: str = Field(..., min_length=1)

     model_config = ConfigDict(populate_by_name=True)

     @model_validator(mode="after")
     def _end_after_start(self):
          if self.end_date <= self.start_date:
               raise ValueError("endDate must be after startDate")
          return self


class LeaseFromApplicationCreate(_LeaseTermsBase):
     """Create a lease for an already accepted application."""
     application_id: int = Field(..., alias="applicationId", gt=0)


class ManualLeaseCreate(_LeaseTermsBase):
     """Create a lease without an application (e.g. an imported existing tenancy)."""
     listing_id: int = Field(..., alias="listingId", gt=0)
     tenant_user_id: int = Field(..., alias="tenantId", gt=0)
     tenant_email: str = Field(..., alias="tenantEmail", min_length=3, max_length=255)
     tenant_name: Optional[str] = Field(None, alias="tenantName", max_length=200)


class SignLeaseRequest(BaseModel):
     """Body of both sign endpoints."""
     consent_given: bool = Field(..., alias="consentGiven")
     initials: Optional[str] = Field(None, min_length=1, max_length=INITIALS_MAX_LENGTH)

     model_config = ConfigDict(
          populate_by_name=True,
          json_schema_extra={"example": {"consentGiven": True, "initials": "JD"}},
     )

     @field_validator("consent_given")
     @classmethod
     def _consent_required(cls, value: bool) -> bool:
          if value is not True:
               raise ValueError("You must give your consent to sign")
          return value

     @field_validator("initials")
     @classmethod
     def _clean_initials(cls, value: Optional[str]) -> Optional[str]:
          return clean_initials(value)


class SignatureResponse(BaseModel):
     id: int
     lease_id: int
     signer_role: SignerRoleEnum
     signer_id: int
     signer_email: str
     signer_name: Optional[str] = None
     initials: Optional[str] = None
     consent_given: bool
     document_version: int
     signed_at: datetime

     model_config = ConfigDict(from_attributes=True)


class FinalizeResponse(BaseModel):
     message: str
     document_id: str
     document_hash: str
     pdf_url: str
     finalized_at: datetime
     already_finalized: bool = False


class SignLeaseResponse(BaseModel):
     message: str
     status: LeaseStatusEnum
     signature: SignatureResponse
     finalization: Optional[FinalizeResponse] = None


class LeaseResponse(BaseModel):
     id: int
     origin: LeaseOriginEnum
     application_id: Optional[int] = None
     listing_id: Optional[int] = None
     tenant_user_id: int
     tenant_email: str
     tenant_name: Optional[str] = None
     landlord_user_id: int
     landlord_email: str
     landlord_name: Optional[str] = None
     start_date: date
     end_date: date
     monthly_rent: Decimal
     deposit: Decimal
     terms: Optional[str] = None
     landlord_info: Optional[dict] = None
     property_info: Optional[dict] = None
     lease_terms: Optional[dict] = None
     additional_conditions: Optional[str] = None
     status: LeaseStatusEnum
     pdf_version: int
     document_id: Optional[str] = None
     document_hash: Optional[str] = None
     pdf_url: Optional[str] = None
     finalized_at: Optional[datetime] = None
     created_at: datetime
     signatures: List[SignatureResponse] = []

     model_config = ConfigDict(from_attributes=True)


class LeaseCreatedResponse(BaseModel):
     message: str
     lease_id: int
     status: LeaseStatusEnum
     application_id: Optional[int] = None
     start_date: date
     end_date: date
     annex_ids: List[int] = []


class DocumentVerificationResponse(BaseModel):
     lease_id: int
     document_id: str
     document_hash: str
     valid: bool
     message: str


class PaymentTermsResponse(BaseModel):
     """Figures the external payment scheduler needs for a finalized lease."""
     lease_id: int
     monthly_rent: Decimal
     deposit: Decimal
     start_date: date
     end_date: date
     next_due_date: Optional[date] = None
