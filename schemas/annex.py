# schemas/annex.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .lease import SignerRoleEnum


class AnnexTypeEnum(str, Enum):
     PAYMENT_CONSENT = "PAYMENT_CONSENT"
     CREDIT_CHECK_AUTH = "CREDIT_CHECK_AUTH"
     ELECTRONIC_COMMS = "ELECTRONIC_COMMS"


class AnnexSignRequest(BaseModel):
     consent_given: bool = Field(..., alias="consentGiven")

     model_config = ConfigDict(populate_by_name=True)

     @field_validator("consent_given")
     @classmethod
     def _consent_required(cls, value: bool) -> bool:
          if value is not True:
               raise ValueError("You must give your consent to sign")
          return value


class AnnexSignatureResponse(BaseModel):
     id: int
     annex_id: int
     signer_id: int
     signer_email: str
     signer_name: Optional[str] = None
     signer_role: SignerRoleEnum
     consent_given: bool
     document_version: int
     signed_at: datetime

     model_config = ConfigDict(from_attributes=True)


class AnnexResponse(BaseModel):
     id: int
     lease_id: int
     type: AnnexTypeEnum
     title: str
     content: str
     version: int
     created_at: datetime
     signatures: List[AnnexSignatureResponse] = []

     model_config = ConfigDict(from_attributes=True)


class AnnexListResponse(BaseModel):
     message: str
     annexes: List[AnnexResponse]


class AnnexSignResponse(BaseModel):
     message: str
     signature: AnnexSignatureResponse
