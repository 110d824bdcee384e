# complyark/api/v1/schemas/organizations.py
from pydantic import BaseModel, Field
from typing import Optional

from complyark.core.records import Industry, Organisation


class OrganisationBase(BaseModel):
    """Base schema for organisation"""
    business_name: str = Field(..., min_length=1, max_length=255, description="Business name")
    business_address: str = Field("", description="Registered address")
    industry_id: Optional[int] = Field(None, description="Industry id")
    contact_person_name: str = Field("", max_length=255)
    contact_email_address: str = Field("", max_length=255)
    contact_phone_number: str = Field("", max_length=50)
    no_of_users: int = Field(0, ge=0, description="Licensed number of users")
    remarks: str = Field("", description="Free-text remarks")


class OrganisationCreate(OrganisationBase):
    """Schema for creating organisation"""
    pass


class OrganisationResponse(OrganisationBase):
    """Schema for organisation response"""
    id: int = Field(..., description="Organisation id")
    industry_name: Optional[str] = None
    case_count: Optional[int] = Field(None, description="Number of cases")

    @classmethod
    def from_record(cls, organisation: Organisation, industry_name: Optional[str] = None,
                    case_count: Optional[int] = None):
        return cls(**organisation.model_dump(), industry_name=industry_name, case_count=case_count)

    class Config:
        from_attributes = True


class PublicOrganisationResponse(BaseModel):
    """What the public request page may learn about an organisation"""
    id: int
    business_name: str


class RequestLinkResponse(BaseModel):
    """Public request-page link for an organisation"""
    organisation_id: int
    token: str
    url: str


class IndustryResponse(BaseModel):
    id: int
    name: str

    @classmethod
    def from_record(cls, industry: Industry):
        return cls(**industry.model_dump())
