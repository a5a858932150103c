import datetime
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Customer or company name")
    email: EmailStr = Field(..., description="Billing email")
    address: str = Field(..., min_length=1, description="Postal address, may span several lines")


class CustomerCreate(CustomerBase):
    pass


class CustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, frozen=True)

    id: uuid.UUID
    name: str
    email: str
    address: str
    created_at: datetime.datetime = Field(..., alias="createdAt")
