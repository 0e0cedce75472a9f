"""Employee resource as exchanged with the upstream API.

Upstream prefixes every field except ``id`` with ``employee_``; the models
read and write those wire names and also accept the plain field names.
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class Employee(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, alias="employee_name")
    salary: int = Field(ge=0, alias="employee_salary")
    age: Optional[int] = Field(default=None, alias="employee_age")
    title: Optional[str] = Field(default=None, alias="employee_title")
    email: Optional[str] = Field(default=None, alias="employee_email")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        # Upstream hands out UUIDs; they stay opaque tokens here
        return str(value) if value is not None else value


class CreateEmployeeInput(BaseModel):
    name: str
    salary: int = Field(ge=0)
    age: int = Field(gt=0)
    title: str

    @field_validator("name", "title")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class DeleteEmployeeInput(BaseModel):
    """Upstream deletes by name, not by id."""
    name: str


class ApiEnvelope(BaseModel, Generic[T]):
    """Upstream response wrapper: ``{"data": ..., "status": ..., "error": ...}``."""
    model_config = ConfigDict(extra="ignore")

    data: Optional[T] = None
    status: Optional[str] = None
    error: Optional[str] = None


# Records are validated one by one so a bad record cannot sink the listing
EmployeeListEnvelope = ApiEnvelope[list[Any]]
EmployeeEnvelope = ApiEnvelope[Employee]
DeleteEnvelope = ApiEnvelope[bool]
