"""Schémas membres (création / mise à jour)."""
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

MemberStatus = Literal["active", "inactive"]
SORT_FIELDS = ("first_name", "status", "plan", "created_at", "last_visit")


class MemberIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    status: MemberStatus = "active"
    plan: Optional[str] = Field(default=None, max_length=120)
