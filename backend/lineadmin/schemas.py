from datetime import date
from pydantic import BaseModel, Field
from typing import List


class HealthResponse(BaseModel):
    status: str


class ActiveDateItem(BaseModel):
    date: date
    hasActivity: bool
    hasDeposit: bool
    canSubmitAt: str
    isSubmittable: bool


class LockStatusResponse(BaseModel):
    account_id: int
    locked_dates: List[date] = Field(default_factory=list)
    active_dates: List[ActiveDateItem] = Field(default_factory=list)
    now: str


class LockSweepResponse(BaseModel):
    checked: int
    locked: int
    failed: int
    now: str
