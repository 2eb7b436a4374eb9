# backend/barbershop/schemas/rules.py
"""
Admin schemas for the date-scoped calendar rules.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, model_validator

HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class ClosedDateCreate(BaseModel):
    shop_id: int
    date: date
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class ClosedDateRead(ClosedDateCreate):
    id: int


class OpenSundayCreate(BaseModel):
    shop_id: int
    date: date
    open_time: str = Field(pattern=HHMM)
    close_time: str = Field(pattern=HHMM)

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_sunday(self):
        if self.date.weekday() != 6:
            raise ValueError("date must be a Sunday")
        if self.open_time >= self.close_time:
            raise ValueError("open_time must be before close_time")
        return self


class OpenSundayRead(BaseModel):
    id: int
    shop_id: int
    date: date
    open_time: str
    close_time: str

    model_config = {"from_attributes": True}


class OpenSundayStaffCreate(BaseModel):
    shop_id: int
    date: date
    staff_id: int
    start_time: str = Field(pattern=HHMM)
    end_time: str = Field(pattern=HHMM)

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class OpenSundayStaffRead(BaseModel):
    id: int
    shop_id: int
    date: date
    staff_id: int
    start_time: str
    end_time: str

    model_config = {"from_attributes": True}


class OpenHolidayCreate(BaseModel):
    shop_id: int
    date: date
    holiday_name: str

    model_config = {"from_attributes": True}


class OpenHolidayRead(OpenHolidayCreate):
    id: int


class FreeDayExceptionCreate(BaseModel):
    staff_id: int
    date: date
    start_time: str = Field(default="10:00", pattern=HHMM)
    end_time: str = Field(default="19:00", pattern=HHMM)
    replacement_date: Optional[date] = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        if self.replacement_date == self.date:
            raise ValueError("replacement_date must differ from date")
        return self


class FreeDayExceptionRead(BaseModel):
    id: int
    staff_id: int
    date: date
    start_time: str
    end_time: str
    replacement_date: Optional[date] = None

    model_config = {"from_attributes": True}


class StaffTimeOffCreate(BaseModel):
    staff_id: int
    start_date: date
    end_date: date
    start_time: Optional[str] = Field(default=None, pattern=HHMM)
    end_time: Optional[str] = Field(default=None, pattern=HHMM)
    reason: Optional[str] = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must be given together")
        if self.start_time and self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class StaffTimeOffRead(BaseModel):
    id: int
    staff_id: int
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class VacationReportEntry(BaseModel):
    staff_id: int
    name: str
    vacation_days_per_year: int
    used_days: int
    used_working_days: int
    remaining_days: int
