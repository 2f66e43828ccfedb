from datetime import date, datetime

from pydantic import BaseModel


class DailyCount(BaseModel):
    date: date
    count: int


class MonthlyCount(BaseModel):
    month: date  # first day of the month
    prescriptions: int
    patients: int


class MedicationCount(BaseModel):
    medication_name: str
    count: int


class StatisticsResponse(BaseModel):
    total_patients: int
    total_prescriptions: int
    prescriptions_today: int
    prescriptions_this_week: int
    prescriptions_this_month: int
    prescriptions_last_month: int
    growth_percentage: int
    last_7_days: list[DailyCount]
    last_6_months: list[MonthlyCount]
    top_medications: list[MedicationCount]
    gender_distribution: dict[str, int]


class NotificationItem(BaseModel):
    id: str
    type: str  # warning / info / success / urgent
    title: str
    message: str
    timestamp: datetime
