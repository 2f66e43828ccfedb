# wasfa/services/dashboard_service.py
"""
Dashboard read models: statistics and derived (never stored) notifications.
"""

from collections import Counter
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from wasfa.models.patient import Patient
from wasfa.models.prescription import Prescription, PrescriptionMedication
from wasfa.models.tenant import SubscriptionStatus, Tenant
from wasfa.schemas.dashboard import (
    DailyCount,
    MedicationCount,
    MonthlyCount,
    NotificationItem,
    StatisticsResponse,
)
from wasfa.services.subscription_service import get_tenant_subscription
from wasfa.utils.datetime_utils import (
    as_utc,
    start_of_day,
    start_of_month,
    start_of_previous_month,
    start_of_week,
    to_date,
    utc_now,
)
from wasfa.utils.labels import FALLBACK_LANGUAGE

TOP_MEDICATIONS_LIMIT = 5

NOTIFICATION_TEXT: dict[str, dict[str, str]] = {
    "trial_ending_title": {
        "ar": "الفترة التجريبية تنتهي قريباً",
        "fr": "Période d'essai se termine bientôt",
        "en": "Trial ending soon",
    },
    "trial_ending_message": {
        "ar": "تبقى {days} أيام على انتهاء الفترة التجريبية",
        "fr": "Il reste {days} jours d'essai",
        "en": "{days} days remaining in trial",
    },
    "expired_title": {"ar": "الاشتراك منتهي", "fr": "Abonnement expiré", "en": "Subscription expired"},
    "expired_message": {
        "ar": "يرجى تجديد اشتراكك للاستمرار في إنشاء الوصفات",
        "fr": "Veuillez renouveler votre abonnement pour continuer",
        "en": "Please renew your subscription to continue creating prescriptions",
    },
    "new_patients_title": {
        "ar": "مرضى جدد اليوم",
        "fr": "Nouveaux patients aujourd'hui",
        "en": "New patients today",
    },
    "new_patients_message": {
        "ar": "{count} مريض جديد",
        "fr": "{count} nouveau(x) patient(s)",
        "en": "{count} new patient(s)",
    },
    "prescriptions_today_title": {
        "ar": "وصفات اليوم",
        "fr": "Prescriptions aujourd'hui",
        "en": "Prescriptions today",
    },
    "prescriptions_today_message": {
        "ar": "{count} وصفة",
        "fr": "{count} prescription(s)",
        "en": "{count} prescription(s)",
    },
    "welcome_title": {
        "ar": "مرحباً بك في WASFA PRO",
        "fr": "Bienvenue sur WASFA PRO",
        "en": "Welcome to WASFA PRO",
    },
    "welcome_message": {
        "ar": "ابدأ بإضافة معلومات العيادة والمرضى",
        "fr": "Commencez par ajouter les informations de la clinique et des patients",
        "en": "Start by adding clinic and patient information",
    },
}


def _text(key: str, language: str, **values) -> str:
    entry = NOTIFICATION_TEXT[key]
    return (entry.get(language) or entry[FALLBACK_LANGUAGE]).format(**values)


def _count_prescriptions(db: Session, tenant_id: UUID, start: datetime | None = None, end: datetime | None = None) -> int:
    query = db.query(func.count(Prescription.id)).filter(Prescription.tenant_id == tenant_id)
    if start is not None:
        query = query.filter(Prescription.created_at >= start)
    if end is not None:
        query = query.filter(Prescription.created_at < end)
    return query.scalar() or 0


def _active_patients(db: Session, tenant_id: UUID):
    return db.query(Patient).filter(Patient.tenant_id == tenant_id, Patient.is_archived.is_(False))


def growth_percentage(this_month: int, last_month: int) -> int:
    """Month-over-month growth; 100 when there is nothing to compare against."""
    if last_month > 0:
        return round((this_month - last_month) / last_month * 100)
    return 100


def _month_starts(now: datetime, months: int) -> list[datetime]:
    starts = [start_of_month(now)]
    while len(starts) < months:
        starts.append(start_of_previous_month(starts[-1]))
    return list(reversed(starts))


def get_statistics(db: Session, *, tenant_id: UUID, now: datetime | None = None) -> StatisticsResponse:
    now = as_utc(now) if now else utc_now()
    today = start_of_day(now)
    month_start = start_of_month(now)
    last_month_start = start_of_previous_month(now)

    this_month = _count_prescriptions(db, tenant_id, month_start)
    last_month = _count_prescriptions(db, tenant_id, last_month_start, month_start)

    # Last 7 days, oldest first, bucketed by UTC date
    window_start = today - timedelta(days=6)
    recent = (
        db.query(Prescription.created_at)
        .filter(Prescription.tenant_id == tenant_id, Prescription.created_at >= window_start)
        .all()
    )
    per_day = Counter(to_date(created_at) for (created_at,) in recent)
    last_7_days = [
        DailyCount(date=day, count=per_day.get(day, 0))
        for day in (to_date(window_start + timedelta(days=i)) for i in range(7))
    ]

    months = _month_starts(now, 6)
    last_6_months = []
    for index, start in enumerate(months):
        end = months[index + 1] if index + 1 < len(months) else None
        patients_query = _active_patients(db, tenant_id).filter(Patient.created_at >= start)
        if end is not None:
            patients_query = patients_query.filter(Patient.created_at < end)
        last_6_months.append(
            MonthlyCount(
                month=to_date(start),
                prescriptions=_count_prescriptions(db, tenant_id, start, end),
                patients=patients_query.count(),
            )
        )

    top_rows = (
        db.query(PrescriptionMedication.medication_name, func.count(PrescriptionMedication.id).label("uses"))
        .join(Prescription, Prescription.id == PrescriptionMedication.prescription_id)
        .filter(Prescription.tenant_id == tenant_id)
        .group_by(PrescriptionMedication.medication_name)
        .order_by(func.count(PrescriptionMedication.id).desc(), PrescriptionMedication.medication_name.asc())
        .limit(TOP_MEDICATIONS_LIMIT)
        .all()
    )

    gender_rows = (
        _active_patients(db, tenant_id)
        .with_entities(Patient.gender, func.count(Patient.id))
        .group_by(Patient.gender)
        .all()
    )
    genders = {"male": 0, "female": 0, "unknown": 0}
    for gender, count in gender_rows:
        genders[gender.value if gender is not None else "unknown"] += count

    return StatisticsResponse(
        total_patients=_active_patients(db, tenant_id).count(),
        total_prescriptions=_count_prescriptions(db, tenant_id),
        prescriptions_today=_count_prescriptions(db, tenant_id, today),
        prescriptions_this_week=_count_prescriptions(db, tenant_id, start_of_week(now)),
        prescriptions_this_month=this_month,
        prescriptions_last_month=last_month,
        growth_percentage=growth_percentage(this_month, last_month),
        last_7_days=last_7_days,
        last_6_months=last_6_months,
        top_medications=[MedicationCount(medication_name=name, count=uses) for name, uses in top_rows],
        gender_distribution=genders,
    )


def get_notifications(
    db: Session,
    *,
    tenant: Tenant,
    language: str,
    now: datetime | None = None,
) -> list[NotificationItem]:
    """
    Notifications derived on the fly from subscription state and today's activity.
    """
    now = as_utc(now) if now else utc_now()
    today = start_of_day(now)
    subscription = get_tenant_subscription(tenant, now)
    items: list[NotificationItem] = []

    def add(item_id: str, item_type: str, title: str, message: str) -> None:
        items.append(NotificationItem(id=item_id, type=item_type, title=title, message=message, timestamp=now))

    days = subscription.days_remaining
    if subscription.status == SubscriptionStatus.TRIAL and days is not None and 0 < days <= 7:
        add(
            "trial-ending",
            "warning",
            _text("trial_ending_title", language),
            _text("trial_ending_message", language, days=days),
        )

    if subscription.status in (SubscriptionStatus.EXPIRED, SubscriptionStatus.SUSPENDED):
        add("subscription-expired", "urgent", _text("expired_title", language), _text("expired_message", language))

    patients_today = _active_patients(db, tenant.id).filter(Patient.created_at >= today).count()
    if patients_today:
        add(
            "new-patients-today",
            "info",
            _text("new_patients_title", language),
            _text("new_patients_message", language, count=patients_today),
        )

    prescriptions_today = _count_prescriptions(db, tenant.id, today)
    if prescriptions_today:
        add(
            "prescriptions-today",
            "success",
            _text("prescriptions_today_title", language),
            _text("prescriptions_today_message", language, count=prescriptions_today),
        )

    if _active_patients(db, tenant.id).count() == 0 and _count_prescriptions(db, tenant.id) == 0:
        add("welcome", "info", _text("welcome_title", language), _text("welcome_message", language))

    return items
