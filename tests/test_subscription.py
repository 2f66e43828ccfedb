from datetime import datetime, timedelta, timezone

from wasfa.models.tenant import SubscriptionStatus, Tenant
from wasfa.services.subscription_service import get_subscription_info

from conftest import API, create_prescription

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_trial_with_time_left_is_active_and_warns_in_last_week():
    info = get_subscription_info("trial", NOW + timedelta(days=5), NOW)
    assert info.is_active is True
    assert info.can_create_prescription is True
    assert info.days_remaining == 5
    assert info.message == "trial_days_remaining:5"
    assert info.warning is True
    assert info.can_upgrade is True


def test_partial_days_round_up():
    info = get_subscription_info("trial", NOW + timedelta(days=10, hours=1), NOW)
    assert info.days_remaining == 11
    assert info.warning is False


def test_trial_past_end_date_is_inactive():
    info = get_subscription_info("trial", NOW - timedelta(days=1), NOW)
    assert info.is_active is False
    assert info.can_create_prescription is False
    assert info.message == "trial_expired"
    assert info.warning is False


def test_trial_without_end_date_is_inactive():
    info = get_subscription_info("trial", None, NOW)
    assert info.is_active is False
    assert info.days_remaining is None
    assert info.message == "trial_expired"


def test_active_subscription_ignores_trial_date():
    info = get_subscription_info("active", NOW - timedelta(days=30), NOW)
    assert info.is_active is True
    assert info.message == ""
    assert info.can_upgrade is False


def test_expired_and_suspended():
    expired = get_subscription_info("expired", None, NOW)
    suspended = get_subscription_info("suspended", None, NOW)
    assert expired.can_create_prescription is False
    assert expired.message == "subscription_expired"
    assert expired.can_upgrade is True
    assert suspended.message == "subscription_suspended"
    assert suspended.can_upgrade is False


def test_naive_trial_end_is_treated_as_utc():
    info = get_subscription_info("trial", datetime(2025, 3, 12, 12, 0), NOW)
    assert info.days_remaining == 2


def test_signup_starts_a_trial(client, admin_headers):
    response = client.get(f"{API}/dashboard/subscription", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "trial"
    assert body["is_active"] is True
    assert body["days_remaining"] == 14


def test_expired_clinic_cannot_create_prescriptions(client, db_session, admin_headers, patient):
    tenant = db_session.query(Tenant).one()
    tenant.subscription_status = SubscriptionStatus.EXPIRED
    db_session.commit()
    db_session.close()

    response = create_prescription(client, admin_headers, patient["id"])
    assert response.status_code == 402
    assert response.json()["detail"] == "subscription_expired"

    # Reading is unaffected
    assert client.get(f"{API}/prescriptions", headers=admin_headers).status_code == 200
