"""
Tests for role-based row scoping.
"""
from decimal import Decimal

import pytest
from fastapi import HTTPException

from greenwaste.models import Report, User, UserRole
from greenwaste.services.access_scope import admin_filter, apply_scope


def _add_report(db, settlement, container_type, driver):
    report = Report(
        settlement_id=settlement.id,
        driver_id=driver.id,
        container_type_id=container_type.id,
        volume=Decimal("1"),
        unit_price=Decimal("50"),
        total_price=Decimal("50.00"),
        currency="ILS"
    )
    db.add(report)
    db.commit()
    return report


@pytest.fixture
def reports(db, settlement, other_settlement, container_type, driver, other_driver):
    return [
        _add_report(db, settlement, container_type, driver),
        _add_report(db, settlement, container_type, other_driver),
        _add_report(db, other_settlement, container_type, driver),
    ]


def test_admin_sees_everything(db, reports, admin):
    assert apply_scope(db.query(Report), Report, admin).count() == 3


def test_driver_sees_own_reports(db, reports, driver):
    visible = apply_scope(db.query(Report), Report, driver).all()
    assert len(visible) == 2
    assert all(r.driver_id == driver.id for r in visible)


def test_settlement_user_sees_own_settlement(db, reports, settlement_user, settlement):
    visible = apply_scope(db.query(Report), Report, settlement_user).all()
    assert len(visible) == 2
    assert all(r.settlement_id == settlement.id for r in visible)


def test_settlement_user_without_settlement_is_forbidden(db, reports):
    user = User(email="orphan@example.com", hashed_password="x", role=UserRole.SETTLEMENT_USER)
    with pytest.raises(HTTPException) as exc_info:
        apply_scope(db.query(Report), Report, user)
    assert exc_info.value.status_code == 403


def test_filters_cannot_widen_scope(db, reports, driver, other_driver):
    query = apply_scope(db.query(Report), Report, driver)
    # Even a filter that bypasses admin_filter only narrows
    assert query.filter(Report.driver_id == other_driver.id).count() == 0


def test_admin_filter(admin, driver, settlement_user):
    assert admin_filter(admin, "abc") == "abc"
    assert admin_filter(driver, "abc") is None
    assert admin_filter(settlement_user, "abc") is None
