"""
Tests for the report intake pipeline.
"""
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from greenwaste.core.exceptions import InvalidVolumeError, NotFoundError, PricingNotFoundError
from greenwaste.models import Notification, NotificationStatus, Report
from greenwaste.schemas.report import ReportCreate, ReportFilters, ReportUpdate
from greenwaste.services import report_service


def _report_data(settlement, container_type, **overrides):
    fields = {
        "settlement_id": settlement.id,
        "container_type_id": container_type.id,
        "volume": Decimal("3.2"),
    }
    fields.update(overrides)
    return ReportCreate(**fields)


def test_create_report_prices_from_active_pricing(db, pricing, settlement, container_type, driver):
    report = report_service.create_report(
        _report_data(settlement, container_type), db, driver_id=driver.id, notify=False
    )

    assert report.total_price == Decimal("160.00")
    assert report.unit_price == Decimal("50")
    assert report.currency == "ILS"
    assert report.pricing_id == pricing.id
    assert report.driver_id == driver.id
    assert report.notification_sent is False


def test_create_report_accepts_tank_id_alias(db, pricing, settlement, container_type, driver):
    data = ReportCreate(settlement_id=settlement.id, tank_id=container_type.id, volume=Decimal("1"))
    report = report_service.create_report(data, db, driver_id=driver.id, notify=False)
    assert report.container_type_id == container_type.id


def test_supplied_pricing_is_trusted(db, settlement, container_type, driver):
    data = _report_data(
        settlement, container_type,
        unit_price=Decimal("10"), total_price=Decimal("999.99"), currency="ils"
    )
    with patch("greenwaste.services.pricing_service.resolve_active_price") as resolver:
        report = report_service.create_report(data, db, driver_id=driver.id, notify=False)

    resolver.assert_not_called()
    assert report.unit_price == Decimal("10")
    assert report.total_price == Decimal("999.99")
    assert report.currency == "ILS"
    assert report.pricing_id is None


def test_partial_supplied_pricing_is_recalculated(db, pricing, settlement, container_type, driver):
    data = _report_data(settlement, container_type, unit_price=Decimal("10"))
    report = report_service.create_report(data, db, driver_id=driver.id, notify=False)
    assert report.total_price == Decimal("160.00")


def test_missing_pricing_creates_nothing(db, settlement, container_type, driver):
    with pytest.raises(PricingNotFoundError):
        report_service.create_report(
            _report_data(settlement, container_type), db, driver_id=driver.id, notify=False
        )
    assert db.query(Report).count() == 0


def test_unknown_settlement_creates_nothing(db, pricing, container_type, driver):
    data = ReportCreate(
        settlement_id="00000000-0000-0000-0000-000000000000",
        container_type_id=container_type.id,
        volume=Decimal("1")
    )
    with pytest.raises(NotFoundError):
        report_service.create_report(data, db, driver_id=driver.id, notify=False)
    assert db.query(Report).count() == 0


def test_notification_failure_does_not_fail_report(db, pricing, settlement, container_type, driver):
    with patch(
        "greenwaste.services.notification_service.dispatch_report_notification",
        side_effect=RuntimeError("gateway exploded")
    ):
        report = report_service.create_report(
            _report_data(settlement, container_type), db, driver_id=driver.id, notify=True
        )

    assert db.query(Report).filter(Report.id == report.id).count() == 1
    assert report.notification_sent is False


def test_unconfigured_gateway_records_failed_notification(db, pricing, settlement, container_type, driver):
    report = report_service.create_report(
        _report_data(settlement, container_type), db, driver_id=driver.id, notify=True
    )

    notifications = db.query(Notification).filter(Notification.report_id == report.id).all()
    assert len(notifications) == 1
    assert notifications[0].status == NotificationStatus.FAILED
    assert report.notification_sent is False


def test_create_report_is_not_idempotent(db, pricing, settlement, container_type, driver):
    data = _report_data(settlement, container_type)
    first = report_service.create_report(data, db, driver_id=driver.id, notify=False)
    second = report_service.create_report(data, db, driver_id=driver.id, notify=False)
    assert first.id != second.id
    assert db.query(Report).count() == 2


def test_volume_above_cap_is_rejected(settlement, container_type):
    with pytest.raises(ValidationError):
        _report_data(settlement, container_type, volume=Decimal("100.01"))


def test_zero_volume_is_rejected(settlement, container_type):
    with pytest.raises(ValidationError):
        _report_data(settlement, container_type, volume=Decimal("0"))


def test_missing_container_type_is_rejected(settlement):
    with pytest.raises(ValidationError):
        ReportCreate(settlement_id=settlement.id, volume=Decimal("1"))


def test_calculator_volume_check_applies_without_schema(db, pricing, settlement, container_type, driver):
    data = _report_data(settlement, container_type).model_copy(update={"volume": Decimal("0")})
    with pytest.raises(InvalidVolumeError):
        report_service.create_report(data, db, driver_id=driver.id, notify=False)


def test_list_reports_respects_role_scope(
    db, pricing, settlement, container_type, driver, other_driver, admin
):
    data = _report_data(settlement, container_type)
    report_service.create_report(data, db, driver_id=driver.id, notify=False)
    report_service.create_report(data, db, driver_id=other_driver.id, notify=False)

    own, total = report_service.list_reports(driver, ReportFilters(), db)
    assert total == 1
    assert own[0].driver_id == driver.id

    # driver_id filter cannot widen a driver's scope
    widened, total = report_service.list_reports(driver, ReportFilters(driver_id=other_driver.id), db)
    assert total == 1
    assert widened[0].driver_id == driver.id

    everything, total = report_service.list_reports(admin, ReportFilters(), db)
    assert total == 2

    filtered, total = report_service.list_reports(admin, ReportFilters(driver_id=other_driver.id), db)
    assert total == 1
    assert filtered[0].driver_id == other_driver.id


def test_get_report_outside_scope_is_not_found(db, pricing, settlement, container_type, driver, other_driver):
    report = report_service.create_report(
        _report_data(settlement, container_type), db, driver_id=driver.id, notify=False
    )
    with pytest.raises(NotFoundError):
        report_service.get_report(report.id, other_driver, db)


def test_volume_precision_is_limited_to_two_decimals(settlement, container_type):
    with pytest.raises(ValidationError):
        _report_data(settlement, container_type, volume=Decimal("3.456"))


def test_stored_total_matches_stored_volume(db, pricing, settlement, container_type, driver):
    report = report_service.create_report(
        _report_data(settlement, container_type, volume=Decimal("3.46")), db, driver_id=driver.id, notify=False
    )
    db.expire(report)
    assert report.volume == Decimal("3.46")
    assert report.total_price == (report.volume * report.unit_price).quantize(Decimal("0.01"))


def test_supplied_total_with_extra_decimals_is_rejected(settlement, container_type):
    with pytest.raises(ValidationError):
        _report_data(settlement, container_type, unit_price=Decimal("10"), total_price=Decimal("999.999"))


def test_update_rejects_zero_volume():
    with pytest.raises(ValidationError):
        ReportUpdate(volume=Decimal("0"))


def test_update_with_unknown_settlement_is_not_found(db, pricing, settlement, container_type, driver):
    report = report_service.create_report(
        _report_data(settlement, container_type), db, driver_id=driver.id, notify=False
    )
    data = ReportUpdate(settlement_id="00000000-0000-0000-0000-000000000000")

    with pytest.raises(NotFoundError):
        report_service.update_report(report.id, data, db)

    db.refresh(report)
    assert report.settlement_id == settlement.id


def test_update_moves_report_to_existing_settlement(db, pricing, settlement, other_settlement, container_type, driver):
    report = report_service.create_report(
        _report_data(settlement, container_type), db, driver_id=driver.id, notify=False
    )
    updated = report_service.update_report(report.id, ReportUpdate(settlement_id=other_settlement.id), db)
    assert updated.settlement_id == other_settlement.id
