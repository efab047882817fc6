"""
Tests for report notifications and delivery status callbacks.
"""
import json
from decimal import Decimal

import httpx
import pytest

from greenwaste.models import Notification, NotificationStatus, Report
from greenwaste.schemas.notification import GreenApiStatusWebhook, NotificationFilters
from greenwaste.services import notification_service
from greenwaste.services.whatsapp_service import GreenApiClient


@pytest.fixture
def report(db, pricing, settlement, container_type, driver):
    report = Report(
        settlement_id=settlement.id,
        driver_id=driver.id,
        container_type_id=container_type.id,
        volume=Decimal("3.2"),
        unit_price=Decimal("50"),
        total_price=Decimal("160.00"),
        currency="ILS",
        pricing_id=pricing.id
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    return report


def _client(handler):
    return GreenApiClient(
        base_url="https://api.example.test",
        instance_id="1101",
        access_token="secret",
        transport=httpx.MockTransport(handler)
    )


def test_render_report_message():
    message = notification_service.render_report_message("כפר ורדים", Decimal("3.2"), Decimal("1160"))
    assert "כפר ורדים" in message
    assert "3.2" in message
    assert "1,160.00 ₪" in message


def test_dispatch_success_marks_sent(db, report):
    sent = []

    def handler(request):
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"idMessage": "MSG-1"})

    notification = notification_service.dispatch_report_notification(report, db, _client(handler))

    assert notification.status == NotificationStatus.SENT
    assert notification.green_api_message_id == "MSG-1"
    assert notification.sent_at is not None
    assert report.notification_sent is True
    assert sent[0]["chatId"] == "972541234567@c.us"
    assert "160.00" in sent[0]["message"]


def test_dispatch_with_image_sends_file(db, report):
    report.image_url = "https://img.test/pickup.jpg"
    db.commit()
    paths = []

    def handler(request):
        paths.append(request.url.path)
        return httpx.Response(200, json={"idMessage": "MSG-2"})

    notification_service.dispatch_report_notification(report, db, _client(handler))
    assert paths == ["/waInstance1101/sendFileByUrl/secret"]


def test_dispatch_gateway_failure_marks_failed(db, report):
    client = _client(lambda request: httpx.Response(500))

    notification = notification_service.dispatch_report_notification(report, db, client)

    assert notification.status == NotificationStatus.FAILED
    assert report.notification_sent is False


def test_dispatch_without_contact_phone(db, report, settlement):
    settlement.contact_phone = None
    db.commit()

    def handler(request):
        raise AssertionError("gateway must not be called")

    notification = notification_service.dispatch_report_notification(report, db, _client(handler))
    assert notification.status == NotificationStatus.FAILED


def _sent_notification(db, report, message_id="MSG-9"):
    notification = Notification(
        report_id=report.id,
        status=NotificationStatus.SENT,
        green_api_message_id=message_id,
        message="x"
    )
    db.add(notification)
    db.commit()
    return notification


def test_status_callback_marks_delivered(db, report):
    notification = _sent_notification(db, report)
    payload = GreenApiStatusWebhook(
        typeWebhook="outgoingMessageStatus", idMessage="MSG-9", status="delivered", timestamp=1700000000
    )

    updated = notification_service.apply_status_callback(payload, db)

    assert updated.id == notification.id
    assert updated.status == NotificationStatus.DELIVERED
    assert updated.delivered_at is not None


def test_status_callback_never_downgrades_delivered(db, report):
    notification = _sent_notification(db, report)
    notification.status = NotificationStatus.DELIVERED
    db.commit()

    payload = GreenApiStatusWebhook(typeWebhook="outgoingMessageStatus", idMessage="MSG-9", status="sent")
    updated = notification_service.apply_status_callback(payload, db)
    assert updated.status == NotificationStatus.DELIVERED


def test_status_callback_ignores_other_webhooks(db, report):
    _sent_notification(db, report)
    payload = GreenApiStatusWebhook(typeWebhook="incomingMessageReceived", idMessage="MSG-9")
    assert notification_service.apply_status_callback(payload, db) is None


def test_list_notifications_scoped(db, report, other_driver, driver):
    _sent_notification(db, report)

    _, total = notification_service.list_notifications(driver, NotificationFilters(), db)
    assert total == 1
    _, total = notification_service.list_notifications(other_driver, NotificationFilters(), db)
    assert total == 0
