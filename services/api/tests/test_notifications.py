"""
Tests for technician resolution, notification and the request services.
"""
import asyncio

import pytest

from adapters.base import RESIDENTIAL_REQUESTS, SERVICE_REQUESTS, SERVICE_TECHS
from core.email_sender import EmailResult
from core.errors import NotFound, ValidationError
from core.notifications import (
    MISSING_CONFIG_REASON,
    SMTP_MISSING_CONFIG_REASON,
    RequestNotifier,
    residential_request_message,
)
from core.requests import ResidentialRequestService, ServiceRequestService
from core.technicians import TechContact, TechnicianDirectory
from settings import Settings

from conftest import FakeSender, FixedClock


@pytest.fixture
def techs(store):
    store.set(SERVICE_TECHS, "tech_1", {"name": "Bob Smith", "email": "bob@example.com"})
    store.set(SERVICE_TECHS, "tech_2", {"name": "Carla Diaz", "email": ""})
    return TechnicianDirectory(store)


class TestTechnicianDirectory:

    def test_by_id(self, techs):
        assert techs.resolve({"assignedTechId": "tech_1"}) == TechContact("tech_1", "Bob Smith", "bob@example.com")

    def test_by_name_case_insensitive(self, techs):
        assert techs.resolve({"assignedTech": "  bob SMITH "}).id == "tech_1"

    def test_unknown_id_falls_back_to_name(self, techs):
        assert techs.resolve({"assignedTechId": "nope", "assignedTech": "Carla Diaz"}).id == "tech_2"

    def test_unknown_name_kept(self, techs):
        assert techs.resolve({"assignedTech": "Zed"}) == TechContact("", "Zed", "")

    def test_nothing(self, techs):
        assert techs.resolve({}) == TechContact()


class TestRequestNotifier:

    def test_sends_with_expected_message(self, email_settings):
        sender = FakeSender()
        notifier = RequestNotifier(sender=sender, settings=email_settings, clock=FixedClock())
        record = {
            "requestNumber": "RR-0007",
            "assignedTechEmail": "bob@example.com",
            "customer": {"name": "Ann", "phone": "555"},
            "description": "cracked window",
        }
        result = asyncio.run(notifier.notify(record))

        assert result == {"sent": True, "notifiedAt": "2026-01-05T15:30:00.000Z"}
        assert sender.sent[0]["to"] == "bob@example.com"
        assert sender.sent[0]["subject"] == "New Residential Request RR-0007"
        assert "Address: N/A" in sender.sent[0]["body"]
        assert "Status: open" in sender.sent[0]["body"]

    def test_missing_config(self, bare_settings):
        sender = FakeSender()
        result = asyncio.run(RequestNotifier(sender=sender, settings=bare_settings).notify(
            {"assignedTechEmail": "bob@example.com"}
        ))
        assert result["sent"] is False
        assert result["reason"] == MISSING_CONFIG_REASON
        assert sender.sent == []

    def test_missing_smtp_config_names_smtp_settings(self):
        settings = Settings(
            _env_file=None,
            email_backend="smtp",
            smtp_user="",
            smtp_password="",
            residential_email_from="office@example.com",
        )
        result = asyncio.run(RequestNotifier(sender=FakeSender(), settings=settings).notify(
            {"assignedTechEmail": "bob@example.com"}
        ))
        assert result["reason"] == SMTP_MISSING_CONFIG_REASON
        assert "RESEND_API_KEY" not in result["reason"]

    def test_missing_tech_email(self, email_settings):
        result = asyncio.run(RequestNotifier(sender=FakeSender(), settings=email_settings).notify({}))
        assert result["reason"] == MISSING_CONFIG_REASON

    def test_provider_error(self, email_settings):
        sender = FakeSender(result=EmailResult(ok=False, status=422, text="bad from"))
        result = asyncio.run(RequestNotifier(sender=sender, settings=email_settings).notify(
            {"assignedTechEmail": "bob@example.com"}
        ))
        assert result["reason"] == "Resend error: 422 bad from"

    def test_transport_exception_captured(self, email_settings):
        sender = FakeSender(error=ConnectionError("boom"))
        result = asyncio.run(RequestNotifier(sender=sender, settings=email_settings).notify(
            {"assignedTechEmail": "bob@example.com"}
        ))
        assert result["sent"] is False
        assert "boom" in result["reason"]
        assert "notifiedAt" in result

    def test_subject_without_number(self):
        subject, _ = residential_request_message({})
        assert subject == "New Residential Request"


class TestResidentialRequests:

    @pytest.fixture
    def sender(self):
        return FakeSender()

    @pytest.fixture
    def service(self, store, techs, sender, email_settings):
        notifier = RequestNotifier(sender=sender, settings=email_settings)
        return ResidentialRequestService(store, notifier, directory=techs)

    def test_create_numbers_and_notifies(self, service, sender):
        first = asyncio.run(service.create({"customer": {"name": "Ann"}, "assignedTechId": "tech_1"}))
        second = asyncio.run(service.create({"customer": {"name": "Ben"}}))

        assert first["requestNumber"] == "RR-0001"
        assert second["requestNumber"] == "RR-0002"
        assert first["status"] == "open"
        assert first["assignedTech"] == "Bob Smith"
        assert first["assignedTechEmail"] == "bob@example.com"
        assert first["emailNotification"]["sent"] is True
        assert first["id"].startswith("req_")
        assert len(sender.sent) == 1

    def test_unknown_tech_name(self, service, store):
        row = asyncio.run(service.create({"customer": {"name": "Ann"}, "assignedTech": "Zed"}))
        assert row["assignedTech"] == "Zed"
        assert row["assignedTechId"] == ""
        assert row["assignedTechEmail"] == ""
        assert row["emailNotification"]["sent"] is False
        assert store.get(RESIDENTIAL_REQUESTS, row["id"]) is not None

    def test_customer_name_required(self, service):
        with pytest.raises(ValidationError) as exc:
            asyncio.run(service.create({"customer": {}}))
        assert exc.value.message == "Customer name is required"

    def test_failed_email_does_not_fail_write(self, store, techs, email_settings):
        notifier = RequestNotifier(sender=FakeSender(error=TimeoutError("slow")), settings=email_settings)
        service = ResidentialRequestService(store, notifier, directory=techs)
        row = asyncio.run(service.create({"customer": {"name": "Ann"}, "assignedTechId": "tech_1"}))
        assert row["emailNotification"]["sent"] is False
        assert store.get(RESIDENTIAL_REQUESTS, row["id"])["requestNumber"] == "RR-0001"

    def test_update_without_tech_change_does_not_notify(self, service, sender):
        row = asyncio.run(service.create({"customer": {"name": "Ann"}, "assignedTechId": "tech_1"}))
        updated = asyncio.run(service.update(row["id"], {"status": "closed", "requestNumber": "RR-9999"}))
        assert updated["status"] == "closed"
        assert updated["requestNumber"] == "RR-0001"
        assert updated["assignedTech"] == "Bob Smith"
        assert len(sender.sent) == 1

    def test_update_tech_change_renotifies(self, service, sender):
        row = asyncio.run(service.create({"customer": {"name": "Ann"}}))
        updated = asyncio.run(service.update(row["id"], {"assignedTech": "bob smith"}))
        assert updated["assignedTechId"] == "tech_1"
        assert updated["emailNotification"]["sent"] is True
        assert sender.sent[-1]["to"] == "bob@example.com"

    def test_update_to_unknown_tech_clears_contact(self, service, store, sender):
        row = asyncio.run(service.create({"customer": {"name": "Ann"}, "assignedTechId": "tech_1"}))
        updated = asyncio.run(service.update(row["id"], {"assignedTech": "New Hire"}))
        assert updated["assignedTech"] == "New Hire"
        assert updated["assignedTechId"] == ""
        assert updated["assignedTechEmail"] == ""
        assert updated["emailNotification"]["sent"] is False
        assert store.get(RESIDENTIAL_REQUESTS, row["id"])["assignedTech"] == "New Hire"
        assert len(sender.sent) == 1

    def test_update_missing(self, service):
        with pytest.raises(NotFound):
            asyncio.run(service.update("req_missing", {"status": "closed"}))


class TestServiceRequests:

    @pytest.fixture
    def service(self, store):
        return ServiceRequestService(store, clock=FixedClock(), now_ms=lambda: 1767627000123)

    def payload(self, **overrides):
        body = {
            "customer": {"name": "  Ann Lee ", "phone": "502-555-0100", "address": "1 Main"},
            "description": " broken storefront ",
            "assignedTechId": "tech_1",
            "assignedTechName": "Bob Smith",
        }
        body.update(overrides)
        return body

    def test_create(self, service):
        row = service.create(self.payload())
        assert row["requestNumber"].startswith("RQR-")
        assert row["requestNumber"].endswith("-000123")
        assert row["status"] == "Requested"
        assert row["customer"]["name"] == "Ann Lee"
        assert row["customer"]["id"] is None
        assert row["description"] == "broken storefront"
        assert row["id"].startswith("sr_")

    @pytest.mark.parametrize("overrides,message", [
        ({"customer": {"name": ""}}, "Customer name is required"),
        ({"description": "  "}, "Description is required"),
        ({"assignedTechName": ""}, "Assigned technician is required"),
        ({"assignedTechId": None}, "Assigned technician is required"),
    ])
    def test_create_validation(self, service, store, overrides, message):
        with pytest.raises(ValidationError) as exc:
            service.create(self.payload(**overrides))
        assert exc.value.message == message
        assert store.list_keys(SERVICE_REQUESTS) == []

    def test_update_merges_customer(self, service):
        row = service.create(self.payload())
        updated = service.update(row["id"], {"customer": {"phone": "999"}, "status": "Scheduled"})
        assert updated["customer"]["phone"] == "999"
        assert updated["customer"]["name"] == "Ann Lee"
        assert updated["status"] == "Scheduled"

    def test_search(self, service):
        row = service.create(self.payload())
        service.create(self.payload(customer={"name": "Other"}, description="mirror"))
        assert [r["id"] for r in service.list(search="STOREFRONT")] == [row["id"]]
        assert [r["id"] for r in service.list(search="502-555")] == [row["id"]]
        assert len(service.list()) == 2
