import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tenpay_business.client import TenpayBusinessClient
from tenpay_business.routers.notifications import create_notification_router

EVENT = json.dumps({"id": "EV1", "event_type": "PAYMENT.SUCCEEDED", "payment_id": "P1"}, separators=(",", ":"))


@pytest.fixture
def received():
    return []


@pytest.fixture
def http(options, received):
    async def handler(payload):
        received.append(payload)

    app = FastAPI()
    app.include_router(create_notification_router(TenpayBusinessClient(options), handler))
    return TestClient(app)


class TestNotificationRouter:

    def test_verified_notification_reaches_handler(self, http, received, tbep_authorization):
        resp = http.post("/tbep/notify", content=EVENT,
                         headers={"TBEP-Authorization": tbep_authorization(EVENT)})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        assert received == [json.loads(EVENT)]

    def test_bad_signature_is_rejected(self, http, received, tbep_authorization):
        resp = http.post("/tbep/notify", content=EVENT.replace("P1", "P2"),
                         headers={"TBEP-Authorization": tbep_authorization(EVENT)})
        assert resp.status_code == 401
        assert resp.json()["detail"]["error_code"] == "tbep:signature:invalid"
        assert received == []

    def test_unknown_serial_number_is_rejected(self, http, received, tbep_authorization):
        resp = http.post("/tbep/notify", content=EVENT,
                         headers={"TBEP-Authorization": tbep_authorization(EVENT, serial_number="SN2")})
        assert resp.status_code == 401
        assert resp.json()["detail"]["error_code"] == "tbep:credentials:unknown_key"

    def test_missing_header_is_rejected(self, http, received):
        resp = http.post("/tbep/notify", content=EVENT)
        assert resp.status_code == 401
        assert resp.json()["detail"]["error_code"] == "tbep:header:malformed"
        assert received == []

    def test_signed_non_json_body(self, http, received, tbep_authorization):
        resp = http.post("/tbep/notify", content="not json",
                         headers={"TBEP-Authorization": tbep_authorization("not json")})
        assert resp.status_code == 400
        assert received == []
