import pytest

from conftest import auth

from houselook.db.store import MemoryRecordStore, StoreUnavailable
from houselook.schemas.transaction import TransactionCreate
from houselook.services.payment_service import PaymentService, payment_service
from houselook.utils import mpesa
from houselook.utils.mpesa import MpesaClient, MpesaError


class FakeClient:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def stk_push(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise MpesaError(self.error)
        return {
            "MerchantRequestID": "mock_merchant_1",
            "CheckoutRequestID": "ws_CO_1",
            "ResponseCode": "0",
            "CustomerMessage": "STK Push request has been initiated",
        }


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self):
        return self._body


class TestBuildTransaction:
    def test_id_format_and_fields(self):
        service = PaymentService(clock=lambda: 1718000000000)
        record = service.build_transaction(TransactionCreate(userId="u1", amount=100, type="points_purchase"))

        prefix, millis, suffix = record["id"].split("_")
        assert prefix == "transaction"
        assert millis == "1718000000000"
        assert len(suffix) == 9
        assert record["timestamp"] == 1718000000000
        assert record["date"].endswith("Z")
        assert record["status"] == "pending"


CALLBACK = {"Body": {"stkCallback": {"CheckoutRequestID": "ws_CO_9", "ResultCode": 0}}}


class FlakyStore(MemoryRecordStore):
    """Fails the points credit or the settlement write until told otherwise."""

    def __init__(self, fail_points=False, fail_settle=False):
        super().__init__({
            "users": {"u1": {"name": "Tenant", "points": 100}},
            "pendingPayments": {"ws_CO_9": {"userId": "u1", "amount": 50, "points": 50, "description": "Buy points"}},
        })
        self.fail_points = fail_points
        self.fail_settle = fail_settle

    def transaction(self, path, update):
        if self.fail_points and path.endswith("/points"):
            raise StoreUnavailable(path, "offline")
        return super().transaction(path, update)

    def update(self, path, values):
        if self.fail_settle and path == "":
            raise StoreUnavailable(path, "offline")
        super().update(path, values)


class TestCallbackSettlement:
    def test_failed_credit_keeps_payment_pending_for_retry(self):
        store = FlakyStore(fail_points=True)
        service = PaymentService(clock=lambda: 1718000000000)
        with pytest.raises(StoreUnavailable):
            service.handle_callback(store, CALLBACK)

        assert store.get("users/u1/points") == 100
        assert store.get("transactions") is None
        assert store.get("pendingPayments/ws_CO_9/userId") == "u1"
        assert store.get("pendingPayments/ws_CO_9/creditedBy") is None

        store.fail_points = False
        transaction_id = service.handle_callback(store, CALLBACK)
        assert store.get("users/u1/points") == 150
        assert store.get(f"transactions/{transaction_id}/status") == "completed"
        assert store.get(f"transactions/{transaction_id}/points") == 50
        assert store.get("pendingPayments") is None

    def test_failed_settlement_write_does_not_credit_twice(self):
        store = FlakyStore(fail_settle=True)
        service = PaymentService(clock=lambda: 1718000000000)
        with pytest.raises(StoreUnavailable):
            service.handle_callback(store, CALLBACK)

        assert store.get("users/u1/points") == 150
        assert store.get("transactions") is None
        assert store.get("pendingPayments/ws_CO_9/creditedBy")

        store.fail_settle = False
        transaction_id = service.handle_callback(store, CALLBACK)
        assert store.get("users/u1/points") == 150
        assert list(store.get("transactions")) == [transaction_id]
        assert store.get("pendingPayments") is None

    def test_non_numeric_balance_counts_as_zero(self):
        store = FlakyStore()
        store.set("users/u1/points", "lots")
        PaymentService().handle_callback(store, CALLBACK)
        assert store.get("users/u1/points") == 50

    def test_unavailable_store_maps_to_503(self, offline_client):
        response = offline_client.post("/api/v1/payments/callback", json=CALLBACK)
        assert response.status_code == 503


class TestStkPushEndpoint:
    @pytest.fixture
    def fake_client(self, monkeypatch):
        fake = FakeClient()
        monkeypatch.setattr(payment_service, "client_factory", lambda: fake)
        return fake

    def push(self, client):
        return client.post(
            "/api/v1/payments/stkpush", json={"phone_number": "254712345678", "amount": 200}, headers=auth()
        )

    def test_initiates_and_parks_pending_payment(self, client, store, fake_client):
        response = self.push(client)
        assert response.status_code == 200
        assert response.json()["checkout_request_id"] == "ws_CO_1"
        assert fake_client.calls[0]["account_reference"] == "user-1"

        assert store.get("pendingPayments/ws_CO_1/userId") == "user-1"
        assert store.get("transactions") is None

    def test_successful_callback_writes_transaction_and_credits_points(self, client, store, fake_client):
        self.push(client)
        callback = {"Body": {"stkCallback": {"CheckoutRequestID": "ws_CO_1", "ResultCode": 0}}}
        body = client.post("/api/v1/payments/callback", json=callback).json()

        assert body["status"] == "OK"
        transaction = store.get(f"transactions/{body['transaction_id']}")
        assert transaction["status"] == "completed"
        assert transaction["amount"] == 200
        assert transaction["reference"] == "ws_CO_1"
        assert store.get("users/user-1/points") == 300
        assert store.get("pendingPayments") is None

        # A repeated callback settles nothing
        again = client.post("/api/v1/payments/callback", json=callback).json()
        assert again["transaction_id"] is None
        assert store.get("users/user-1/points") == 300

    def test_failed_callback_credits_nothing(self, client, store, fake_client):
        self.push(client)
        callback = {"Body": {"stkCallback": {"CheckoutRequestID": "ws_CO_1", "ResultCode": 1032}}}
        body = client.post("/api/v1/payments/callback", json=callback).json()

        assert store.get(f"transactions/{body['transaction_id']}/status") == "failed"
        assert store.get("users/user-1/points") == 100

    def test_rejected_push(self, client, store, monkeypatch):
        monkeypatch.setattr(payment_service, "client_factory", lambda: FakeClient(error="PhoneNumber and Amount are required"))
        response = client.post(
            "/api/v1/payments/stkpush", json={"phone_number": "254712345678", "amount": 5}, headers=auth()
        )
        assert response.status_code == 502
        assert store.get("pendingPayments") is None


class TestMpesaClient:
    def test_posts_safaricom_body(self, monkeypatch):
        sent = {}

        def fake_post(url, headers=None, data=None, timeout=None):
            sent.update(url=url, headers=headers, data=data)
            return FakeResponse(200, {"ResponseCode": "0"})

        monkeypatch.setattr(mpesa.requests, "post", fake_post)
        client = MpesaClient("http://localhost:3005/", shortcode="174379")
        assert client.stk_push("254712345678", 99.9, "ref", "desc") == {"ResponseCode": "0"}
        assert sent["url"] == "http://localhost:3005/mpesa/stkpush/v1/processrequest"
        assert '"Amount": 99' in sent["data"]
        assert "Authorization" not in sent["headers"]

    def test_error_response(self, monkeypatch):
        monkeypatch.setattr(
            mpesa.requests, "post",
            lambda *a, **kw: FakeResponse(400, {"error": "PhoneNumber and Amount are required"}),
        )
        with pytest.raises(MpesaError, match="PhoneNumber and Amount are required"):
            MpesaClient("http://localhost:3005", shortcode="174379").stk_push("", 0, "ref", "desc")

    def test_unreachable(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise mpesa.requests.ConnectionError("refused")

        monkeypatch.setattr(mpesa.requests, "post", refuse)
        with pytest.raises(MpesaError):
            MpesaClient("http://localhost:1", shortcode="174379").stk_push("254700000000", 1, "ref", "desc")
