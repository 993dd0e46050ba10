"""
Tests for the FastAPI REST API endpoints.
"""

import json

import pytest
from fastapi.testclient import TestClient

from risk_analyzer.api import routes
from risk_analyzer.config import FIBONACCI_INPUT, FIBONACCI_MAX_INPUT
from risk_analyzer.core.worker import fibonacci
from risk_analyzer.main import app

client = TestClient(app)


def _record(**overrides) -> dict:
    defaults = {
        "id": "1",
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
        "country": "US",
        "accountBalance": "1000000",
        "suspiciousActivityScore": "0.1",
        "hasPreviousFraud": False,
        "locationMismatch": False,
        "isAccountVerified": True,
    }
    defaults.update(overrides)
    return defaults


def _upload(records, filename="customers.json", content_type="application/json"):
    body = records if isinstance(records, (str, bytes)) else json.dumps(records)
    return client.post("/api/v1/analyze", files={"file": (filename, body, content_type)})


@pytest.fixture(autouse=True)
def _fresh_analysis():
    routes.reset_analysis()
    yield
    routes.reset_analysis()


class TestHealthEndpoint:
    def test_health_check(self):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestRootEndpoint:
    def test_root(self):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["service"] == "Customer Risk Analyzer"


class TestAnalyzeUpload:
    def test_valid_file_returns_200(self):
        resp = _upload([_record(), _record(id="2", email="broken")])
        assert resp.status_code == 200
        data = resp.json()
        assert data["totalRecords"] == 2
        assert data["validRecords"] == 1
        assert data["invalidRecords"] == 1
        assert data["topCountries"] == [{"country": "US", "count": 1}]
        assert data["customers"][0]["riskScore"] == 11
        assert data["customers"][0]["riskCategory"] == "Low"
        assert data["customers"][0]["name"] == "A B"
        assert data["rejectedRecords"] == [{"index": 1, "errors": ["Invalid email format"]}]

    def test_json_extension_with_other_content_type(self):
        resp = _upload([_record()], content_type="text/plain")
        assert resp.status_code == 200

    def test_wrong_file_type_returns_415(self):
        resp = _upload("id,name\n1,A", filename="customers.csv", content_type="text/csv")
        assert resp.status_code == 415
        assert resp.json()["detail"] == "Please select a JSON file"

    def test_bare_object_returns_400(self):
        resp = _upload(_record())
        assert resp.status_code == 400
        assert resp.json()["detail"] == "JSON file must contain an array of customer records"

    def test_malformed_json_returns_400(self):
        resp = _upload("[{")
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("Invalid JSON")

    def test_failed_upload_keeps_no_result(self):
        _upload("not json")
        assert client.get("/api/v1/analysis/summary").status_code == 400

    def test_missing_file_returns_422(self):
        resp = client.post("/api/v1/analyze")
        assert resp.status_code == 422

    def test_analysis_runs_off_event_loop(self, monkeypatch):
        dispatched = []

        async def recording_threadpool(func, *args, **kwargs):
            dispatched.append(func)
            return func(*args, **kwargs)

        monkeypatch.setattr(routes, "run_in_threadpool", recording_threadpool)
        resp = _upload([_record()])
        assert resp.status_code == 200
        assert dispatched == [routes.analyze_customer_data]


class TestAnalyzeRecords:
    def test_array_body(self):
        resp = client.post("/api/v1/analyze/records", json=[_record(), _record(id="2", country="DE")])
        assert resp.status_code == 200
        assert resp.json()["validRecords"] == 2

    def test_object_body_returns_400(self):
        resp = client.post("/api/v1/analyze/records", json={"records": []})
        assert resp.status_code == 400


class TestSummaryEndpoint:
    def test_no_analysis_returns_400(self):
        resp = client.get("/api/v1/analysis/summary")
        assert resp.status_code == 400

    def test_summary_excludes_customers(self):
        _upload([_record(), _record(id="2", country="DE"), _record(id="3", country="DE")])
        resp = client.get("/api/v1/analysis/summary")
        assert resp.status_code == 200
        data = resp.json()
        assert "customers" not in data
        assert data["validRecords"] == 3
        assert data["topCountries"][0] == {"country": "DE", "count": 2}

    def test_next_upload_replaces_previous(self):
        _upload([_record(), _record(id="2")])
        _upload([_record(id="9", country="JP")])
        data = client.get("/api/v1/analysis/summary").json()
        assert data["totalRecords"] == 1
        assert data["topCountries"] == [{"country": "JP", "count": 1}]


class TestCustomerPages:
    def _upload_many(self, count):
        _upload([_record(id=str(i)) for i in range(count)])

    def test_first_page(self):
        self._upload_many(250)
        data = client.get("/api/v1/analysis/customers").json()
        assert data["page"] == 1
        assert data["pageSize"] == 100
        assert data["totalItems"] == 250
        assert data["totalPages"] == 3
        assert len(data["customers"]) == 100
        assert data["customers"][0]["id"] == "0"

    def test_last_partial_page(self):
        self._upload_many(250)
        data = client.get("/api/v1/analysis/customers", params={"page": 3}).json()
        assert len(data["customers"]) == 50
        assert data["customers"][0]["id"] == "200"

    def test_page_past_end_is_empty(self):
        self._upload_many(5)
        data = client.get("/api/v1/analysis/customers", params={"page": 4}).json()
        assert data["customers"] == []

    def test_page_zero_returns_422(self):
        self._upload_many(5)
        assert client.get("/api/v1/analysis/customers", params={"page": 0}).status_code == 422


class TestFibonacciEndpoint:
    def test_result(self):
        with TestClient(app) as c:
            resp = c.post("/api/v1/compute/fibonacci", json={"n": 20})
        assert resp.status_code == 200
        data = resp.json()
        assert data["n"] == 20
        assert data["result"] == 6765
        assert data["elapsedSeconds"] >= 0

    def test_default_input(self):
        with TestClient(app) as c:
            resp = c.post("/api/v1/compute/fibonacci", json={})
        assert resp.status_code == 200
        assert resp.json()["n"] == FIBONACCI_INPUT
        assert resp.json()["result"] == fibonacci(FIBONACCI_INPUT)

    def test_timeout_returns_504(self):
        with TestClient(app) as c:
            resp = c.post("/api/v1/compute/fibonacci", json={"n": FIBONACCI_MAX_INPUT, "timeoutSeconds": 0.5})
        assert resp.status_code == 504

    def test_input_above_bound_returns_422(self):
        with TestClient(app) as c:
            resp = c.post("/api/v1/compute/fibonacci", json={"n": FIBONACCI_MAX_INPUT + 1})
        assert resp.status_code == 422

    def test_unknown_field_returns_422(self):
        with TestClient(app) as c:
            resp = c.post("/api/v1/compute/fibonacci", json={"n": 5, "extra": 1})
        assert resp.status_code == 422

    def test_worker_not_running_returns_503(self):
        app.state.worker = None
        resp = client.post("/api/v1/compute/fibonacci", json={"n": 5})
        assert resp.status_code == 503
