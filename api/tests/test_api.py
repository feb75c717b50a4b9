from __future__ import annotations
import pytest
from fastapi.testclient import TestClient
from dataset_plugin.main import app
from dataset_plugin.deps.client import get_dataset_client
from dataset_plugin.services.errors import DataSetStatusError, DataSetTransportError

client = TestClient(app)

@pytest.fixture
def dataset(stub_client):
    """Route the app's DataSet dependency to a stub."""
    app.dependency_overrides[get_dataset_client] = lambda: stub_client
    yield stub_client
    app.dependency_overrides.pop(get_dataset_client, None)

def test_root():
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "DataSet Datasource"
    assert "version" in data
    assert "/query" in str(data["endpoints"])

def test_live():
    response = client.get("/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"
    assert response.headers["X-Request-ID"].startswith("req_")

def test_request_id_is_echoed():
    response = client.get("/live", headers={"X-Request-ID": "grafana-123"})
    assert response.headers["X-Request-ID"] == "grafana-123"

def test_query_data(dataset):
    dataset.results["PLOT"] = {"data": {"xAxis": [1700000000000], "plots": [{"label": "web", "samples": [5]}]}}
    dataset.results["PQ"] = {"error": {"message": "unknown function"}}

    response = client.post("/query", json={
        "range": {"from": 1700000000000, "to": 1700003600000},
        "queries": [
            {"refId": "A", "queryType": "Standard", "expression": "count()", "maxDataPoints": 100},
            {"refId": "B", "queryType": "Power Query", "expression": "| frob()"},
        ],
    })

    assert response.status_code == 200
    results = response.json()["results"]
    frame = results["A"]["frames"][0]
    assert frame["refId"] == "A"
    assert frame["fields"][0] == {"name": "time", "type": "time", "values": [1700000000000]}
    assert frame["fields"][1]["values"] == [5]
    assert "error" not in results["A"]
    assert results["B"]["error"] == "unknown function"

def test_query_data_validation(dataset):
    response = client.post("/query", json={"queries": [{"refId": "A", "queryType": "Nope"}]})
    assert response.status_code == 422

def test_facet_query_resource(dataset):
    dataset.results["FACET_VALUES"] = {"data": {"facet": {"values": [{"value": "prod"}, {"value": "staging"}]}}}

    response = client.post("/resources/facet-query", json={"queryVariable": "env"})

    assert response.status_code == 200
    assert response.json() == {"value": ["prod", "staging"]}
    assert dataset.requests[0].facet_values.name == "env"

def test_facet_query_requires_variable(dataset):
    response = client.post("/resources/facet-query", json={"queryVariable": ""})
    assert response.status_code == 422

def test_facet_query_upstream_failure(dataset):
    dataset.results["FACET_VALUES"] = DataSetStatusError("submit", 429, "rate limited")

    response = client.post("/resources/facet-query", json={"queryVariable": "env"})

    assert response.status_code == 502
    assert "429" in response.json()["detail"]

def test_top_facets_resource(dataset):
    dataset.results["TOP_FACETS"] = {"data": {"facets": [{"name": "serverHost"}, {"name": "logfile"}]}}

    response = client.get("/resources/top-facets")

    assert response.status_code == 200
    assert response.json() == {"value": ["serverHost", "logfile"]}

def test_health_ok(dataset):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "OK", "message": "Data source is working"}

def test_health_reports_transport_error(dataset):
    dataset.facet_status = DataSetTransportError("facet", "connection refused")
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ERROR"
    assert "connection refused" in response.json()["message"]

def test_client_missing_before_startup():
    app.dependency_overrides.pop(get_dataset_client, None)
    response = client.post("/query", json={"range": {"from": 0, "to": 1}, "queries": []})
    assert response.status_code == 503

def test_prometheus_metrics(dataset):
    client.get("/live")
    response = client.get("/metrics/prometheus")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "dataset_lrq_executions_total" in response.text
