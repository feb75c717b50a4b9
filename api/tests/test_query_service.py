from __future__ import annotations
import json
import pytest
from dataset_plugin.config import DATASET_FACET_LOOKBACK, DataSetSettings
from dataset_plugin.models.lrq import PlotData, TableData
from dataset_plugin.models.schemas import PanelQuery, QueryDataRequest, TimeRange
from dataset_plugin.services import query_service
from dataset_plugin.services.errors import DataSetTimeoutError, ResponseDecodeError
from tests.conftest import StubClient

HOUR = TimeRange.model_validate({"from": 1700000000000, "to": 1700003600000})

def test_standard_query_becomes_plot_request():
    query = PanelQuery(refId="A", expression="count(status == 500)", breakDownFacetValue="serverHost", maxDataPoints=500)
    request = query_service.build_lrq_request(query, HOUR)

    wire = json.loads(request.to_wire())
    assert wire == {
        "queryType": "PLOT",
        "startTime": 1700000000,
        "endTime": 1700003600,
        "plot": {
            "expression": "count(status == 500)",
            "slices": 500,
            "frequency": "HIGH",
            "autoAlign": False,
            "breakdownFacet": "serverHost",
        },
    }

def test_power_query_becomes_pq_table_request():
    query = PanelQuery(refId="B", queryType="Power Query", expression="| group count() by serverHost")
    wire = json.loads(query_service.build_lrq_request(query, HOUR).to_wire())
    assert wire["queryType"] == "PQ"
    assert wire["pq"] == {"query": "| group count() by serverHost", "resultType": "TABLE"}
    assert "plot" not in wire

@pytest.mark.parametrize("max_points,interval_ms,expected", [
    (None, None, 1000),
    (500, None, 500),
    (None, 60000, 60),
    (30, 60000, 30),
    (50000, None, 10000),
    (None, 10 ** 9, 1),
])
def test_slice_count(max_points, interval_ms, expected):
    query = PanelQuery(refId="A", expression="count()", maxDataPoints=max_points, intervalMs=interval_ms)
    assert query_service.slice_count(query, HOUR) == expected

def test_plot_frames_one_per_series():
    data = PlotData.model_validate({
        "xAxis": [1000, 2000],
        "plots": [{"label": "web-1", "samples": [1, 2]}, {"label": "web-2", "samples": [3, None]}],
    })
    frames = query_service.plot_frames("A", data)

    assert [f.name for f in frames] == ["web-1", "web-2"]
    assert frames[1].fields[0].values == [1000, 2000]
    assert frames[1].fields[1].values == [3, None]
    assert frames[1].fields[1].labels == {"facet": "web-2"}

def test_table_frames_one_field_per_column():
    data = TableData.model_validate({
        "columns": [{"name": "serverHost"}, {"name": "count"}],
        "values": [["web-1", 10], ["web-2", 4]],
    })
    (frame,) = query_service.table_frames("B", data)

    assert [(f.name, f.type) for f in frame.fields] == [("serverHost", "string"), ("count", "number")]
    assert frame.fields[1].values == [10, 4]

@pytest.mark.asyncio
async def test_query_data_reports_errors_per_ref_id(stub_client):
    stub_client.results["PLOT"] = {"data": {"xAxis": [1], "plots": [{"label": "", "samples": [7]}]}}
    stub_client.results["PQ"] = DataSetTimeoutError("poll")
    request = QueryDataRequest.model_validate({
        "range": {"from": 1700000000000, "to": 1700003600000},
        "queries": [
            {"refId": "A", "expression": "count()"},
            {"refId": "B", "queryType": "Power Query", "expression": "| count()"},
        ],
    })

    response = await query_service.query_data(stub_client, request)

    assert response.results["A"].error is None
    assert response.results["A"].frames[0].fields[1].values == [7]
    assert "timed out" in response.results["B"].error
    assert response.results["B"].frames == []

@pytest.mark.asyncio
async def test_result_error_is_reported(stub_client):
    stub_client.results["PQ"] = {"error": {"message": "syntax error at column 3"}}
    query = PanelQuery(refId="A", queryType="Power Query", expression="| bad")

    response = await query_service.run_query(stub_client, query, HOUR)

    assert response.error == "syntax error at column 3"

@pytest.mark.asyncio
async def test_empty_expression_skips_dataset(stub_client):
    response = await query_service.run_query(stub_client, PanelQuery(refId="A", expression="  "), HOUR)
    assert response.frames == []
    assert stub_client.requests == []

@pytest.mark.asyncio
async def test_facet_values_for_variable(stub_client):
    stub_client.results["FACET_VALUES"] = {"data": {"facet": {"values": [{"value": "web-1", "count": 3}, {"value": "web-2"}]}}}

    values = await query_service.facet_values(stub_client, "serverHost", now=1700003600)

    assert values == ["web-1", "web-2"]
    (request,) = stub_client.requests
    assert request.facet_values.name == "serverHost"
    assert request.end_time == 1700003600
    assert request.start_time == 1700003600 - DATASET_FACET_LOOKBACK

@pytest.mark.asyncio
async def test_facet_values_bad_payload(stub_client):
    stub_client.results["FACET_VALUES"] = {"data": {"facet": {"values": "nope"}}}
    with pytest.raises(ResponseDecodeError):
        await query_service.facet_values(stub_client, "serverHost")

@pytest.mark.asyncio
async def test_top_facets_names(stub_client):
    stub_client.results["TOP_FACETS"] = {"data": {"facets": [{"name": "serverHost", "count": 90}, {"name": "logfile"}]}}
    assert await query_service.top_facets(stub_client) == ["serverHost", "logfile"]

@pytest.mark.asyncio
async def test_health_ok_on_200(stub_client):
    ok, message = await query_service.check_health(stub_client)
    assert ok
    assert stub_client.requests[0].field == query_service.HEALTH_CHECK_FIELD

@pytest.mark.asyncio
async def test_health_error_on_other_status(stub_client):
    stub_client.facet_status = 401
    ok, message = await query_service.check_health(stub_client)
    assert not ok
    assert "401" in message

@pytest.mark.asyncio
async def test_health_error_without_api_key():
    client = StubClient(DataSetSettings(url="https://dataset.test", api_key=""))
    ok, message = await query_service.check_health(client)
    assert not ok
    assert client.requests == []
