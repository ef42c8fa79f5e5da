import json
from datetime import date

import httpx
import pytest

from venue.app.errors import SupabaseError
from venue.app.services.availability.sources import (
    SupabaseCalendarSource,
    month_map_from_rows,
    month_map_from_rpc,
)
from venue.app.utils.supabase import SupabaseClient


def make_client(handler):
    return SupabaseClient(
        base_url="https://db.example.test/",
        api_key="anon-key",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_rpc_posts_params_with_auth_headers():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"2025-03-15": {"full_day": True}})

    result = await make_client(handler).rpc("get_calendar_month", {"p_year": 2025, "p_month": 3})

    assert seen["url"] == "https://db.example.test/rest/v1/rpc/get_calendar_month"
    assert seen["headers"]["apikey"] == "anon-key"
    assert seen["headers"]["authorization"] == "Bearer anon-key"
    assert seen["body"] == {"p_year": 2025, "p_month": 3}
    assert result == {"2025-03-15": {"full_day": True}}


@pytest.mark.asyncio
async def test_select_renders_postgrest_filters():
    seen = {}

    def handler(request):
        seen["params"] = list(request.url.params.multi_items())
        return httpx.Response(200, json=[{"date": "2025-03-15"}])

    rows = await make_client(handler).select(
        "public_availability",
        filters=[("date", "gte", "2025-03-01"), ("is_blocked", "is", True), ("note", "is", None)],
        order="date.asc",
    )

    assert rows == [{"date": "2025-03-15"}]
    assert seen["params"] == [
        ("select", "*"),
        ("date", "gte.2025-03-01"),
        ("is_blocked", "is.true"),
        ("note", "is.null"),
        ("order", "date.asc"),
    ]


@pytest.mark.asyncio
async def test_insert_returns_first_row_and_asks_for_representation():
    seen = {}

    def handler(request):
        seen["prefer"] = request.headers.get("Prefer")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=[{"id": "b1", "booking_date": "2025-03-15"}])

    row = await make_client(handler).insert("bookings", {"booking_date": "2025-03-15"})

    assert row == {"id": "b1", "booking_date": "2025-03-15"}
    assert seen["prefer"] == "return=representation"
    assert seen["body"] == [{"booking_date": "2025-03-15"}]


@pytest.mark.asyncio
async def test_empty_response_is_none():
    client = make_client(lambda request: httpx.Response(204))
    assert await client.rpc("admin_confirm_booking", {}) is None
    assert await client.delete("events", [("id", "eq", 1)]) == []


@pytest.mark.asyncio
async def test_error_body_becomes_supabase_error():
    def handler(request):
        return httpx.Response(409, json={
            "code": "23505",
            "message": "This date is already booked",
            "details": None,
            "hint": None,
        })

    with pytest.raises(SupabaseError) as exc_info:
        await make_client(handler).insert("bookings", {})

    error = exc_info.value
    assert error.status == 409
    assert error.code == "23505"
    assert error.message == "This date is already booked"
    assert error.to_dict()["code"] == "23505"


@pytest.mark.asyncio
async def test_plain_text_error():
    client = make_client(lambda request: httpx.Response(500, text="upstream exploded"))
    with pytest.raises(SupabaseError, match="upstream exploded"):
        await client.rpc("get_calendar_month")


@pytest.mark.asyncio
async def test_network_error_becomes_supabase_error():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(SupabaseError) as exc_info:
        await make_client(handler).rpc("get_calendar_month")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert exc_info.value.status is None


def test_month_map_from_rpc_ignores_non_objects():
    assert month_map_from_rpc(None) == {}
    assert month_map_from_rpc([]) == {}
    data = month_map_from_rpc({"2025-03-15": {"morning": True}, "2025-03-16": None})
    assert data["2025-03-15"].morning
    assert not data["2025-03-16"].any_slot_taken


def test_month_map_from_rows_merges_duplicates():
    rows = [
        {"date": "2025-03-15", "morning": True},
        {"date": "2025-03-15", "night": True},
        {"date": None, "full_day": True},
    ]
    data = month_map_from_rows(rows)
    assert list(data) == ["2025-03-15"]
    assert data["2025-03-15"].morning and data["2025-03-15"].night


@pytest.mark.asyncio
async def test_calendar_source_queries_rpc_and_view():
    calls = []

    def handler(request):
        calls.append((request.url.path, list(request.url.params.multi_items())))
        if request.url.path.endswith("/rpc/get_calendar_month"):
            return httpx.Response(200, json=None)
        return httpx.Response(200, json=[{"date": "2025-03-15", "full_day": True}])

    source = SupabaseCalendarSource(make_client(handler))

    assert await source.get_calendar_month(2025, 3) == {}
    data = await source.get_availability_range(date(2025, 3, 1), date(2025, 3, 31))

    assert data["2025-03-15"].full_day
    assert calls[1] == (
        "/rest/v1/public_availability",
        [("select", "*"), ("date", "gte.2025-03-01"), ("date", "lte.2025-03-31")],
    )
