"""Endpoint tests for the census FastAPI application."""

from __future__ import annotations

from typing import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from services.census.app.config.settings import ParserSettings, Settings
from services.census.app.errors import UnknownProfileError
from services.census.app.main import create_app

CENSUS_TEXT = "\n".join(
    [
        "# pasted census",
        "DOE, JANE A NURS N TR N03 D 72 years Female 123456789  0.8 Days Smith MD, John",
        "SMITH, ROBERT B NURS S TR S15 W 65 years Male 987654321  1.6 Days Adams DO, Mary",
        "BROWN, LINDA C 230 D 79 years Female 555444333 12.9 Days Shah MD",
        "unparseable",
    ]
)


@pytest.fixture
def anyio_backend() -> str:
    """Limit ``pytest-anyio`` to the asyncio backend for these tests."""

    return "asyncio"


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    app = create_app(Settings())

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.mark.anyio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "census"}
    assert response.headers["X-Request-ID"] == "req-42"
    assert response.headers["X-Correlation-ID"] == "req-42"
    assert response.headers["X-Response-Time"].endswith("s")


@pytest.mark.anyio
async def test_profile_describes_columns_and_defaults(client: AsyncClient) -> None:
    response = await client.get("/census/profile")

    assert response.status_code == 200
    payload = response.json()
    assert payload["name"] == "rounding"
    assert payload["roomShapes"] == ["letter_digits", "three_digit"]
    assert payload["defaultSortKeys"] == [
        {"column": "room", "ascending": True},
        {"column": "bed", "ascending": True},
    ]
    assert [column["column"] for column in payload["columns"]] == [
        "name",
        "room",
        "bed",
        "los",
        "physicians",
    ]


@pytest.mark.anyio
async def test_arrange_with_defaults(client: AsyncClient) -> None:
    response = await client.post("/census/arrange", json={"text": CENSUS_TEXT})

    assert response.status_code == 200
    payload = response.json()
    assert payload["parsedCount"] == 3
    assert payload["rejectedCount"] == 1
    assert [row["record"]["room"] for row in payload["rows"]] == ["N03", "230", "S15"]
    assert payload["sortKeys"] == [
        {"column": "room", "ascending": True},
        {"column": "bed", "ascending": True},
    ]

    smith = payload["rows"][2]
    assert smith["index"] == 3
    assert smith["displayName"] == "*** SMITH, ROBERT B"
    assert smith["highlighted"] is False
    assert smith["record"]["marked"] is True
    assert smith["record"]["patientNumber"] == "987654321"
    assert smith["record"]["lengthOfStay"] == 1.6
    assert smith["record"]["trailingText"] == "Adams DO, Mary"


@pytest.mark.anyio
async def test_arrange_with_explicit_options(client: AsyncClient) -> None:
    response = await client.post(
        "/census/arrange",
        json={
            "text": CENSUS_TEXT,
            "sortKeys": [{"column": "los", "ascending": False}],
            "prioritizeLowLos": False,
            "markingMode": "highlight",
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert [row["record"]["lengthOfStay"] for row in payload["rows"]] == [12.9, 1.6, 0.8]
    assert [row["highlighted"] for row in payload["rows"]] == [False, True, False]
    los_column = next(column for column in payload["columns"] if column["column"] == "los")
    assert los_column == {"column": "los", "title": "LOS", "position": 0, "ascending": False}


@pytest.mark.anyio
async def test_arrange_with_empty_sort_keys_keeps_paste_order(client: AsyncClient) -> None:
    response = await client.post(
        "/census/arrange",
        json={"text": CENSUS_TEXT, "sortKeys": [], "prioritizeLowLos": False},
    )

    assert [row["record"]["room"] for row in response.json()["rows"]] == ["N03", "S15", "230"]


@pytest.mark.anyio
async def test_arrange_rejects_columns_outside_the_profile(client: AsyncClient) -> None:
    response = await client.post(
        "/census/arrange",
        json={"text": CENSUS_TEXT, "sortKeys": [{"column": "unit"}]},
    )

    assert response.status_code == 400
    problem = response.json()
    assert problem["type"].endswith("/unknown-column")
    assert problem["column"] == "unit"
    assert problem["profile"] == "rounding"


@pytest.mark.anyio
async def test_arrange_validates_payload(client: AsyncClient) -> None:
    response = await client.post("/census/arrange", json={"sortKeys": [{"column": "age"}]})

    assert response.status_code == 422
    problem = response.json()
    assert problem["title"] == "Request Validation Failed"
    assert problem["errors"]


@pytest.mark.anyio
async def test_toggle_flips_existing_and_prepends_new_columns(client: AsyncClient) -> None:
    keys = [{"column": "room", "ascending": True}, {"column": "bed", "ascending": True}]

    flipped = await client.post("/census/sort/toggle", json={"sortKeys": keys, "column": "bed"})
    added = await client.post("/census/sort/toggle", json={"sortKeys": keys, "column": "los"})

    assert flipped.json()["sortKeys"] == [
        {"column": "room", "ascending": True},
        {"column": "bed", "ascending": False},
    ]
    assert added.json()["sortKeys"] == [{"column": "los", "ascending": True}, *keys]


@pytest.mark.anyio
async def test_toggle_rejects_unknown_column(client: AsyncClient) -> None:
    response = await client.post(
        "/census/sort/toggle", json={"sortKeys": [], "column": "patient_number"}
    )

    assert response.status_code == 400


@pytest.mark.anyio
async def test_reset_returns_profile_default(client: AsyncClient) -> None:
    response = await client.post("/census/sort/reset")

    assert response.status_code == 200
    assert response.json()["sortKeys"] == [
        {"column": "room", "ascending": True},
        {"column": "bed", "ascending": True},
    ]


@pytest.mark.anyio
async def test_nursing_profile_app_exposes_unit_column() -> None:
    app = create_app(Settings(parser=ParserSettings(profile="nursing_census")))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            "/census/arrange",
            json={"text": CENSUS_TEXT, "sortKeys": [{"column": "unit"}, {"column": "los"}]},
        )

    assert response.status_code == 200
    rows = response.json()["rows"]
    assert [row["record"]["unit"] for row in rows] == ["NURS", "NURS"]


def test_create_app_rejects_unknown_profile() -> None:
    with pytest.raises(UnknownProfileError):
        create_app(Settings(parser=ParserSettings(profile="cardiology")))
