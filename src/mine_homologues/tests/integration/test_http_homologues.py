"""HTTP-level tests: FastAPI app over respx-mocked registry and mines."""

from __future__ import annotations

import json
from urllib.parse import parse_qs

import httpx
import respx

REGISTRY = "https://registry.test/service"
FLYMINE = "https://www.flymine.org/flymine"
ANOMINE = "https://anomine.test/anomine"
BEEMINE = "https://beemine.test/beemine"

FLY = "Drosophila melanogaster"


def _instance(namespace: str, name: str, url: str, **extra: object) -> dict[str, object]:
    return {"namespace": namespace, "name": name, "url": url, **extra}


def _catalog() -> dict[str, object]:
    return {
        "instances": [
            _instance(
                "flymine",
                "FlyMine",
                FLYMINE,
                neighbours=["insects"],
                colors={"header": {"main": "#5c0075"}},
            ),
            _instance("anomine", "AnoMine", ANOMINE, neighbours=["insects"]),
            _instance("beemine", "BeeMine", BEEMINE, neighbours=["insects"]),
            _instance("humanmine", "HumanMine", "https://h.test/h", neighbours=["mammals"]),
        ]
    }


def _rows(*rows: dict[str, object]) -> httpx.Response:
    return httpx.Response(200, json={"results": list(rows), "wasSuccessful": True})


def _gene(symbol: str, organism: str, secondary: str) -> dict[str, object]:
    return {
        "symbol": symbol,
        "secondaryIdentifier": secondary,
        "organism": {"name": organism, "shortName": organism.split()[0][0] + ". x"},
    }


def _flymine_handler(request: httpx.Request) -> httpx.Response:
    query = parse_qs(request.content.decode())["query"][0]
    if 'path="Gene.id"' in query:
        if 'value="42"' in query:
            return _rows(_gene("dpp", FLY, "CG9885"))
        return _rows()
    return _rows(_gene("dpp", FLY, "CG9885"))


def _mock_federation(
    router: respx.Router, anomine_rows: list[dict[str, object]] | None = None
) -> None:
    router.get(f"{REGISTRY}/namespace", params={"url": FLYMINE}).respond(
        200, json={"namespace": "flymine"}
    )
    router.get(f"{REGISTRY}/instances").respond(200, json=_catalog())
    router.post(f"{FLYMINE}/service/query/results").mock(side_effect=_flymine_handler)
    if anomine_rows is None:
        anomine_rows = [
            _gene("dpp", FLY, "CG9885"),
            _gene("AGAP-dpp", "Anopheles gambiae", "AGAP001"),
        ]
    router.post(f"{ANOMINE}/service/query/results").mock(
        return_value=_rows(*anomine_rows)
    )
    router.post(f"{BEEMINE}/service/query/results").respond(503, text="down")


def _parse_sse(body: str) -> list[tuple[str, dict[str, object]]]:
    events = []
    for block in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


async def test_homologues_json(client: httpx.AsyncClient, mock_http: respx.Router) -> None:
    _mock_federation(mock_http)

    response = await client.get(
        "/api/v1/homologues", params={"serviceRoot": FLYMINE, "geneId": 42}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["gene"] == {"symbol": "dpp", "organism": FLY}
    assert body["namespace"] == "flymine"
    mines = {m["namespace"]: m for m in body["mines"]}
    assert set(mines) == {"flymine", "anomine"}
    assert mines["flymine"]["color"] == "#5c0075"
    assert [h["text"] for h in mines["anomine"]["homologues"]] == ["AGAP-dpp (A. x)"]
    assert mines["anomine"]["homologues"][0]["href"] == (
        f"{ANOMINE}/portal.do?class=Gene&externalid=AGAP-dpp"
    )
    assert mines["anomine"]["showAll"] is None
    assert body["unavailable"] == ["BeeMine"]
    assert body["note"] == "No homologues available for: BeeMine"


async def test_unknown_gene_is_problem_404(
    client: httpx.AsyncClient, mock_http: respx.Router
) -> None:
    _mock_federation(mock_http)

    response = await client.get(
        "/api/v1/homologues", params={"serviceRoot": FLYMINE, "geneId": 7}
    )

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "GENE_NOT_FOUND"


async def test_unregistered_mine_is_problem_404(
    client: httpx.AsyncClient, mock_http: respx.Router
) -> None:
    _mock_federation(mock_http)
    mock_http.get(f"{REGISTRY}/namespace", params={"url": "https://nowhere.test/x"}).respond(
        404, json={"error": "not found"}
    )
    mock_http.post("https://nowhere.test/x/service/query/results").mock(
        return_value=_rows(_gene("dpp", FLY, "CG9885"))
    )

    response = await client.get(
        "/api/v1/homologues",
        params={"serviceRoot": "https://nowhere.test/x", "geneId": 42},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "UNKNOWN_MINE"


async def test_registry_outage_is_problem_502(
    client: httpx.AsyncClient, mock_http: respx.Router
) -> None:
    mock_http.post(f"{FLYMINE}/service/query/results").mock(side_effect=_flymine_handler)
    mock_http.get(f"{REGISTRY}/namespace").mock(
        side_effect=httpx.ConnectError("registry unreachable")
    )

    response = await client.get(
        "/api/v1/homologues", params={"serviceRoot": FLYMINE, "geneId": 42}
    )

    assert response.status_code == 502
    assert response.json()["code"] == "REGISTRY_ERROR"


async def test_missing_gene_id_is_422(client: httpx.AsyncClient) -> None:
    response = await client.get("/api/v1/homologues", params={"serviceRoot": FLYMINE})
    assert response.status_code == 422
    problem = response.json()
    assert problem["code"] == "VALIDATION_ERROR"
    assert ["query", "geneId"] in [e["loc"] for e in problem["errors"]]


async def test_homologues_stream(client: httpx.AsyncClient, mock_http: respx.Router) -> None:
    _mock_federation(mock_http)

    response = await client.get(
        "/api/v1/homologues/stream", params={"serviceRoot": FLYMINE, "geneId": 42}
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    events = _parse_sse(response.text)
    types = [t for t, _ in events]
    assert types[:3] == ["instance_selected"] * 3
    assert types[-1] == "done"
    assert types.count("instance_loaded") == 2
    assert types.count("instance_empty") == 1
    notes = [data for t, data in events if t == "unavailable_note"]
    assert notes == [
        {"names": ["BeeMine"], "text": "No homologues available for: BeeMine"}
    ]
    loaded = {
        data["instance"]["namespace"]: data  # type: ignore[index]
        for t, data in events
        if t == "instance_loaded"
    }
    assert loaded["anomine"]["total"] == 1
    assert loaded["anomine"]["hasMore"] is False


async def test_stream_reports_bootstrap_error_as_event(
    client: httpx.AsyncClient, mock_http: respx.Router
) -> None:
    _mock_federation(mock_http)

    response = await client.get(
        "/api/v1/homologues/stream", params={"serviceRoot": FLYMINE, "geneId": 7}
    )

    events = _parse_sse(response.text)
    assert [t for t, _ in events] == ["error"]
    assert events[0][1]["code"] == "GENE_NOT_FOUND"
    assert events[0][1]["status"] == 404


async def test_stream_keeps_every_homologue_reachable_over_the_cap(
    client: httpx.AsyncClient, mock_http: respx.Router
) -> None:
    rows = [_gene(f"AGAP-{i}", "Anopheles gambiae", f"AGAP00{i}") for i in range(8)]
    _mock_federation(mock_http, anomine_rows=rows)

    response = await client.get(
        "/api/v1/homologues/stream", params={"serviceRoot": FLYMINE, "geneId": 42}
    )

    (anomine,) = [
        data
        for t, data in _parse_sse(response.text)
        if t == "instance_loaded" and data["instance"]["namespace"] == "anomine"  # type: ignore[index]
    ]
    assert len(anomine["homologues"]) == 5  # type: ignore[arg-type]
    assert anomine["total"] == 8
    assert anomine["hasMore"] is True
    assert [h["symbol"] for h in anomine["allHomologues"]] == [  # type: ignore[index, union-attr]
        f"AGAP-{i}" for i in range(8)
    ]
