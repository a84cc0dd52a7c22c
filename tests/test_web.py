import logging

import web
from state import GameState


def post(client, match_id, payload):
    res = client.post(f"/api/update/{match_id}", json=payload)
    assert res.status_code == 200
    assert res.json() == {"ok": True}
    return res


def test_state_of_unknown_match_is_default(client):
    res = client.get("/api/state/Hockey")
    assert res.status_code == 200
    assert res.json() == GameState().to_dict()


def test_state_serializes_optionals_as_null(client):
    data = client.get("/api/state/Volley").json()
    assert len(data) == 18
    assert data["logoA"] is None
    assert data["logoB"] is None
    assert data["bgImage"] is None
    assert data["teamA_name"] == "Squadra A"
    assert data["sideLeft"] == "A"


def test_example_match_flow(client):
    post(client, "Volley", {"action": "score", "team": "A", "delta": 25})
    post(client, "Volley", {"action": "score", "team": "B", "delta": 20})
    state = client.get("/api/state/Volley").json()
    assert state["teamA_sets"] == 1
    assert state["teamA_score"] == 0
    assert state["teamB_score"] == 20
    assert state["current_set"] == 2

    # Basket is independent
    assert client.get("/api/state/Basket").json()["teamA_sets"] == 0


def test_config_then_reset_match(client):
    post(client, "Basket", {"action": "set_config", "teamA_name": "Lupi", "teamB_name": "Orsi",
                            "logoA": "lupi.png", "sideLeft": "B"})
    post(client, "Basket", {"action": "timeout", "team": "B", "delta": 1})
    state = client.get("/api/state/Basket").json()
    assert state["logoA"] == "lupi.png"
    assert state["sideLeft"] == "B"
    assert state["teamB_timeouts"] == 1

    post(client, "Basket", {"action": "reset_match", "keepNames": True})
    state = client.get("/api/state/Basket").json()
    assert (state["teamA_name"], state["teamB_name"]) == ("Lupi", "Orsi")
    assert state["logoA"] is None
    assert state["sideLeft"] == "A"
    assert state["teamB_timeouts"] == 0

    post(client, "Basket", {"action": "reset_match", "keepNames": False})
    assert client.get("/api/state/Basket").json() == GameState().to_dict()


def test_update_always_acknowledges(client):
    post(client, "Volley", {"action": "fly"})
    post(client, "Volley", {"action": "score", "team": "Q", "delta": "lots"})
    post(client, "Volley", ["not", "an", "object"])

    res = client.post("/api/update/Volley", content=b"{not json")
    assert res.status_code == 200
    assert res.json() == {"ok": True}

    res = client.post("/api/update/Volley")
    assert res.json() == {"ok": True}

    assert client.get("/api/state/Volley").json() == GameState().to_dict()

    # numbers too long to parse and nesting too deep to decode
    huge = b'{"action": "score", "team": "A", "delta": ' + b"9" * 5000 + b"}"
    deep = b'{"action": "score", "x": ' + b"[" * 100000 + b"]" * 100000 + b"}"
    for body in (huge, deep):
        res = client.post("/api/update/Basket", content=body)
        assert res.status_code == 200
        assert res.json() == {"ok": True}


def test_update_creates_unknown_match(client, store):
    post(client, "Torneo 2", {"action": "score", "team": "B", "delta": 3})
    assert "Torneo 2" in store
    assert client.get("/api/state/Torneo 2").json()["teamB_score"] == 3


def test_list_matches(client):
    client.get("/api/state/Extra")
    assert sorted(client.get("/api/matches").json()["matches"]) == ["Basket", "Extra", "Volley"]


def test_pages(client):
    home = client.get("/")
    assert home.status_code == 200
    assert "/control/Volley" in home.text
    assert "/display/Basket" in home.text

    control = client.get("/control/Basket")
    assert control.status_code == 200
    assert 'const match = "Basket";' in control.text

    display = client.get("/display/")
    assert display.status_code == 200
    assert 'const match = "Volley";' in display.text


def test_page_escapes_match_id(client):
    res = client.get("/control/</script><b>x")
    assert "<title>Controllo &lt;/script&gt;&lt;b&gt;x</title>" in res.text
    assert 'const match = "<\\/script><b>x";' in res.text


def test_unknown_path_is_404(client):
    assert client.get("/nowhere").status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_internal_fault_is_500(client, monkeypatch, caplog):
    def boom(match_id):
        raise RuntimeError("boom")

    monkeypatch.setattr(web.store, "snapshot", boom)
    with caplog.at_level(logging.ERROR):
        res = client.get("/api/state/Volley")

    assert res.status_code == 500
    assert res.text == "Internal error"
    record = next((r for r in caplog.records if r.message == "Unhandled exception"), None)
    assert record is not None
    assert record.exc_info[0] is RuntimeError
