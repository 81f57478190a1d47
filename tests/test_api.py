from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1] / "python-backend"))

from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def test_health_endpoint() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "policy-engine"}


def test_select_endpoint_uses_camel_case() -> None:
    response = client.post(
        "/policy/select",
        json={
            "audience": "k12",
            "riskProfile": "high",
            "toolUseMode": "restricted",
            "customTags": ["privacy"],
        },
    )
    assert response.status_code == 200
    data = response.json()

    clauses = data["clauses"]
    assert clauses
    assert [clause["priority"] for clause in clauses] == list(range(1, len(clauses) + 1))
    assert {"riskLevel", "toolUseModes", "selected", "reason", "score"} <= set(clauses[0])
    assert data["summary"]["total"] == len(clauses)
    assert data["summary"]["clause_ids"] == [clause["id"] for clause in clauses]


def test_select_endpoint_accepts_snake_case_and_overrides() -> None:
    response = client.post(
        "/policy/select",
        json={
            "audience": "highered",
            "risk_profile": "medium",
            "tool_use_mode": "permitted",
            "exclude_clauses": ["bias-001"],
            "include_clauses": ["privacy-002-coppa"],
        },
    )
    assert response.status_code == 200
    clauses = response.json()["clauses"]
    ids = [clause["id"] for clause in clauses]

    assert "bias-001" not in ids
    assert ids[-1] == "privacy-002-coppa"
    assert clauses[-1]["reason"] == "Manually included"


def test_select_endpoint_rejects_missing_fields() -> None:
    response = client.post("/policy/select", json={})
    assert response.status_code == 422


def test_clause_lookup_endpoints() -> None:
    found = client.get("/policy/clauses/bias-001")
    assert found.status_code == 200
    assert found.json()["title"] == "AI Bias Prevention"

    missing = client.get("/policy/clauses/does-not-exist")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Clause not found: does-not-exist"

    search = client.get("/policy/clauses/search", params={"q": "coppa"})
    assert search.status_code == 200
    assert "privacy-002-coppa" in [clause["id"] for clause in search.json()]

    listing = client.get("/policy/clauses", params={"audience": "highered"})
    ids = [clause["id"] for clause in listing.json()]
    assert "purpose-003-highered" in ids
    assert "purpose-002-k12" not in ids


def test_template_endpoints() -> None:
    k12 = client.get("/policy/templates", params={"audience": "k12"})
    assert k12.status_code == 200
    assert {template["id"] for template in k12.json()} == {"k12-standard", "k12-restrictive"}

    assert len(client.get("/policy/templates").json()) == 4
    assert client.get("/policy/templates/k12-standard").json()["audience"] == "k12"
    assert client.get("/policy/templates/unknown").status_code == 404


def test_diff_endpoint() -> None:
    response = client.post(
        "/policy/diff",
        json={"baseText": "The cat sat.", "newText": "The dog sat.", "granularity": "word"},
    )
    assert response.status_code == 200
    data = response.json()

    assert [(diff["type"], diff["position"]) for diff in data["diffs"]] == [
        ("deletion", 1),
        ("addition", 2),
    ]
    assert data["diffs"][0]["oldText"] == "cat"
    assert data["summary"] == {"addition": 1, "deletion": 1, "modification": 0}


def test_redline_generate_apply_and_render() -> None:
    base, new = "The cat sat.", "The dog sat."
    generated = client.post(
        "/policy/redline", json={"baseText": base, "newText": new, "author": "Counsel"}
    )
    assert generated.status_code == 200
    changes = generated.json()["changes"]
    assert [change["type"] for change in changes] == ["delete", "insert"]
    assert changes[0]["position"] == {"paragraph": 0, "sentence": 0, "word": 1}
    assert all(change["author"] == "Counsel" for change in changes)

    applied = client.post("/policy/redline/apply", json={"baseText": base, "changes": changes})
    assert applied.status_code == 200
    assert applied.json() == {"text": new}

    rendered = client.post(
        "/policy/redline/html", json={"baseText": base, "changes": changes, "title": "Draft"}
    )
    assert rendered.status_code == 200
    assert rendered.headers["content-type"].startswith("text/html")
    assert ">dog</ins>" in rendered.text
    assert "<title>Draft</title>" in rendered.text


def _chain_corpus():
    from policy_engine.corpus import ClauseCorpus

    metadata = {
        "version": 1,
        "created_at": "2025-08-26T00:00:00Z",
        "updated_at": "2025-08-26T00:00:00Z",
        "author": "tests",
    }

    def clause(clause_id, **extra):
        return {
            "id": clause_id,
            "title": clause_id.title(),
            "body": "Body.",
            "risk_level": "medium",
            "metadata": metadata,
            **extra,
        }

    return ClauseCorpus.from_records(
        [
            clause("root", dependencies=["middle"]),
            clause("middle", audience=["highered"], dependencies=["leaf"]),
            clause("leaf", audience=["highered"]),
        ]
    )


def test_select_endpoint_transitive_defaults_to_config(monkeypatch) -> None:
    from policy_engine.selection import selector as selector_module
    from routes.policy import get_corpus

    monkeypatch.setattr(
        selector_module,
        "get_setting",
        lambda section, name, default=None: True if name == "transitive_dependencies" else default,
    )
    app.dependency_overrides[get_corpus] = _chain_corpus
    try:
        body = {"audience": "k12", "riskProfile": "medium", "toolUseMode": "permitted"}
        from_config = client.post("/policy/select", json=body)
        overridden = client.post("/policy/select", params={"transitive": "false"}, json=body)
    finally:
        app.dependency_overrides.clear()

    assert [clause["id"] for clause in from_config.json()["clauses"]] == ["root", "middle", "leaf"]
    assert [clause["id"] for clause in overridden.json()["clauses"]] == ["root", "middle"]
