import pytest
from fastapi.testclient import TestClient

from main import create_app

ALICE = {"X-Account-Id": "alice"}
BOB = {"X-Account-Id": "bob"}
CAROL = {"X-Account-Id": "carol"}


def mint_body(meme_id, royalty=10):
    return {
        "id": meme_id,
        "media_url": f"https://cdn.example/{meme_id}.png",
        "title": "Title",
        "description": "Description",
        "royalty": royalty,
    }


@pytest.fixture
def client(db):
    with TestClient(create_app(db)) as c:
        yield c


def test_root_and_schema(client):
    assert client.get("/").json() == {"message": "MemeFi ledger ready"}
    schema = client.get("/schema").json()
    assert set(schema) == {"meme", "comment", "user_stats"}


def test_database_check(client):
    body = client.get("/test").json()
    assert body["database_name"] == "memefi_test"
    assert body["ledger"].startswith("✅ Initialized")


def test_mint_and_read(client):
    res = client.post("/api/memes", json=mint_body("m1"), headers=ALICE)
    assert res.status_code == 201
    assert res.json()["owner_id"] == "alice"

    meme = client.get("/api/memes/m1").json()
    assert meme["creator_id"] == "alice"
    assert meme["likes_count"] == 0
    assert client.get("/api/memes-count").json()["count"] == 1
    assert [m["id"] for m in client.get("/api/users/alice/memes").json()] == ["m1"]


def test_meme_named_count_is_readable(client):
    assert client.post("/api/memes", json=mint_body("count"), headers=ALICE).status_code == 201
    res = client.get("/api/memes/count")
    assert res.status_code == 200
    assert res.json()["id"] == "count"
    assert res.json()["owner_id"] == "alice"
    assert client.get("/api/memes-count").json() == {"count": 1, "max_page_size": 100}


def test_mint_requires_identity(client):
    assert client.post("/api/memes", json=mint_body("m1")).status_code == 401
    assert client.post("/api/memes", json=mint_body("m1"), headers={"X-Account-Id": "  "}).status_code == 401


def test_mint_errors(client):
    client.post("/api/memes", json=mint_body("m1"), headers=ALICE)
    dup = client.post("/api/memes", json=mint_body("m1"), headers=BOB)
    assert dup.status_code == 409
    assert dup.json()["detail"] == "Meme ID already exists"
    bad = client.post("/api/memes", json=mint_body("m2", royalty=101), headers=ALICE)
    assert bad.status_code == 422
    assert bad.json()["detail"] == "Royalty must be between 0 and 100"


def test_missing_meme_is_404(client):
    assert client.get("/api/memes/ghost").status_code == 404
    assert client.post("/api/memes/ghost/like", headers=BOB).status_code == 404
    assert client.post("/api/memes/ghost/comments", json={"text": "hi"}, headers=BOB).status_code == 404


def test_like_flow(client):
    client.post("/api/memes", json=mint_body("m1"), headers=ALICE)

    res = client.post("/api/memes/m1/like", headers=BOB)
    assert res.json() == {"ok": True, "likes": 1}
    assert client.get("/api/memes/m1").json()["last_like_timestamp"] > 0
    assert client.get("/api/users/alice/stats").json()["total_likes"] == 1

    again = client.post("/api/memes/m1/like", headers=BOB)
    assert again.status_code == 409
    assert again.json()["detail"] == "User already liked this meme"

    assert client.delete("/api/memes/m1/like", headers=CAROL).status_code == 409
    assert client.delete("/api/memes/m1/like", headers=BOB).json() == {"ok": True, "likes": 0}
    assert client.get("/api/memes/m1/likes").json() == {"likes": 0}
    assert client.get("/api/users/alice/stats").json()["total_likes"] == 0


def test_unlike_without_history(client):
    client.post("/api/memes", json=mint_body("m1"), headers=ALICE)
    res = client.delete("/api/memes/m1/like", headers=BOB)
    assert res.status_code == 404
    assert res.json()["detail"] == "No likes found for meme"


def test_comment_flow(client):
    client.post("/api/memes", json=mint_body("m1"), headers=ALICE)

    res = client.post("/api/memes/m1/comments", json={"text": "  nice  "}, headers=CAROL)
    assert res.status_code == 201
    assert res.json()["text"] == "nice"

    assert client.post("/api/memes/m1/comments", json={"text": "   "}, headers=CAROL).status_code == 422
    assert client.post("/api/memes/m1/comments", json={"text": "x" * 501}, headers=CAROL).status_code == 422

    comments = client.get("/api/memes/m1/comments").json()
    assert len(comments) == 1
    assert comments[0]["user_id"] == "carol"
    assert client.get("/api/users/alice/stats").json()["total_comments"] == 1


def test_list_pagination(client):
    for i in range(3):
        client.post("/api/memes", json=mint_body(f"m{i}"), headers=ALICE)
    assert [m["id"] for m in client.get("/api/memes").json()] == ["m0", "m1", "m2"]
    assert [m["id"] for m in client.get("/api/memes", params={"from_index": 1, "limit": 1}).json()] == ["m1"]
    assert client.get("/api/memes", params={"from_index": 9}).json() == []
    assert client.get("/api/memes", params={"from_index": -1}).status_code == 422


def test_without_database():
    with TestClient(create_app(None)) as client:
        assert client.get("/").status_code == 200
        res = client.get("/api/memes")
        assert res.status_code == 500
        assert res.json()["detail"] == "Database not configured"
        assert client.get("/test").json()["database"] == "❌ Not Available"
