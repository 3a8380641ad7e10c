"""HTTP surface - public rounds, guess submission, leaderboards, admin and health.

Invariants:
    - The prompt is hidden until the round is completed
    - Errors come back as {"error": {"code", ...}} with the error's HTTP status
    - Admin routes require X-Admin-Key when one is configured
"""

from uuid import uuid4

from tests.services.fakes import ADMIN_KEY


def _user():
    return {"X-User-Id": str(uuid4())}


ADMIN = {"X-Admin-Key": ADMIN_KEY}


async def _start_round(runtime):
    return await runtime.scheduler.rotate_round()


# ==============================================================================
# Health
# ==============================================================================


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


# ==============================================================================
# Rounds
# ==============================================================================


async def test_no_active_round_is_404(client):
    res = await client.get("/api/v1/rounds/active")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "NO_ACTIVE_ROUND"


async def test_active_round_hides_prompt(client, seeded, runtime):
    round_row = await _start_round(runtime)

    res = await client.get("/api/v1/rounds/active")

    assert res.status_code == 200
    body = res.json()
    assert body["round"]["id"] == str(round_row.id)
    assert body["round"]["status"] == "active"
    assert body["round"]["word_count"] == 7
    assert "prompt" not in body["round"]
    assert body["guess_count"] == 0
    assert body["has_guessed"] is None


async def test_submit_guess(client, seeded, runtime):
    round_row = await _start_round(runtime)
    user = _user()

    res = await client.post(
        f"/api/v1/rounds/{round_row.id}/guess", json={"guess": round_row.prompt}, headers=user,
    )

    assert res.status_code == 201
    body = res.json()
    assert body["score"] == 100
    assert body["rank"] == 1
    assert body["total_guesses"] == 1
    assert body["element_breakdown"]["element_score"] == 100

    active = (await client.get("/api/v1/rounds/active", headers=user)).json()
    assert active["has_guessed"] is True
    assert active["user_score"] == 100


async def test_guess_requires_user_id(client, seeded, runtime):
    round_row = await _start_round(runtime)
    res = await client.post(f"/api/v1/rounds/{round_row.id}/guess", json={"guess": "cat"})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_empty_guess_is_400(client, seeded, runtime):
    round_row = await _start_round(runtime)
    res = await client.post(
        f"/api/v1/rounds/{round_row.id}/guess", json={"guess": "   "}, headers=_user(),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_GUESS"


async def test_missing_body_field_is_validation_error(client, seeded, runtime):
    round_row = await _start_round(runtime)
    res = await client.post(f"/api/v1/rounds/{round_row.id}/guess", json={}, headers=_user())
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_duplicate_guess_is_409(client, seeded, runtime):
    round_row = await _start_round(runtime)
    user = _user()
    url = f"/api/v1/rounds/{round_row.id}/guess"

    await client.post(url, json={"guess": "a cat"}, headers=user)
    res = await client.post(url, json={"guess": "a dog"}, headers=user)

    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_GUESS"


async def test_guess_on_completed_round_is_rejected(client, seeded, runtime):
    first = await _start_round(runtime)
    await _start_round(runtime)

    res = await client.post(
        f"/api/v1/rounds/{first.id}/guess", json={"guess": "late"}, headers=_user(),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "ROUND_NOT_ACTIVE"


async def test_unknown_round_is_404(client):
    res = await client.get(f"/api/v1/rounds/{uuid4()}")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "ROUND_NOT_FOUND"


async def test_completed_round_reveals_prompt(client, seeded, runtime):
    first = await _start_round(runtime)
    await _start_round(runtime)

    res = await client.get(f"/api/v1/rounds/{first.id}")

    assert res.status_code == 200
    assert res.json()["round"]["prompt"] == first.prompt
    assert res.json()["round"]["status"] == "completed"


async def test_history_lists_completed_rounds(client, seeded, runtime):
    first = await _start_round(runtime)
    await _start_round(runtime)

    res = await client.get("/api/v1/rounds/history", params={"page": 1, "limit": 5})

    body = res.json()
    assert body["total"] == 1
    assert [r["id"] for r in body["rounds"]] == [str(first.id)]
    assert body["rounds"][0]["prompt"] == first.prompt


async def test_leaderboard_hides_guesses_until_completed(client, seeded, runtime):
    round_row = await _start_round(runtime)
    url = f"/api/v1/rounds/{round_row.id}/guess"
    await client.post(url, json={"guess": round_row.prompt}, headers=_user())
    await client.post(url, json={"guess": "zebra"}, headers=_user())

    live = (await client.get(f"/api/v1/rounds/{round_row.id}/leaderboard")).json()
    assert live["total"] == 2
    assert live["entries"][0]["rank"] == 1
    assert live["entries"][0]["score"] == 100
    assert all(e["guess_text"] is None for e in live["entries"])

    await _start_round(runtime)
    done = (await client.get(f"/api/v1/rounds/{round_row.id}/leaderboard")).json()
    assert done["entries"][0]["guess_text"] == round_row.prompt


# ==============================================================================
# Admin
# ==============================================================================


async def test_admin_requires_key(client):
    res = await client.get("/api/v1/admin/rounds/next")
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "ADMIN_ACCESS_DENIED"


async def test_admin_rotate(client, seeded, runtime):
    res = await client.post("/api/v1/admin/rounds/rotate", headers=ADMIN)

    assert res.status_code == 200
    body = res.json()
    active = await runtime.round_engine.get_active_round()
    assert body["round_id"] == str(active.id)


async def test_admin_rotate_failure_is_503(client, runtime):
    res = await client.post("/api/v1/admin/rounds/rotate", headers=ADMIN)
    assert res.status_code == 503
    assert res.json()["error"]["code"] == "ROUND_CREATION_FAILED"


async def test_admin_next_rotation(client):
    res = await client.get("/api/v1/admin/rounds/next", headers=ADMIN)
    assert res.status_code == 200
    assert res.json() == {"next_rotation_at": None, "scheduler_running": False}


async def test_admin_variety_report(client, seeded, runtime):
    await _start_round(runtime)
    await _start_round(runtime)

    res = await client.get("/api/v1/admin/word-bank/variety", headers=ADMIN)

    assert res.status_code == 200
    body = res.json()
    assert body["rounds_analyzed"] == 2
    assert body["total_words"] == seeded
    assert "animals" in body["categories"]
