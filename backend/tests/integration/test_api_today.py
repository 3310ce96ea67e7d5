import pytest


async def test_day_view_for_untouched_day(client):
    resp = await client.get("/today/2024-01-05")
    assert resp.status_code == 200
    assert resp.json() == {
        "date": "2024-01-05",
        "total_hours": 0.0,
        "total_display": "0h 0m",
        "workout_done": False,
        "entries": [],
    }


async def test_manual_and_stopwatch_entries(client):
    manual = await client.post("/today/2024-01-05/entries", json={"hours": 2.5})
    assert manual.status_code == 201, manual.text
    assert manual.json()["total_display"] == "2h 30m"

    watch = await client.post("/today/2024-01-05/stopwatch", json={"elapsed_seconds": 5400})
    assert watch.status_code == 201, watch.text
    assert watch.json()["hours_added"] == pytest.approx(1.5)
    assert watch.json()["total_hours"] == pytest.approx(4.0)

    day = (await client.get("/today/2024-01-05")).json()
    assert day["total_display"] == "4h 0m"
    assert [(e["kind"], e["note"]) for e in day["entries"]] == [
        ("manual", "Manual time entry"),
        ("stopwatch", "Stopwatch session"),
    ]


async def test_zero_hours_are_rejected(client):
    resp = await client.post("/today/2024-01-05/entries", json={"hours": 0})
    assert resp.status_code == 422


async def test_bad_date_is_rejected(client):
    resp = await client.get("/today/yesterday")
    assert resp.status_code == 422


async def test_delete_single_entry(client):
    created = (await client.post("/today/2024-01-06/entries", json={"hours": 1.0})).json()

    resp = await client.delete(f"/today/entries/{created['id']}")
    assert resp.status_code == 204

    missing = await client.delete(f"/today/entries/{created['id']}")
    assert missing.status_code == 404

    day = (await client.get("/today/2024-01-06")).json()
    assert day["entries"] == []
    assert day["total_hours"] == 0


async def test_bulk_delete_reports_count_and_new_total(client):
    ids = []
    for hours in (1.0, 2.0, 3.0):
        ids.append((await client.post("/today/2024-01-07/entries", json={"hours": hours})).json()["id"])

    resp = await client.post("/today/2024-01-07/entries/bulk-delete", json={"ids": ids[:2] + [999]})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"requested": 3, "deleted": 2, "total_hours": 3.0}


async def test_bulk_delete_skips_entries_from_other_days(client):
    mine = (await client.post("/today/2024-01-07/entries", json={"hours": 1.0})).json()["id"]
    other = (await client.post("/today/2024-02-01/entries", json={"hours": 2.0})).json()["id"]

    resp = await client.post("/today/2024-01-07/entries/bulk-delete", json={"ids": [mine, other]})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"requested": 2, "deleted": 1, "total_hours": 0.0}

    untouched = (await client.get("/today/2024-02-01")).json()
    assert [e["id"] for e in untouched["entries"]] == [other]
    assert untouched["total_hours"] == pytest.approx(2.0)

    only_foreign = await client.post("/today/2024-01-07/entries/bulk-delete", json={"ids": [other]})
    assert only_foreign.status_code == 500
    assert only_foreign.json()["detail"] == "Failed to delete entries"


async def test_bulk_delete_with_nothing_deleted_is_an_error(client):
    resp = await client.post("/today/2024-01-07/entries/bulk-delete", json={"ids": [41, 42]})
    assert resp.status_code == 500


async def test_workout_save_keeps_recomputed_total(client):
    await client.post("/today/2024-01-08/entries", json={"hours": 1.25})

    resp = await client.put("/today/2024-01-08/workout", json={"workout_done": True})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["workout_done"] is True
    assert body["total_hours"] == pytest.approx(1.25)

    records = (await client.get("/records")).json()
    assert records == [{"date": "2024-01-08", "hours": 1.25, "workout_done": True}]
