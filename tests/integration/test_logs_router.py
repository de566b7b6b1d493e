"""Integration tests for the audit log endpoints."""

import pytest


class TestLogsRouter:
    async def test_requires_auth(self, client):
        assert (await client.get("/logs")).status_code == 401
        assert (await client.post("/logs", json={"action": "login"})).status_code == 401

    async def test_login_is_logged(self, client, admin_headers):
        resp = await client.get("/logs", headers=admin_headers)
        assert resp.status_code == 200
        entries = resp.json()
        assert len(entries) == 1
        assert entries[0]["action"] == "login"
        assert entries[0]["username"] == "admin"
        assert entries[0]["deviceDetails"] is None
        assert isinstance(entries[0]["id"], int)

    async def test_append_device_details_form(self, client, staff_headers):
        resp = await client.post("/logs", json={
            "action": "reset",
            "deviceId": "dev-1",
            "deviceDetails": "Office PC (00:1B:44:11:3A:B7)",
        }, headers=staff_headers)
        assert resp.status_code == 201
        assert resp.json()["success"] is True

        newest = (await client.get("/logs", params={"limit": 1}, headers=staff_headers)).json()[0]
        assert newest["action"] == "reset"
        assert newest["deviceDetails"] == "Office PC (00:1B:44:11:3A:B7)"
        assert newest["username"] == "staff"

    async def test_actor_comes_from_token(self, client, staff_headers):
        await client.post("/logs", json={
            "action": "login", "userId": "someone-else", "username": "mallory",
        }, headers=staff_headers)
        newest = (await client.get("/logs", params={"limit": 1}, headers=staff_headers)).json()[0]
        assert newest["username"] == "staff"
        assert newest["userId"] != "someone-else"

    @pytest.mark.parametrize("body", [
        {"action": "update"},
        {"action": "delete"},
        {"action": "issue_key", "deviceDetails": "no parentheses"},
        {},
    ])
    async def test_rejects_invalid_entries(self, client, admin_headers, body):
        resp = await client.post("/logs", json=body, headers=admin_headers)
        assert resp.status_code == 422

    async def test_newest_first_with_limit(self, client, admin_headers):
        for i in range(5):
            await client.post("/logs", json={
                "action": "issue_key", "macAddress": f"AA:00:{i:02d}", "hostname": f"h{i}",
            }, headers=admin_headers)
        entries = (await client.get("/logs", params={"limit": 3}, headers=admin_headers)).json()
        assert [e["deviceDetails"] for e in entries] == [
            "h4 (AA:00:04)", "h3 (AA:00:03)", "h2 (AA:00:02)",
        ]

    async def test_filter_by_action(self, client, admin_headers):
        await client.post("/logs", json={
            "action": "delete", "macAddress": "AA:01", "hostname": "gone",
        }, headers=admin_headers)
        entries = (await client.get("/logs", params={"action": "delete"}, headers=admin_headers)).json()
        assert [e["action"] for e in entries] == ["delete"]

    async def test_limit_bounds(self, client, admin_headers):
        assert (await client.get("/logs", params={"limit": 0}, headers=admin_headers)).status_code == 422
        resp = await client.get("/logs", params={"limit": 100000}, headers=admin_headers)
        assert resp.status_code == 422
        assert resp.json()["code"] == "VALIDATION_ERROR"

    async def test_no_update_or_delete_routes(self, client, admin_headers):
        entry_id = (await client.get("/logs", headers=admin_headers)).json()[0]["id"]
        assert (await client.delete(f"/logs/{entry_id}", headers=admin_headers)).status_code in (404, 405)
        assert (await client.put(f"/logs/{entry_id}", json={}, headers=admin_headers)).status_code in (404, 405)
