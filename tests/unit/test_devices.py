"""Tests for the device registry and key lifecycle."""

from datetime import timedelta

import pytest

from keygate.common.exceptions import (
    DeviceNotFoundError,
    DuplicateDeviceError,
    ValidationError,
)
from keygate.common.security import Principal
from keygate.devices.service import normalize_mac
from keygate.devices.status import DeviceStatus, device_status
from keygate.keygen.generator import validate_format


ADMIN = Principal(user_id="user-1", username="admin", role="admin")
MAC = "AA:BB:CC:DD:EE:01"


class TestNormalizeMac:
    def test_uppercases_and_colons(self):
        assert normalize_mac(" aa-bb-cc-dd-ee-01 ") == MAC

    def test_empty(self):
        assert normalize_mac("") == ""


class TestCreate:
    async def test_registers_pending(self, services, now):
        async with services.db.get_session() as session:
            device = await services.devices.create(session, MAC, "H1", actor=ADMIN, now=now)
        assert device.key_code is None
        assert device.active is False
        assert device.added_by == ADMIN.user_id
        assert device_status(device, now) == DeviceStatus.PENDING

    async def test_duplicate_mac_rejected(self, services):
        async with services.db.get_session() as session:
            await services.devices.create(session, MAC, "H1")
        with pytest.raises(DuplicateDeviceError):
            async with services.db.get_session() as session:
                await services.devices.create(session, MAC.lower(), "H2")

    async def test_missing_fields(self, services):
        async with services.db.get_session() as session:
            with pytest.raises(ValidationError):
                await services.devices.create(session, "", "H1")
            with pytest.raises(ValidationError):
                await services.devices.create(session, MAC, "   ")


class TestIssueKey:
    async def test_creates_active_device(self, services, now):
        async with services.db.get_session() as session:
            device = await services.devices.issue_key(
                session, MAC, "H1", "1month", actor=ADMIN, now=now,
            )
        assert validate_format(device.key_code)
        assert device.active is True
        assert device.activated_at == now
        assert device.expires_at == now + timedelta(days=30)
        assert device_status(device, now) == DeviceStatus.ACTIVE

    async def test_one_day_scenario(self, services, now):
        async with services.db.get_session() as session:
            device = await services.devices.issue_key(session, MAC, "H1", "1day", now=now)
        assert device_status(device, now + timedelta(hours=1)) == DeviceStatus.ACTIVE
        assert device_status(device, now + timedelta(hours=25)) == DeviceStatus.EXPIRED

    async def test_forever_key(self, services, now):
        async with services.db.get_session() as session:
            device = await services.devices.issue_key(session, MAC, "H1", "forever", now=now)
        assert device.expires_at is None
        assert device_status(device, now + timedelta(days=10_000)) == DeviceStatus.ACTIVE

    async def test_pending_device_receives_key(self, services, now):
        async with services.db.get_session() as session:
            pending = await services.devices.create(session, MAC, "old-name", now=now)
        async with services.db.get_session() as session:
            issued = await services.devices.issue_key(session, MAC, "H1", "3days", now=now)
            assert issued.id == pending.id
            assert issued.hostname == "H1"
            assert len(await services.devices.list_devices(session)) == 1

    async def test_device_holding_key_rejected(self, services, now):
        async with services.db.get_session() as session:
            await services.devices.issue_key(session, MAC, "H1", "1day", now=now)
        with pytest.raises(DuplicateDeviceError):
            async with services.db.get_session() as session:
                await services.devices.issue_key(session, MAC, "H1", "1day", now=now)

    async def test_expired_device_still_needs_reset(self, services, now):
        async with services.db.get_session() as session:
            await services.devices.issue_key(session, MAC, "H1", "1day", now=now)
        with pytest.raises(DuplicateDeviceError):
            async with services.db.get_session() as session:
                await services.devices.issue_key(
                    session, MAC, "H1", "1day", now=now + timedelta(days=5),
                )

    async def test_unknown_duration_rejected(self, services):
        async with services.db.get_session() as session:
            with pytest.raises(ValidationError):
                await services.devices.issue_key(session, MAC, "H1", "10years")
            assert await services.devices.find_by_mac(session, MAC) is None

    async def test_appends_issue_key_log(self, services, now):
        async with services.db.get_session() as session:
            device = await services.devices.issue_key(session, MAC, "H1", "1day", actor=ADMIN, now=now)
        async with services.db.get_session() as session:
            entries = await services.audit.list_entries(session)
        assert len(entries) == 1
        assert entries[0].action == "issue_key"
        assert entries[0].device_id == device.id
        assert entries[0].username == "admin"
        assert entries[0].device_details == f"H1 ({MAC})"

    async def test_reissue_after_reset_yields_new_key(self, services, now):
        async with services.db.get_session() as session:
            first = await services.devices.issue_key(session, MAC, "H1", "1day", now=now)
            first_key = first.key_code
        async with services.db.get_session() as session:
            await services.devices.reset(session, first.id)
        async with services.db.get_session() as session:
            second = await services.devices.issue_key(session, MAC, "H1", "1day", now=now)
        assert second.id == first.id
        assert second.key_code != first_key

    async def test_log_failure_rolls_back_device(self, services, monkeypatch):
        async def broken_append(*args, **kwargs):
            raise RuntimeError("log store down")

        monkeypatch.setattr(services.audit, "append", broken_append)
        with pytest.raises(RuntimeError):
            async with services.db.get_session() as session:
                await services.devices.issue_key(session, MAC, "H1", "1day")
        monkeypatch.undo()

        async with services.db.get_session() as session:
            assert await services.devices.find_by_mac(session, MAC) is None


class TestLookups:
    async def _seed(self, services, now):
        async with services.db.get_session() as session:
            active = await services.devices.issue_key(session, "AA:00:00:00:00:01", "alpha", "forever", now=now)
            expired = await services.devices.issue_key(
                session, "AA:00:00:00:00:02", "beta", "1day", now=now - timedelta(days=2),
            )
            pending = await services.devices.create(session, "AA:00:00:00:00:03", "gamma", now=now)
        return active, expired, pending

    async def test_get_missing(self, services):
        async with services.db.get_session() as session:
            with pytest.raises(DeviceNotFoundError):
                await services.devices.get(session, "nope")

    async def test_find_by_key(self, services, now):
        active, _, _ = await self._seed(services, now)
        async with services.db.get_session() as session:
            found = await services.devices.find_by_key(session, active.key_code.lower())
            assert found.id == active.id
            assert await services.devices.find_by_key(session, "") is None
            assert await services.devices.find_by_key(session, "ZZZZZ-ZZZZZ-ZZZZZ-ZZZZZ-ZZZZZ") is None

    async def test_find_by_mac_and_status(self, services, now):
        active, expired, pending = await self._seed(services, now)
        async with services.db.get_session() as session:
            devices = services.devices
            assert (await devices.find_by_mac_and_status(session, "aa-00-00-00-00-01", "active", now)).id == active.id
            assert await devices.find_by_mac_and_status(session, expired.mac, "active", now) is None
            assert (await devices.find_by_mac_and_status(session, expired.mac, "expired", now)).id == expired.id
            assert (await devices.find_by_mac_and_status(session, pending.mac, DeviceStatus.PENDING, now)).id == pending.id
            assert await devices.find_by_mac_and_status(session, "FF:FF:FF:FF:FF:FF", "active", now) is None

    async def test_list_filters_by_status(self, services, now):
        active, expired, pending = await self._seed(services, now)
        async with services.db.get_session() as session:
            devices = services.devices
            assert [d.id for d in await devices.list_devices(session, status="active", now=now)] == [active.id]
            assert [d.id for d in await devices.list_devices(session, status="expired", now=now)] == [expired.id]
            assert [d.id for d in await devices.list_devices(session, status="pending", now=now)] == [pending.id]
            assert len(await devices.list_devices(session, now=now)) == 3

    async def test_list_keeps_registration_order_on_equal_timestamps(self, services, now):
        macs = [f"AA:BB:CC:DD:EE:{i:02d}" for i in range(12)]
        async with services.db.get_session() as session:
            for i, mac in enumerate(macs):
                if i % 2:
                    await services.devices.issue_key(session, mac, f"h{i}", "1day", now=now)
                else:
                    await services.devices.create(session, mac, f"h{i}", now=now)
        async with services.db.get_session() as session:
            listed = await services.devices.list_devices(session)
        assert [d.mac for d in listed] == macs

    async def test_registration_order_survives_deletes(self, services, now):
        async with services.db.get_session() as session:
            first = await services.devices.create(session, "AA:00:00:00:00:01", "one", now=now)
            second = await services.devices.create(session, "AA:00:00:00:00:02", "two", now=now)
        async with services.db.get_session() as session:
            await services.devices.delete(session, second.id, now=now)
            third = await services.devices.create(session, "AA:00:00:00:00:03", "three", now=now)
        async with services.db.get_session() as session:
            listed = await services.devices.list_devices(session)
        assert [d.id for d in listed] == [first.id, third.id]

    async def test_list_search(self, services, now):
        active, _, _ = await self._seed(services, now)
        async with services.db.get_session() as session:
            by_host = await services.devices.list_devices(session, search="BETA")
            assert [d.hostname for d in by_host] == ["beta"]
            by_key = await services.devices.list_devices(session, search=active.key_code[:5].lower())
            assert active.id in [d.id for d in by_key]


class TestResetAndDelete:
    async def test_reset_clears_key(self, services, now):
        async with services.db.get_session() as session:
            device = await services.devices.issue_key(session, MAC, "H1", "6months", now=now)
        async with services.db.get_session() as session:
            reset = await services.devices.reset(session, device.id, actor=ADMIN)
        assert reset.key_code is None
        assert reset.active is False
        assert reset.expires_at is None
        assert device_status(reset, now) == DeviceStatus.PENDING

    async def test_reset_logs(self, services, now):
        async with services.db.get_session() as session:
            device = await services.devices.issue_key(session, MAC, "H1", "1day", now=now)
        async with services.db.get_session() as session:
            await services.devices.reset(session, device.id, actor=ADMIN, now=now + timedelta(minutes=1))
        async with services.db.get_session() as session:
            entries = await services.audit.list_entries(session)
        assert [e.action for e in entries] == ["reset", "issue_key"]

    async def test_reset_missing(self, services):
        with pytest.raises(DeviceNotFoundError):
            async with services.db.get_session() as session:
                await services.devices.reset(session, "missing")

    async def test_delete_keeps_history(self, services, now):
        async with services.db.get_session() as session:
            device = await services.devices.issue_key(session, MAC, "H1", "1day", now=now)
        async with services.db.get_session() as session:
            await services.devices.delete(session, device.id, actor=ADMIN, now=now + timedelta(minutes=1))
        async with services.db.get_session() as session:
            assert await services.devices.list_devices(session) == []
            history = await services.audit.list_for_device(session, device.id)
        assert [e.action for e in history] == ["delete", "issue_key"]

    async def test_delete_missing(self, services):
        with pytest.raises(DeviceNotFoundError):
            async with services.db.get_session() as session:
                await services.devices.delete(session, "missing")
