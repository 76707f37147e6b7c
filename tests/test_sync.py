"""Remote mirroring: id reconciliation, fallback lookup, failures and reloads."""

import asyncio

from app.features.auth.service import AuthService
from app.features.appointments.service import AppointmentService
from app.features.appointments.schemas import BookAppointmentRequest
from app.features.resources.schemas import ResourceRequestCreate
from app.features.resources.service import ResourceService
from app.models import AppointmentStatus, ResourceRequestStatus, Role
from app.portal import build_portal
from app.shared.schemas import UNAUTHENTICATED, UNAVAILABLE
from app.store import MemoryStorage
from app.store.state import DOCTORS_KEY, RESOURCE_REQUESTS_KEY, USERS_KEY
from app.sync.mappers import MAPPINGS

from conftest import InMemoryRemoteBackend, make_patient, wait_until


def _portal(backend, seed=True):
    return build_portal(storage=MemoryStorage(), backend=backend, seed_demo_data=seed)


def test_create_records_remote_id():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        patient_id = make_patient(portal.store, portal.session)
        
        warnings = await portal.mirror_create(USERS_KEY, portal.store.users.get(patient_id))
        
        assert warnings == []
        [row] = backend.tables["profiles"]
        assert row["id"] == patient_id
        assert row["role"] == "patient"
        assert portal.store.users.get(patient_id).remote_id == row["_id"]
    
    asyncio.run(scenario())


def test_update_falls_back_to_natural_key():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        # Row written by another client under a server-generated id only
        remote_id = backend.seed("doctors", {"name": "Dr. Sarah Jenkins", "specialty": "Cardio"})
        
        previous = portal.store.doctors.get("d1")
        updated = previous.model_copy(update={"bio": "Updated bio"})
        portal.store.update_doctor(updated)
        warnings = await portal.mirror_update(DOCTORS_KEY, updated, previous)
        
        assert warnings == []
        row = backend.tables["doctors"][0]
        assert row["bio"] == "Updated bio"
        assert row["id"] == "d1"
        assert portal.store.doctors.get("d1").remote_id == remote_id
    
    asyncio.run(scenario())


def test_lookup_order_prefers_remote_id():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        remote_id = backend.seed("doctors", {"id": "d1", "name": "Dr. Sarah Jenkins"})
        portal.store.attach_remote_id(DOCTORS_KEY, "d1", remote_id)
        
        row = await portal.sync.locate(MAPPINGS[DOCTORS_KEY], portal.store.doctors.get("d1"))
        
        assert row["_id"] == remote_id
        lookups = [c for c in backend.calls if c[0] == "find_one"]
        assert lookups == [("find_one", "doctors", {"_id": remote_id})]
    
    asyncio.run(scenario())


def test_missing_remote_row_warns_but_keeps_local_change():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        
        previous = portal.store.doctors.get("d2")
        result = portal.store.delete_doctor("d2")
        warnings = await portal.mirror_delete(DOCTORS_KEY, previous)
        
        assert result.ok
        assert "d2" not in portal.store.doctors
        assert len(warnings) == 1
        assert "no matching row" in warnings[0]
    
    asyncio.run(scenario())


def test_remote_failure_surfaces_warning_without_rollback():
    async def scenario():
        backend = InMemoryRemoteBackend()
        backend.failing.add("appointments")
        portal = _portal(backend)
        make_patient(portal.store, portal.session)
        
        result = await AppointmentService.book(
            portal, BookAppointmentRequest(doctor_id="d1", date="2024-06-01", time="10:00"),
        )
        
        assert result.ok
        assert result.warnings and "connection refused" in result.warnings[0]
        appointment = portal.store.appointments.get(result.entity_id)
        assert appointment.status == AppointmentStatus.PENDING
        assert appointment.remote_id is None
    
    asyncio.run(scenario())


def test_status_changes_are_mirrored():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        make_patient(portal.store, portal.session)
        booked = await AppointmentService.book(
            portal, BookAppointmentRequest(doctor_id="d1", date="2024-06-01", time="10:00"),
        )
        
        await AppointmentService.approve(portal, booked.entity_id)
        
        [row] = backend.tables["appointments"]
        assert row["status"] == "upcoming"
        assert row["doctor_name"] == "Dr. Sarah Jenkins"
        assert row["appointment_date"] == "2024-06-01"
        assert row["patient_email"] == "pat@medicore.com"
    
    asyncio.run(scenario())


def test_closed_adapter_does_not_write_back():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        await portal.close()
        
        warnings = await portal.mirror_create(DOCTORS_KEY, portal.store.doctors.get("d1"))
        
        assert warnings == []
        assert len(backend.tables["doctors"]) == 1
        assert portal.store.doctors.get("d1").remote_id is None
    
    asyncio.run(scenario())


def test_reload_replaces_mirrored_collections():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        backend.seed("profiles", {
            "id": "u9", "name": "Remote Pat", "email": "remote@medicore.com",
            "role": "patient", "password": "pw",
        })
        backend.seed("doctors", {"id": "d1", "name": "Dr. Sarah Jenkins", "specialty": "Cardiology"})
        backend.seed("appointments", {
            "patient_id": "u9", "doctor_name": "Dr. Sarah Jenkins",
            "appointment_date": "2024-06-01", "appointment_time": "10:00",
        })
        
        warnings = await portal.sync.reload()
        
        assert warnings == []
        assert [u.email for u in portal.store.users] == ["remote@medicore.com"]
        [appointment] = portal.store.appointments.list()
        assert appointment.doctor_id == "d1"
        assert appointment.patient_name == "Remote Pat"
        assert appointment.status == AppointmentStatus.PENDING
        # Catalog is local only and survives the reload
        assert len(portal.store.hospital_resources) == 5
    
    asyncio.run(scenario())


def test_reload_keeps_table_that_cannot_be_read():
    async def scenario():
        backend = InMemoryRemoteBackend()
        backend.failing.add("doctors")
        portal = _portal(backend)
        
        warnings = await portal.sync.reload()
        
        assert len(warnings) == 1
        assert len(portal.store.doctors) == 10
    
    asyncio.run(scenario())


def test_reload_signs_out_vanished_account():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        make_patient(portal.store, portal.session)
        
        await portal.sync.reload()
        
        assert portal.session.current_user is None
    
    asyncio.run(scenario())


def test_change_feed_triggers_reload():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        portal.sync.start()
        await asyncio.sleep(0)
        
        backend.seed("profiles", {"id": "u1", "name": "New", "email": "new@medicore.com", "role": "patient"})
        backend.notify("doctors")  # not watched
        backend.notify("profiles")
        await wait_until(lambda: portal.sync.reload_count == 1)
        
        assert portal.store.users.get("u1").name == "New"
        await portal.close()
        assert not portal.sync.is_live
    
    asyncio.run(scenario())


def test_remote_login_imports_unknown_profile():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        remote_id = backend.seed("profiles", {
            "id": "u7", "name": "Dana", "email": "dana@medicore.com",
            "role": "admin", "password": "secret",
        })
        
        bad = await AuthService.login(portal, "dana@medicore.com", "nope")
        assert bad.reason == UNAUTHENTICATED
        
        good = await AuthService.login(portal, "dana@medicore.com", "secret")
        assert good.ok
        user = portal.session.current_user
        assert user.id == "u7"
        assert user.role == Role.ADMIN
        assert portal.store.users.get("u7").remote_id == remote_id
    
    asyncio.run(scenario())


def test_remote_login_requires_remote_store():
    async def scenario():
        backend = InMemoryRemoteBackend()
        backend.failing.add("profiles")
        portal = _portal(backend)
        
        result = await AuthService.login(portal, "admin@medicore.com", "admin")
        
        assert result.reason == UNAVAILABLE
        assert portal.session.current_user is None
    
    asyncio.run(scenario())


def test_admin_delete_mirrors_cascade():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        patient_id = make_patient(portal.store, portal.session)
        await portal.mirror_create(USERS_KEY, portal.store.users.get(patient_id))
        booked = await AppointmentService.book(
            portal, BookAppointmentRequest(doctor_id="d1", date="2024-06-01", time="10:00"),
        )
        
        result = await AuthService.delete_user(portal, patient_id)
        
        assert result.ok and result.warnings == []
        assert backend.tables["profiles"] == []
        assert backend.tables["appointments"][0]["status"] == "cancelled"
        assert portal.store.appointments.get(booked.entity_id).status == AppointmentStatus.CANCELLED
    
    asyncio.run(scenario())


async def _request_icu_bed(portal, backend, time, remote_down=False):
    if remote_down:
        backend.failing.add("resources")
    result = await ResourceService.request_resource(
        portal, ResourceRequestCreate(resource_id="r2", date="2024-06-01", time=time),
    )
    backend.failing.discard("resources")
    assert result.ok
    return result.entity_id


def test_unsynced_request_does_not_overwrite_synced_sibling():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        patient_id = make_patient(portal.store, portal.session)
        await portal.mirror_create(USERS_KEY, portal.store.users.get(patient_id))
        first = await _request_icu_bed(portal, backend, "09:00", remote_down=True)
        second = await _request_icu_bed(portal, backend, "18:00")
        
        result = await ResourceService.cancel(portal, first)
        
        assert result.ok
        assert len(result.warnings) == 1 and "no matching row" in result.warnings[0]
        [row] = backend.tables["resources"]
        assert row["id"] == second
        assert row["status"] == "pending"
        
        await portal.sync.reload()
        assert portal.store.resource_requests.get(second).status == ResourceRequestStatus.PENDING
    
    asyncio.run(scenario())


def test_natural_key_match_claimed_by_another_record_is_skipped():
    async def scenario():
        backend = InMemoryRemoteBackend()
        portal = _portal(backend)
        make_patient(portal.store, portal.session)
        first = await _request_icu_bed(portal, backend, "09:00", remote_down=True)
        second = await _request_icu_bed(portal, backend, "09:00")
        
        row = await portal.sync.locate(
            MAPPINGS[RESOURCE_REQUESTS_KEY], portal.store.resource_requests.get(first),
        )
        assert row is None
        assert backend.tables["resources"][0]["id"] == second
        
        # A row nobody has claimed yet is still found by its natural key
        backend.tables["resources"][0]["id"] = None
        row = await portal.sync.locate(
            MAPPINGS[RESOURCE_REQUESTS_KEY], portal.store.resource_requests.get(first),
        )
        assert row is not None and row["time"] == "09:00"
    
    asyncio.run(scenario())


class VanishingRowBackend(InMemoryRemoteBackend):
    """Another client deletes the row between lookup and update."""
    
    async def update(self, table, filters, changes):
        self.tables[table].clear()
        return await super().update(table, filters, changes)


def test_update_of_row_removed_after_lookup_warns():
    async def scenario():
        backend = VanishingRowBackend()
        portal = _portal(backend)
        backend.seed("doctors", {"id": "d1", "name": "Dr. Sarah Jenkins"})
        
        previous = portal.store.doctors.get("d1")
        updated = previous.model_copy(update={"bio": "Moved on"})
        portal.store.update_doctor(updated)
        warnings = await portal.mirror_update(DOCTORS_KEY, updated, previous)
        
        assert len(warnings) == 1 and "removed" in warnings[0]
        assert portal.store.doctors.get("d1").bio == "Moved on"
        assert portal.store.doctors.get("d1").remote_id is None
    
    asyncio.run(scenario())


class FlakyStorageBackend(InMemoryRemoteBackend):
    """The first table read fails with an error that is not a remote error."""
    
    def __init__(self):
        super().__init__()
        self.broken_reads = 1
    
    async def select(self, table):
        if self.broken_reads:
            self.broken_reads -= 1
            raise OSError("disk full")
        return await super().select(table)


def test_change_feed_survives_failed_reload():
    async def scenario():
        backend = FlakyStorageBackend()
        portal = _portal(backend)
        portal.sync.start()
        await asyncio.sleep(0)
        
        backend.notify("profiles")
        await wait_until(lambda: backend.broken_reads == 0)
        backend.seed("profiles", {"id": "u1", "name": "Later", "email": "later@medicore.com", "role": "patient"})
        backend.notify("profiles")
        await wait_until(lambda: portal.sync.reload_count == 1)
        
        assert portal.store.users.get("u1").name == "Later"
        await portal.close()
    
    asyncio.run(scenario())
