"""Store operations: repositories, session, cascades and status machines."""

from app.models import AppointmentStatus, ResourceRequestStatus, Role
from app.shared.schemas import CONFLICT, INVALID, NOT_FOUND, UNAUTHENTICATED
from app.store import HospitalStore, MemoryStorage, Session
from app.store.state import APPOINTMENTS_KEY, DOCTORS_KEY, HOSPITAL_RESOURCES_KEY, USERS_KEY

from conftest import make_patient


def test_generated_ids_are_unique(store):
    ids = [store.add_doctor({"name": f"Dr. {i}", "specialty": "ENT"}).entity_id for i in range(200)]
    assert len(set(ids)) == len(ids)
    assert all(doc_id in store.doctors for doc_id in ids)


def test_add_ignores_caller_supplied_id(store):
    result = store.add_doctor({"id": "d1", "name": "Dr. Clash", "specialty": "ENT"})
    assert result.entity_id != "d1"
    assert store.doctors.get("d1").name == "Dr. Sarah Jenkins"


def test_demo_data_seeded_when_storage_empty(store):
    assert store.users.first(lambda u: u.email == "admin@medicore.com").role == Role.ADMIN
    assert len(store.doctors) == 10
    assert len(store.hospital_resources) == 5
    assert len(store.appointments) == 0


def test_no_seed_when_disabled():
    store = HospitalStore(MemoryStorage(), seed_demo_data=False)
    assert len(store.users) == 0
    assert len(store.doctors) == 0


def test_seed_data_is_written_to_storage(storage, store):
    assert len(storage.get(DOCTORS_KEY)) == 10
    assert len(storage.get(HOSPITAL_RESOURCES_KEY)) == 5
    assert storage.get(USERS_KEY)[0]["email"] == "admin@medicore.com"
    assert storage.get(APPOINTMENTS_KEY) == []


def test_add_with_missing_fields_fails_without_change(storage, store, session):
    doctors_before = storage.get(DOCTORS_KEY)
    
    result = store.add_doctor({"specialty": "x"})
    assert not result.ok
    assert result.reason == INVALID
    assert "name" in result.message
    assert len(store.doctors) == 10
    assert storage.get(DOCTORS_KEY) == doctors_before
    
    assert store.add_resource({"name": "Stretcher", "total_stock": "lots"}).reason == INVALID
    assert len(store.hospital_resources) == 5
    
    signup = store.signup(session, {"email": "nameless@medicore.com", "password": "pw"})
    assert signup.reason == INVALID
    assert session.current_user is None
    assert store.users.first(lambda u: u.email == "nameless@medicore.com") is None


def test_mutations_survive_restart(storage, store, session):
    patient_id = make_patient(store, session)
    store.book_appointment(session, "d1", "2024-06-01", "10:00")
    
    reopened = HospitalStore(storage)
    restored = Session(storage)
    restored.restore()
    
    assert reopened.users.get(patient_id).email == "pat@medicore.com"
    assert len(reopened.appointments) == 1
    assert restored.current_user.id == patient_id


def test_persisted_records_use_camel_case_keys(storage, store, session):
    make_patient(store, session)
    store.book_appointment(session, "d1", "2024-06-01", "10:00")
    
    stored = storage.get(APPOINTMENTS_KEY)[0]
    assert stored["patientId"] == session.current_user.id
    assert stored["doctorName"] == "Dr. Sarah Jenkins"
    assert "availableDays" in storage.get("doctors")[0]


def test_login_success_and_failure(store, session):
    store.signup(session, {"name": "X", "email": "x@y.com", "password": "pw123", "role": Role.PATIENT})
    store.logout(session)
    
    bad = store.login(session, "x@y.com", "wrong")
    assert not bad.ok
    assert bad.reason == UNAUTHENTICATED
    assert bad.message == "Invalid credentials."
    assert session.current_user is None
    
    good = store.login(session, "x@y.com", "pw123")
    assert good.ok
    assert session.current_user.email == "x@y.com"


def test_unknown_email_gets_same_message_as_wrong_password(store, session):
    unknown = store.login(session, "nobody@medicore.com", "admin")
    wrong = store.login(session, "admin@medicore.com", "nope")
    assert unknown.message == wrong.message


def test_signup_logs_in_and_rejects_duplicate_email(store, session):
    make_patient(store, session)
    assert session.current_user.email == "pat@medicore.com"
    
    again = store.signup(session, {"name": "Other", "email": "PAT@medicore.com", "password": "x"})
    assert not again.ok
    assert again.reason == CONFLICT


def test_logout_keeps_collections(store, session):
    make_patient(store, session)
    store.book_appointment(session, "d1", "2024-06-01", "10:00")
    store.logout(session)
    
    assert session.current_user is None
    assert len(store.appointments) == 1
    assert len(store.users) == 2


def test_update_user_refreshes_session(store, session):
    patient_id = make_patient(store, session)
    updated = store.users.get(patient_id).model_copy(update={"avatar": "data:image/png;base64,AAA"})
    
    assert store.update_user(session, updated).ok
    assert session.current_user.avatar == "data:image/png;base64,AAA"


def test_update_missing_doctor_is_a_failed_no_op(store):
    ghost = store.doctors.get("d1").model_copy(update={"id": "ghost"})
    result = store.update_doctor(ghost)
    assert not result.ok
    assert result.reason == NOT_FOUND
    assert "ghost" not in store.doctors


def test_deleting_user_cancels_but_keeps_appointments(store, session):
    patient_id = make_patient(store, session)
    first = store.book_appointment(session, "d1", "2024-06-01", "10:00").entity_id
    second = store.book_appointment(session, "d2", "2024-06-02", "09:00").entity_id
    store.approve_appointment(second)
    
    assert store.delete_user(patient_id).ok
    
    assert patient_id not in store.users
    assert len(store.appointments) == 2
    assert store.appointments.get(first).status == AppointmentStatus.CANCELLED
    assert store.appointments.get(second).status == AppointmentStatus.CANCELLED


def test_delete_account_logs_out(store, session):
    patient_id = make_patient(store, session)
    store.book_appointment(session, "d1", "2024-06-01", "10:00")
    
    assert store.delete_account(session).ok
    
    assert session.current_user is None
    assert patient_id not in store.users
    assert all(a.status == AppointmentStatus.CANCELLED for a in store.appointments)


def test_booking_snapshots_names(store, session):
    patient_id = make_patient(store, session)
    appointment_id = store.book_appointment(session, "d3", "2024-06-01", "10:00").entity_id
    
    renamed = store.doctors.get("d3").model_copy(update={"name": "Dr. Emily Stone-Hart"})
    store.update_doctor(renamed)
    
    appointment = store.appointments.get(appointment_id)
    assert appointment.patient_id == patient_id
    assert appointment.doctor_name == "Dr. Emily Stone"


def test_booking_requires_session_and_known_doctor(store, session):
    assert store.book_appointment(session, "d1", "2024-06-01", "10:00").reason == UNAUTHENTICATED
    make_patient(store, session)
    assert store.book_appointment(session, "missing", "2024-06-01", "10:00").reason == NOT_FOUND


def test_booking_scenario(store, session):
    patient_id = make_patient(store, session)
    result = store.book_appointment(session, "d1", "2024-06-01", "10:00")
    appointment = store.appointments.get(result.entity_id)
    assert appointment.status == AppointmentStatus.PENDING
    assert appointment.patient_id == patient_id
    assert appointment.doctor_id == "d1"
    
    assert store.approve_appointment(appointment.id).ok
    assert store.appointments.get(appointment.id).status == AppointmentStatus.UPCOMING
    
    assert store.cancel_appointment(appointment.id).ok
    assert store.appointments.get(appointment.id).status == AppointmentStatus.CANCELLED
    
    assert store.cancel_appointment(appointment.id).ok
    assert store.appointments.get(appointment.id).status == AppointmentStatus.CANCELLED


def test_approving_cancelled_appointment_is_rejected(store, session):
    make_patient(store, session)
    appointment_id = store.book_appointment(session, "d1", "2024-06-01", "10:00").entity_id
    store.cancel_appointment(appointment_id)
    
    result = store.approve_appointment(appointment_id)
    assert not result.ok
    assert store.appointments.get(appointment_id).status == AppointmentStatus.CANCELLED


def test_completion_only_from_upcoming(store, session):
    make_patient(store, session)
    appointment_id = store.book_appointment(session, "d1", "2024-06-01", "10:00").entity_id
    
    assert not store.complete_appointment(appointment_id).ok
    store.approve_appointment(appointment_id)
    assert store.complete_appointment(appointment_id).ok
    
    assert not store.cancel_appointment(appointment_id).ok
    assert store.appointments.get(appointment_id).status == AppointmentStatus.COMPLETED


def test_status_history_follows_transitions(store, session):
    make_patient(store, session)
    appointment_id = store.book_appointment(session, "d1", "2024-06-01", "10:00").entity_id
    history = [store.appointments.get(appointment_id).status]
    for op in (store.approve_appointment, store.approve_appointment,
               store.complete_appointment, store.cancel_appointment, store.approve_appointment):
        op(appointment_id)
        status = store.appointments.get(appointment_id).status
        if status != history[-1]:
            history.append(status)
    
    assert history == [AppointmentStatus.PENDING, AppointmentStatus.UPCOMING, AppointmentStatus.COMPLETED]


def test_delete_appointment_removes_record(store, session):
    make_patient(store, session)
    appointment_id = store.book_appointment(session, "d1", "2024-06-01", "10:00").entity_id
    assert store.delete_appointment(appointment_id).ok
    assert appointment_id not in store.appointments
    assert store.delete_appointment(appointment_id).reason == NOT_FOUND


def test_resource_request_copies_price_and_id(store, session):
    make_patient(store, session)
    request_id = store.request_resource(session, "r2", "2024-06-01").entity_id
    request = store.resource_requests.get(request_id)
    
    assert request.status == ResourceRequestStatus.PENDING
    assert request.resource_id == "r2"
    assert request.type == "ICU Bed"
    assert request.price == 8000
    
    repriced = store.hospital_resources.get("r2").model_copy(update={"price": 9000})
    store.update_resource(repriced)
    assert store.resource_requests.get(request_id).price == 8000


def test_patient_can_only_cancel_own_pending_request(store, session):
    owner_id = make_patient(store, session)
    request_id = store.request_resource(session, "r1", "2024-06-01").entity_id
    paid_id = store.request_resource(session, "r1", "2024-06-02").entity_id
    store.mark_request_paid(paid_id)
    
    make_patient(store, session, email="other@medicore.com", name="Other")
    other = session.current_user
    assert not store.cancel_resource_request(request_id, actor=other).ok
    
    owner = store.users.get(owner_id)
    assert not store.cancel_resource_request(paid_id, actor=owner).ok
    assert store.resource_requests.get(paid_id).status == ResourceRequestStatus.PAID
    
    assert store.cancel_resource_request(request_id, actor=owner).ok
    assert store.resource_requests.get(request_id).status == ResourceRequestStatus.CANCELLED


def test_cancelled_request_cannot_be_paid(store, session):
    make_patient(store, session)
    request_id = store.request_resource(session, "r1", "2024-06-01").entity_id
    store.cancel_resource_request(request_id)
    
    assert not store.mark_request_paid(request_id).ok
    assert store.resource_requests.get(request_id).status == ResourceRequestStatus.CANCELLED


def test_attach_remote_id_skips_vanished_records(store, session):
    patient_id = make_patient(store, session)
    assert store.attach_remote_id(USERS_KEY, patient_id, "srv-1")
    assert store.users.get(patient_id).remote_id == "srv-1"
    assert not store.attach_remote_id(USERS_KEY, "gone", "srv-2")
