import pytest

from app.core.exceptions import ValidationError
from app.services.time_slots import DEFAULT_TIME_SLOTS, resolve_time_slot


def test_default_catalog_is_nine_hourly_slots():
    assert [slot.id for slot in DEFAULT_TIME_SLOTS] == [str(index) for index in range(1, 10)]
    assert DEFAULT_TIME_SLOTS[0].start_time == "08:00"
    assert DEFAULT_TIME_SLOTS[-1].end_time == "17:00"
    assert all(slot.duration == 60 for slot in DEFAULT_TIME_SLOTS)


def test_resolve_time_slot_accepts_padded_ids():
    slot = resolve_time_slot(" 2 ")
    assert (slot.start_time, slot.end_time) == ("09:00", "10:00")


def test_resolve_time_slot_rejects_unknown_ids():
    with pytest.raises(ValidationError) as exc_info:
        resolve_time_slot("42")
    assert exc_info.value.details["valid_time_slot_ids"][0] == "1"


def test_timeslots_endpoint_requires_login(client):
    assert client.get("/api/timeslots").status_code == 401


def test_timeslots_endpoint_lists_department_and_university_slots(client, admin):
    response = client.get("/api/timeslots", headers=admin["headers"])
    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["departmentSlots"]) == 9
    assert data["universitySlots"][3] == {
        "id": "4",
        "start_time": "11:00",
        "end_time": "12:00",
        "duration": 60,
        "label": "11:00-12:00",
    }
