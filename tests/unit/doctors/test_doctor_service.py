import pytest
from sqlalchemy.orm import Session

from clinic.config import TOP_RATED_LIMIT
from clinic.domain.doctors.schemas import DoctorCreate, DoctorListResponse, DoctorUpdate
from clinic.domain.doctors.service import DoctorService, parse_experience_filter
from clinic.exceptions import DoctorNotFound, InvalidCalendar, InvalidFilter, MissingField
from clinic.models import Doctor, User


@pytest.fixture
def service(db: Session) -> DoctorService:
    return DoctorService(db)


@pytest.fixture
def directory(make_doctor) -> list[Doctor]:
    return [
        make_doctor(name="Dr. Ada Grey", specialty="Cardiology", experience=8, gender="female", rating=4.8),
        make_doctor(name="Dr. Ben Stone", specialty="Dermatology", experience=3, gender="male", rating=3.9),
        make_doctor(name="Dr. Cleo Park", specialty="Cardiology", experience=15, gender="female", rating=4.2),
        make_doctor(name="Dr. Dan Holt", specialty="Neurology", experience=1, gender="male", rating=2.5),
    ]


class TestParseExperienceFilter:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, (None, None)),
            ("", (None, None)),
            ("5", (5, 5)),
            ("3-8", (3, 8)),
            (" 3 - 8 ", (3, 8)),
            ("10+", (10, None)),
        ],
    )
    def test_grammar(self, value, expected) -> None:
        assert parse_experience_filter(value) == expected

    @pytest.mark.parametrize("value", ["abc", "8-3", "5-", "+5"])
    def test_rejects_malformed(self, value: str) -> None:
        with pytest.raises(InvalidFilter):
            parse_experience_filter(value)


class TestSearch:
    @pytest.mark.usefixtures("directory")
    def test_unfiltered_is_paginated_by_rating(self, service: DoctorService) -> None:
        result = service.search(page=1, per_page=2)

        assert isinstance(result, DoctorListResponse)
        assert [d.name for d in result.doctors] == ["Dr. Ada Grey", "Dr. Cleo Park"]
        assert (result.total, result.page, result.perPage, result.totalPages) == (4, 1, 2, 2)

    @pytest.mark.usefixtures("directory")
    def test_text_matches_name_or_specialty(self, service: DoctorService) -> None:
        assert {d.name for d in service.search(query="cardio").doctors} == {"Dr. Ada Grey", "Dr. Cleo Park"}
        assert [d.name for d in service.search(query="stone").doctors] == ["Dr. Ben Stone"]

    @pytest.mark.usefixtures("directory")
    def test_filters_combine(self, service: DoctorService) -> None:
        result = service.search(gender="Female", experience="10+", rating=4.0)

        assert [d.name for d in result.doctors] == ["Dr. Cleo Park"]

    @pytest.mark.usefixtures("directory")
    def test_experience_range(self, service: DoctorService) -> None:
        result = service.search(experience="1-3")

        assert {d.name for d in result.doctors} == {"Dr. Ben Stone", "Dr. Dan Holt"}

    def test_inactive_doctors_are_hidden(self, service: DoctorService, directory: list[Doctor], db: Session) -> None:
        directory[0].is_active = False
        db.commit()

        result = service.search()

        assert "Dr. Ada Grey" not in [d.name for d in result.doctors]
        assert result.total == 3

    def test_top_rated_returns_short_list(self, service: DoctorService, make_doctor) -> None:
        for i in range(TOP_RATED_LIMIT + 2):
            make_doctor(name=f"Dr. {i}", rating=float(i % 5))

        result = service.search(top_rated=True)

        assert isinstance(result, list)
        assert len(result) == TOP_RATED_LIMIT
        assert [d.rating for d in result] == sorted((d.rating for d in result), reverse=True)

    @pytest.mark.usefixtures("directory")
    def test_top_rated_with_filters_falls_back_to_search(self, service: DoctorService) -> None:
        result = service.search(top_rated=True, gender="male")

        assert isinstance(result, DoctorListResponse)
        assert result.total == 2

    @pytest.mark.parametrize(("page", "per_page"), [(0, 10), (1, 0), (1, 101)])
    def test_rejects_bad_pagination(self, service: DoctorService, page: int, per_page: int) -> None:
        with pytest.raises(InvalidFilter):
            service.search(page=page, per_page=per_page)

    def test_rejects_bad_rating(self, service: DoctorService) -> None:
        with pytest.raises(InvalidFilter):
            service.search(rating=7)


class TestDoctorWrites:
    def test_add_doctor(self, service: DoctorService, admin: User) -> None:
        data = DoctorCreate(
            name="  Dr. New  ",
            specialty="Pediatrics",
            experience=4,
            degree="MBBS",
            location="North Wing",
            gender="female",
            available_times={"2025-03-01": {"morning": ["08:00"]}},
        )

        doctor = service.add_doctor(data, admin)

        assert doctor.name == "Dr. New"
        assert doctor.rating == 0.0
        assert doctor.created_by == admin.id
        assert doctor.available_times == {"2025-03-01": {"morning": ["08:00"]}}

    def test_add_doctor_lists_missing_fields(self, service: DoctorService, admin: User) -> None:
        with pytest.raises(MissingField) as exc_info:
            service.add_doctor(DoctorCreate(name="Dr. Half"), admin)

        assert "specialty" in exc_info.value.fields
        assert "available_times" in exc_info.value.fields

    def test_add_doctor_rejects_bad_calendar(self, service: DoctorService, admin: User) -> None:
        data = DoctorCreate(
            name="Dr. Bad",
            specialty="X",
            experience=1,
            degree="MD",
            location="Y",
            gender="male",
            available_times={"2025-03-01": "morning"},
        )

        with pytest.raises(InvalidCalendar):
            service.add_doctor(data, admin)

    def test_add_doctor_rejects_label_in_two_shifts(self, service: DoctorService, admin: User) -> None:
        data = DoctorCreate(
            name="Dr. Twice",
            specialty="X",
            experience=1,
            degree="MD",
            location="Y",
            gender="male",
            available_times={"2025-03-01": {"morning": ["08:00"], "evening": ["08:00"]}},
        )

        with pytest.raises(InvalidCalendar):
            service.add_doctor(data, admin)

    def test_update_keeps_blank_fields(self, service: DoctorService, doctor: Doctor, admin: User) -> None:
        updated = service.update_doctor(doctor.id, DoctorUpdate(location="East Wing", specialty=""), admin)

        assert updated.location == "East Wing"
        assert updated.specialty == "Cardiology"
        assert updated.updated_by == admin.id

    def test_remove_is_soft_delete(self, service: DoctorService, db: Session, doctor: Doctor, admin: User) -> None:
        doctor_id = doctor.id

        service.remove_doctor(doctor_id, admin)

        assert db.get(Doctor, doctor_id).is_active is False
        with pytest.raises(DoctorNotFound):
            service.get_doctor(doctor_id)

    def test_update_slots_merges_by_date(self, service: DoctorService, doctor: Doctor, admin: User) -> None:
        updated = service.update_slots(
            doctor.id,
            {"2025-01-10": {"evening": ["18:00"]}, "2025-01-12": {"morning": ["08:00"]}},
            admin,
        )

        assert updated.available_times == {
            "2025-01-10": {"evening": ["18:00"]},
            "2025-01-12": {"morning": ["08:00"]},
        }

    def test_update_slots_unknown_doctor(self, service: DoctorService, admin: User) -> None:
        with pytest.raises(DoctorNotFound):
            service.update_slots(9999, {}, admin)

    def test_update_slots_null_removes_date(self, service: DoctorService, make_doctor, admin: User) -> None:
        doctor = make_doctor(
            available_times={"2025-01-10": {"morning": ["09:00"]}, "2025-01-11": {"morning": ["10:00"]}}
        )

        updated = service.update_slots(doctor.id, {"2025-01-10": None}, admin)

        assert updated.available_times == {"2025-01-11": {"morning": ["10:00"]}}

    def test_update_slots_rejects_label_in_two_shifts(self, service: DoctorService, doctor: Doctor, admin: User) -> None:
        with pytest.raises(InvalidCalendar):
            service.update_slots(doctor.id, {"2025-01-12": {"morning": ["08:00"], "evening": ["08:00"]}}, admin)

        assert "2025-01-12" not in service.get_doctor(doctor.id).available_times
