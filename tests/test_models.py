"""Tests for the timetable document models."""

import json

import pytest
from pydantic import ValidationError

from timetable.data.models import (
    Day,
    PeriodKind,
    PeriodSlot,
    Placement,
    Room,
    SubjectConfig,
    Teacher,
    TeacherAssignment,
    TimetableDocument,
)


@pytest.fixture
def document_data() -> dict:
    """A small document in saved (camelCase) form."""
    return {
        "schoolInfo": {
            "name": "테스트초",
            "classesPerGrade": {"3": 2},
            "maxPeriods": {"3": 6},
            "bellSchedules": [
                {
                    "id": "a",
                    "name": "기본 시정표",
                    "targetGrades": [1, 2, 3, 4, 5, 6],
                    "periods": {
                        "1": {"start": "09:00", "end": "09:40", "name": "1교시", "type": "CLASS"},
                        "2": {"start": "09:40", "end": "10:00", "name": "중간놀이", "type": "ETC"},
                    },
                }
            ],
            "hasDistinctSchedules": False,
        },
        "teachers": [
            {
                "id": "t1",
                "name": "영어A",
                "color": "pastel-purple",
                "assignments": [{"subject": "영어", "roomId": "eng1", "targets": ["3"], "hours": 2}],
                "maxHours": 18,
            }
        ],
        "rooms": [{"id": "eng1", "name": "영어1실", "capacity": 1}],
        "subjects": ["영어", "수학"],
        "timetable": [
            {
                "id": "p1",
                "day": "월",
                "period": 1,
                "classId": "3-1",
                "subject": "영어",
                "teacherId": "t1",
                "roomId": "eng1",
            }
        ],
        "subjectStyles": {"영어": {"color": "#fff"}},
        "subjectHours": {"영어": 2},
        "subjectConfigs": {"영어": {"allowOverlap": False, "allowOverlapByGrade": [4]}},
        "version": "1.4",
    }


class TestPeriodSlot:
    """Tests for bell-schedule periods."""

    def test_duration(self):
        slot = PeriodSlot(start="09:00", end="09:40")
        assert slot.duration_minutes == 40
        assert slot.is_class

    def test_etc_period(self):
        slot = PeriodSlot(start="12:10", end="13:00", name="점심", type=PeriodKind.ETC)
        assert not slot.is_class

    def test_invalid_time_rejected(self):
        with pytest.raises(ValidationError):
            PeriodSlot(start="9am", end="09:40")


class TestPlacement:
    """Tests for Placement."""

    def test_generated_id(self):
        a = Placement(day=Day.MON, period=1, class_id="3-1", subject="영어")
        b = Placement(day=Day.MON, period=1, class_id="3-1", subject="영어")
        assert a.id and b.id
        assert a.id != b.id

    def test_homeroom(self):
        p = Placement(day=Day.TUE, period=2, class_id="3-1", subject="국어")
        assert p.is_homeroom
        assert not Placement(day=Day.TUE, period=2, class_id="3-1", subject="영어", teacher_id="t1").is_homeroom

    def test_day_from_korean_symbol(self):
        p = Placement(day="수", period=3, class_id="3-1", subject="수학")
        assert p.day is Day.WED

    def test_invalid_day_rejected(self):
        with pytest.raises(ValidationError):
            Placement(day="토", period=1, class_id="3-1", subject="수학")

    @pytest.mark.parametrize("period", [0, 16])
    def test_period_out_of_range(self, period):
        with pytest.raises(ValidationError):
            Placement(day=Day.MON, period=period, class_id="3-1", subject="수학")

    def test_class_ref(self):
        p = Placement(day=Day.MON, period=1, class_id="4레벨", subject="영어")
        assert p.class_ref.is_aggregate
        assert p.class_ref.grade == 4

    def test_same_slot(self):
        a = Placement(day=Day.MON, period=1, class_id="3-1", subject="영어")
        b = Placement(day=Day.MON, period=1, class_id="3-2", subject="수학")
        c = Placement(day=Day.MON, period=2, class_id="3-1", subject="영어")
        assert a.same_slot(b)
        assert not a.same_slot(c)


class TestRegistries:
    """Tests for teachers, rooms and subject configs."""

    def test_room_default_capacity(self):
        assert Room(id="r1", name="과학실").capacity == 1

    def test_room_negative_capacity_rejected(self):
        with pytest.raises(ValidationError):
            Room(id="r1", name="과학실", capacity=-1)

    def test_assignment_null_targets(self):
        assignment = TeacherAssignment.model_validate({"subject": "영어", "targets": None})
        assert assignment.targets == []

    def test_teacher_subjects(self):
        teacher = Teacher(
            id="t1",
            name="A",
            assignments=[TeacherAssignment(subject="영어"), TeacherAssignment(subject="체육")],
        )
        assert teacher.subjects == ["영어", "체육"]

    def test_subject_config_defaults(self):
        config = SubjectConfig()
        assert not config.allow_overlap
        assert config.allow_overlap_by_grade == []


class TestTimetableDocument:
    """Tests for the whole document."""

    def test_parse_camel_case(self, document_data):
        document = TimetableDocument.model_validate(document_data)
        assert document.school_info.classes_per_grade == {3: 2}
        assert document.school_info.bell_schedules[0].periods[2].type is PeriodKind.ETC
        assert document.teachers[0].assignments[0].room_id == "eng1"
        assert document.timetable[0].class_id == "3-1"
        assert document.subject_configs["영어"].allow_overlap_by_grade == [4]

    def test_dump_keeps_camel_case_and_subject_keys(self, document_data):
        document = TimetableDocument.model_validate(document_data)
        dumped = json.loads(document.to_json())

        assert "schoolInfo" in dumped
        assert dumped["timetable"][0]["classId"] == "3-1"
        # Subject names are data, not field names
        assert "영어" in dumped["subjectConfigs"]
        assert dumped["subjectConfigs"]["영어"]["allowOverlapByGrade"] == [4]

    def test_unknown_fields_ignored(self, document_data):
        document_data["futureField"] = {"x": 1}
        document = TimetableDocument.model_validate(document_data)
        assert document.version == "1.4"

    def test_duplicate_placement_ids(self, document_data):
        document_data["timetable"].append(dict(document_data["timetable"][0]))
        with pytest.raises(ValidationError, match="Duplicate placement ID"):
            TimetableDocument.model_validate(document_data)

    def test_duplicate_room_ids(self, document_data):
        document_data["rooms"].append({"id": "eng1", "name": "영어2실"})
        with pytest.raises(ValidationError, match="Duplicate room ID"):
            TimetableDocument.model_validate(document_data)

    def test_reference_warnings(self, document_data):
        document_data["timetable"].append({
            "id": "p2", "day": "화", "period": 1, "classId": "3-2",
            "subject": "과학", "teacherId": "ghost", "roomId": "nowhere",
        })
        warnings = TimetableDocument.model_validate(document_data).reference_warnings()

        assert any("unknown teacher 'ghost'" in w for w in warnings)
        assert any("unknown room 'nowhere'" in w for w in warnings)
        assert any("'과학' not in catalog" in w for w in warnings)

    def test_clean_document_has_no_warnings(self, document_data):
        assert TimetableDocument.model_validate(document_data).reference_warnings() == []

    def test_summary(self, document_data):
        summary = TimetableDocument.model_validate(document_data).summary()
        assert summary["placements"] == 1
        assert summary["school_name"] == "테스트초"
