"""Tests for the timetable store."""

import pytest

from timetable.conflicts import ConflictKind
from timetable.data.defaults import build_bell_schedule
from timetable.data.models import (
    Day,
    Placement,
    Room,
    SchoolInfo,
    SubjectConfig,
    Teacher,
    TeacherAssignment,
    TeacherLayoutConfig,
    TimetableDocument,
)
from timetable.policy import OverlapPolicyStore
from timetable.store import PlacementOutcome, TimetableStore


@pytest.fixture
def school() -> SchoolInfo:
    """Schedule A only: grades 1-6, periods 1-6, two classes in grade 3."""
    schedule = build_bell_schedule("a", "기본 시정표", [1, 2, 3, 4, 5, 6], [("09:00", "09:40")] * 6)
    return SchoolInfo(
        name="테스트초",
        classes_per_grade={3: 2, 4: 3},
        bell_schedules=[schedule],
    )


@pytest.fixture
def store(school) -> TimetableStore:
    teacher = Teacher(
        id="T1",
        name="영어A",
        assignments=[TeacherAssignment(subject="영어", targets=["3"], hours=2)],
    )
    return TimetableStore(
        school_info=school,
        teachers=[teacher],
        rooms=[Room(id="sci1", name="과학실1", capacity=1)],
        subjects=["영어", "과학", "수학"],
        layout=TeacherLayoutConfig(grades=["3", "4"]),
    )


def placement(class_id: str, subject: str, **kwargs) -> Placement:
    fields = dict(day=Day.MON, period=1, class_id=class_id, subject=subject)
    fields.update(kwargs)
    return Placement(**fields)


class TestConstruction:
    """Tests for building a store."""

    def test_empty_policy_store_is_shared(self):
        policies = OverlapPolicyStore()
        store = TimetableStore(policies=policies)
        store.add_placement(placement("4레벨", "영어", id="lvl"))
        candidate = placement("4-2", "영어")

        assert store.policies is policies
        assert store.check_conflict(candidate).has_conflict

        policies.grant_grade_overlap("영어", 4)
        assert not store.check_conflict(candidate).has_conflict

    def test_default_policy_store(self):
        assert len(TimetableStore().policies) == 0


class TestScenario:
    """A teacher cannot teach two classes at once."""

    def test_second_class_same_teacher_conflicts(self, store):
        first = store.place(placement("3-1", "영어", teacher_id="T1"))
        second = store.place(placement("3-2", "영어", teacher_id="T1"))

        assert first.outcome is PlacementOutcome.ACCEPTED
        assert second.outcome is PlacementOutcome.REJECTED
        assert second.conflict.kinds == {ConflictKind.TEACHER}
        assert second.conflict.involves(first.placement.id)
        assert len(store.placements) == 1


class TestPlacementMutators:
    """Tests for add/remove/update and place."""

    def test_add_and_get(self, store):
        p = placement("3-1", "수학")
        store.add_placement(p)
        assert store.get_placement(p.id) == p

    def test_add_duplicate_id_replaces(self, store):
        p = placement("3-1", "수학", id="p1")
        store.add_placement(p)
        store.add_placement(placement("3-2", "수학", id="p1"))
        assert len(store.placements) == 1
        assert store.get_placement("p1").class_id == "3-2"

    def test_idempotent_removal(self, store):
        store.add_placement(placement("3-1", "수학", id="p1"))
        before = store.placements

        assert store.remove_placement("missing") is False
        assert store.placements == before

    def test_remove(self, store):
        store.add_placement(placement("3-1", "수학", id="p1"))
        assert store.remove_placement("p1") is True
        assert store.placements == []

    def test_update_unknown(self, store):
        assert store.update_placement(placement("3-1", "수학", id="nope")) is False
        assert store.placements == []

    def test_update(self, store):
        store.add_placement(placement("3-1", "수학", id="p1"))
        assert store.update_placement(placement("3-1", "과학", id="p1"))
        assert store.get_placement("p1").subject == "과학"

    def test_force_overrides(self, store):
        store.place(placement("3-1", "수학"))
        result = store.place(placement("3-1", "과학"), force=True)

        assert result.outcome is PlacementOutcome.OVERRIDDEN
        assert result.written
        assert result.conflict.kinds == {ConflictKind.CLASS_DIFFERENT_SUBJECT}
        assert len(store.placements) == 2

    def test_move_existing_placement(self, store):
        store.place(placement("3-1", "영어", id="p1", teacher_id="T1"))
        result = store.place(placement("3-1", "영어", id="p1", teacher_id="T1", period=2))

        assert result.outcome is PlacementOutcome.ACCEPTED
        assert store.get_placement("p1").period == 2
        assert len(store.placements) == 1

    def test_checks_see_current_state(self, store):
        candidate = placement("3-2", "영어", teacher_id="T1")
        assert not store.check_conflict(candidate).has_conflict

        store.add_placement(placement("3-1", "영어", id="p1", teacher_id="T1"))
        assert store.check_conflict(candidate).has_conflict

        store.remove_placement("p1")
        assert not store.check_conflict(candidate).has_conflict

    def test_grant_lifts_conflict(self, store):
        store.add_placement(placement("4레벨", "영어", id="lvl"))
        candidate = placement("4-2", "영어")

        assert store.check_conflict(candidate).has_conflict
        assert store.grant_grade_overlap("영어", 4) is True
        assert not store.check_conflict(candidate).has_conflict

    def test_clear_teacher_schedule(self, store):
        store.add_placement(placement("3-1", "영어", teacher_id="T1"))
        store.add_placement(placement("3-2", "영어", teacher_id="T1", period=2))
        store.add_placement(placement("3-2", "수학"))

        assert store.clear_teacher_schedule("T1") == 2
        assert len(store.placements) == 1


class TestQueries:
    """Tests for read access."""

    def test_filters(self, store):
        store.add_placement(placement("3-1", "과학", id="a", room_id="sci1"))
        store.add_placement(placement("3-2", "영어", id="b", teacher_id="T1"))
        store.add_placement(placement("3-1", "수학", id="c", day=Day.TUE))

        assert [p.id for p in store.placements_at(Day.MON, 1)] == ["a", "b"]
        assert [p.id for p in store.placements_for_teacher("T1")] == ["b"]
        assert [p.id for p in store.placements_for_class("3-1")] == ["a", "c"]
        assert [p.id for p in store.placements_for_room("sci1")] == ["a"]

    def test_class_list(self, store):
        assert store.class_list() == ["3-1", "3-2", "4-1", "4-2", "4-3"]

    def test_required_hours_fallback(self, store):
        store.subject_hours["과학"] = 3
        assert store.required_hours("과학") == 3
        assert store.required_hours("음악") == 2

    def test_teacher_load_zero_cap(self, store):
        store.update_teacher(Teacher(id="T1", name="영어A", max_hours=0))
        assert store.teacher_load("T1") == (0, 0)

    def test_teacher_load_explicit_cap(self, store):
        store.update_teacher(Teacher(id="T1", name="영어A", max_hours=12))
        assert store.teacher_load("T1") == (0, 12)

    def test_teacher_load(self, store):
        store.add_placement(placement("3-1", "영어", teacher_id="T1"))
        assert store.teacher_load("T1") == (1, 20)

    def test_unfulfilled_blocks(self, store):
        assert len(store.unfulfilled_blocks("T1")) == 4
        assert store.unfulfilled_blocks("nobody") == []

    def test_scan(self, store):
        store.add_placement(placement("3-1", "영어", id="a", teacher_id="T1"))
        store.add_placement(placement("3-2", "영어", id="b", teacher_id="T1"))
        assert store.scan().conflicted_ids == {"a", "b"}


class TestRegistryMutators:
    """Tests for teacher, room and subject edits."""

    def test_remove_teacher_cascades(self, store):
        store.add_placement(placement("3-1", "영어", teacher_id="T1"))
        store.add_placement(placement("3-2", "수학"))

        assert store.remove_teacher("T1") is True
        assert store.get_teacher("T1") is None
        assert [p.class_id for p in store.placements] == ["3-2"]
        assert store.remove_teacher("T1") is False

    def test_update_teacher(self, store):
        assert store.update_teacher(Teacher(id="T1", name="영어B"))
        assert store.get_teacher("T1").name == "영어B"
        assert not store.update_teacher(Teacher(id="T9", name="없음"))

    def test_removed_room_stops_constraining(self, store):
        store.add_placement(placement("3-1", "과학", room_id="sci1"))
        candidate = placement("3-2", "과학", room_id="sci1")
        assert store.check_conflict(candidate).has_conflict

        assert store.remove_room("sci1")
        assert not store.check_conflict(candidate).has_conflict

    def test_room_capacity_update(self, store):
        store.add_placement(placement("3-1", "과학", room_id="sci1"))
        candidate = placement("3-2", "과학", room_id="sci1")

        store.update_room(Room(id="sci1", name="과학실1", capacity=2))
        assert not store.check_conflict(candidate).has_conflict

    def test_add_subject(self, store):
        assert store.add_subject("음악")
        assert not store.add_subject("음악")

    def test_rename_subject(self, store):
        store.add_placement(placement("3-1", "영어", id="p1", teacher_id="T1"))
        store.subject_hours["영어"] = 2
        store.subject_styles["영어"] = {"color": "#fff"}
        store.grant_grade_overlap("영어", 3)

        store.rename_subject("영어", "English")

        assert "English" in store.subjects and "영어" not in store.subjects
        assert store.get_placement("p1").subject == "English"
        assert store.get_teacher("T1").subjects == ["English"]
        assert store.subject_hours == {"English": 2}
        assert "English" in store.subject_styles
        assert store.policies.is_overlap_allowed("English", 3)


class TestDocumentConversion:
    """Tests for document import and export."""

    def test_round_trip(self, store):
        store.add_placement(placement("3-1", "영어", id="p1", teacher_id="T1"))
        store.grant_grade_overlap("영어", 4)
        store.project_password = "hash"

        document = store.to_document()
        restored = TimetableStore.from_document(document)

        assert [p.id for p in restored.placements] == ["p1"]
        assert restored.policies.is_overlap_allowed("영어", 4)
        assert restored.project_password == "hash"
        assert document.version == "1.4"

    def test_import_replaces_state(self, store):
        store.add_placement(placement("3-1", "수학", id="old"))
        document = TimetableDocument(
            rooms=[Room(id="gym", name="강당", capacity=2)],
            timetable=[
                placement("3-1", "영어", id="a", teacher_id="T2"),
                placement("3-2", "영어", id="b", teacher_id="T2"),
            ],
            subject_configs={"영어": SubjectConfig(allow_overlap=True)},
        )

        report = store.import_document(document)

        assert {p.id for p in store.placements} == {"a", "b"}
        assert store.get_teacher("T1") is None
        assert store.get_room("gym") is not None
        assert report.conflicted_ids == {"a", "b"}

    def test_import_replaces_every_field(self, store):
        store.subject_hours["영어"] = 3
        store.subject_styles["영어"] = {"color": "#000"}
        store.grant_grade_overlap("영어", 3)
        store.project_password = "old"

        document = TimetableDocument(
            school_info=SchoolInfo(name="새학교", classes_per_grade={1: 1}),
            subjects=["국어"],
            subject_hours={"국어": 4},
            subject_styles={"국어": {"color": "#fff"}},
            teacher_config=TeacherLayoutConfig(grades=["1"]),
            project_password="new",
        )

        store.import_document(document)

        assert store.school_info.name == "새학교"
        assert store.class_list() == ["1-1"]
        assert store.layout.grades == ["1"]
        assert store.subjects == ["국어"]
        assert store.subject_hours == {"국어": 4}
        assert store.subject_styles == {"국어": {"color": "#fff"}}
        assert len(store.policies) == 0
        assert store.project_password == "new"
        assert store.teachers == [] and store.rooms == []
