from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
import pytest

from src.campustrack.campustrack.academics.model import Faculty, Semester, Subject
from src.campustrack.campustrack.colors.palette import PALETTE
from src.campustrack.campustrack.colors.service import ColorRegistry
from src.campustrack.campustrack.core.exceptions import (
    MDCNotConfiguredError,
    NotFoundError,
    SlotOccupiedError,
    StoreUnavailableError,
    ValidationError,
)
from src.campustrack.campustrack.mdc.model import MDCCourse
from src.campustrack.campustrack.timetable.model import (
    MDCSaveResult,
    TimetableEntry,
    TimetableEntryView,
)
from src.campustrack.campustrack.timetable.service import TimetableService

CSE, ECE, MTH = 1, 2, 3


@dataclass
class InMemoryAcademics:
    subjects: dict[int, Subject]
    faculty: dict[int, Faculty]
    semesters: dict[int, Semester]

    def get_subject(self, subject_id):
        return self.subjects.get(int(subject_id))

    def get_faculty(self, faculty_id):
        return self.faculty.get(int(faculty_id))

    def get_semester(self, semester_id):
        return self.semesters.get(int(semester_id))

    def find_mdc_subject(self, *, department_id, semester_number):
        for s in self.subjects.values():
            if s.is_mdc and s.department_id == department_id and self.semesters[s.semester_id].number == semester_number:
                return s
        return None


@dataclass
class InMemoryMDC:
    courses: dict[int, MDCCourse] = field(default_factory=dict)

    def get_by_id(self, course_id):
        return self.courses.get(int(course_id))

    def find_for_offering(self, *, mdc_department_id, semester_number):
        matches = [
            c
            for c in sorted(self.courses.values(), key=lambda c: c.course_id)
            if c.mdc_department_id == mdc_department_id and c.semester_number == semester_number
        ]
        return matches[0] if matches else None


class InMemoryTimetable:
    """Slot uniqueness is checked under a lock, the way a unique key behaves.

    Every write is one transaction: on error the entries, the teaching pairs
    and the MDC courses go back to what they were before the write.
    """

    def __init__(self, academics: InMemoryAcademics, mdc: InMemoryMDC):
        self._lock = threading.Lock()
        self._academics = academics
        self._mdc = mdc
        self.entries: dict[int, TimetableEntry] = {}
        self.pairs: set[tuple[int, int]] = set()
        self._next_id = 1
        self.before_insert = None
        self.fail_pair_sync = False

    @contextmanager
    def _transaction(self):
        with self._lock:
            entries, pairs, next_id = dict(self.entries), set(self.pairs), self._next_id
            courses = dict(self._mdc.courses)
            try:
                yield
            except Exception:
                self.entries, self.pairs, self._next_id = entries, pairs, next_id
                self._mdc.courses.clear()
                self._mdc.courses.update(courses)
                raise

    def _sync_pairs(self, released=()):
        if self.fail_pair_sync:
            raise StoreUnavailableError("Database temporarily unavailable")
        in_use = {(e.faculty_id, e.subject_id) for e in self.entries.values()}
        self.pairs |= in_use
        self.pairs -= {p for p in released if p not in in_use}

    def get_by_id(self, entry_id):
        return self.entries.get(int(entry_id))

    def get_for_slot(self, slot):
        return next((e for e in self.entries.values() if e.slot == slot), None)

    def _insert_locked(self, *, slot, subject_id, faculty_id, room, mdc_course_id):
        if any(e.slot == slot for e in self.entries.values()):
            raise SlotOccupiedError("Timetable slot is already occupied")
        entry_id = self._next_id
        self._next_id += 1
        self.entries[entry_id] = TimetableEntry(
            entry_id=entry_id,
            slot=slot,
            subject_id=subject_id,
            faculty_id=faculty_id,
            room=room,
            mdc_course_id=mdc_course_id,
        )
        return entry_id

    def insert(self, *, slot, subject_id, faculty_id, room=None, mdc_course_id=None):
        if self.before_insert:
            self.before_insert()
        with self._transaction():
            entry_id = self._insert_locked(
                slot=slot, subject_id=subject_id, faculty_id=faculty_id, room=room, mdc_course_id=mdc_course_id
            )
            self._sync_pairs()
            return entry_id

    def update(self, *, entry_id, subject_id, faculty_id, room, mdc_course_id=None):
        with self._transaction():
            entry = self.entries.get(int(entry_id))
            if not entry:
                return False
            self.entries[entry.entry_id] = replace(
                entry, subject_id=subject_id, faculty_id=faculty_id, room=room, mdc_course_id=mdc_course_id
            )
            self._sync_pairs(released=[(entry.faculty_id, entry.subject_id)])
            return True

    def delete(self, entry_id):
        with self._transaction():
            entry = self.entries.pop(int(entry_id), None)
            if entry is None:
                return False
            self._sync_pairs(released=[(entry.faculty_id, entry.subject_id)])
            return True

    def list_for_grid(self, *, department_id, semester_id, academic_year_id):
        views = []
        for e in self.entries.values():
            if (e.slot.department_id, e.slot.semester_id, e.slot.academic_year_id) != (
                department_id,
                semester_id,
                academic_year_id,
            ):
                continue
            subject = self._academics.subjects[e.subject_id]
            views.append(TimetableEntryView(entry=e, subject_code=subject.code, subject_name=subject.name))
        return views

    def count_all(self):
        return len(self.entries)

    def has_subject_on_day(self, *, subject_id, day_of_week):
        return any(e.subject_id == subject_id and e.slot.day_of_week == day_of_week for e in self.entries.values())

    def save_mdc_entry(
        self, *, slot, entry_id, subject_id, faculty_id, room, mdc_course_id, mdc_department_id, semester_number
    ):
        with self._transaction():
            linked = {
                c.course_id
                for c in self._mdc.courses.values()
                if c.mdc_department_id == mdc_department_id and c.semester_number == semester_number
            }
            released = {(e.faculty_id, e.subject_id) for e in self.entries.values() if e.mdc_course_id in linked}

            if entry_id is None:
                saved_id = self._insert_locked(
                    slot=slot, subject_id=subject_id, faculty_id=faculty_id, room=room, mdc_course_id=mdc_course_id
                )
            else:
                saved_id = int(entry_id)
                previous = self.entries.get(saved_id)
                if previous is None:
                    raise NotFoundError("Timetable entry not found")
                released.add((previous.faculty_id, previous.subject_id))
                self.entries[saved_id] = replace(
                    previous,
                    subject_id=subject_id,
                    faculty_id=faculty_id,
                    room=room,
                    mdc_course_id=mdc_course_id,
                )

            for course_id in linked:
                self._mdc.courses[course_id] = replace(self._mdc.courses[course_id], faculty_id=faculty_id)

            propagated = 0
            for e in list(self.entries.values()):
                if e.entry_id != saved_id and e.mdc_course_id in linked and e.faculty_id != faculty_id:
                    self.entries[e.entry_id] = replace(e, faculty_id=faculty_id)
                    propagated += 1

            self._sync_pairs(released)
            return MDCSaveResult(entry_id=saved_id, propagated=propagated)


class InMemoryColors:
    def __init__(self):
        self.indices: dict[tuple[str, int, int], int] = {}

    def get_index(self, *, kind, entity_id, version):
        return self.indices.get((kind.value, int(entity_id), version))

    def get_indices(self, *, kind, entity_ids, version):
        return {i: self.indices[(kind.value, i, version)] for i in entity_ids if (kind.value, i, version) in self.indices}

    def assign(self, *, kind, entity_id, version):
        key = (kind.value, int(entity_id), version)
        if key not in self.indices:
            self.indices[key] = max(self.indices.values(), default=-1) + 1
        return self.indices[key]


@dataclass
class World:
    service: TimetableService
    timetable: InMemoryTimetable
    academics: InMemoryAcademics
    mdc: InMemoryMDC


@pytest.fixture()
def world() -> World:
    academics = InMemoryAcademics(
        subjects={
            1: Subject(subject_id=1, code="CS101", name="Programming", department_id=CSE, semester_id=1),
            2: Subject(subject_id=2, code="CS102", name="Discrete Structures", department_id=CSE, semester_id=1),
            3: Subject(subject_id=3, code="EC101", name="Electronics", department_id=ECE, semester_id=1),
            4: Subject(subject_id=4, code="MT101", name="Statistics", department_id=MTH, semester_id=1, is_mdc=True),
            5: Subject(subject_id=5, code="CS201", name="Data Structures", department_id=CSE, semester_id=2),
        },
        faculty={
            10: Faculty(faculty_id=10, full_name="Anita Rao", department_id=CSE),
            11: Faculty(faculty_id=11, full_name="Vikram Shah", department_id=CSE),
            20: Faculty(faculty_id=20, full_name="Meera Nair", department_id=ECE),
            30: Faculty(faculty_id=30, full_name="Rahul Iyer", department_id=MTH),
            31: Faculty(faculty_id=31, full_name="Sara Thomas", department_id=MTH),
        },
        semesters={
            1: Semester(semester_id=1, number=1, name="Semester 1", academic_year_id=1),
            2: Semester(semester_id=2, number=2, name="Semester 2", academic_year_id=1),
        },
    )
    mdc = InMemoryMDC()
    timetable = InMemoryTimetable(academics, mdc)
    service = TimetableService(timetable, academics, mdc, ColorRegistry(InMemoryColors()))
    return World(service=service, timetable=timetable, academics=academics, mdc=mdc)


def _slot(service, *, department_id=CSE, semester_id=1, academic_year_id=1, day=1, period=1):
    return service.make_slot(
        department_id=department_id,
        semester_id=semester_id,
        academic_year_id=academic_year_id,
        day_of_week=day,
        period=period,
    )


def test_added_entry_appears_in_grid_with_color(world):
    slot = _slot(world.service, day=3, period=4)

    entry = world.service.add_entry(slot, subject_id=1, faculty_id=10, room=" A-101 ")
    grid = world.service.get_grid(CSE, 1)

    cell = grid.cell(3, 4)
    assert cell.entry.entry.entry_id == entry.entry_id
    assert cell.entry.entry.room == "A-101"
    assert cell.color in PALETTE
    assert len(grid.rows) == 6 and all(len(row) == 5 for row in grid.rows)
    assert len(grid.occupied()) == 1
    assert (10, 1) in world.timetable.pairs


def test_grid_colors_are_stable_per_subject(world):
    world.service.add_entry(_slot(world.service, day=1), subject_id=1, faculty_id=10)
    world.service.add_entry(_slot(world.service, day=2), subject_id=2, faculty_id=11)
    world.service.add_entry(_slot(world.service, day=4), subject_id=1, faculty_id=11)

    first = world.service.get_grid(CSE, 1)
    second = world.service.get_grid(CSE, 1)

    assert first.cell(1, 1).color == first.cell(4, 1).color == second.cell(1, 1).color
    assert first.cell(2, 1).color != first.cell(1, 1).color


def test_occupied_slot_rejects_second_entry(world):
    slot = _slot(world.service)
    world.service.add_entry(slot, subject_id=1, faculty_id=10)

    with pytest.raises(SlotOccupiedError):
        world.service.add_entry(slot, subject_id=2, faculty_id=11)
    assert world.timetable.count_all() == 1


def test_concurrent_adds_to_one_slot_let_exactly_one_win(world):
    barrier = threading.Barrier(2)
    world.timetable.before_insert = lambda: barrier.wait(timeout=5)
    slot = _slot(world.service, day=2, period=2)
    outcomes = []

    def add(subject_id, faculty_id):
        try:
            world.service.add_entry(slot, subject_id=subject_id, faculty_id=faculty_id)
            outcomes.append("ok")
        except SlotOccupiedError:
            outcomes.append("occupied")

    threads = [threading.Thread(target=add, args=(1, 10)), threading.Thread(target=add, args=(2, 11))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["occupied", "ok"]
    assert len(world.service.get_grid(CSE, 1).occupied()) == 1


@pytest.mark.parametrize(
    "subject_id,faculty_id",
    [
        (3, 10),  # subject of another department
        (5, 10),  # subject of another semester
        (99, 10),
        (1, 20),  # faculty of another department
        (1, 99),
    ],
)
def test_subject_and_faculty_must_belong_to_the_grid(world, subject_id, faculty_id):
    with pytest.raises(NotFoundError):
        world.service.add_entry(_slot(world.service), subject_id=subject_id, faculty_id=faculty_id)
    assert world.timetable.count_all() == 0


@pytest.mark.parametrize("day,period", [(0, 1), (7, 1), (1, 0), (1, 6)])
def test_slot_coordinates_are_bounded(world, day, period):
    with pytest.raises(ValidationError):
        _slot(world.service, day=day, period=period)


def test_update_replaces_only_given_fields(world):
    entry = world.service.add_entry(_slot(world.service), subject_id=1, faculty_id=10, room="A-101")

    updated = world.service.update_entry(entry.entry_id, faculty_id=11)

    assert (updated.subject_id, updated.faculty_id, updated.room) == (1, 11, "A-101")
    assert updated.slot == entry.slot
    assert (11, 1) in world.timetable.pairs
    assert (10, 1) not in world.timetable.pairs

    cleared = world.service.update_entry(entry.entry_id, room=None)
    assert cleared.room is None
    assert world.timetable.get_by_id(entry.entry_id).faculty_id == 11


def test_update_missing_entry_is_not_found(world):
    with pytest.raises(NotFoundError):
        world.service.update_entry(404, room="B-2")


def test_delete_empties_the_slot_and_second_delete_is_not_found(world):
    entry = world.service.add_entry(_slot(world.service), subject_id=1, faculty_id=10)
    world.service.add_entry(_slot(world.service, day=2), subject_id=1, faculty_id=10)

    world.service.delete_entry(entry.entry_id)

    assert world.service.get_grid(CSE, 1).cell(1, 1).is_empty
    assert (10, 1) in world.timetable.pairs  # still taught on Tuesday
    with pytest.raises(NotFoundError):
        world.service.delete_entry(entry.entry_id)


def test_deleting_last_use_of_a_pair_removes_the_mapping(world):
    entry = world.service.add_entry(_slot(world.service), subject_id=1, faculty_id=10)

    world.service.delete_entry(entry.entry_id)

    assert (10, 1) not in world.timetable.pairs


def test_toggle_mdc_without_configuration_leaves_slot_unchanged(world):
    slot = _slot(world.service, department_id=MTH)
    before = dict(world.timetable.entries)

    with pytest.raises(MDCNotConfiguredError):
        world.service.toggle_mdc(slot, True)
    assert world.timetable.entries == before
    assert world.timetable.get_for_slot(slot) is None


def test_toggle_mdc_without_configuration_keeps_occupied_slot(world):
    world.academics.subjects[6] = Subject(subject_id=6, code="MT102", name="Algebra", department_id=MTH, semester_id=1)
    slot = _slot(world.service, department_id=MTH)
    entry = world.service.add_entry(slot, subject_id=6, faculty_id=30)

    with pytest.raises(MDCNotConfiguredError):
        world.service.toggle_mdc(slot, True)
    assert world.timetable.get_for_slot(slot) == entry


def _configure_mdc(world, *, faculty_id=30):
    world.mdc.courses[1] = MDCCourse(
        course_id=1,
        course_name="Statistics for Everyone",
        home_department_id=CSE,
        mdc_department_id=MTH,
        year=1,
        semester_number=1,
        faculty_id=faculty_id,
    )
    world.mdc.courses[2] = MDCCourse(
        course_id=2,
        course_name="Statistics for Everyone",
        home_department_id=ECE,
        mdc_department_id=MTH,
        year=1,
        semester_number=1,
        faculty_id=faculty_id,
    )


def test_toggle_mdc_prefills_draft_without_writing(world):
    _configure_mdc(world)
    slot = _slot(world.service, department_id=MTH, day=2, period=3)

    draft = world.service.toggle_mdc(slot, True)

    assert draft.is_mdc
    assert (draft.subject_id, draft.faculty_id, draft.mdc_course_id) == (4, 30, 1)
    assert draft.course_name == "Statistics for Everyone"
    assert world.timetable.count_all() == 0

    off = world.service.toggle_mdc(slot, False, draft=draft)
    assert not off.is_mdc
    assert off.subject_id == 4


def test_saving_mdc_slot_propagates_faculty_to_every_copy(world):
    _configure_mdc(world)
    other_year = _slot(world.service, department_id=MTH, academic_year_id=2, day=2, period=3)
    world.timetable.insert(slot=other_year, subject_id=4, faculty_id=30, mdc_course_id=2)

    slot = _slot(world.service, department_id=MTH, day=2, period=3)
    draft = world.service.toggle_mdc(slot, True).with_changes(faculty_id=31, room="C-1")
    entry = world.service.save_draft(draft)

    assert entry.is_mdc and entry.faculty_id == 31
    assert {c.faculty_id for c in world.mdc.courses.values()} == {31}
    assert {e.faculty_id for e in world.timetable.entries.values()} == {31}
    assert (31, 4) in world.timetable.pairs


def test_changing_faculty_of_mdc_entry_goes_through_propagation(world):
    _configure_mdc(world)
    slot = _slot(world.service, department_id=MTH, day=5, period=1)
    entry = world.service.save_draft(world.service.toggle_mdc(slot, True))
    copy = _slot(world.service, department_id=MTH, academic_year_id=2, day=5, period=1)
    world.timetable.insert(slot=copy, subject_id=4, faculty_id=30, mdc_course_id=1)

    world.service.update_entry(entry.entry_id, faculty_id=31)

    assert all(e.faculty_id == 31 for e in world.timetable.entries.values())
    assert world.mdc.courses[1].faculty_id == 31


def test_save_draft_requires_subject_and_faculty(world):
    _configure_mdc(world, faculty_id=None)
    slot = _slot(world.service, department_id=MTH)

    draft = world.service.toggle_mdc(slot, True)

    with pytest.raises(ValidationError):
        world.service.save_draft(draft)
    assert world.timetable.count_all() == 0


def test_saving_plain_draft_over_mdc_entry_unlinks_it(world):
    _configure_mdc(world)
    slot = _slot(world.service, department_id=MTH)
    entry = world.service.save_draft(world.service.toggle_mdc(slot, True))

    plain = world.service.toggle_mdc(slot, False)
    saved = world.service.save_draft(plain)

    assert saved.entry_id == entry.entry_id
    assert not world.timetable.get_by_id(entry.entry_id).is_mdc


def test_classes_count_counts_every_entry(world):
    world.service.add_entry(_slot(world.service, day=1), subject_id=1, faculty_id=10)
    world.service.add_entry(_slot(world.service, day=6, period=5), subject_id=2, faculty_id=11)

    assert world.service.classes_count() == 2


def test_grid_defaults_to_the_semesters_academic_year(world):
    world.service.add_entry(_slot(world.service, academic_year_id=1), subject_id=1, faculty_id=10)
    world.service.add_entry(_slot(world.service, academic_year_id=2), subject_id=2, faculty_id=11)

    current = world.service.get_grid(CSE, 1)
    other = world.service.get_grid(CSE, 1, 2)

    assert current.academic_year_id == 1
    assert [c.entry.entry.subject_id for c in current.occupied()] == [1]
    assert [c.entry.entry.subject_id for c in other.occupied()] == [2]


def test_grid_of_unknown_semester_is_not_found(world):
    with pytest.raises(NotFoundError):
        world.service.get_grid(CSE, 99)


def _add_foreign_courses(world):
    # Course 3 is offered by CSE; course 4 by MTH but for semester number 2.
    world.mdc.courses[3] = MDCCourse(
        course_id=3,
        course_name="Python for Scientists",
        home_department_id=ECE,
        mdc_department_id=CSE,
        year=1,
        semester_number=1,
        faculty_id=10,
    )
    world.mdc.courses[4] = MDCCourse(
        course_id=4,
        course_name="Linear Models",
        home_department_id=ECE,
        mdc_department_id=MTH,
        year=1,
        semester_number=2,
        faculty_id=30,
    )


@pytest.mark.parametrize("course_id", [3, 4])
def test_mdc_save_rejects_course_offered_for_another_slot(world, course_id):
    _configure_mdc(world)
    _add_foreign_courses(world)
    cse_copy = world.timetable.insert(slot=_slot(world.service, day=4), subject_id=1, faculty_id=10, mdc_course_id=3)
    before_courses = dict(world.mdc.courses)
    slot = _slot(world.service, department_id=MTH, day=2, period=3)

    draft = world.service.toggle_mdc(slot, True).with_changes(mdc_course_id=course_id, faculty_id=31)

    with pytest.raises(NotFoundError):
        world.service.save_draft(draft)
    assert world.mdc.courses == before_courses
    assert world.timetable.get_by_id(cse_copy).faculty_id == 10
    assert world.timetable.get_for_slot(slot) is None


def test_failed_pair_sync_leaves_slot_empty_and_free_for_retry(world):
    slot = _slot(world.service)
    world.timetable.fail_pair_sync = True

    with pytest.raises(StoreUnavailableError):
        world.service.add_entry(slot, subject_id=1, faculty_id=10)
    assert world.timetable.count_all() == 0
    assert world.timetable.pairs == set()

    world.timetable.fail_pair_sync = False
    entry = world.service.add_entry(slot, subject_id=1, faculty_id=10)
    assert world.service.get_grid(CSE, 1).cell(1, 1).entry.entry.entry_id == entry.entry_id


def test_failed_update_or_delete_changes_nothing(world):
    entry = world.service.add_entry(_slot(world.service), subject_id=1, faculty_id=10)
    world.timetable.fail_pair_sync = True

    with pytest.raises(StoreUnavailableError):
        world.service.update_entry(entry.entry_id, faculty_id=11)
    with pytest.raises(StoreUnavailableError):
        world.service.delete_entry(entry.entry_id)

    assert world.timetable.get_by_id(entry.entry_id) == entry
    assert world.timetable.pairs == {(10, 1)}


def test_failed_mdc_save_rolls_back_propagation(world):
    _configure_mdc(world)
    copy_id = world.timetable.insert(
        slot=_slot(world.service, department_id=MTH, academic_year_id=2, day=2, period=3),
        subject_id=4,
        faculty_id=30,
        mdc_course_id=2,
    )
    slot = _slot(world.service, department_id=MTH, day=2, period=3)
    draft = world.service.toggle_mdc(slot, True).with_changes(faculty_id=31)
    world.timetable.fail_pair_sync = True

    with pytest.raises(StoreUnavailableError):
        world.service.save_draft(draft)

    assert {c.faculty_id for c in world.mdc.courses.values()} == {30}
    assert world.timetable.get_by_id(copy_id).faculty_id == 30
    assert world.timetable.get_for_slot(slot) is None
