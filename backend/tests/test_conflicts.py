from __future__ import annotations

from scheduling.conflicts import ClassificationKind, classify, find_time_conflict, sections_overlap, slot_key


def test_duplicate_id_wins_over_everything(make_section):
    a = make_section("a")
    same_id = make_section("a", dept="MATH", code="50", days="TuTh")

    verdict = classify(same_id, [a])

    assert verdict.kind == ClassificationKind.DUPLICATE
    assert verdict.other is a
    assert not verdict.accepted
    assert "already in the schedule" in verdict.message


def test_same_slot_identical_time_is_replace_not_conflict(make_section):
    a = make_section("a", days="M", start="9:00", end="9:50")
    b = make_section("b", days="M", start="9:00", end="9:50")

    verdict = classify(b, [a])

    assert verdict.kind == ClassificationKind.REPLACE
    assert verdict.other is a
    assert verdict.accepted


def test_genuine_conflict_blocks_a_swap(make_section):
    a = make_section("a", days="M", start="9:00", end="9:50")
    z = make_section("z", dept="MATH", code="50", days="M", start="9:30", end="10:20")
    b = make_section("b", days="M", start="9:30", end="10:20")

    verdict = classify(b, [a, z])

    assert verdict.kind == ClassificationKind.TIME_CONFLICT
    assert verdict.other is z
    assert "conflicts with MATH 50" in verdict.message


def test_first_conflict_in_list_order_is_reported(make_section):
    x = make_section("x", dept="PHYS", code="7A", start="9:40", end="10:30")
    y = make_section("y", dept="CHEM", code="1A", start="9:00", end="9:50")
    candidate = make_section("c", dept="MATH", code="50", start="9:30", end="10:20")

    assert classify(candidate, [x, y]).other is x
    assert classify(candidate, [y, x]).other is y


def test_overlap_boundary_is_half_open(make_section):
    early = make_section("e", days="MWF", start="9:00", end="9:50")
    touching = make_section("t", dept="MATH", code="50", days="MWF", start="9:50", end="10:40")
    assert not sections_overlap(early, touching)

    hour = make_section("h", days="MWF", start="9:00", end="10:00")
    nudged = make_section("n", dept="MATH", code="50", days="MWF", start="9:59", end="10:30")
    assert sections_overlap(hour, nudged)


def test_mixed_clock_formats_compare_on_one_scale(make_section):
    afternoon = make_section("p", days="Tu", start="1:00 PM", end="2:15 PM")
    military = make_section("m", dept="MATH", code="50", days="Tu", start="14:00", end="15:00")

    assert sections_overlap(afternoon, military)


def test_day_disjoint_sections_never_conflict(make_section):
    mwf = make_section("a", days="MWF", start="9:00", end="9:50")
    tuth = make_section("b", dept="MATH", code="50", days="TuTh", start="9:00", end="9:50")
    same_slot_tuth = make_section("c", days="TuTh", start="9:00", end="9:50")

    assert classify(tuth, [mwf]).kind == ClassificationKind.NEW
    assert classify(same_slot_tuth, [mwf]).kind == ClassificationKind.REPLACE


def test_different_component_of_same_course_is_new(make_section):
    lec = make_section("lec", component="LEC", days="MWF")
    lab = make_section("lab", component="LAB", days="Tu", start="14:00", end="15:50")

    verdict = classify(lab, [lec])

    assert verdict.kind == ClassificationKind.NEW
    assert verdict.message.startswith("Added CS 101 LAB")


def test_slot_key_ignores_component_case(make_section):
    assert slot_key(make_section("a", component="lec")) == slot_key(make_section("b", component="LEC"))


def test_find_time_conflict_ignores_by_identity(make_section):
    a = make_section("a")
    b = make_section("b", dept="MATH", code="50")

    assert find_time_conflict(make_section("c", dept="PHYS", code="7A"), [a, b], ignore=a) is b
    assert find_time_conflict(make_section("c", dept="PHYS", code="7A"), [a], ignore=a) is None


def test_replace_scenario(make_section):
    u1 = make_section("u1", dept="EECS", code="168", days="MWF", start="09:00", end="09:50")
    u2 = make_section("u2", dept="EECS", code="168", days="MWF", start="10:00", end="10:50")

    verdict = classify(u2, [u1])

    assert verdict.kind == ClassificationKind.REPLACE
    assert verdict.message == f"Replaced {u1.label()} with {u2.label()}."


def test_new_scenario_on_disjoint_days(make_section):
    u1 = make_section("u1", dept="EECS", code="168", days="MWF", start="09:00", end="09:50")
    u3 = make_section("u3", dept="MATH", code="101", days="TuTh", start="09:00", end="09:50")

    assert classify(u3, [u1]).kind == ClassificationKind.NEW
