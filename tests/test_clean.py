import pytest
from siftlib.clean import clean_tags, plan_clean, parse_confirmation
from siftlib.entries import parse_filename, group_by_title
from siftlib.plan import execute_plan


def _entries(*names):
    return [parse_filename(n) for n in names]


def _clean_directory(fs):
    """Plan and apply clean over every title-group of `fs`, returning the rename count."""
    operations = []
    for entries in group_by_title(parse_filename(n) for n in fs.list_files()).values():
        operations.extend(d.operation for d in plan_clean(entries, fs.rename) if d.operation)
    return execute_plan(operations).total_applied


def test_singleton_drops_all_tags():
    decisions = plan_clean(_entries("Widget (Rev A).zip"), renamer=lambda old, new: None)
    assert len(decisions) == 1
    assert decisions[0].tags == ()
    assert decisions[0].clean_filename == "Widget.zip"
    assert decisions[0].changed
    assert decisions[0].operation.kind == "rename"
    assert decisions[0].operation.target == "Widget.zip"


def test_singleton_with_many_tags():
    decisions = plan_clean(_entries("Chrono Trigger (USA) (Rev 1) (Beta) (Proto).sfc"), renamer=None)
    assert decisions[0].clean_filename == "Chrono Trigger.sfc"


def test_group_strips_tags_shared_by_every_member():
    group = _entries("Game (USA) (Disc 1) (v1.1).cue", "Game (USA) (v1.1) (Disc 2).cue")
    assert clean_tags(group) == [("Disc 1",), ("Disc 2",)]
    decisions = plan_clean(group, renamer=lambda old, new: None)
    assert [d.clean_filename for d in decisions] == ["Game (Disc 1).cue", "Game (Disc 2).cue"]


def test_group_keeps_distinguishing_tags_in_original_order():
    group = _entries("Game (Europe) (En,Fr) (Rev 2).bin", "Game (Europe) (Rev 1).bin")
    decisions = plan_clean(group, renamer=None)
    assert decisions[0].tags == ("En,Fr", "Rev 2")
    assert decisions[1].tags == ("Rev 1",)


def test_scenario_without_common_tags_plans_no_renames():
    group = _entries("Game (USA).bin", "Game (Europe).bin", "Game (USA)(Beta).bin")
    decisions = plan_clean(group, renamer=None)
    assert [d.clean_filename for d in decisions] == [e.filename for e in group]
    assert all(d.operation is None for d in decisions)


def test_already_clean_names_are_skipped():
    group = _entries("Game (USA).bin", "Game (Europe).bin")
    assert all(d.operation is None and not d.changed for d in plan_clean(group, renamer=None))


def test_repeated_tag_counts_towards_group_size():
    # 'Beta' occurs twice in one name and reaches the group size of 2
    group = _entries("Game (Beta)(Beta).bin", "Game (USA).bin")
    decisions = plan_clean(group, renamer=None)
    assert decisions[0].clean_filename == "Game.bin"
    assert decisions[1].clean_filename == "Game (USA).bin"


def test_empty_title_is_never_renamed():
    decisions = plan_clean(_entries("(USA).bin"), renamer=None)
    assert decisions[0].operation is None
    assert decisions[0].clean_filename == "(USA).bin"


def test_rename_action_applies_and_reports(make_fs):
    fs = make_fs(["Widget (Rev A).zip"])
    decisions = plan_clean(_entries(*fs.list_files()), fs.rename)
    assert decisions[0].operation.action() is True
    assert fs.files == ["Widget.zip"]


def test_rename_failure_is_caught(make_fs):
    fs = make_fs(["Widget (Rev A).zip", "Widget.zip (copy)"], fail={"Widget (Rev A).zip"})
    errors = []
    decisions = plan_clean(_entries("Widget (Rev A).zip"), fs.rename, on_error=lambda name, e: errors.append(name))
    assert decisions[0].operation.action() is False
    assert errors == ["Widget (Rev A).zip"]
    assert "Widget (Rev A).zip" in fs.files


def test_rename_collision_does_not_stop_other_renames(make_fs):
    fs = make_fs(["Game (USA) (Rev 1).bin", "Game (Rev 1) (USA).bin", "Other (Japan).bin"])
    assert _clean_directory(fs) == 2
    assert sorted(fs.files) == ["Game (Rev 1) (USA).bin", "Game.bin", "Other.bin"]


def test_clean_twice_is_idempotent(make_fs):
    fs = make_fs([
        "Game (USA) (Disc 1).cue",
        "Game (USA) (Disc 2).cue",
        "Widget (Rev A).zip",
        "Zelda (USA).sfc",
        "Zelda (Europe)(Rev 1).sfc",
    ])
    assert _clean_directory(fs) == 3
    assert sorted(fs.files) == [
        "Game (Disc 1).cue", "Game (Disc 2).cue", "Widget.zip",
        "Zelda (Europe)(Rev 1).sfc", "Zelda (USA).sfc",
    ]
    assert _clean_directory(fs) == 0


@pytest.mark.parametrize("response, default, expected", [
    ("y", False, True),
    ("YES", False, True),
    ("n", True, False),
    (" no ", True, False),
    ("", True, True),
    ("maybe", True, True),
    ("maybe", False, False),
])
def test_parse_confirmation(response, default, expected):
    assert parse_confirmation(response, default=default) is expected


def test_stripped_names_use_canonical_spacing():
    group = _entries("Game (USA)(Disc 1).bin", "Game (USA)(Disc 2).bin")
    decisions = plan_clean(group, renamer=None)
    assert [d.clean_filename for d in decisions] == ["Game (Disc 1).bin", "Game (Disc 2).bin"]


def test_untouched_group_members_keep_non_tag_text():
    # No tag is shared, so nothing is stripped and '[!]' stays on disk
    group = _entries("Tetris (World) [!].gb", "Tetris (Japan).gb")
    assert all(d.operation is None for d in plan_clean(group, renamer=None))


def test_stripped_group_members_drop_non_tag_text():
    # Once a shared tag is stripped the canonical join applies and '[!]' goes too
    group = _entries("Tetris (USA) (Rev 1) [!].gb", "Tetris (USA) (Rev 2).gb")
    decisions = plan_clean(group, renamer=None)
    assert [d.clean_filename for d in decisions] == ["Tetris (Rev 1).gb", "Tetris (Rev 2).gb"]
