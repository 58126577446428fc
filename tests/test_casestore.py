import json

import pytest

from casetranslate.casestore import CaseStore
from casetranslate.errors import ItemStoreError


def test_select_keeps_case_order_or_requested_order(make_case):
    case = make_case(("a", "one"), ("b", "two"), ("c", "three"))
    assert [item.guid for item in case.select()] == ["a", "b", "c"]
    assert [item.guid for item in case.select(["c", "a"])] == ["c", "a"]


def test_select_rejects_unknown_guids(make_case):
    case = make_case(("a", "one"))
    with pytest.raises(ItemStoreError, match="missing"):
        case.select(["missing"])


def test_mutation_requires_write_access(make_case):
    item = make_case(("a", "one")).select(["a"])[0]
    with pytest.raises(ItemStoreError):
        item.add_tag("Languages|English (en)")
    with pytest.raises(ItemStoreError):
        item.custom_metadata.put_text("Field", "value")
    with pytest.raises(ItemStoreError):
        with item.modify() as modifier:
            modifier.replace_text("changed")
    assert item.text == "one"


def test_write_scope_persists_and_releases_lock(make_case):
    case = make_case(("a", "one"))
    item = case.select(["a"])[0]
    with case.with_write_access():
        assert case.lock_path.exists()
        item.custom_metadata.put_text("Field", "French (fr)")
        item.add_tag("Detected Languages|French (fr)")
        item.add_tag("Detected Languages|French (fr)")
        with item.modify() as modifier:
            modifier.replace_text("changed")

    assert not case.lock_path.exists()
    reloaded = CaseStore.open(case.path).select(["a"])[0]
    assert reloaded.text == "changed"
    assert reloaded.custom_metadata.get("Field") == "French (fr)"
    assert reloaded.tags == frozenset({"Detected Languages|French (fr)"})


def test_write_scope_saves_committed_work_when_interrupted(make_case):
    case = make_case(("a", "one"), ("b", "two"))
    with pytest.raises(RuntimeError):
        with case.with_write_access():
            with case.select(["a"])[0].modify() as modifier:
                modifier.replace_text("first")
            raise RuntimeError("boom")

    assert not case.lock_path.exists()
    assert CaseStore.open(case.path).select(["a"])[0].text == "first"


def test_modify_discards_changes_when_block_fails(make_case):
    case = make_case(("a", "one"))
    item = case.select(["a"])[0]
    with case.with_write_access():
        with pytest.raises(ValueError):
            with item.modify() as modifier:
                modifier.replace_text("half done")
                raise ValueError("later step failed")
    assert item.text == "one"


def test_locked_case_cannot_be_opened_for_writing(make_case):
    case = make_case(("a", "one"))
    case.lock_path.write_text("1234")
    with pytest.raises(ItemStoreError, match="locked"):
        with case.with_write_access():
            pass
    assert case.lock_path.exists()


@pytest.mark.parametrize(
    "payload",
    ['{"items": {}}', "not json", '{"items": [{"guid": "a", "text": 3}]}'],
)
def test_invalid_case_files_are_rejected(tmp_path, payload):
    path = tmp_path / "case.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(ItemStoreError):
        CaseStore.open(path)


def test_duplicate_guids_are_rejected(tmp_path):
    path = tmp_path / "case.json"
    path.write_text(
        json.dumps({"items": [{"guid": "a", "text": "x"}, {"guid": "a", "text": "y"}]}),
        encoding="utf-8",
    )
    with pytest.raises(ItemStoreError, match="duplicate"):
        CaseStore.open(path)


def test_missing_case_file(tmp_path):
    with pytest.raises(ItemStoreError, match="not found"):
        CaseStore.open(tmp_path / "absent.json")
