import pytest

from namenest.normalize import normalize_and_validate_items
from namenest.vocabulary import Vocabulary
from tests.model_fakes import name_items


def _payloads(records):
    return [record.to_payload() for record in records]


def test_transposed_native_and_latin_fields_are_swapped():
    raw = [{"name": "Игорь", "nativeName": "Igor", "meaning": "warrior", "origin": "Russian"}]
    out = normalize_and_validate_items(raw, "Russian", 3, [])
    assert _payloads(out) == [
        {"name": "Igor", "nativeName": "Игорь", "meaning": "warrior", "origin": "Russian"}
    ]


def test_native_only_item_is_dropped_without_error():
    raw = [{"name": "Игорь", "nativeName": "", "meaning": "warrior", "origin": "Russian"}]
    assert normalize_and_validate_items(raw, "Russian", 3, []) == []


def test_empty_name_with_latin_native_is_not_promoted():
    raw = [{"name": "", "nativeName": "Olga", "meaning": "holy", "origin": "Russian"}]
    assert normalize_and_validate_items(raw, "Russian", 3, []) == []


@pytest.mark.parametrize("token", ["Example", "EXAMPLE", "Okay", "Names", "think"])
def test_disallowed_tokens_are_rejected(token):
    raw = [{"name": token, "meaning": "a fine meaning", "origin": "English"}]
    assert normalize_and_validate_items(raw, "English", 3, []) == []


def test_duplicates_and_excluded_names_are_removed_case_insensitively():
    raw = name_items("Mia", "mia", "Luca", "MIA ", "Sofia")
    out = normalize_and_validate_items(raw, "Italian", 10, ["LUCA", "  "])
    assert [record.name for record in out] == ["Mia", "Sofia"]


def test_result_never_exceeds_requested_count():
    raw = name_items(*[f"Name{chr(ord('a') + i)}" for i in range(12)])
    out = normalize_and_validate_items(raw, "Italian", 5, [])
    assert len(out) == 5


def test_items_after_count_are_not_evaluated():
    def _items():
        yield from name_items("Mia", "Luca")
        raise AssertionError("evaluated past the requested count")

    assert len(normalize_and_validate_items(_items(), "Italian", 2, [])) == 2


def test_missing_origin_falls_back_to_request_then_various():
    raw = [{"name": "Mia", "meaning": "mine"}]
    assert normalize_and_validate_items(raw, "Italian", 1, [])[0].origin == "Italian"
    assert normalize_and_validate_items(raw, "any", 1, [])[0].origin == "Various"
    assert normalize_and_validate_items(raw, None, 1, [])[0].origin == "Various"


def test_wrong_typed_items_and_fields_are_coerced_and_filtered():
    raw = [
        "Mia",
        42,
        None,
        {"name": 7, "meaning": "seven"},
        {"name": "Mia", "meaning": ["not", "text"], "origin": "Italian"},
        {"name": "  Nora  ", "meaning": " light ", "origin": " Irish "},
    ]
    assert _payloads(normalize_and_validate_items(raw, "Irish", 5, [])) == [
        {"name": "Nora", "meaning": "light", "origin": "Irish"}
    ]


def test_latin_native_name_is_not_kept():
    raw = [{"name": "Mia", "nativeName": "Mia", "meaning": "mine", "origin": "Italian"}]
    out = normalize_and_validate_items(raw, "Italian", 1, [])
    assert out[0].native_name is None
    assert "nativeName" not in out[0].to_payload()


def test_length_and_markup_limits():
    ok_meaning = "m" * 180
    raw = [
        {"name": "Mia", "meaning": "m" * 181, "origin": "Italian"},
        {"name": "Luca", "meaning": "<b>light</b>", "origin": "Italian"},
        {"name": "Nora", "meaning": "light", "origin": "o" * 61},
        {"name": "Sofia", "meaning": ok_meaning, "origin": "o" * 60},
    ]
    out = normalize_and_validate_items(raw, "Italian", 5, [])
    assert [record.name for record in out] == ["Sofia"]


def test_normalization_is_idempotent():
    raw = [
        {"name": "Игорь", "nativeName": "Igor", "meaning": "warrior", "origin": "Russian"},
        {"name": "Ольга", "meaning": "holy"},
        {"name": "Anya", "nativeName": "Аня", "meaning": "grace", "origin": "Russian"},
        {"name": "anya", "meaning": "grace again"},
        {"name": "Example", "meaning": "meta"},
        {"name": "Mila", "nativeName": "Mila", "meaning": "dear"},
    ]
    first = normalize_and_validate_items(raw, "Russian", 10, ["Boris"])
    second = normalize_and_validate_items(first, "Russian", 10, ["Boris"])
    assert second == first
    assert normalize_and_validate_items(_payloads(first), "Russian", 10, ["Boris"]) == first
    assert [record.name for record in first] == ["Igor", "Anya", "Mila"]


@pytest.mark.parametrize(
    "names,exclude",
    [
        (("Mia", "MIA", "mIa"), ()),
        (("Luca", "Sofia", "luca", "SOFIA", "Nora"), ("nora",)),
        (("Ava", "Eva", "Ava"), ("EVA", "ava")),
    ],
)
def test_result_names_are_unique_and_disjoint_from_exclude(names, exclude):
    out = normalize_and_validate_items(name_items(*names), "Italian", 10, exclude)
    keys = [record.name.lower() for record in out]
    assert len(keys) == len(set(keys))
    assert not set(keys) & {entry.lower() for entry in exclude}


def test_substituted_vocabulary_changes_disallowed_tokens():
    vocabulary = Vocabulary(disallowed_tokens=frozenset({"mia"}))
    raw = name_items("Mia", "Example")
    out = normalize_and_validate_items(raw, "Italian", 5, [], vocabulary)
    assert [record.name for record in out] == ["Example"]


def test_zero_count_or_missing_items_yield_nothing():
    assert normalize_and_validate_items(name_items("Mia"), "Italian", 0, []) == []
    assert normalize_and_validate_items(None, "Italian", 3, []) == []
