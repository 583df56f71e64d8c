import pytest

from namenest.sanitize import contains_script, is_clean_text, is_latin_only, looks_like_name


def test_is_clean_text_accepts_plain_short_text():
    assert is_clean_text("Mia", 40)
    assert is_clean_text("  padded  ", 6)
    assert is_clean_text("x" * 40, 40)


@pytest.mark.parametrize("value", [None, 123, ["Mia"], "", "   ", "x" * 41])
def test_is_clean_text_rejects_missing_or_long_values(value):
    assert not is_clean_text(value, 40)


@pytest.mark.parametrize("char", list("{}<>[]`$\\"))
def test_is_clean_text_rejects_markup_characters(char):
    assert not is_clean_text(f"Mi{char}a", 40)


@pytest.mark.parametrize("char", ["\x00", "\x07", "\n", "\x1f", "\x7f"])
def test_is_clean_text_rejects_control_characters(char):
    assert not is_clean_text(f"Mi{char}a", 40)


@pytest.mark.parametrize(
    "value",
    ["Mia", "Zoë", "Zoë", "O'Brien", "O’Brien", "Anne-Marie", "Mary Anne", "Ångström"],
)
def test_is_latin_only_true_for_latin_display_names(value):
    assert is_latin_only(value)


@pytest.mark.parametrize("value", ["Игорь", "Olga1", "Ольга Olga", "さくら", "", None, 5])
def test_is_latin_only_false_for_other_scripts_and_junk(value):
    assert not is_latin_only(value)


@pytest.mark.parametrize("value", ["Anne-Marie", "Jean Luc", "Игорь", "مريم", "さくら", "Zoë"])
def test_looks_like_name_accepts_any_script(value):
    assert looks_like_name(value)


@pytest.mark.parametrize(
    "value",
    ["Mary Anne Louise Smith", "R2D2", "Mia!", "Mia.", "a" * 41, "", "Mia\tRose", "<Mia>"],
)
def test_looks_like_name_rejects_non_name_shapes(value):
    assert not looks_like_name(value)


def test_contains_script_detects_named_blocks():
    assert contains_script("Ольга", "cyrillic")
    assert contains_script("さくら", "japanese")
    assert contains_script("桜", "japanese")
    assert contains_script("שרה", "hebrew")
    assert contains_script("مريم", "arabic")
    assert contains_script("Ἀλέξανδρος", "greek")
    assert not contains_script("Olga", "cyrillic")


def test_contains_script_unknown_script_or_non_string():
    assert not contains_script("Ольга", "klingon")
    assert not contains_script(None, "cyrillic")


def test_contains_script_uses_substituted_tables():
    scripts = {"latin-basic": ((0x41, 0x5A),)}
    assert contains_script("Mia", "latin-basic", scripts)
    assert not contains_script("mia", "latin-basic", scripts)
