import pytest

from mindreader.errors import TextTooShort
from mindreader.triggers import TriggerScan, extract_between, require_meaningful, scan_for_trigger


def test_scan_detects_phrases_despite_punctuation_and_case():
    scan = scan_for_trigger("Okay. Magic, Word! let's go", "magic word", "magic stop")
    assert scan == TriggerScan(has_start=True, has_end=False)


def test_scan_with_empty_phrases_never_matches():
    assert scan_for_trigger("anything at all", "", None) == TriggerScan(False, False)


def test_scan_matches_inside_other_words():
    # containment, not token match
    assert scan_for_trigger("the cathedral", "cat", "").has_start


def test_extract_between_both_phrases():
    assert extract_between("Hello magic word apple magic stop", "magic word", "magic stop") == "apple"


def test_extract_between_keeps_original_punctuation():
    text = "magic word pizza, yes magic stop"
    assert extract_between(text, "magic word", "magic stop") == "pizza, yes"


def test_extract_between_drops_leading_single_letter():
    assert extract_between("magic word I love jazz magic stop", "magic word", "magic stop") == "love jazz"


def test_extract_between_adjacent_phrases_is_empty():
    assert extract_between("Hello magic word magic stop", "magic word", "magic stop") == ""


def test_extract_between_without_phrases_returns_trimmed_text():
    text = "  just some speech  "
    assert extract_between(text, "", "") == text.strip()
    assert extract_between(text, "open sesame", "close sesame") == text.strip()


def test_extract_between_only_start_found():
    assert extract_between("magic word the red balloon", "magic word", "magic stop") == "the red balloon"


def test_extract_between_end_before_start_uses_text_after_start():
    text = "magic stop first then magic word blue car"
    assert extract_between(text, "magic word", "magic stop") == "blue car"


def test_extract_between_only_end_found():
    assert extract_between("my old piano magic stop", "magic word", "magic stop") == "my old piano"


def test_extract_between_strips_single_letter_artifact():
    assert extract_between("go now s tiger lily", "go now", "") == "tiger lily"


def test_extract_between_empty_text():
    assert extract_between("   ", "a", "b") == ""


def test_require_meaningful_rejects_short_text():
    with pytest.raises(TextTooShort):
        require_meaningful("a.")
    with pytest.raises(TextTooShort):
        require_meaningful("?!")


def test_require_meaningful_returns_cleaned_text():
    assert require_meaningful("hi!") == "hi"
