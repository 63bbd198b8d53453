from studbud.modules.generation import gate
from studbud.modules.generation.gate import (
    FALLBACK_LABEL,
    MIN_ALNUM_CHARS,
    InsufficientContent,
    Sufficient,
)
from studbud.modules.generation.models.payload import (
    BinaryPayload,
    InputOrigin,
    PreparedContent,
    TextPayload,
)


def _pasted(text, label=None, origin=InputOrigin.PASTED):
    return PreparedContent(payload=TextPayload(text=text), origin=origin, label=label)


def test_threshold_is_one_hundred():
    assert MIN_ALNUM_CHARS == 100


def test_ninety_nine_alphanumerics_rejected():
    outcome = gate.check(_pasted("a" * 99))
    assert isinstance(outcome, InsufficientContent)
    assert outcome.alnum_count == 99


def test_one_hundred_alphanumerics_accepted():
    outcome = gate.check(_pasted("a" * 100))
    assert isinstance(outcome, Sufficient)


def test_punctuation_and_whitespace_do_not_count():
    text = "ab, cd! " * 24  # 96 alphanumerics
    assert gate.alnum_count(text) == 96
    assert isinstance(gate.check(_pasted(text)), InsufficientContent)


def test_sufficient_prose(photosynthesis_text):
    assert isinstance(gate.check(_pasted(photosynthesis_text)), Sufficient)


def test_seed_is_cleaned_content():
    outcome = gate.check(_pasted("  cats \n are   great  "))
    assert isinstance(outcome, InsufficientContent)
    assert outcome.seed == "cats are great"


def test_seed_falls_back_to_label_then_default():
    labelled = gate.check(_pasted("   ", label="cell biology", origin=InputOrigin.FILE))
    assert labelled.seed == "cell biology"
    bare = gate.check(_pasted(""))
    assert bare.seed == FALLBACK_LABEL


def test_topics_are_exempt():
    outcome = gate.check(_pasted("cats", origin=InputOrigin.TOPIC))
    assert isinstance(outcome, Sufficient)


def test_binary_payloads_are_exempt():
    content = PreparedContent(
        payload=BinaryPayload(media_type="image/png", data=b"\x89PNG"),
        origin=InputOrigin.FILE,
    )
    assert isinstance(gate.check(content), Sufficient)


def test_alphanumerics_split_by_spaces_still_count():
    text = " ".join(["abcd"] * 25)
    assert gate.alnum_count(text) == 100
    assert gate.is_sufficient(text)
