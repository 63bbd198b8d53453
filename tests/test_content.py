import io

import pytest

from studbud.modules.generation.content import (
    collapse_whitespace,
    normalize_input,
    resolve_media_type,
)
from studbud.modules.generation.errors import ReadError, ValidationError
from studbud.modules.generation.models.payload import (
    BinaryPayload,
    FileInput,
    InputOrigin,
    PastedText,
    TextPayload,
    TopicInput,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_text_file_is_whitespace_collapsed():
    raw = FileInput(
        name="notes.txt",
        data=b"  Cells \n\n divide\t\tby   mitosis.  ",
        media_type="text/plain",
    )
    prepared = normalize_input(raw)
    assert prepared.payload == TextPayload(text="Cells divide by mitosis.")
    assert prepared.origin == InputOrigin.FILE
    assert prepared.label == "notes"


def test_media_type_guessed_from_name_when_missing():
    raw = FileInput(name="chapter.txt", data=b"# Heading", media_type=None)
    assert resolve_media_type(raw) == "text/plain"
    assert normalize_input(raw).payload.text == "# Heading"


def test_zero_length_file_fails():
    with pytest.raises(ReadError):
        normalize_input(FileInput(name="empty.txt", data=b"", media_type="text/plain"))


def test_undecodable_text_file_fails():
    raw = FileInput(name="broken.txt", data=b"\xff\xfe\xfa\x80", media_type="text/plain")
    with pytest.raises(ReadError) as exc_info:
        normalize_input(raw)
    assert exc_info.value.kind == "ReadError"


def test_accepted_image_becomes_binary_payload():
    raw = FileInput(name="diagram.png", data=PNG_BYTES, media_type="image/png")
    prepared = normalize_input(raw, binary_media_types={"image/png"})
    assert isinstance(prepared.payload, BinaryPayload)
    assert prepared.payload.media_type == "image/png"
    assert prepared.payload.data == PNG_BYTES


def test_image_rejected_for_text_only_provider():
    raw = FileInput(name="diagram.png", data=PNG_BYTES, media_type="image/png")
    with pytest.raises(ReadError) as exc_info:
        normalize_input(raw, binary_media_types=())
    assert "paste the text" in exc_info.value.message


def test_pdf_converted_to_text_when_not_accepted_as_binary():
    from pypdf import PdfWriter

    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buf = io.BytesIO()
    writer.write(buf)

    raw = FileInput(name="blank.pdf", data=buf.getvalue(), media_type="application/pdf")
    prepared = normalize_input(raw, binary_media_types=())
    assert prepared.payload == TextPayload(text="")


def test_unreadable_pdf_fails():
    raw = FileInput(name="bad.pdf", data=b"not a pdf at all", media_type="application/pdf")
    with pytest.raises(ReadError):
        normalize_input(raw, binary_media_types=())


def test_normalizing_same_file_twice_is_identical():
    raw = FileInput(name="notes.txt", data=b"Mitochondria   make ATP.\n", media_type="text/plain")
    first = normalize_input(raw)
    second = normalize_input(raw)
    assert first == second
    assert first.payload.text.encode() == second.payload.text.encode()


def test_pasted_text_wrapped_directly():
    prepared = normalize_input(PastedText(text="Some pasted notes"))
    assert prepared.payload == TextPayload(text="Some pasted notes")
    assert prepared.origin == InputOrigin.PASTED


def test_topic_wrapped_with_label():
    prepared = normalize_input(TopicInput(topic="  French   Revolution "))
    assert prepared.origin == InputOrigin.TOPIC
    assert prepared.label == "French Revolution"


@pytest.mark.parametrize("raw", [PastedText(text="   \n "), TopicInput(topic="")])
def test_empty_text_inputs_are_validation_errors(raw):
    with pytest.raises(ValidationError):
        normalize_input(raw)


def test_collapse_whitespace():
    assert collapse_whitespace("a \n\t b  c ") == "a b c"
