import base64

import pytest

from geminiproxy.core.errors import ClientInputError
from geminiproxy.utils.content import (
    ContentNormalizer,
    InlineImagePart,
    TextPart,
    guess_mime_type,
    parse_data_uri,
)
from geminiproxy.utils.uploads import UploadStore


@pytest.fixture
def store(tmp_path):
    return UploadStore(str(tmp_path))


@pytest.fixture
def normalizer(store):
    return ContentNormalizer(store, "Unsupported content type")


def test_plain_string_is_single_text_part(normalizer):
    assert normalizer.normalize("hello world") == [TextPart("hello world")]


def test_empty_string_still_yields_one_part(normalizer):
    assert normalizer.normalize("") == [TextPart("")]


@pytest.mark.parametrize("value, expected", [(None, "None"), (42, "42"), (True, "True")])
def test_other_values_are_coerced_to_text(normalizer, value, expected):
    assert normalizer.normalize(value) == [TextPart(expected)]


def test_data_uri_image_keeps_mime_and_bytes(normalizer):
    raw = b"\x89PNG\r\n\x1a\nfake"
    encoded = base64.b64encode(raw).decode("ascii")
    parts = normalizer.normalize(
        [{"type": "image_url", "image_url": {"url": f"data:image/png;base64,{encoded}"}}]
    )
    assert parts == [InlineImagePart(data=encoded, mime_type="image/png")]
    assert parts[0].to_bytes() == raw


def test_image_url_may_be_a_bare_string(normalizer):
    parts = normalizer.normalize([{"type": "image_url", "image_url": "data:image/gif;base64,R0lG"}])
    assert parts == [InlineImagePart(data="R0lG", mime_type="image/gif")]


def test_mixed_list_preserves_order(normalizer):
    parts = normalizer.normalize(
        [
            {"type": "text", "text": "look at this"},
            {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,AAAA"}},
            {"type": "text", "text": "thanks"},
        ]
    )
    assert parts == [
        TextPart("look at this"),
        InlineImagePart(data="AAAA", mime_type="image/jpeg"),
        TextPart("thanks"),
    ]


def test_unknown_item_types_degrade_to_placeholder(normalizer):
    parts = normalizer.normalize([{"type": "input_audio", "input_audio": {}}, "bare string", {"type": "text", "text": "ok"}])
    assert parts == [
        TextPart("Unsupported content type"),
        TextPart("Unsupported content type"),
        TextPart("ok"),
    ]


def test_remote_and_malformed_image_urls_degrade_to_placeholder(normalizer):
    parts = normalizer.normalize(
        [
            {"type": "image_url", "image_url": {"url": "https://example.com/cat.png"}},
            {"type": "image_url", "image_url": {"url": "data:image/png,notbase64"}},
            {"type": "image_url"},
        ]
    )
    assert parts == [TextPart("Unsupported content type")] * 3


def test_upload_reference_is_read_and_encoded(tmp_path, normalizer):
    raw = b"png-bytes"
    (tmp_path / "1700000000000-cat.png").write_bytes(raw)
    parts = normalizer.normalize(
        [{"type": "image_url", "image_url": {"url": "/uploads/1700000000000-cat.png"}}]
    )
    assert parts == [InlineImagePart(data=base64.b64encode(raw).decode("ascii"), mime_type="image/png")]


def test_upload_reference_is_reread_every_time(tmp_path, normalizer):
    path = tmp_path / "1-note.png"
    path.write_bytes(b"first")
    item = [{"type": "image_url", "image_url": {"url": "/uploads/1-note.png"}}]
    first = normalizer.normalize(item)[0]
    path.write_bytes(b"second")
    second = normalizer.normalize(item)[0]
    assert first.to_bytes() == b"first"
    assert second.to_bytes() == b"second"


def test_upload_reference_without_extension_defaults_to_jpeg(tmp_path, normalizer):
    (tmp_path / "1-blob").write_bytes(b"x")
    parts = normalizer.normalize([{"type": "image_url", "image_url": {"url": "/uploads/1-blob"}}])
    assert parts[0].mime_type == "image/jpeg"


def test_missing_upload_is_a_client_error(normalizer):
    with pytest.raises(ClientInputError):
        normalizer.normalize([{"type": "image_url", "image_url": {"url": "/uploads/nope.png"}}])


def test_upload_reference_cannot_escape_upload_dir(tmp_path):
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    (tmp_path / "secret.png").write_bytes(b"secret")
    normalizer = ContentNormalizer(UploadStore(str(uploads)))
    with pytest.raises(ClientInputError):
        normalizer.normalize([{"type": "image_url", "image_url": {"url": "/uploads/../secret.png"}}])


def test_parse_data_uri_rejects_non_base64():
    assert parse_data_uri("data:image/png,abc") is None


def test_guess_mime_type_prefers_declared_type():
    assert guess_mime_type("photo.png", "image/webp") == "image/webp"
    assert guess_mime_type("photo.png") == "image/png"
    assert guess_mime_type("photo") == "image/jpeg"
    assert guess_mime_type("截图.webp") == "image/webp"


def test_upload_names_stay_distinct_within_one_millisecond(monkeypatch, tmp_path):
    monkeypatch.setattr("geminiproxy.utils.uploads.time.time", lambda: 1700000000.5)
    store = UploadStore(str(tmp_path))
    names = [store._make_filename(name) for name in ("猫.png", "狗.png", "shot.png", "shot.png")]
    assert len(set(names)) == 4
    assert all(name.startswith("1700000000500-") for name in names)
    assert names[0].endswith("-file.png")
    assert names[2].endswith("-shot.png")


def test_upload_name_falls_back_to_file_stem(tmp_path):
    store = UploadStore(str(tmp_path))
    assert store._make_filename("截图.webp").endswith("-file.webp")
    assert store._make_filename(None).endswith("-file")
    assert "/" not in store._make_filename("../../etc/passwd")
