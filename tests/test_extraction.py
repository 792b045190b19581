import pytest

from playground.core.extraction import extract_image, extract_text, normalize_image_value


RAW_BASE64 = "iVBORw0KGgo" + "A" * 120


def test_string_output_url():
    assert extract_image({"output": " https://x/a.png "}) == "https://x/a.png"


def test_list_output_first_usable_candidate():
    job = {"output": ["not-an-image", {"caption": "x"}, {"url": "https://x/b.png"}, "https://x/c.png"]}
    assert extract_image(job) == "https://x/b.png"


def test_object_key_priority():
    item = {"path": "https://x/path.png", "uri": "https://x/uri.png", "image": "https://x/image.png"}
    assert extract_image({"output": [item]}) == "https://x/image.png"
    del item["image"]
    assert extract_image({"output": [item]}) == "https://x/uri.png"


def test_single_object_output():
    assert extract_image({"output": {"url": "https://x/a.png"}}) == "https://x/a.png"


def test_images_field_used_when_output_missing():
    assert extract_image({"output": None, "images": ["https://x/a.png"]}) == "https://x/a.png"


def test_data_uri_accepted_as_is():
    uri = "data:image/webp;base64,AAAA"
    assert extract_image({"output": [uri]}) == uri


def test_base64_wrapped_with_expected_format():
    payload = RAW_BASE64[:60] + "\n" + RAW_BASE64[60:]
    result = extract_image({"output": payload}, "png")
    assert result == f"data:image/png;base64,{RAW_BASE64}"


@pytest.mark.parametrize("output_format, subtype", [(None, "jpeg"), ("", "jpeg"), (".j-p-g", "jpg"), ("***", "jpeg")])
def test_base64_format_sanitized(output_format, subtype):
    assert normalize_image_value(RAW_BASE64, output_format).startswith(f"data:image/{subtype};base64,")


def test_short_base64_like_strings_rejected():
    assert normalize_image_value("abc123") is None
    assert normalize_image_value("A" * 100) is None


def test_nothing_usable():
    assert extract_image({"output": ["hello world", 3, None]}) is None
    assert extract_image({"status": "failed"}) is None
    assert extract_image(None) is None


def test_extract_image_is_repeatable():
    job = {"output": [{"image": RAW_BASE64}]}
    assert extract_image(job, "png") == extract_image(job, "png")
    assert job == {"output": [{"image": RAW_BASE64}]}


def test_text_from_string_output():
    assert extract_text({"output": "  a cat in the rain  "}) == "a cat in the rain"


def test_text_from_token_list_uses_first_non_blank_item():
    assert extract_text({"output": ["", "  ", "A cat", "ignored"]}) == "A cat"


def test_text_from_message_objects():
    job = {"output": [{"message": "from message"}]}
    assert extract_text(job) == "from message"
    job = {"output": [{"text": "  ", "content": ["", {"text": "nested"}]}]}
    assert extract_text(job) == "nested"


def test_text_falls_back_to_output_text_then_logs():
    assert extract_text({"output": None, "output_text": "plain"}) == "plain"
    logs = "\n".join(f"line {i}" for i in range(8))
    assert extract_text({"output": [], "logs": logs}) == "line 3 line 4 line 5 line 6 line 7"


def test_text_empty_when_nothing_found():
    assert extract_text({"output": [{"role": "assistant"}], "logs": "   "}) == ""
    assert extract_text("not a prediction") == ""
