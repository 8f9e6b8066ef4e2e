import pytest

from src.providers import cipher
from src.providers.base import Applied, CipherParameters, Invalid, NotApplicable
from conftest import CHARSET, cipher_encode, cipher_page


@pytest.mark.parametrize("charset,offset,radix", [
    (CHARSET, 9, 7),
    ("abcdefghij", 0, 2),
    ("0123456789abcdefghijklmnopqrstuvwxyz!", 250, 36),
])
def test_every_byte_survives_encode_decode(charset, offset, radix):
    data = bytes(range(256))
    params = CipherParameters(cipher_encode(data, charset, offset, radix), charset, offset, radix)
    assert cipher.decode_bytes(params) == data


def test_decodes_worked_example():
    # 'A' = 65, +3 = 68 = 2*25 + 3*5 + 3 → "cdd" with digits a..e, separator 'f'
    params = CipherParameters("cddf", "abcdefghij", 3, 5)
    assert params.separator == "f"
    assert cipher.decode(params) == "A"


def test_unknown_characters_are_skipped_within_segment():
    params = CipherParameters("c?d#df", "abcdefghij", 3, 5)
    assert cipher.decode(params) == "A"


def test_empty_segments_are_skipped():
    params = CipherParameters("ffcddffcddf", "abcdefghij", 3, 5)
    assert cipher.decode(params) == "AA"


def test_out_of_range_values_are_dropped():
    # "a" → 0 - 3 < 0, "eeee" → 624 - 3 > 255
    params = CipherParameters("afcddfeeeef", "abcdefghij", 3, 5)
    assert cipher.decode(params) == "A"


def test_first_occurrence_wins_for_repeated_charset_characters():
    # 'a' sits at 0 and 3; separator is charset[5] == 'e'
    params = CipherParameters("bae", "abcadefghij", 0, 5)
    assert cipher.decode_bytes(params) == b"\x05"


def test_invalid_utf8_is_replaced():
    params = CipherParameters(cipher_encode(b"ok\xff", "abcdefghij", 0, 5), "abcdefghij", 0, 5)
    assert cipher.decode(params) == "ok�"


def test_unpack_applies_to_page():
    outcome = cipher.unpack(cipher_page("var url = '/e/abc123';"))
    assert outcome == Applied("var url = '/e/abc123';")


def test_unpack_handles_multibyte_text():
    outcome = cipher.unpack(cipher_page("tÍtulo — ok"))
    assert outcome == Applied("tÍtulo — ok")


def test_unpack_not_applicable_without_invocation():
    html = "<html><script>var url = 'https://kwik.cx/e/abc';</script></html>"
    assert cipher.unpack(html) == NotApplicable()
    assert not cipher.detect(html)


def test_radix_out_of_range_is_invalid():
    html = 'eval(function(a,b,c,d,e,f){return a}("xyz",19,"abc",0,3,32))'
    outcome = cipher.unpack(html)
    assert isinstance(outcome, Invalid)
    assert "out of range" in outcome.reason


def test_non_numeric_offset_is_invalid():
    html = 'eval(function(a,b,c,d,e,f){return a}("xyz",19,"abcdef",x1,3,32))'
    outcome = cipher.unpack(html)
    assert isinstance(outcome, Invalid)
    assert "offset" in outcome.reason
