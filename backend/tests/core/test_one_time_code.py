"""One-Time Codes — generation, keying and comparison.

Tests:
    - Codes are 6 digits from the decimal alphabet, leading zeros allowed
    - Store keys are per normalized email and never collide
    - codes_match is exact
"""

from proofpass.core.one_time_code import (
    codes_match, generate_code, normalize_email, signin_code_key,
)


def test_generated_code_is_six_digits():
    for _ in range(50):
        code = generate_code()
        assert len(code) == 6
        assert code.isdigit()


def test_generate_code_respects_custom_alphabet():
    code = generate_code(length=4, alphabet="ab")
    assert len(code) == 4
    assert set(code) <= {"a", "b"}


def test_codes_vary_between_calls():
    codes = {generate_code() for _ in range(20)}
    assert len(codes) > 1


def test_signin_key_normalizes_email():
    assert signin_code_key(" Alice@Example.COM ") == signin_code_key("alice@example.com")
    assert signin_code_key("alice@example.com") == "user:email-signin-code:alice@example.com"


def test_signin_keys_differ_per_email():
    assert signin_code_key("a@b.com") != signin_code_key("a@c.com")


def test_normalize_email_strips_and_lowercases():
    assert normalize_email("  A@B.Com\n") == "a@b.com"


def test_codes_match_exact_only():
    assert codes_match("012345", "012345")
    assert not codes_match("012345", "12345")
    assert not codes_match("012345", "012346")
    assert not codes_match("012345", "")
