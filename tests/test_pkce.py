import string

import pytest

from auth.pkce import (
    ALPHABET,
    STATE_LENGTH,
    VERIFIER_LENGTH,
    code_challenge,
    generate_pkce,
    generate_state,
    random_string,
)


def test_alphabet_is_62_alphanumerics() -> None:
    assert len(ALPHABET) == 62
    assert set(ALPHABET) == set(string.ascii_letters + string.digits)


@pytest.mark.parametrize("length", [0, 1, 16, 43, 64, 128, 500])
def test_random_string_exact_length(length: int) -> None:
    assert len(random_string(length)) == length


def test_random_string_uses_alphabet_only() -> None:
    value = random_string(2000)

    assert set(value) <= set(ALPHABET)


def test_random_string_negative_length() -> None:
    with pytest.raises(ValueError):
        random_string(-1)


def test_random_string_not_repeated() -> None:
    assert random_string(32) != random_string(32)


def test_code_challenge_deterministic() -> None:
    verifier = "deterministic-verifier"

    assert code_challenge(verifier) == code_challenge(verifier)


def test_code_challenge_matches_rfc7636_vector() -> None:
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

    assert code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_code_challenge_is_unpadded_base64url() -> None:
    challenge = code_challenge(random_string(64))

    assert len(challenge) == 43
    assert "=" not in challenge
    assert "+" not in challenge
    assert "/" not in challenge


def test_generate_pkce_pair() -> None:
    pair = generate_pkce()

    assert len(pair.verifier) == VERIFIER_LENGTH
    assert pair.challenge == code_challenge(pair.verifier)


def test_generate_state_length() -> None:
    assert len(generate_state()) == STATE_LENGTH
