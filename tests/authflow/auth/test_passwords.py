from authflow.auth import passwords


def test_hash_password_verifies_only_the_original_password() -> None:
    hashed = passwords.hash_password('correct-horse', rounds=4)

    assert hashed != 'correct-horse'
    assert passwords.verify_password('correct-horse', hashed)
    assert not passwords.verify_password('wrong-horse', hashed)


def test_verify_password_treats_missing_or_malformed_hash_as_mismatch() -> None:
    assert not passwords.verify_password('correct-horse', None)
    assert not passwords.verify_password('', 'irrelevant')
    assert not passwords.verify_password('correct-horse', 'not-a-bcrypt-hash')


def test_hash_reset_token_is_deterministic() -> None:
    token = passwords.generate_reset_token()

    assert passwords.hash_reset_token(token) == passwords.hash_reset_token(token)
    assert passwords.hash_reset_token(token) != token
    assert len(passwords.hash_reset_token(token)) == 64


def test_generate_reset_token_returns_distinct_hex_tokens() -> None:
    first = passwords.generate_reset_token()
    second = passwords.generate_reset_token()

    assert first != second
    assert len(first) == 2 * passwords.RESET_TOKEN_BYTES
    int(first, 16)
