"""Tests for libs/keyvault/password.py - constrained random password generation."""

import string

import pytest

from libs.keyvault.exceptions import PolicyError
from libs.keyvault.models import DEFAULT_EXCLUDED_CHARACTERS, PasswordPolicy
from libs.keyvault.password import PUNCTUATION, PasswordGenerator, generate_password


class TestAllowedCharacters:
    """Alphabet construction from policy flags and exclusions."""

    @pytest.mark.unit()
    def test_default_policy_removes_default_exclusions(self) -> None:
        alphabet = PasswordGenerator().allowed_characters(PasswordPolicy())

        for char in DEFAULT_EXCLUDED_CHARACTERS:
            assert char not in alphabet
        assert set(string.ascii_letters + string.digits) <= set(alphabet)
        assert " " not in alphabet

    @pytest.mark.unit()
    def test_exclude_flags_remove_categories(self) -> None:
        policy = PasswordPolicy(
            exclude_numbers=True,
            exclude_punctuation=True,
            exclude_uppercase=True,
            excluded_characters="",
        )

        assert PasswordGenerator().allowed_characters(policy) == string.ascii_lowercase

    @pytest.mark.unit()
    def test_include_space_adds_space(self) -> None:
        policy = PasswordPolicy(include_space=True)

        assert " " in PasswordGenerator().allowed_characters(policy)

    @pytest.mark.unit()
    def test_explicit_exclusions_apply_to_space(self) -> None:
        policy = PasswordPolicy(include_space=True, excluded_characters=" ")

        assert " " not in PasswordGenerator().allowed_characters(policy)

    @pytest.mark.unit()
    def test_empty_alphabet_raises_policy_error(self) -> None:
        """Excluding every category leaves nothing to draw from."""
        policy = PasswordPolicy(
            exclude_numbers=True,
            exclude_punctuation=True,
            exclude_uppercase=True,
            exclude_lowercase=True,
        )

        with pytest.raises(PolicyError, match="excludes every character"):
            PasswordGenerator().generate(policy)

    @pytest.mark.unit()
    def test_exclusion_list_covering_remaining_alphabet_raises(self) -> None:
        policy = PasswordPolicy(
            exclude_uppercase=True,
            exclude_lowercase=True,
            exclude_punctuation=True,
            excluded_characters=string.digits,
        )

        with pytest.raises(PolicyError):
            PasswordGenerator().generate(policy)


class TestGenerate:
    """Password draws honor length and alphabet."""

    @pytest.mark.unit()
    def test_default_length_is_32(self) -> None:
        assert len(generate_password()) == 32

    @pytest.mark.unit()
    @pytest.mark.parametrize("length", [1, 16, 100])
    def test_length_matches_policy(self, length: int) -> None:
        assert len(generate_password(PasswordPolicy(length=length))) == length

    @pytest.mark.unit()
    def test_length_may_exceed_alphabet_size(self) -> None:
        """Draws are with replacement, so a 2-character alphabet still yields 50 characters."""
        policy = PasswordPolicy(
            length=50,
            exclude_uppercase=True,
            exclude_numbers=True,
            exclude_punctuation=True,
            excluded_characters=string.ascii_lowercase[2:],
        )

        password = generate_password(policy)

        assert len(password) == 50
        assert set(password) <= {"a", "b"}

    @pytest.mark.unit()
    def test_output_never_contains_excluded_characters(self) -> None:
        policy = PasswordPolicy(length=500, excluded_characters="abcXYZ019!#")

        password = generate_password(policy)

        assert not set(password) & set("abcXYZ019!#")

    @pytest.mark.unit()
    def test_punctuation_only_policy(self) -> None:
        policy = PasswordPolicy(
            length=64,
            exclude_uppercase=True,
            exclude_lowercase=True,
            exclude_numbers=True,
            excluded_characters="",
        )

        assert set(generate_password(policy)) <= set(PUNCTUATION)

    @pytest.mark.unit()
    def test_successive_passwords_differ(self) -> None:
        assert generate_password() != generate_password()

    @pytest.mark.unit()
    def test_non_positive_length_rejected_by_model(self) -> None:
        with pytest.raises(ValueError, match="greater than 0"):
            PasswordPolicy(length=0)
