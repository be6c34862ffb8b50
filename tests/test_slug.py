import pytest

from app.core.slug import (
    INVITE_CODE_ALPHABET,
    SLUG_ALPHABET,
    UniqueSlugError,
    generate_invite_code,
    generate_slug,
    generate_unique_slug,
    is_valid_slug,
)


def test_generated_slug_uses_url_safe_alphabet():
    slug = generate_slug()
    assert len(slug) == 10
    assert set(slug) <= set(SLUG_ALPHABET)
    assert is_valid_slug(slug)


def test_unique_slug_skips_taken_candidates():
    candidates = iter(["aaaaaaaaaa", "bbbbbbbbbb", "cccccccccc"])
    taken = {"aaaaaaaaaa", "bbbbbbbbbb"}

    slug = generate_unique_slug(lambda s: s in taken, generator=lambda: next(candidates))

    assert slug == "cccccccccc"


def test_unique_slug_gives_up_after_max_attempts():
    calls = []

    def _always_taken(slug):
        calls.append(slug)
        return True

    with pytest.raises(UniqueSlugError) as exc_info:
        generate_unique_slug(_always_taken, max_attempts=5)

    assert exc_info.value.attempts == 5
    assert len(calls) == 5


@pytest.mark.parametrize("slug", ["", None, "short", "abcdefghijk", "abc def ghi", "abcdefghi!", "../../etc0"])
def test_invalid_slug_formats(slug):
    assert not is_valid_slug(slug)


def test_valid_slug_with_dash_and_underscore():
    assert is_valid_slug("A_b-C9d_e-")


def test_invite_code_is_unambiguous_upper_case():
    code = generate_invite_code()
    assert len(code) == 8
    assert set(code) <= set(INVITE_CODE_ALPHABET)
    assert not set(code) & set("01IO")
