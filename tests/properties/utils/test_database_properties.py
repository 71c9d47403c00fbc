import pytest
from hypothesis import given, strategies as st

from promptstash.utils import safe_identifier

# Valid SQL identifiers: start with letter/underscore, then alphanumeric/underscore
valid_identifier = st.from_regex(r"[A-Za-z_][A-Za-z0-9_]*", fullmatch=True)

# Characters that would enable SQL injection
INJECTION_CHARS = frozenset("'\";-/*\\")


@given(name=valid_identifier)
def test_safe_identifier_accepts_all_valid_identifiers(name: str) -> None:
    assert safe_identifier(name) == f'"{name}"'


@given(
    prefix=st.text(min_size=0, max_size=10),
    injection_char=st.sampled_from(sorted(INJECTION_CHARS)),
    suffix=st.text(min_size=0, max_size=10),
)
def test_safe_identifier_rejects_injection_characters(
    prefix: str, injection_char: str, suffix: str
) -> None:
    name = prefix + injection_char + suffix
    with pytest.raises(ValueError, match="Invalid SQL identifier"):
        _ = safe_identifier(name)


@given(name=st.from_regex(r"[0-9][A-Za-z0-9_]*", fullmatch=True))
def test_safe_identifier_rejects_leading_digit(name: str) -> None:
    with pytest.raises(ValueError, match="Invalid SQL identifier"):
        _ = safe_identifier(name)
