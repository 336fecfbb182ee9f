"""Tests for the SCIM filter builder."""

from uaa_scim import Filter


def test_eq_quotes_strings():
    assert str(Filter.eq("userName", "joe")) == 'userName eq "joe"'


def test_eq_booleans_are_bare():
    assert str(Filter.eq("active", True)) == "active eq true"
    assert str(Filter.eq("active", False)) == "active eq false"


def test_and_or_wrap_operands():
    joe = Filter.eq("userName", "joe")
    active = Filter.eq("active", True)
    assert str(joe & active) == '(userName eq "joe") and (active eq true)'
    assert str(joe | active) == '(userName eq "joe") or (active eq true)'


def test_any_eq_is_flat():
    assert str(Filter.any_eq("client_id", ["a", "b", "c"])) == (
        'client_id eq "a" or client_id eq "b" or client_id eq "c"'
    )


def test_any_eq_single_value():
    assert str(Filter.any_eq("displayName", ["admins"])) == 'displayName eq "admins"'
