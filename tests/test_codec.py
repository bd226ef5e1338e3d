import logging

import pytest

from smart_widgets.core.errors import WidgetConfigError
from smart_widgets.models.widget import CALCULATION_MODES
from smart_widgets.services.codec import decode_type, encode_type, is_encoded_stat, is_stat_tag


@pytest.mark.parametrize("mode", CALCULATION_MODES)
def test_stat_modes_survive_encoding(mode):
    assert decode_type(encode_type("stat", mode)) == ("stat", mode)


def test_encoding_uses_hyphenated_tag():
    assert encode_type("stat", "sum") == "statcard-sum"
    assert encode_type("stat") == "statcard-count"


def test_non_stat_kinds_pass_through():
    assert encode_type("bar", "sum") == "bar"
    assert decode_type("bar") == ("bar", None)
    assert decode_type("latestOperations") == ("latestOperations", None)


def test_legacy_spelling_is_accepted_on_read():
    assert decode_type("statcardaverage") == ("stat", "average")
    assert decode_type("StatCard-Max") == ("stat", "max")


def test_plain_stat_uses_fallback_mode():
    assert decode_type("stat") == ("stat", "count")
    assert decode_type("stat", "min") == ("stat", "min")


def test_plain_stat_with_unknown_fallback_defaults_to_count(caplog):
    with caplog.at_level(logging.WARNING):
        assert decode_type("stat", "median") == ("stat", "count")
    assert "median" in caplog.text


@pytest.mark.parametrize("tag", ["statcard", "statcard-", "StatCard"])
def test_statcard_without_mode_reads_like_plain_stat(tag):
    assert decode_type(tag) == ("stat", "count")
    assert decode_type(tag, "max") == ("stat", "max")
    assert is_stat_tag(tag)


def test_encoded_tag_wins_over_disagreeing_mode(caplog):
    with caplog.at_level(logging.WARNING):
        assert decode_type("statcard-sum", "max") == ("stat", "sum")
    assert "disagrees" in caplog.text


def test_unknown_mode_cannot_be_encoded():
    with pytest.raises(WidgetConfigError):
        encode_type("stat", "median")


def test_tag_predicates():
    assert is_encoded_stat("statcard-min")
    assert not is_encoded_stat("stat")
    assert is_stat_tag("stat")
    assert is_stat_tag("statcardsum")
    assert not is_stat_tag("bar")
