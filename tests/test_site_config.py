import pytest
from fastapi import HTTPException

from core.site_config import DEFAULT_SITE_CONFIG, deep_merge, validate_config_update


def test_deep_merge_keeps_defaults():
    merged = deep_merge(DEFAULT_SITE_CONFIG, {"features": {"enableComments": False}})
    assert merged["features"]["enableComments"] is False
    assert merged["features"]["enableSearch"] is True
    assert DEFAULT_SITE_CONFIG["features"]["enableComments"] is True


def test_validate_drops_unknown_keys():
    assert validate_config_update({"homeLayout": {"columns": 2}, "secret": 1}) == {
        "homeLayout": {"columns": 2}
    }


@pytest.mark.parametrize("columns", [0, 5, True, "3"])
def test_validate_rejects_bad_columns(columns):
    with pytest.raises(HTTPException):
        validate_config_update({"homeLayout": {"columns": columns}})


def test_validate_rejects_non_boolean_feature():
    with pytest.raises(HTTPException):
        validate_config_update({"features": {"enableComments": "yes"}})


def test_validate_requires_objects():
    with pytest.raises(HTTPException):
        validate_config_update({"footer": "text"})
