from pathlib import Path

from vcard_scribe.config import (
    CONF_NAME,
    Settings,
    default_conf_path,
    load_settings,
    write_default_conf,
)
from vcard_scribe.version import VCardVersion


def test_missing_file_gives_defaults(tmp_path: Path):
    assert load_settings(tmp_path / "nope.toml") == Settings()


def test_default_conf_round_trip(tmp_path: Path):
    conf = tmp_path / "local" / CONF_NAME
    write_default_conf(conf)
    assert conf.exists()

    settings = load_settings(conf)
    assert settings.version is VCardVersion.V4_0
    assert settings.add_prodid is True
    assert settings.line_length == 75


def test_values_are_read(tmp_path: Path):
    conf = tmp_path / CONF_NAME
    conf.write_text(
        'target_version = "3.0"\n'
        "include_trailing_semicolons = true\n"
        "add_prodid = false\n"
        "version_strict = false\n"
        "line_length = 0\n",
        encoding="utf-8",
    )
    settings = load_settings(conf)
    assert settings.writer_options() == {
        "target_version": VCardVersion.V3_0,
        "include_trailing_semicolons": True,
        "add_prodid": False,
        "version_strict": False,
        "line_length": None,
    }


def test_bad_values_are_ignored(tmp_path: Path, caplog):
    conf = tmp_path / CONF_NAME
    conf.write_text('target_version = "5.0"\n', encoding="utf-8")
    assert load_settings(conf).target_version is None
    assert "Unknown target_version" in caplog.text

    conf.write_text("this is = not [toml", encoding="utf-8")
    assert load_settings(conf) == Settings()


def test_default_path(tmp_path: Path):
    assert default_conf_path(tmp_path) == tmp_path / CONF_NAME
