import pytest

from app.core.locales import get_locale_value, locale_tag, path_to_locale
from app.core.settings import Settings, settings
from app.services.content_service import validate_doc_content
from app.services.errors import ContentTooLargeError, InvalidContentError
from app.utils.slug import collection_path, product_path


def test_locale_helpers():
    assert locale_tag("zh-CN") == "zh"
    assert locale_tag("en") == "en"
    assert path_to_locale("en") == "en"
    assert path_to_locale("xx") == settings.DEFAULT_LOCALE

    assert get_locale_value({"zh-CN": "a", "en": "b"}, "zh-CN") == "a"
    assert get_locale_value({"zh-CN": "", "en": "b"}, "zh-CN") == "b"
    assert get_locale_value({"ja": "c"}, "zh-CN") == "c"
    assert get_locale_value(None, "en") == ""


def test_public_paths_use_locale_segment():
    assert product_path("zh-CN", "foo") == "/zh-CN/products/foo"
    assert collection_path("en", "best") == "/en/collections/best"


def test_settings_parse_env_strings():
    s = Settings(SUPPORTED_LOCALES="zh-CN,en,ja", LOCALE_PATH_MAP="zh-CN:zh,en:en")
    assert s.SUPPORTED_LOCALES == ["zh-CN", "en", "ja"]
    assert s.LOCALE_PATH_MAP == {"zh-CN": "zh", "en": "en"}
    assert Settings(DATABASE_URL="postgres://u:p@h/db").SQLALCHEMY_DATABASE_URL == "postgresql+psycopg2://u:p@h/db"


def test_enforced_subpaths_only_when_present():
    validate_doc_content("homepage", {"anything": {"goes": True}})
    validate_doc_content("homepage", {"featured": [{"canonicalId": "g1", "priority": 1}]})

    with pytest.raises(InvalidContentError) as exc:
        validate_doc_content("homepage", {"featured": [{"canonicalId": "g1"}, {"badge": "hot"}]})
    assert exc.value.code.startswith("invalid_content:featured.1")

    with pytest.raises(InvalidContentError):
        validate_doc_content("leaderboard", {"items": [{"canonicalId": "g1"}]})


def test_content_size_limit(monkeypatch):
    monkeypatch.setattr(settings, "MAX_DOC_CONTENT_KB", 1)
    with pytest.raises(ContentTooLargeError) as exc:
        validate_doc_content("productDoc", {"blob": "x" * 2048})
    assert exc.value.kind == "validation"
