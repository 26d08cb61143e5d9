import tmdb_movies.language as lang


def test_normalize_language_uppercases_region_only():
    assert lang.normalize_language("en-us") == "en-US"
    assert lang.normalize_language("pt-br") == "pt-BR"
    assert lang.normalize_language("EN-us") == "EN-US"


def test_normalize_language_leaves_other_tags_untouched():
    assert lang.normalize_language("en") == "en"
    assert lang.normalize_language("zh-hant-tw") == "zh-hant-tw"
    assert lang.normalize_language("") == ""
    assert lang.normalize_language(None) is None


def test_image_languages_param_for_english_region():
    assert lang.image_languages_param("en-US") == "en-US,en,null"
    assert lang.image_languages_param("en-us") == "en-US,en,null"


def test_image_languages_param_for_other_languages():
    assert lang.image_languages_param("fr-FR") == "fr-FR,fr,null,en"
    assert lang.image_languages_param("de") == "de,null,en"
    assert lang.image_languages_param("en") == "en,null"


def test_image_languages_param_without_language():
    assert lang.image_languages_param(None) == "null,en"
    assert lang.image_languages_param("") == "null,en"


def test_adjust_image_language():
    assert lang.adjust_image_language("en", "en-US") == "en-US"
    assert lang.adjust_image_language("fr", "en-US") == "fr"
    assert lang.adjust_image_language("en", "en") == "en"
    assert lang.adjust_image_language(None, "en-US") is None


def test_is_english_is_exact_match():
    assert lang.is_english("en") is True
    assert lang.is_english(" EN ") is True
    assert lang.is_english("en-GB") is False
    assert lang.is_english(None) is False
