from casetranslate.languages import LanguageCatalog, default_catalog


def test_display_name_is_capitalised():
    catalog = default_catalog()
    assert catalog.display_name("en") == "English"
    assert catalog.display_name("zh-CN") == "Chinese_simplified"


def test_detection_label_combines_name_and_code():
    assert default_catalog().detection_label("fr") == "French (fr)"


def test_unknown_code_falls_back_to_code():
    catalog = default_catalog()
    assert "xx" not in catalog
    assert catalog.detection_label("xx") == "xx (xx)"


def test_code_for_matches_names_case_insensitively():
    catalog = default_catalog()
    assert catalog.code_for("english") == "en"
    assert catalog.code_for("English") == "en"
    assert catalog.code_for(" GERMAN ") == "de"


def test_code_for_accepts_codes_and_rejects_unknown_names():
    catalog = default_catalog()
    assert catalog.code_for("zh-tw") == "zh-TW"
    assert catalog.code_for("klingon") is None
    assert catalog.code_for("") is None


def test_injected_catalog_normalises_names():
    catalog = LanguageCatalog({"en": "English", "pt-BR": "Portuguese (Brazil)", "": "x"})
    assert len(catalog) == 2
    assert catalog["en"] == "english"
    assert list(catalog.values()) == ["english", "portuguese (brazil)"]
    assert catalog.code_for("Portuguese (Brazil)") == "pt-BR"
    assert "en" in catalog
