from propdata.utils.address_matcher import AddressMatcher, get_address_matcher


def test_normalize_address():
    matcher = AddressMatcher()
    assert matcher.normalize_address("20387 Dale Drive") == "20387 dale dr"
    assert matcher.normalize_address("456 SW 39th Avenue") == "456 sw 39 ave"
    assert matcher.normalize_address("101-1234 Main St.") == "101 1234 main st"
    assert matcher.normalize_address(None) == ""


def test_extract_street_number():
    matcher = AddressMatcher()
    assert matcher.extract_street_number("20387 Dale Drive") == "20387"
    assert matcher.extract_street_number("Unit B, 456 Oak Ave") == "456"
    assert matcher.extract_street_number("Dale Drive") is None


def test_same_number_and_street_name_matches_despite_suffix():
    matcher = AddressMatcher()
    assert matcher.is_exact_match("20387 Dale Drive", "20387 Dale Avenue")
    assert matcher.is_exact_match("20387 Dale Drive", "20387 DALE DR, MAPLE RIDGE, BC")


def test_different_street_or_number_does_not_match():
    matcher = AddressMatcher()
    assert not matcher.is_exact_match("20387 Dale Drive", "20387 Oak Street")
    assert not matcher.is_exact_match("20387 Dale Drive", "20388 Dale Drive")
    assert not matcher.is_exact_match("20387 Dale Drive", "120387 Dale Drive")
    assert not matcher.is_exact_match("20387 Dale Drive", None)
    assert not matcher.is_exact_match("Dale Drive", "20387 Dale Drive")


def test_directional_alone_is_not_a_street_name():
    matcher = AddressMatcher()
    assert not matcher.is_exact_match("456 W 10th Ave", "456 W 12th Ave")
    assert matcher.is_exact_match("456 W 10th Ave", "456 WEST 10TH AVENUE")


def test_street_named_only_by_type_words():
    matcher = AddressMatcher()
    assert matcher.is_exact_match("1200 North Road", "1200 NORTH RD")
    assert not matcher.is_exact_match("1200 North Road", "1200 Main Road")


def test_cache_key_ignores_case_and_abbreviation():
    matcher = get_address_matcher()
    assert matcher.cache_key("20387 Dale Drive ", "Maple Ridge") == matcher.cache_key("20387 dale dr", "MAPLE RIDGE")
    assert matcher is get_address_matcher()


def test_unit_civic_form_matches_on_the_civic_number():
    matcher = AddressMatcher()
    assert matcher.extract_street_number("101-1234 Main St") == "1234"
    assert matcher.extract_street_number("#101-1234 Main St") == "1234"
    assert matcher.is_exact_match("101-1234 Main St", "1234 Main St")
    assert matcher.is_exact_match("#101-1234 Main St", "101-1234 MAIN ST")
    assert not matcher.is_exact_match("101-1234 Main St", "101 Main St")


def test_city_after_comma_is_not_part_of_the_street():
    matcher = AddressMatcher()
    assert matcher.street_part("20387 Dale Drive, Maple Ridge") == "20387 Dale Drive"
    assert matcher.significant_tokens("20387 Dale Drive, Maple Ridge") == {"dale"}
    assert not matcher.is_exact_match("20387 Dale Drive, Maple Ridge", "20387 Maple Crescent")
    assert not matcher.is_exact_match("20387 Maple Crescent", "20387 Dale Dr, Maple Ridge, BC")
    assert matcher.is_exact_match("20387 Dale Drive, Maple Ridge", "20387 DALE DR")
