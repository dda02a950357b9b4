from conftest import make_listing
from marketplace.services.catalog import filter_listings, option_values

MIRROR = [
    make_listing("1", "Ana", "Costureira", "Centro", description="Ajustes e consertos"),
    make_listing("2", "Bea", "Eletricista", "Norte", description="Instalações"),
    make_listing("3", "Caio", "Pedreiro", "centro", description="Reformas"),
]


def _names(listings):
    return [listing.name for listing in listings]


def test_empty_filters_match_everything():
    assert _names(filter_listings(MIRROR)) == ["Ana", "Bea", "Caio"]


def test_search_is_case_insensitive_over_literal_field_values():
    # "a" occurs in every name ("Ana", "Bea", "Caio").
    assert _names(filter_listings(MIRROR, search="a")) == ["Ana", "Bea", "Caio"]
    assert _names(filter_listings(MIRROR, search="ANA")) == ["Ana"]


def test_search_covers_description_and_service_type():
    assert _names(filter_listings(MIRROR, search="reform")) == ["Caio"]
    assert _names(filter_listings(MIRROR, search="eletric")) == ["Bea"]


def test_search_does_not_match_location_or_contact():
    assert filter_listings(MIRROR, search="norte") == []
    assert filter_listings(MIRROR, search="555") == []


def test_category_and_location_are_substring_filters_anded():
    assert _names(filter_listings(MIRROR, location="CENTRO")) == ["Ana", "Caio"]
    assert _names(filter_listings(MIRROR, category="costu", location="centro")) == ["Ana"]
    assert filter_listings(MIRROR, search="bea", location="centro") == []


def test_option_values_are_sorted_and_distinct():
    mirror = MIRROR + [make_listing("4", "Duda", "Costureira", "Sul"), make_listing("5", "Eva", "", "")]
    assert option_values(mirror, "service_type") == ["Costureira", "Eletricista", "Pedreiro"]
    assert option_values(mirror, "location") == ["Centro", "Norte", "Sul", "centro"]


def test_option_values_of_empty_mirror():
    assert option_values([], "location") == []
