import pytest
from storefront.products.variants import VariantResolver, VariantSelection, parse_variant_key, variant_key

COLORS = ["Preto", "Branco", "Azul"]
SIZES = ["P", "M", "G"]


@pytest.fixture
def resolver():
    return VariantResolver(COLORS, SIZES, {"Preto-M": 3, "Branco-M": 0, "Azul-G": 2, "Preto-P": 1})


def test_parse_variant_key():
    assert parse_variant_key("Preto-M") == ("Preto", "M")
    assert parse_variant_key(" Preto - M ") == ("Preto", "M")
    assert parse_variant_key("Azul-Marinho-M") == ("", "")
    assert parse_variant_key("Preto") == ("", "")
    assert variant_key(" Preto ", "M ") == "Preto-M"


def test_available_colors_for_size(resolver):
    assert resolver.available_colors("M") == ["Preto"]
    assert resolver.has_stock("Branco", "M") is False
    assert resolver.has_stock("Preto", "M") is True


def test_available_colors_without_size_keeps_declared_order(resolver):
    assert resolver.available_colors("") == ["Preto", "Azul"]
    assert resolver.available_sizes(None) == ["P", "M", "G"]
    assert resolver.available_sizes("Azul") == ["G"]


def test_available_sets_only_contain_stocked_pairs(resolver):
    for size in SIZES:
        for color in resolver.available_colors(size):
            assert resolver.has_stock(color, size)
    for color in COLORS:
        for size in resolver.available_sizes(color):
            assert resolver.has_stock(color, size)


def test_padded_selection_matches_stock_lookup(resolver):
    # has_stock trims its arguments , so availability must agree with it
    assert resolver.available_colors(" M ") == resolver.available_colors("M") == ["Preto"]
    assert resolver.available_sizes("Azul ") == resolver.available_sizes("Azul") == ["G"]
    for color in resolver.available_colors(" P"):
        assert resolver.has_stock(color, " P")


@pytest.mark.parametrize("stock_map", [None, {}])
def test_product_without_variant_map_is_unconstrained(stock_map):
    r = VariantResolver(COLORS, SIZES, stock_map)
    assert r.available_colors("M") == COLORS
    assert r.available_sizes("Preto") == SIZES
    assert r.has_stock("Verde", "XG") is True
    assert r.stock_for("Preto", "M") is None


def test_malformed_keys_are_ignored():
    r = VariantResolver(["Azul", "Marinho"], ["M"], {"Azul-Marinho-M": 5, "Azul-M": 0})
    assert r.available_colors("") == []
    assert r.available_sizes("") == []


def test_unknown_combination_has_no_stock(resolver):
    assert resolver.stock_for("Azul", "P") is None
    assert resolver.has_stock("Azul", "P") is False


def test_select_size_rederives_color(resolver):
    current = VariantSelection(color="Azul", size="G")
    nxt = resolver.select_size(current, "M")
    assert nxt == VariantSelection(color="Preto", size="M")


def test_select_size_keeps_valid_color(resolver):
    current = VariantSelection(color="Preto", size="M")
    assert resolver.select_size(current, "P") == VariantSelection(color="Preto", size="P")


def test_select_color_rederives_size(resolver):
    current = VariantSelection(color="Preto", size="M")
    assert resolver.select_color(current, "Azul") == VariantSelection(color="Azul", size="G")


def test_select_color_with_nothing_available_clears_size():
    r = VariantResolver(["Preto", "Branco"], ["M"], {"Preto-M": 1, "Branco-M": 0})
    current = VariantSelection(color="Preto", size="M")
    assert r.select_color(current, "Branco") == VariantSelection(color="Branco", size="")


def test_initial_selection(resolver):
    assert resolver.initial_selection() == VariantSelection(color="Preto", size="P")
    empty = VariantResolver(["Preto"], ["M"], {"Preto-M": 0})
    assert empty.initial_selection() == VariantSelection(color="", size="")


def test_from_product_mapping():
    r = VariantResolver.from_product({"colors": ["Preto"], "sizes": ["M"], "stock_by_variant": {"Preto-M": 2}})
    assert r.stock_for("Preto", "M") == 2
