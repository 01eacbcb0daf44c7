import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from subsyshub.roles import (  # noqa: E402
    RoleCatalog,
    RoleSet,
    normalize_role,
    split_function,
)


def test_normalize_role_ignores_case_whitespace_ec_numbers_and_comments() -> None:
    assert normalize_role("  Histidinol   dehydrogenase (EC 1.1.1.23) ") == "histidinol dehydrogenase"
    assert normalize_role("histidinol dehydrogenase # fragment") == "histidinol dehydrogenase"
    assert normalize_role("Potassium uptake protein (TC 2.A.38.1.1).") == "potassium uptake protein"
    assert normalize_role(None) == ""


def test_split_function_handles_multi_role_separators() -> None:
    parts = split_function(
        "Phosphoribosyl-ATP pyrophosphatase (EC 3.6.1.31) / Phosphoribosyl-AMP cyclohydrolase (EC 3.5.4.19)"
    )
    assert parts == [
        "Phosphoribosyl-ATP pyrophosphatase (EC 3.6.1.31)",
        "Phosphoribosyl-AMP cyclohydrolase (EC 3.5.4.19)",
    ]
    assert split_function("Role A @ Role B; Role C # note") == ["Role A", "Role B", "Role C"]
    assert split_function("") == []


def test_find_or_insert_groups_equivalent_descriptions() -> None:
    catalog = RoleCatalog()
    first = catalog.find_or_insert("Histidinol dehydrogenase (EC 1.1.1.23)")
    second = catalog.find_or_insert("histidinol  DEHYDROGENASE")

    assert first == second
    assert len(catalog) == 1
    assert catalog.descriptions(first) == {
        "Histidinol dehydrogenase (EC 1.1.1.23)",
        "histidinol  DEHYDROGENASE",
    }


def test_role_ids_are_short_mnemonics_with_suffix_on_collision() -> None:
    catalog = RoleCatalog()
    first = catalog.find_or_insert("ATP phosphoribosyltransferase (EC 2.4.2.17)")
    second = catalog.find_or_insert("ATP phosphoribosyltransferase regulatory subunit")
    third = catalog.find_or_insert("ATP phosphoribosyltransferases")

    assert first == "AtpPhos"
    assert second == "AtpPhosReguSubu"
    assert third == "AtpPhos2"


def test_ids_for_with_insert_false_leaves_catalog_untouched() -> None:
    catalog = RoleCatalog()
    known = catalog.find_or_insert("Histidinol dehydrogenase")

    roles = catalog.ids_for("Histidinol dehydrogenase / Unknown extra domain", insert=False)

    assert roles.ids == frozenset({known})
    assert len(catalog) == 1
    assert catalog.find("Unknown extra domain") is None

    grown = catalog.ids_for("Histidinol dehydrogenase / Unknown extra domain")
    assert len(grown) == 2
    assert len(catalog) == 2


def test_role_set_contains_is_subset_test() -> None:
    feature_roles = RoleSet(frozenset({"HistDehy", "AtpPhos"}))

    assert feature_roles.contains(RoleSet(frozenset({"HistDehy"})))
    assert feature_roles.contains(RoleSet())
    assert not RoleSet(frozenset({"HistDehy"})).contains(feature_roles)


def test_loaded_roles_keep_their_ids_and_new_ids_avoid_them() -> None:
    catalog = RoleCatalog()
    catalog.add("AtpPhos", ["ATP phosphoribosyltransferase"])

    assert catalog.find("atp phosphoribosyltransferase (EC 2.4.2.17)") == "AtpPhos"
    assert catalog.find_or_insert("ATP phosphoribosyltransferase like") == "AtpPhosLike"
    assert catalog.groupings() == frozenset(
        {
            frozenset({"ATP phosphoribosyltransferase"}),
            frozenset({"ATP phosphoribosyltransferase like"}),
        }
    )


def test_enumeration_only_descriptions_get_their_own_role() -> None:
    catalog = RoleCatalog()

    role_id = catalog.find_or_insert("(EC 1.1.1.23)")
    roles = catalog.ids_for("(ec 1.1.1.23) / Histidinol dehydrogenase")

    assert role_id == "Ec111123"
    assert catalog.find("  (EC   1.1.1.23)  # partial") == role_id
    assert len(roles) == 2
    assert role_id in roles.ids
    assert len(catalog) == 2
    assert catalog.descriptions(role_id) == {"(EC 1.1.1.23)", "(ec 1.1.1.23)"}


def test_blank_descriptions_name_no_role() -> None:
    catalog = RoleCatalog()

    with pytest.raises(ValueError):
        catalog.find_or_insert("   ")
    assert catalog.find("") is None
    assert len(catalog.ids_for("   ")) == 0
    assert len(catalog) == 0
