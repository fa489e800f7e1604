import pytest

from cookbook.errors import InvalidArgumentError
from cookbook.search import RecipeSearchCriteria, normalize_terms


def test_normalize_terms_trims_lowercases_and_dedupes():
    assert normalize_terms([" Egg", "egg ", "", "  ", "Rice"]) == ["egg", "rice"]


def test_normalize_terms_empty_is_none():
    assert normalize_terms(None) is None
    assert normalize_terms([]) is None
    assert normalize_terms(["", "   "]) is None


def test_blank_instruction_content_counts_as_absent():
    criteria = RecipeSearchCriteria(instructions_content="   ")
    assert criteria.instructions_content is None
    assert criteria.filter_count == 0


def test_no_filters_is_not_advanced():
    assert RecipeSearchCriteria().is_advanced is False


def test_one_filter_is_not_advanced():
    assert RecipeSearchCriteria(is_vegetarian=False).is_advanced is False
    assert RecipeSearchCriteria(include_ingredients=["egg", "rice"]).is_advanced is False


def test_two_filters_are_advanced():
    criteria = RecipeSearchCriteria(is_vegetarian=True, servings=4)
    assert criteria.filter_count == 2
    assert criteria.is_advanced is True


def test_empty_lists_do_not_count():
    criteria = RecipeSearchCriteria(servings=2, include_ingredients=[""], exclude_ingredients=[])
    assert criteria.filter_count == 1
    assert criteria.is_advanced is False


def test_effective_servings_suppressed_by_full_range():
    assert RecipeSearchCriteria(servings=2, min_servings=3, max_servings=5).effective_servings is None


@pytest.mark.parametrize("min_servings,max_servings", [(3, None), (None, 5), (None, None)])
def test_effective_servings_passes_through(min_servings, max_servings):
    criteria = RecipeSearchCriteria(servings=2, min_servings=min_servings, max_servings=max_servings)
    assert criteria.effective_servings == 2


def test_validate_rejects_inverted_range():
    with pytest.raises(InvalidArgumentError) as exc:
        RecipeSearchCriteria(min_servings=6, max_servings=2).validate()
    assert exc.value.message == "minServings (6) cannot be greater than maxServings (2)"


def test_validate_accepts_equal_bounds():
    RecipeSearchCriteria(min_servings=4, max_servings=4).validate()


def test_validate_rejects_include_exclude_overlap():
    criteria = RecipeSearchCriteria(
        include_ingredients=["Pork", "salt", "Egg"],
        exclude_ingredients=[" egg", "pork", "nuts"],
    )
    with pytest.raises(InvalidArgumentError) as exc:
        criteria.validate()
    assert exc.value.message == (
        "The following should not be in both includeIngredients and "
        "excludeIngredients filter: egg, pork"
    )


def test_validate_allows_disjoint_include_exclude():
    RecipeSearchCriteria(include_ingredients=["egg"], exclude_ingredients=["eggplant"]).validate()
