"""Tests for the cookbook recipes API.

Tests cover:
- Recipe CRUD with ingredients and instructions
- Vegetarian derivation and ingredient reuse
- Search filters
- Error envelope and status mapping
"""

import uuid

from sqlalchemy import func, select

from cookbook.models import Ingredient, Instruction, Recipe, RecipeIngredient

from conftest import make_payload


def _create(client, payload):
    response = client.post("/v1/recipes", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


# --- Create ---


def test_create_vegetarian_recipe(client):
    """All-vegetarian ingredients give a vegetarian recipe with steps 1..N."""
    response = client.post("/v1/recipes", json=make_payload())
    assert response.status_code == 201

    body = response.json()
    assert body["success"] is True
    assert "errorCode" not in body
    assert "errorMessage" not in body

    data = body["data"]
    assert data["title"] == "Garden Salad"
    assert data["servings"] == 2
    assert data["isVegetarian"] is True
    assert [i["stepNumber"] for i in data["instructions"]] == [1, 2]
    assert [i["content"] for i in data["instructions"]] == ["Chop.", "Toss."]
    assert [i["name"] for i in data["ingredients"]] == ["Tomato", "Lettuce"]
    assert data["ingredients"][0]["quantity"] == 2
    assert data["ingredients"][0]["unit"] == "pcs"
    assert data["createdAt"] is not None
    assert data["updatedAt"] is not None


def test_missing_vegetarian_flag_makes_recipe_non_vegetarian(client):
    payload = make_payload(ingredients=[
        {"name": "Tomato", "quantity": 2, "isVegetarian": True},
        {"name": "Bacon", "quantity": 3, "unit": "slices"},
    ])
    data = _create(client, payload)
    assert data["isVegetarian"] is False


def test_explicit_null_vegetarian_flag_makes_recipe_non_vegetarian(client):
    payload = make_payload(ingredients=[
        {"name": "Tomato", "quantity": 2, "isVegetarian": True},
        {"name": "Mystery sauce", "quantity": 1, "isVegetarian": None},
    ])
    data = _create(client, payload)
    assert data["isVegetarian"] is False
    assert data["ingredients"][1]["isVegetarian"] is None


def test_ingredient_reused_case_insensitively(client, db_session):
    """Second recipe reuses the stored "Tomato" row and its vegetarian flag."""
    _create(client, make_payload(
        title="Recipe A",
        ingredients=[{"name": "Tomato", "quantity": 1, "isVegetarian": True}],
    ))
    recipe_b = _create(client, make_payload(
        title="Recipe B",
        ingredients=[{"name": "tomato", "quantity": 4, "isVegetarian": False}],
    ))

    assert recipe_b["isVegetarian"] is True
    assert recipe_b["ingredients"][0]["name"] == "Tomato"

    rows = db_session.scalars(
        select(Ingredient).where(func.lower(Ingredient.name) == "tomato")
    ).all()
    assert len(rows) == 1
    assert rows[0].name == "Tomato"
    assert rows[0].is_vegetarian is True


def test_create_rejects_empty_ingredients(client):
    response = client.post("/v1/recipes", json=make_payload(ingredients=[]))
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "ingredients" in body["errorMessage"]


def test_create_rejects_non_positive_quantity(client):
    payload = make_payload(ingredients=[{"name": "Tomato", "quantity": 0}])
    response = client.post("/v1/recipes", json=payload)
    assert response.status_code == 400
    assert "quantity" in response.json()["errorMessage"]


def test_create_rejects_quantity_finer_than_stored_precision(client):
    payload = make_payload(ingredients=[{"name": "Saffron", "quantity": 0.0004, "unit": "g"}])
    response = client.post("/v1/recipes", json=payload)
    assert response.status_code == 400
    assert "ingredients.0.quantity" in response.json()["errorMessage"]


def test_create_rejects_quantity_too_large_to_store(client):
    payload = make_payload(ingredients=[{"name": "Rice", "quantity": 12345678901, "unit": "g"}])
    response = client.post("/v1/recipes", json=payload)
    assert response.status_code == 400
    assert "ingredients.0.quantity" in response.json()["errorMessage"]


def test_quantity_bounds_round_trip(client):
    created = _create(client, make_payload(ingredients=[
        {"name": "Saffron", "quantity": 0.001, "unit": "g", "isVegetarian": True},
        {"name": "Rice", "quantity": 123456789.5, "unit": "g", "isVegetarian": True},
    ]))

    data = client.get(f"/v1/recipes/{created['id']}").json()["data"]
    assert [i["quantity"] for i in data["ingredients"]] == [0.001, 123456789.5]
    assert all(i["quantity"] > 0 for i in data["ingredients"])


def test_create_rejects_blank_instruction(client):
    payload = make_payload(instructions=[{"content": "   "}])
    response = client.post("/v1/recipes", json=payload)
    assert response.status_code == 400
    assert "content" in response.json()["errorMessage"]


def test_create_rejects_short_title(client):
    response = client.post("/v1/recipes", json=make_payload(title="ab"))
    assert response.status_code == 400
    assert "title" in response.json()["errorMessage"]


def test_create_rejects_duplicate_ingredient_names(client):
    payload = make_payload(ingredients=[
        {"name": "Tomato", "quantity": 1},
        {"name": " TOMATO ", "quantity": 2},
    ])
    response = client.post("/v1/recipes", json=payload)
    assert response.status_code == 400
    assert "tomato" in response.json()["errorMessage"]


# --- Get ---


def test_get_recipe_round_trip(client):
    payload = make_payload(description="Fresh and crunchy.")
    created = _create(client, payload)

    response = client.get(f"/v1/recipes/{created['id']}")
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["title"] == payload["title"]
    assert data["description"] == "Fresh and crunchy."
    assert data["servings"] == payload["servingSize"]
    assert {(i["name"], i["quantity"], i["unit"]) for i in data["ingredients"]} == {
        ("Tomato", 2, "pcs"),
        ("Lettuce", 1, "head"),
    }
    assert [i["content"] for i in data["instructions"]] == ["Chop.", "Toss."]
    assert all(i["recipeId"] == created["id"] for i in data["instructions"])


def test_get_unknown_recipe_returns_404_with_code(client):
    response = client.get(f"/v1/recipes/{uuid.uuid4()}")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["errorCode"] == 1
    assert "Recipe not found" in body["errorMessage"]
    assert "data" not in body


def test_get_malformed_id_returns_400(client):
    response = client.get("/v1/recipes/not-a-uuid")
    assert response.status_code == 400
    assert response.json()["success"] is False


# --- Update ---


def test_update_replaces_ingredients_and_instructions(client, db_session):
    created = _create(client, make_payload(
        ingredients=[
            {"name": "Egg", "quantity": 2, "isVegetarian": True},
            {"name": "Milk", "quantity": 1, "unit": "cup", "isVegetarian": True},
        ],
        instructions=[{"content": "Crack."}, {"content": "Whisk."}, {"content": "Fry."}],
    ))
    before = client.get(f"/v1/recipes/{created['id']}").json()["data"]

    update = make_payload(
        title="Ham Toast",
        serving_size=1,
        ingredients=[{"name": "Ham", "quantity": 2, "unit": "slices", "isVegetarian": False}],
        instructions=[{"content": "Toast the bread."}],
    )
    response = client.put(f"/v1/recipes/{created['id']}", json=update)
    assert response.status_code == 204
    assert response.content == b""

    data = client.get(f"/v1/recipes/{created['id']}").json()["data"]
    assert data["title"] == "Ham Toast"
    assert data["servings"] == 1
    assert data["isVegetarian"] is False
    assert [(i["stepNumber"], i["content"]) for i in data["instructions"]] == [(1, "Toast the bread.")]
    assert [i["name"] for i in data["ingredients"]] == ["Ham"]
    assert data["createdAt"] == before["createdAt"]

    recipe_id = uuid.UUID(created["id"])
    assert db_session.scalar(
        select(func.count()).select_from(Instruction).where(Instruction.recipe_id == recipe_id)
    ) == 1
    assert db_session.scalar(
        select(func.count()).select_from(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id)
    ) == 1


def test_update_keeping_same_ingredient(client):
    created = _create(client, make_payload())
    update = make_payload(ingredients=[
        {"name": "Lettuce", "quantity": 3, "unit": "leaves", "isVegetarian": True},
        {"name": "Tomato", "quantity": 5, "unit": "pcs", "isVegetarian": True},
    ])
    assert client.put(f"/v1/recipes/{created['id']}", json=update).status_code == 204

    data = client.get(f"/v1/recipes/{created['id']}").json()["data"]
    assert [(i["name"], i["quantity"]) for i in data["ingredients"]] == [("Lettuce", 3), ("Tomato", 5)]


def test_update_unknown_recipe_returns_404(client):
    response = client.put(f"/v1/recipes/{uuid.uuid4()}", json=make_payload())
    assert response.status_code == 404
    assert response.json()["errorCode"] == 1


# --- Delete ---


def test_delete_recipe_cascades(client, db_session):
    created = _create(client, make_payload())

    response = client.delete(f"/v1/recipes/{created['id']}")
    assert response.status_code == 204

    assert client.get(f"/v1/recipes/{created['id']}").status_code == 404

    recipe_id = uuid.UUID(created["id"])
    assert db_session.get(Recipe, recipe_id) is None
    assert db_session.scalars(select(Instruction).where(Instruction.recipe_id == recipe_id)).all() == []
    assert db_session.scalars(select(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id)).all() == []
    # Ingredients outlive the recipe
    assert db_session.scalar(select(func.count()).select_from(Ingredient)) == 2


def test_delete_unknown_recipe_returns_404(client):
    response = client.delete(f"/v1/recipes/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["errorCode"] == 1


# --- Search ---


def _seed_search_recipes(client):
    _create(client, make_payload(
        title="Egg Fried Rice", serving_size=2,
        ingredients=[
            {"name": "Egg", "quantity": 2, "isVegetarian": True},
            {"name": "Rice", "quantity": 1, "unit": "cup", "isVegetarian": True},
        ],
        instructions=[{"content": "Cook the rice."}, {"content": "Stir-fry in a wok."}],
    ))
    _create(client, make_payload(
        title="Eggplant Parmesan", serving_size=4,
        ingredients=[
            {"name": "Eggplant", "quantity": 1, "isVegetarian": True},
            {"name": "Parmesan", "quantity": 50, "unit": "g", "isVegetarian": True},
        ],
        instructions=[{"content": "Slice and bake."}],
    ))
    _create(client, make_payload(
        title="Pork Roast", serving_size=6,
        ingredients=[
            {"name": "Pork shoulder", "quantity": 2, "unit": "kg", "isVegetarian": False},
            {"name": "Salt", "quantity": 1, "unit": "tbsp", "isVegetarian": True},
        ],
        instructions=[{"content": "Roast for 3 hours."}],
    ))


def _titles(response):
    assert response.status_code == 200, response.text
    return sorted(r["title"] for r in response.json()["data"])


def test_list_all_without_filters(client):
    _seed_search_recipes(client)
    assert _titles(client.get("/v1/recipes")) == ["Egg Fried Rice", "Eggplant Parmesan", "Pork Roast"]


def test_search_range_and_include(client):
    """egg matches Eggplant too; the range keeps only the 4-serving recipe."""
    _seed_search_recipes(client)
    response = client.get("/v1/recipes?minServings=3&maxServings=5&includeIngredients=egg")
    assert _titles(response) == ["Eggplant Parmesan"]


def test_search_include_is_partial_and_case_insensitive(client):
    _seed_search_recipes(client)
    assert _titles(client.get("/v1/recipes?includeIngredients=EGG")) == ["Egg Fried Rice", "Eggplant Parmesan"]


def test_search_include_requires_all_terms(client):
    _seed_search_recipes(client)
    response = client.get("/v1/recipes?includeIngredients=egg&includeIngredients=rice")
    assert _titles(response) == ["Egg Fried Rice"]
    assert _titles(client.get("/v1/recipes?includeIngredients=egg,rice")) == ["Egg Fried Rice"]


def test_search_exclude_any_term(client):
    _seed_search_recipes(client)
    assert _titles(client.get("/v1/recipes?excludeIngredients=pork,rice")) == ["Eggplant Parmesan"]


def test_search_vegetarian_flag(client):
    _seed_search_recipes(client)
    assert _titles(client.get("/v1/recipes?isVegetarian=false&maxServings=10")) == ["Pork Roast"]
    assert _titles(client.get("/v1/recipes?isVegetarian=true&servings=2")) == ["Egg Fried Rice"]


def test_single_store_filter_lists_all(client):
    """One filter only is not an advanced search: the store lists everything."""
    _seed_search_recipes(client)
    assert len(client.get("/v1/recipes?isVegetarian=false").json()["data"]) == 3


def test_search_instruction_content(client):
    _seed_search_recipes(client)
    response = client.get("/v1/recipes?instructionContent=wok&isVegetarian=true")
    assert _titles(response) == ["Egg Fried Rice"]
    assert _titles(client.get("/v1/recipes?instructionContent=ROAST&minServings=1")) == ["Pork Roast"]


def test_search_range_overrides_exact_servings(client):
    _seed_search_recipes(client)
    response = client.get("/v1/recipes?servings=2&minServings=4&maxServings=6")
    assert _titles(response) == ["Eggplant Parmesan", "Pork Roast"]


def test_search_conflicting_include_exclude(client):
    response = client.get("/v1/recipes?includeIngredients=pork&excludeIngredients=Pork")
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "pork" in body["errorMessage"]


def test_search_min_greater_than_max(client):
    response = client.get("/v1/recipes?minServings=5&maxServings=2")
    assert response.status_code == 400
    message = response.json()["errorMessage"]
    assert "5" in message and "2" in message


def test_search_rejects_non_positive_servings(client):
    response = client.get("/v1/recipes?servings=0")
    assert response.status_code == 400
    assert "servings" in response.json()["errorMessage"]


# --- Error boundary ---


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/v2/nothing-here")
    assert response.status_code == 404
    assert response.json()["success"] is False
