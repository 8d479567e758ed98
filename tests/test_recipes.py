import pytest

from conftest import make_item, make_product
from services import recipes as recipe_service
from services.errors import ConflictError, ValidationFailed


@pytest.fixture
def pizza(db, branch):
    product = make_product(db, branch, name="Pizza", price=12.0)
    dough = make_item(db, branch, name="Dough", stock=20.0, unit_cost=0.8, unit="unit")
    cheese = make_item(db, branch, name="Mozzarella", stock=5.0, unit_cost=10.0)
    return product, dough, cheese


def test_recipe_cost_and_margin(db, branch, pizza):
    product, dough, cheese = pizza
    recipe = recipe_service.create_recipe(
        db, branch, product.id,
        [{"item_id": dough.id, "quantity": 2}, {"item_id": cheese.id, "quantity": 0.3}],
        yield_qty=2,
    )

    cost = recipe_service.recipe_cost(recipe)

    assert cost["batch_cost"] == 4.6
    assert cost["portion_cost"] == 2.3
    assert cost["margin"] == 9.7
    assert cost["margin_percent"] == pytest.approx(80.83, abs=0.01)
    assert [line["name"] for line in cost["ingredients"]] == ["Dough", "Mozzarella"]


def test_one_recipe_per_product(db, branch, pizza):
    product, dough, _ = pizza
    recipe_service.create_recipe(db, branch, product.id, [{"item_id": dough.id, "quantity": 1}])
    with pytest.raises(ConflictError):
        recipe_service.create_recipe(db, branch, product.id, [{"item_id": dough.id, "quantity": 1}])


def test_recipe_needs_ingredients_and_positive_yield(db, branch, pizza):
    product, dough, _ = pizza
    with pytest.raises(ValidationFailed):
        recipe_service.create_recipe(db, branch, product.id, [])
    with pytest.raises(ValidationFailed):
        recipe_service.create_recipe(db, branch, product.id, [{"item_id": dough.id, "quantity": 1}], yield_qty=0)


def test_replacing_ingredients(db, branch, pizza):
    product, dough, cheese = pizza
    recipe = recipe_service.create_recipe(db, branch, product.id, [{"item_id": dough.id, "quantity": 1}])

    recipe = recipe_service.update_recipe(db, branch, recipe, {"preparation_time": 15},
                                          ingredients=[{"item_id": cheese.id, "quantity": 0.2}])

    assert recipe.preparation_time == 15
    assert [i.item_id for i in recipe.ingredients] == [cheese.id]
    assert recipe_service.recipe_cost(recipe)["batch_cost"] == 2.0
