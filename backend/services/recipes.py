# backend/services/recipes.py
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from models.inventory import InventoryItem
from models.product import Product
from models.recipe import Recipe, RecipeIngredient
from models.tenant import Branch
from services.errors import ConflictError, NotFoundError, ValidationFailed


def get_recipe(db: Session, branch: Branch, recipe_id: int) -> Recipe:
    recipe = db.query(Recipe).filter(Recipe.id == recipe_id, Recipe.branch_id == branch.id).first()
    if not recipe:
        raise NotFoundError("Recipe not found", recipe_id=recipe_id)
    return recipe


def _build_ingredients(db: Session, branch: Branch, ingredients: Sequence[dict]) -> List[RecipeIngredient]:
    if not ingredients:
        raise ValidationFailed("A recipe needs at least one ingredient")
    built = []
    for entry in ingredients:
        item = db.query(InventoryItem).filter(
            InventoryItem.id == entry["item_id"], InventoryItem.branch_id == branch.id
        ).first()
        if not item:
            raise NotFoundError(f"Inventory item {entry['item_id']} not found", item_id=entry["item_id"])
        if entry["quantity"] <= 0:
            raise ValidationFailed("Ingredient quantity must be positive", item_id=item.id)
        built.append(RecipeIngredient(item_id=item.id, quantity=entry["quantity"]))
    return built


def create_recipe(db: Session, branch: Branch, product_id: int, ingredients: Sequence[dict], *,
                  yield_qty: float = 1.0, preparation_time: Optional[int] = None,
                  instructions: Optional[str] = None) -> Recipe:
    product = db.query(Product).filter(Product.id == product_id, Product.branch_id == branch.id).first()
    if not product:
        raise NotFoundError("Product not found", product_id=product_id)
    if db.query(Recipe).filter(Recipe.product_id == product_id).first():
        raise ConflictError(f"'{product.name}' already has a recipe", product_id=product_id)
    if yield_qty <= 0:
        raise ValidationFailed("Yield must be positive")

    recipe = Recipe(
        tenant_id=branch.tenant_id,
        branch_id=branch.id,
        product_id=product.id,
        yield_qty=yield_qty,
        preparation_time=preparation_time,
        instructions=instructions,
    )
    recipe.ingredients = _build_ingredients(db, branch, ingredients)
    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    return recipe


def update_recipe(db: Session, branch: Branch, recipe: Recipe, changes: dict,
                  ingredients: Optional[Sequence[dict]] = None) -> Recipe:
    if changes.get("yield_qty") is not None and changes["yield_qty"] <= 0:
        raise ValidationFailed("Yield must be positive")
    for key, value in changes.items():
        setattr(recipe, key, value)
    if ingredients is not None:
        recipe.ingredients = _build_ingredients(db, branch, ingredients)
    db.commit()
    db.refresh(recipe)
    return recipe


def delete_recipe(db: Session, recipe: Recipe) -> None:
    db.delete(recipe)
    db.commit()


def recipe_cost(recipe: Recipe) -> dict:
    """Cost of one batch and one portion at current average unit costs."""
    lines = []
    batch_cost = 0.0
    for ingredient in recipe.ingredients:
        cost = ingredient.quantity * ingredient.item.unit_cost
        batch_cost += cost
        lines.append({
            "item_id": ingredient.item_id,
            "name": ingredient.item.name,
            "unit": ingredient.item.unit,
            "quantity": ingredient.quantity,
            "unit_cost": ingredient.item.unit_cost,
            "cost": round(cost, 2),
        })

    portion_cost = batch_cost / recipe.yield_qty
    price = recipe.product.price
    margin = price - portion_cost
    return {
        "recipe_id": recipe.id,
        "product_id": recipe.product_id,
        "product_name": recipe.product.name,
        "ingredients": lines,
        "batch_cost": round(batch_cost, 2),
        "yield_qty": recipe.yield_qty,
        "portion_cost": round(portion_cost, 2),
        "price": price,
        "margin": round(margin, 2),
        "margin_percent": round(margin / price * 100, 2) if price else None,
    }
