# backend/routes/recipes.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.recipe import Recipe
from models.tenant import Branch
import schemas.recipe as recipe_schemas
from services import recipes as recipe_service
from utils.audit import client_ip, write_log
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required

router = APIRouter(prefix=BRANCH_PREFIX + "/recipes", tags=["Recipes"])


@router.get("", response_model=List[recipe_schemas.RecipeOut])
def list_recipes(
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return db.query(Recipe).filter(Recipe.branch_id == branch.id).order_by(Recipe.id).all()


@router.post("", response_model=recipe_schemas.RecipeOut, status_code=status.HTTP_201_CREATED)
def create_recipe(
    payload: recipe_schemas.RecipeCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    recipe = recipe_service.create_recipe(
        db, branch, payload.product_id, [i.model_dump() for i in payload.ingredients],
        yield_qty=payload.yield_qty, preparation_time=payload.preparation_time,
        instructions=payload.instructions,
    )
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="RECIPE_CREATE",
              resource="recipes", ip=client_ip(request), meta={"recipe_id": recipe.id})
    return recipe


@router.get("/by-product/{product_id}", response_model=recipe_schemas.RecipeOut)
def get_recipe_for_product(
    product_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    recipe = db.query(Recipe).filter(Recipe.product_id == product_id, Recipe.branch_id == branch.id).first()
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


@router.get("/{recipe_id}", response_model=recipe_schemas.RecipeOut)
def get_recipe(
    recipe_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return recipe_service.get_recipe(db, branch, recipe_id)


# Batch and portion cost at current average ingredient costs
@router.get("/{recipe_id}/cost", response_model=recipe_schemas.RecipeCost)
def get_recipe_cost(
    recipe_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return recipe_service.recipe_cost(recipe_service.get_recipe(db, branch, recipe_id))


@router.patch("/{recipe_id}", response_model=recipe_schemas.RecipeOut)
def update_recipe(
    recipe_id: int,
    payload: recipe_schemas.RecipeUpdate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    recipe = recipe_service.get_recipe(db, branch, recipe_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"ingredients"})
    ingredients = [i.model_dump() for i in payload.ingredients] if payload.ingredients is not None else None
    return recipe_service.update_recipe(db, branch, recipe, changes, ingredients)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(
    recipe_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    recipe = recipe_service.get_recipe(db, branch, recipe_id)
    recipe_service.delete_recipe(db, recipe)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="RECIPE_DELETE",
              resource="recipes", ip=client_ip(request), meta={"recipe_id": recipe_id})
