# backend/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from services.errors import DomainError, NotFoundError, ValidationFailed, ConflictError

from routes.tenants import router as tenants_router
from routes.menu import router as menu_router
from routes.products import router as products_router
from routes.checkout import router as checkout_router
from routes.orders import router as orders_router
from routes.tables import router as tables_router
from routes.shifts import router as shifts_router
from routes.inventory import router as inventory_router
from routes.suppliers import router as suppliers_router
from routes.purchases import router as purchases_router
from routes.recipes import router as recipes_router
from routes.finance import router as finance_router
from routes.cash import router as cash_router
from routes.logs import router as logs_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="Restaurant Ordering API", version="1.0.0")

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Services raise domain errors; this is the only place deciding their HTTP shape
def _status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    if isinstance(exc, ValidationFailed):
        return 422
    return 400


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    status_code = _status_for(exc)
    if status_code >= 409:
        logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code, "context": exc.context},
    )


app.include_router(tenants_router)
app.include_router(menu_router)
app.include_router(products_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(tables_router)
app.include_router(shifts_router)
app.include_router(inventory_router)
app.include_router(suppliers_router)
app.include_router(purchases_router)
app.include_router(recipes_router)
app.include_router(finance_router)
app.include_router(cash_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"message": "Restaurant Ordering API is running"}
