import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .api import customers, health
from .api.deps import order_events
from .api.routes import cart, coupons, menu, orders, payments, realtime, settings as settings_routes, setup, tables
from .config import settings
from .db.session import engine
from .errors import CafeError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Brew Cafe")

# Подключаем роуты
app.include_router(health.router)
app.include_router(settings_routes.router)
app.include_router(menu.router)
app.include_router(menu.admin_router)
app.include_router(tables.router)
app.include_router(tables.admin_router)
app.include_router(cart.router)
app.include_router(coupons.router)
app.include_router(coupons.admin_router)
app.include_router(payments.router)
app.include_router(orders.router)
app.include_router(orders.admin_router)
app.include_router(customers.router)
app.include_router(setup.router)
app.include_router(realtime.router)


@app.exception_handler(CafeError)
async def cafe_error_handler(request: Request, exc: CafeError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "code": exc.code})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Database error", "code": "DATABASE_ERROR"})


@app.on_event("startup")
async def on_startup():
    await order_events.start()
    logger.info("Application started")


@app.on_event("shutdown")
async def on_shutdown():
    await order_events.close()
    await engine.dispose()
    logger.info("Application stopped")
