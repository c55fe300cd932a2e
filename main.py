from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from txscope.config import settings
from txscope.database.manager import DatabaseManager
from txscope.middleware.logging_md import LoggingMiddleware
from txscope.logging.logger import LogConfig
from txscope.exceptions.errors import UnitOfWorkError
from txscope.exceptions.handler import BusinessException, global_exception_handler
from apps.identity.api.router import router as identity_router

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await DatabaseManager.shutdown()

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Initialize logging configuration
LogConfig.setup_logging()

# Register global exception handlers
app.add_exception_handler(BusinessException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(UnitOfWorkError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(LoggingMiddleware)

# Mount routers (prefix from config for easy override in private projects)
app.include_router(
    identity_router,
    prefix=settings.API_V1_IDENTITY_PREFIX,
    tags=["Identity & Tenant"]
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
