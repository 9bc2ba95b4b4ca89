import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from realty_crm.lib.config import settings
from realty_crm.lib.errors import CRMError
from realty_crm.lib.logging import setup_logging
from realty_crm.features.health.routes import router as health_router
from realty_crm.features.auth.routes import router as auth_router
from realty_crm.features.organizations.routes import router as organizations_router
from realty_crm.features.projects.routes import router as projects_router
from realty_crm.features.units.routes import router as units_router
from realty_crm.features.promotions.routes import router as promotions_router
from realty_crm.features.leads.routes import router as leads_router
from realty_crm.features.files.routes import router as files_router

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Realty CRM API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(health_router, prefix="/api", tags=["Health"])
app.include_router(auth_router, prefix="/api", tags=["Authentication"])
app.include_router(organizations_router, prefix="/api", tags=["Organizations"])
app.include_router(projects_router, prefix="/api", tags=["Projects"])
app.include_router(units_router, prefix="/api", tags=["Units"])
app.include_router(promotions_router, prefix="/api", tags=["Promotions"])
app.include_router(leads_router, prefix="/api", tags=["Leads"])
app.include_router(files_router, prefix="/api", tags=["Files"])


@app.get("/")
async def root():
    return {"message": "Realty CRM API", "docs": "/docs"}
