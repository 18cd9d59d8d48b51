# backend/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from backend.config import ALLOWED_ORIGINS, AUTO_MIGRATE, ENV, USE_AUTH_MIDDLEWARE

# -----------
# Logging
# -----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ----------------------------------------
# DB metadata (DEV ONLY: auto-create tables)
# ----------------------------------------
from backend.database import Base, engine  # noqa: E402
from backend import models  # noqa: F401,E402

if ENV == "dev" or AUTO_MIGRATE:
    Base.metadata.create_all(bind=engine)

# -----------
# Routers
# -----------
from backend.errors import ProfileError  # noqa: E402
from backend.routes.profile import router as profile_router, profile_error_handler  # noqa: E402

app = FastAPI(
    title="DevProfiles API",
    version="1.0.0",
    description="Developer profiles with experience and education history",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,          # must be explicit when credentials=True
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],                    # includes Authorization, Content-Type, etc.
    expose_headers=["Content-Type", "Authorization"],
    max_age=600,
)

# ------------------------------------------------
# JWT Auth middleware (toggleable for debugging)
# ------------------------------------------------
if USE_AUTH_MIDDLEWARE:
    from backend.middleware.auth_middleware import AuthMiddleware
    app.add_middleware(AuthMiddleware)
    logger.info("AuthMiddleware mounted (USE_AUTH_MIDDLEWARE=true)")
else:
    logger.info("AuthMiddleware disabled (USE_AUTH_MIDDLEWARE=false)")

# ------------------------------------------------
# Request log (method, path, auth header presence)
# ------------------------------------------------
@app.middleware("http")
async def log_requests(request: Request, call_next):
    auth_present = bool(request.headers.get("authorization"))
    response = await call_next(request)
    logger.info("REQ %s %s  Auth? %s -> %s", request.method, request.url.path, auth_present, response.status_code)
    return response

# ------------------------------------------------
# Mount routers + error rendering
# ------------------------------------------------
app.add_exception_handler(ProfileError, profile_error_handler)
app.include_router(profile_router, prefix="/api/v1")

# -----------
# Health & root
# -----------
@app.get("/health")
def health():
    return {"status": "ok", "env": ENV}

@app.get("/")
def root():
    return {"name": "DevProfiles API", "version": "1.0.0"}

@app.on_event("startup")
async def list_routes():
    for r in app.routes:
        if isinstance(r, APIRoute):
            methods = ",".join(sorted(r.methods))
            logger.debug("%-10s %-35s -> %s.%s", methods, r.path, r.endpoint.__module__, r.endpoint.__name__)
