"""
PMS - Partner Management System API

Start with:
    uvicorn server:app --host 0.0.0.0 --port 8001 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import logging

from config import CORS_ORIGINS, UPLOAD_DIR
from services.errors import PMSError

# Logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("pms")

app = FastAPI(
    title="Partner Management System",
    description="Hospital lead intake, partner points and sales rotation",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PMSError)
async def pms_error_handler(request: Request, exc: PMSError):
    if exc.status_code >= 500:
        logger.error(f"[{exc.kind}] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ==================== ROUTES ====================

from routes import leads, points_approval, users, hospitals

app.include_router(leads.router, prefix="/api")
app.include_router(points_approval.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(hospitals.router, prefix="/api")

# Lead documents and remark attachments
app.mount("/uploads", StaticFiles(directory=str(UPLOAD_DIR), check_dir=False), name="uploads")


@app.get("/")
async def root():
    return {
        "name": "Partner Management System API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


# ==================== STARTUP ====================

@app.on_event("startup")
async def startup():
    from services.store import get_store

    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    await get_store().ensure_indexes()
    logger.info("PMS API started")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
