import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from soroban.api import examples, worksheets
from soroban.core.config import get_settings

settings = get_settings()
logging.basicConfig(level="DEBUG" if settings.debug else settings.log_level)

app = FastAPI(
    title=settings.app_name,
    description="Abacus (soroban) practice-sequence generator",
    version="0.1.0",
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",  # Vite dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(examples.router)
app.include_router(worksheets.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    return {"status": "ok"}
