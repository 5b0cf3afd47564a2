import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.router import api_router
from app.core import init_database

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(title="Adaptive Progress Engine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8080",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    await init_database()
    print("Приложение запущено!")


@app.get("/")
async def root():
    base_url = "http://localhost:8000"

    return {
        "app": "Adaptive Progress Engine",
        "links": {
            "📈 Analysis": f"{base_url}/api/v1/progress/analysis",
            "📚 Docs": f"{base_url}/docs",
            "📖 ReDoc": f"{base_url}/redoc"
        }
    }
