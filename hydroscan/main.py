# hydroscan/main.py
from fastapi import FastAPI
import uvicorn

from hydroscan.api import api_router
from hydroscan.data.database import init_db
from hydroscan.data.seed import seed
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(initialize_db: bool = True) -> FastAPI:
    if initialize_db:
        logger.info("Initializing database")
        init_db()
        seed()

    app = FastAPI(
        title="HydroScan Order Service",
        version="1.0.0",
    )
    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
