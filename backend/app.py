import os
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from backend.routes import router
from backend.state import init_storage
from storyline.logging_config import setup_logging
from storyline.timeline import format_game_time

load_dotenv(Path(__file__).parent.parent / ".env")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def create_app(data_dir: Path | None = None) -> FastAPI:
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    init_storage(resolved)

    app = FastAPI(title="Storyline")
    app.include_router(router, prefix="/api")

    @app.get("/")
    async def status():
        now = datetime.now(timezone.utc)
        return {
            "status": "Server is running!",
            "time": now.isoformat(),
            "gameTime": format_game_time(now),
        }

    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
