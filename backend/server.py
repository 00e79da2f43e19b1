import logging
import os

import uvicorn
from dotenv import load_dotenv

# Load .env from backend dir (where server.py runs)
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


def main() -> None:
    from app.main import app  # noqa: PLC0415

    for route in app.routes:
        if hasattr(route, "path") and hasattr(route, "methods"):
            logging.info("App route: %s %s", sorted(route.methods) if route.methods else "GET", route.path)
    uvicorn.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
        log_level=os.environ.get("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
