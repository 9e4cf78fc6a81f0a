import uvicorn

from api.core.config import settings
from src.logging_config import logger


def main() -> None:
    logger.info("Starting API host=%s port=%s", settings.api_host, settings.api_port)
    uvicorn.run("api.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
