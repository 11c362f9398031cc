import uvicorn

from .config import get_settings
from .logging_config import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(log_level=settings.log_level)
    uvicorn.run(
        "coin_search.app:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
