import uvicorn

from docextract.api.app import create_app
from docextract.bootstrap import build_container
from docextract.config.settings import Settings
from docextract.logging.logger import Log


def main() -> None:
    """Entry point: load settings -> build dependencies -> serve the API."""
    settings = Settings()
    Log.configure(settings.log_level)
    app = create_app(build_container(settings))
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
