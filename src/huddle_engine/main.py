"""Entrypoint: run the Huddle Engine reply service."""

import uvicorn

from huddle_engine.api.app import create_app
from huddle_engine.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
