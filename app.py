"""Development entrypoint delegating to the application package."""

import logging

from career_matcher.config import Settings, load_environment

# Load environment variables from .env and .env.<APP_ENV>
load_environment()

settings = Settings.from_env()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

from career_matcher.main import create_app  # noqa: E402

app = create_app(settings)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=settings.port, debug=True)
