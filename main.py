import os

from dotenv import load_dotenv

from logging_setup import configure_logging

# .env first so logging and scraper settings can come from it
load_dotenv()

configure_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    use_json=os.getenv("USE_JSON_LOGGING", "true").lower() == "true"
)

from app import app  # noqa: E402

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=False)
