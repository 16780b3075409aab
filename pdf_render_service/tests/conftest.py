import os

# Must run before pdf_render_service.core.config is first imported:
# the global ConfigurationManager loads APP_ENV's YAML at import time.
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("API_KEY", "test-api-key")
