import os
from typing import Optional

from dotenv import load_dotenv

# Load .env file variables into environment
load_dotenv(verbose=True)


class Settings:
    """Application configuration settings loaded from environment variables."""

    # --- Server Settings ---
    HTTPIPE_HOST: str = "0.0.0.0"  # nosec B104
    HTTPIPE_PORT: int = 8000
    HTTPIPE_RELOAD: bool = False
    HTTPIPE_APP: str = "httpipe.demo:pipe"

    # --- Request Settings ---
    HTTPIPE_MAX_BODY_SIZE: Optional[int] = None

    # --- Server settings Getters using os.getenv ---
    def get_app_host(self) -> str:
        return os.getenv("HTTPIPE_HOST", self.HTTPIPE_HOST)

    def get_app_port(self) -> int:
        """Returns the port the runner listens on."""
        try:
            return int(os.getenv("HTTPIPE_PORT", str(self.HTTPIPE_PORT)))
        except ValueError:
            raise ValueError("HTTPIPE_PORT environment variable must be an integer.")

    def get_app_reload(self) -> bool:
        """Returns True if uvicorn should reload on code changes."""
        return os.getenv("HTTPIPE_RELOAD", str(self.HTTPIPE_RELOAD)).lower() == "true"

    def get_app_target(self) -> str:
        """Returns the 'module:attribute' location of the pipe to serve."""
        return os.getenv("HTTPIPE_APP", self.HTTPIPE_APP)

    # --- Request settings Getters ---
    def get_max_body_size(self) -> Optional[int]:
        """Returns the request body limit in bytes, or None if bodies are unlimited."""
        size_str = os.getenv("HTTPIPE_MAX_BODY_SIZE")
        if size_str is None or size_str == "":
            return self.HTTPIPE_MAX_BODY_SIZE
        try:
            size = int(size_str)
        except ValueError:
            raise ValueError("HTTPIPE_MAX_BODY_SIZE environment variable must be an integer.")
        if size < 0:
            raise ValueError("HTTPIPE_MAX_BODY_SIZE environment variable must not be negative.")
        return size

    # --- Logging Settings ---
    def get_log_level(self, default: str = "INFO") -> str:
        """Gets the configured log level, defaulting if not set."""
        return os.getenv("LOG_LEVEL", default).upper()

    def get_run_mode(self) -> str:
        """Returns the run mode, defaulting to 'prod' if not set."""
        return os.getenv("RUN_MODE", "prod")

    def dev_mode(self) -> bool:
        """Returns True if the run mode is 'dev', False otherwise."""
        return self.get_run_mode() == "dev"
