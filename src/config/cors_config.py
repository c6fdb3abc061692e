"""CORS configuration for the public API."""

import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
DEFAULT_ALLOW_HEADERS = ["Content-Type", "Authorization"]


class CORSConfigurationError(Exception):
    """Raised when CORS configuration is invalid or insecure."""

    pass


def normalize_origin(origin: str) -> str:
    """Normalize an origin URL by stripping whitespace and trailing slashes.

    Args:
        origin: The origin URL to normalize

    Returns:
        Normalized origin URL

    Raises:
        CORSConfigurationError: If origin is invalid.

    """
    origin = origin.strip()

    if not origin:
        raise CORSConfigurationError("Origin cannot be empty")

    # Allow wildcard origin
    if origin == "*":
        return origin

    parsed = urlparse(origin)
    if not parsed.scheme or not parsed.netloc:
        raise CORSConfigurationError(f"Invalid origin URL: {origin}")

    return origin.rstrip("/")


def parse_comma_separated_list(value: str | list[str] | None) -> list[str]:
    """Parse comma-separated string or return as-is if already a list.

    Args:
        value: Comma-separated string or list

    Returns:
        List of values with whitespace stripped

    Raises:
        CORSConfigurationError: If value is invalid.

    """
    if value is None:
        return []

    if isinstance(value, list):
        return [v.strip() for v in value if v.strip()]

    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]

    raise CORSConfigurationError(f"Invalid value type: {type(value)}")


class CORSConfiguration:
    """CORS configuration with validation.

    The defaults are deliberately permissive: every origin, the
    GET/POST/PUT/DELETE/OPTIONS methods and the Content-Type/Authorization
    headers. Deployments narrow the origin list through the environment.
    """

    def __init__(
        self,
        allow_origins: str | list[str] | None = "*",
        allow_methods: str | list[str] | None = None,
        allow_headers: str | list[str] | None = None,
        allow_credentials: bool = False,
        max_age: int = 600,
        environment: str = "development",
    ):
        """Initialize CORS configuration.

        Args:
            allow_origins: Comma-separated string or list of allowed origins
            allow_methods: Comma-separated string or list of allowed methods
            allow_headers: Comma-separated string or list of allowed headers
            allow_credentials: Whether to allow credentials
            max_age: Max age for preflight cache in seconds
            environment: Environment name (development, staging, production)

        Raises:
            CORSConfigurationError: If configuration is invalid or insecure.

        """
        self.environment = environment.lower()
        self.allow_credentials = allow_credentials
        self.max_age = max_age

        try:
            origins = parse_comma_separated_list(allow_origins) or ["*"]
            self.allow_origins: list[str] = [normalize_origin(o) for o in origins]

            self._validate_security_rules()

            self.allow_methods = [m.upper() for m in parse_comma_separated_list(allow_methods)] or list(
                DEFAULT_ALLOW_METHODS
            )
            self.allow_headers = parse_comma_separated_list(allow_headers) or list(DEFAULT_ALLOW_HEADERS)

            logger.info(f"CORS configuration initialized for {self.environment} environment")

        except CORSConfigurationError as exc:
            logger.error(f"CORS configuration error: {exc}")
            raise

    @property
    def allows_any_origin(self) -> bool:
        return "*" in self.allow_origins

    def _validate_security_rules(self) -> None:
        """Validate CORS security rules.

        Rules:
        1. Never allow "*" with credentials
        2. Warn if wildcard is used in production

        Raises:
            CORSConfigurationError: If security rules are violated.

        """
        if self.allow_credentials and self.allows_any_origin:
            raise CORSConfigurationError(
                "Cannot enable credentials with wildcard origins (*). Provide explicit allowed origins instead."
            )

        if self.allows_any_origin and self.environment == "production":
            logger.warning("Wildcard origins (*) enabled in production environment")

    def get_middleware_config(self) -> dict:
        """Get configuration dict for FastAPI CORSMiddleware."""
        return {
            "allow_origins": self.allow_origins,
            "allow_credentials": self.allow_credentials,
            "allow_methods": self.allow_methods,
            "allow_headers": self.allow_headers,
            "max_age": self.max_age,
        }

    def log_configuration(self) -> None:
        """Log effective CORS configuration at startup."""
        origins_display = (
            f"{self.allow_origins[0]} (+{len(self.allow_origins) - 1} more)"
            if len(self.allow_origins) > 1
            else str(self.allow_origins)
        )

        logger.info(
            f"CORS Configuration:\n"
            f"  Environment: {self.environment}\n"
            f"  Origins: {origins_display}\n"
            f"  Methods: {', '.join(self.allow_methods)}\n"
            f"  Headers: {', '.join(self.allow_headers)}\n"
            f"  Credentials: {self.allow_credentials}\n"
            f"  Preflight Max Age: {self.max_age}s"
        )
