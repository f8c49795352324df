# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# Loads and validates process configuration before the server starts.
#
# Pipeline (runs once, synchronously, at startup):
#   1. Resolve APP_STAGE (defaults to "dev")
#   2. Overlay the stage's .env file onto the environment
#        dev        -> .env
#        test       -> .env.test
#        production -> nothing (deployment sets the variables)
#   3. Validate the resulting snapshot against the Settings schema
#   4. On failure, report every violation and exit with status 1
#
# Usage:
#   from app.config import bootstrap_settings
#   settings = bootstrap_settings()
#   app = create_app(settings)
#
# Settings is never imported as a module-level global. It is built once by
# the entry point and handed to everything that needs it.
# =============================================================================

import json
import logging
import os
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal

from dotenv import dotenv_values
from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from pydantic_settings import BaseSettings, SettingsConfigDict

from lib.utils import mask_url_credentials

logger = logging.getLogger(__name__)


STAGE_DEV = "dev"
STAGE_TEST = "test"
STAGE_PRODUCTION = "production"

# Overlay file per stage; stages not listed here load nothing
OVERLAY_FILES = {
    STAGE_DEV: ".env",
    STAGE_TEST: ".env.test",
}

DATABASE_SCHEMES = ("mongodb://", "postgresql://")
POSTGRES_SCHEME = "postgresql://"
DEFAULT_JWT_EXPIRES_IN = "7d"
POSTGRES_REQUIRED_FIELDS = ("JWT_SECRET", "JWT_EXPIRES_IN")
POSTGRES_REQUIRED_MESSAGE = "{field} must be defined when using PostgreSQL"


# =============================================================================
# Settings Schema
# =============================================================================

class Settings(BaseSettings):
    """
    Validated application configuration.

    Instances only exist when every rule passed, so consumers never need to
    re-check values. The model is frozen: nothing may change it after
    startup.

    Values come exclusively from the snapshot passed to the constructor
    (see settings_customise_sources), which keeps validation a pure function
    of its input.
    """

    # -------------------------------------------------------------------------
    # Runtime Mode
    # -------------------------------------------------------------------------

    NODE_ENV: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment reported to libraries"
    )

    APP_STAGE: Literal["dev", "test", "production"] = Field(
        default=STAGE_DEV,
        description="Deployment stage; selects which .env overlay is loaded"
    )

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    PORT: int = Field(
        default=3000,
        gt=0,
        description="Port for the API server"
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level"
    )

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------
    # Must be declared before the JWT fields: the PostgreSQL rule below reads
    # the already-validated DATABASE_URL.

    DATABASE_URL: str = Field(
        ...,
        min_length=1,
        description="mongodb:// or postgresql:// connection URL"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    JWT_SECRET: Annotated[str, Field(min_length=12)] | None = Field(
        default=None,
        validate_default=True,
        description="Secret for signing tokens (required with PostgreSQL)"
    )

    JWT_EXPIRES_IN: str | None = Field(
        default=None,
        validate_default=True,
        description=f"Token lifetime, e.g. '7d' (defaults to {DEFAULT_JWT_EXPIRES_IN})"
    )

    BCRYPT_ROUNDS: int = Field(
        default=12,
        ge=10,
        le=20,
        description="bcrypt cost factor"
    )

    model_config = SettingsConfigDict(
        case_sensitive=True,
        frozen=True,
        # The snapshot is the whole process environment
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Only the explicit snapshot; os.environ and .env files are handled
        # by load_config before validation.
        return (init_settings,)

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator("DATABASE_URL")
    @classmethod
    def _check_database_scheme(cls, value: str) -> str:
        if not value.startswith(DATABASE_SCHEMES):
            raise PydanticCustomError(
                "database_url_scheme",
                "DATABASE_URL must be a valid MongoDB or PostgreSQL URL",
            )
        return value

    @field_validator("JWT_SECRET", "JWT_EXPIRES_IN")
    @classmethod
    def _require_jwt_for_postgres(cls, value: str | None, info: ValidationInfo) -> str | None:
        # DATABASE_URL is missing from info.data when it failed its own checks
        database_url = info.data.get("DATABASE_URL", "")
        if not value and database_url.startswith(POSTGRES_SCHEME):
            raise PydanticCustomError(
                "cross_field",
                POSTGRES_REQUIRED_MESSAGE,
                {"field": info.field_name},
            )

        if info.field_name == "JWT_EXPIRES_IN" and not value:
            return DEFAULT_JWT_EXPIRES_IN
        return value

    # -------------------------------------------------------------------------
    # Stage Predicates
    # -------------------------------------------------------------------------

    @property
    def is_production(self) -> bool:
        """Check if running in the production stage."""
        return self.APP_STAGE == STAGE_PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in the dev stage."""
        return self.APP_STAGE == STAGE_DEV

    @property
    def is_testing(self) -> bool:
        """Check if running in the test stage."""
        return self.APP_STAGE == STAGE_TEST

    @property
    def masked_database_url(self) -> str:
        """DATABASE_URL with any password replaced, safe for logs."""
        return mask_url_credentials(self.DATABASE_URL)


# =============================================================================
# Violations
# =============================================================================

class ViolationKind(str, Enum):
    """Category of a failed configuration rule."""
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    TYPE_COERCION_FAILURE = "TypeCoercionFailure"
    RANGE_VIOLATION = "RangeViolation"
    FORMAT_VIOLATION = "FormatViolation"
    CROSS_FIELD_VIOLATION = "CrossFieldViolation"


_KIND_BY_ERROR_TYPE = {
    "missing": ViolationKind.MISSING_REQUIRED_FIELD,
    "int_parsing": ViolationKind.TYPE_COERCION_FAILURE,
    "int_type": ViolationKind.TYPE_COERCION_FAILURE,
    "int_from_float": ViolationKind.TYPE_COERCION_FAILURE,
    "float_parsing": ViolationKind.TYPE_COERCION_FAILURE,
    "string_type": ViolationKind.TYPE_COERCION_FAILURE,
    "greater_than": ViolationKind.RANGE_VIOLATION,
    "greater_than_equal": ViolationKind.RANGE_VIOLATION,
    "less_than": ViolationKind.RANGE_VIOLATION,
    "less_than_equal": ViolationKind.RANGE_VIOLATION,
    "database_url_scheme": ViolationKind.FORMAT_VIOLATION,
    "literal_error": ViolationKind.FORMAT_VIOLATION,
    "string_too_short": ViolationKind.FORMAT_VIOLATION,
    "string_too_long": ViolationKind.FORMAT_VIOLATION,
    "string_pattern_mismatch": ViolationKind.FORMAT_VIOLATION,
    "cross_field": ViolationKind.CROSS_FIELD_VIOLATION,
}


@dataclass(frozen=True)
class Violation:
    """One failed validation rule."""
    field: str
    message: str
    kind: ViolationKind

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating an environment snapshot.

    Exactly one of `config` / `violations` is populated. The caller decides
    what to do with a failure; validation never exits the process itself.
    """
    config: Settings | None = None
    violations: tuple[Violation, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.config is not None

    def flatten(self) -> dict[str, list[str]]:
        """Group violation messages by field, in first-seen order."""
        grouped: dict[str, list[str]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.field, []).append(violation.message)
        return grouped


def _violation_from_error(error: dict[str, Any]) -> Violation:
    path = ".".join(str(part) for part in error["loc"]) or "__root__"
    error_type = error["type"]
    kind = _KIND_BY_ERROR_TYPE.get(error_type)
    if kind is None:
        logger.debug(f"Unmapped validation error type '{error_type}' on {path}")
        kind = ViolationKind.FORMAT_VIOLATION
    return Violation(field=path, message=error["msg"], kind=kind)


def _postgres_requirement_violations(
    environ: Mapping[str, str],
    reported: list[Violation],
) -> list[Violation]:
    """
    Apply the PostgreSQL JWT rule to the raw snapshot.

    Settings only runs it on values that passed their own checks, so an
    empty JWT_SECRET that failed min_length would otherwise go unreported.
    """
    if not environ.get("DATABASE_URL", "").startswith(POSTGRES_SCHEME):
        return []

    already = {v.field for v in reported if v.kind == ViolationKind.CROSS_FIELD_VIOLATION}
    return [
        Violation(
            field=name,
            message=POSTGRES_REQUIRED_MESSAGE.format(field=name),
            kind=ViolationKind.CROSS_FIELD_VIOLATION,
        )
        for name in POSTGRES_REQUIRED_FIELDS
        if not environ.get(name) and name not in already
    ]


# =============================================================================
# Stage Resolution & Overlay
# =============================================================================

@dataclass(frozen=True)
class ResolvedStage:
    """The APP_STAGE in effect before validation (may be unrecognised)."""
    name: str

    @property
    def is_production(self) -> bool:
        return self.name == STAGE_PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.name == STAGE_DEV

    @property
    def is_testing(self) -> bool:
        return self.name == STAGE_TEST


def resolve_stage(environ: MutableMapping[str, str]) -> ResolvedStage:
    """
    Resolve the active stage, writing the "dev" default back when unset.

    Unknown values are returned as-is; the schema rejects them later.
    """
    if not environ.get("APP_STAGE"):
        environ["APP_STAGE"] = STAGE_DEV
    return ResolvedStage(environ["APP_STAGE"])


def load_stage_overlay(
    stage: ResolvedStage,
    environ: MutableMapping[str, str],
    base_dir: str | Path = ".",
) -> None:
    """
    Merge the stage's .env file into `environ`.

    Values already present in `environ` win, matching python-dotenv's
    load_dotenv(override=False). A missing file means there is nothing to
    overlay. Any other I/O error propagates.
    """
    filename = OVERLAY_FILES.get(stage.name)
    if filename is None:
        logger.debug(f"No overlay for stage '{stage.name}'")
        return

    path = Path(base_dir) / filename
    if not path.is_file():
        logger.debug(f"Overlay file not found, skipping: {path}")
        return

    loaded = 0
    for key, value in dotenv_values(path).items():
        if value is None or key in environ:
            continue
        environ[key] = value
        loaded += 1

    logger.debug(f"Loaded {loaded} variable(s) from {path}")


# =============================================================================
# Validation
# =============================================================================

def validate_environment(environ: Mapping[str, str]) -> ValidationResult:
    """
    Validate an environment snapshot against the Settings schema.

    Pure: the same snapshot always yields the same config or the same
    violations. All violations are collected in a single pass.

    Args:
        environ: Raw key/value configuration (normally os.environ after
            the overlay has been applied)

    Returns:
        ValidationResult with either `config` or `violations` set
    """
    known = {key: environ[key] for key in Settings.model_fields if key in environ}

    try:
        return ValidationResult(config=Settings(**known))
    except ValidationError as e:
        violations = [_violation_from_error(error) for error in e.errors()]
        violations += _postgres_requirement_violations(known, violations)
        return ValidationResult(violations=tuple(violations))


def load_config(
    environ: MutableMapping[str, str] | None = None,
    base_dir: str | Path = ".",
) -> ValidationResult:
    """
    Run the full pipeline: stage resolution, overlay, validation.

    Args:
        environ: Environment to read and overlay (defaults to os.environ)
        base_dir: Directory holding the .env overlay files

    Returns:
        ValidationResult for the overlaid environment
    """
    if environ is None:
        environ = os.environ

    stage = resolve_stage(environ)
    load_stage_overlay(stage, environ, base_dir)
    return validate_environment(environ)


# =============================================================================
# Reporting
# =============================================================================

def report_violations(result: ValidationResult) -> None:
    """Log every violation as a `field: message` line."""
    logger.error("Invalid environment variables!")
    logger.error(json.dumps(result.flatten(), indent=2))
    for violation in result.violations:
        logger.error(str(violation))


def log_config_summary(settings: Settings) -> None:
    """Log the key settings once validation has passed."""
    logger.info("All environment variables validated successfully")
    logger.info(f"DATABASE_URL: {settings.masked_database_url}")
    logger.info(f"PORT: {settings.PORT}")
    logger.info(f"APP_STAGE: {settings.APP_STAGE}")
    logger.info(f"NODE_ENV: {settings.NODE_ENV}")


def bootstrap_settings(
    environ: MutableMapping[str, str] | None = None,
    base_dir: str | Path = ".",
) -> Settings:
    """
    Load configuration or stop the process.

    This is the only place a configuration error is fatal: the violations
    are reported, then SystemExit(1) is raised.

    Returns:
        Settings: The validated configuration
    """
    result = load_config(environ, base_dir)

    if not result.ok:
        report_violations(result)
        raise SystemExit(1)

    log_config_summary(result.config)
    return result.config
