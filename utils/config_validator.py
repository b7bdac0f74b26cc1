"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of failing on the first checkout.
"""

import sys
from typing import Optional

from enums.runtime_environment import RuntimeEnvironment


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_required_config(value: Optional[str], name: str, example: str = "") -> None:
    """
    Validate that a required config value is set.

    Raises:
        ConfigValidationError: If value is missing
    """
    if not value or not value.strip():
        error_msg = f"{name} is required but not set!"
        if example:
            error_msg += f"\nAdd to .env: {name}={example}"
        raise ConfigValidationError(error_msg)


def validate_razorpay_credentials(key_id: Optional[str], key_secret: Optional[str],
                                  runtime_environment: RuntimeEnvironment) -> None:
    """
    Validate Razorpay API credentials.

    Key ids look like rzp_test_XXXX or rzp_live_XXXX; production must use a
    live key. The key secret signs payment callbacks, so it must be present.

    Raises:
        ConfigValidationError: If credentials are missing or don't match the environment
    """
    validate_required_config(key_id, 'RAZORPAY_KEY_ID', 'rzp_test_<your-key-id>')
    validate_required_config(key_secret, 'RAZORPAY_KEY_SECRET', '<your-key-secret>')

    if not key_id.startswith(("rzp_test_", "rzp_live_")):
        raise ConfigValidationError(
            f"RAZORPAY_KEY_ID has an unexpected format: must start with 'rzp_test_' or 'rzp_live_'\n"
            "Copy the key id from the Razorpay dashboard (Settings -> API Keys)."
        )

    if runtime_environment == RuntimeEnvironment.PROD and not key_id.startswith("rzp_live_"):
        raise ConfigValidationError(
            "RAZORPAY_KEY_ID is a test key but RUNTIME_ENVIRONMENT=PROD!\n"
            "Use a live key (rzp_live_...) in production."
        )

    if len(key_secret.strip()) < 16:
        raise ConfigValidationError(
            f"RAZORPAY_KEY_SECRET looks truncated (length: {len(key_secret.strip())}, minimum: 16)!\n"
            "Payment signature verification requires the full key secret."
        )


def validate_service_area(state: Optional[str], pincode_prefix: Optional[str]) -> None:
    """
    Validate the region lock settings.

    Raises:
        ConfigValidationError: If state is empty or the prefix is not 1-6 digits
    """
    validate_required_config(state, 'SERVICE_AREA_STATE', 'delhi')
    validate_required_config(pincode_prefix, 'SERVICE_AREA_PINCODE_PREFIX', '11')

    if not pincode_prefix.isdigit() or len(pincode_prefix) > 6:
        raise ConfigValidationError(
            f"SERVICE_AREA_PINCODE_PREFIX must be 1-6 digits (currently: '{pincode_prefix}')\n"
            "Indian pincodes are 6 digits; Delhi pincodes start with 11."
        )


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Args:
        config_module: The config module to validate

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_service_area(
        getattr(config_module, 'SERVICE_AREA_STATE', None),
        getattr(config_module, 'SERVICE_AREA_PINCODE_PREFIX', None)
    )

    validate_razorpay_credentials(
        getattr(config_module, 'RAZORPAY_KEY_ID', None),
        getattr(config_module, 'RAZORPAY_KEY_SECRET', None),
        config_module.RUNTIME_ENVIRONMENT
    )


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nStartup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
