import os

"""Test configuration to set environment variables for the pytest suite.
This ensures required settings are present before importing modules
that depend on them."""

# Flag application is running in test mode
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")

# In-memory database; tests build their own engines
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")

os.environ.setdefault("CURRENCY", "INR")

# Region lock used by the checkout tests
os.environ.setdefault("SERVICE_AREA_STATE", "delhi")
os.environ.setdefault("SERVICE_AREA_PINCODE_PREFIX", "11")

# Gateway credentials (never reach a real gateway, the gateway is mocked)
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_1234567890abcd")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test_razorpay_secret_0123456789")
