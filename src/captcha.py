"""Server-side reCAPTCHA verification."""

import os
import logging
from typing import Optional
import requests
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

RECAPTCHA_SECRET = os.getenv("RECAPTCHA_SECRET", "")
RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
REQUEST_TIMEOUT = 10


def verify_captcha(token: Optional[str]) -> bool:
    """
    Verify a captcha proof with Google.

    Verification is skipped when no secret is configured or the client sent
    no token.

    Args:
        token: Captcha response token from the client

    Returns:
        bool: True if verification passed or was skipped
    """
    if not RECAPTCHA_SECRET or not token:
        logger.debug("Captcha verification skipped")
        return True

    try:
        response = requests.post(
            RECAPTCHA_VERIFY_URL,
            data={"secret": RECAPTCHA_SECRET, "response": token},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        result = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Captcha verification error: {e}")
        return False

    if not result.get("success"):
        logger.warning(f"Captcha rejected: {result.get('error-codes')}")
        return False

    return True
