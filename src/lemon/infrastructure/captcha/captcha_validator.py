"""reCAPTCHA response validation over HTTP."""

import logging

import httpx

from lemon.domain.shared.exceptions import ErrorCode, ValidationError

logger = logging.getLogger(__name__)


class CaptchaFailedError(ValidationError):
    """Raised when a CAPTCHA response is missing or rejected."""

    def __init__(self, message: str = "Looks like you are a robot! Please try again.") -> None:
        super().__init__(message, ErrorCode.CAPTCHA_FAILED)


class CaptchaValidator:
    """Checks CAPTCHA responses against the verification endpoint.

    Without a secret key every response is accepted, which keeps local
    setups and tests free of CAPTCHA. Network failures reject the
    response.
    """

    def __init__(
        self,
        secret_key: str | None,
        verify_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._secret_key = secret_key
        self._verify_url = verify_url
        self._timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._secret_key)

    async def validate(self, captcha_response: str | None, remote_ip: str | None = None) -> None:
        """Raise CaptchaFailedError unless the response checks out."""
        if not self.enabled:
            logger.debug("CAPTCHA secret not configured, skipping validation")
            return

        if not captcha_response:
            raise CaptchaFailedError

        form = {"secret": self._secret_key, "response": captcha_response}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(self._verify_url, data=form)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "CAPTCHA verification returned error %d",
                e.response.status_code,
            )
            raise CaptchaFailedError from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("CAPTCHA verification failed (%s): %s", type(e).__name__, e)
            raise CaptchaFailedError from e

        if not isinstance(body, dict):
            logger.warning("CAPTCHA verification returned a non-object body")
            raise CaptchaFailedError

        if not body.get("success"):
            logger.info("CAPTCHA rejected: %s", body.get("error-codes", []))
            raise CaptchaFailedError
