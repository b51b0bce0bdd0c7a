from lemon.infrastructure.captcha.captcha_validator import (
    CaptchaFailedError,
    CaptchaValidator,
)

__all__ = ["CaptchaFailedError", "CaptchaValidator"]
