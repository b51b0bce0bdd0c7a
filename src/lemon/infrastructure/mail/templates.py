"""Plain-text mail templates for the account flows."""

from lemon.infrastructure.mail.base import MailData

VERIFICATION_SUBJECT = "Please verify your email - {app_name}"

VERIFICATION_TEXT = """Hello {name},

Thanks for signing up for {app_name}.

Please verify your email address by opening the link below:
{link}

If you didn't create an account, you can safely ignore this email.

-- {app_name}
"""

PASSWORD_RESET_SUBJECT = "Password Reset Request - {app_name}"

PASSWORD_RESET_TEXT = """Hello,

You requested a password reset for your {app_name} account.

Open the link below to reset your password (valid for {hours} hour(s)):
{link}

If you didn't request this, you can safely ignore this email.

-- {app_name}
"""

EMAIL_CHANGE_SUBJECT = "Confirm your new email - {app_name}"

EMAIL_CHANGE_TEXT = """Hello {name},

You asked to change the email address of your {app_name} account to this one.

Open the link below to confirm the change (valid for {hours} hour(s)):
{link}

If you didn't request this, you can safely ignore this email.

-- {app_name}
"""


def verification_mail(to: str, name: str, link: str, app_name: str) -> MailData:
    return MailData(
        to=to,
        subject=VERIFICATION_SUBJECT.format(app_name=app_name),
        body=VERIFICATION_TEXT.format(name=name or to, link=link, app_name=app_name),
    )


def password_reset_mail(to: str, link: str, hours: int, app_name: str) -> MailData:
    return MailData(
        to=to,
        subject=PASSWORD_RESET_SUBJECT.format(app_name=app_name),
        body=PASSWORD_RESET_TEXT.format(link=link, hours=hours, app_name=app_name),
    )


def email_change_mail(
    to: str,
    name: str,
    link: str,
    hours: int,
    app_name: str,
) -> MailData:
    return MailData(
        to=to,
        subject=EMAIL_CHANGE_SUBJECT.format(app_name=app_name),
        body=EMAIL_CHANGE_TEXT.format(
            name=name or to,
            link=link,
            hours=hours,
            app_name=app_name,
        ),
    )
