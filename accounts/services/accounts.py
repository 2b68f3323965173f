"""
Account operations shared by the JSON API and the HTML pages.

Every operation answers with a small result object whose `info` string is
one of the status codes the front end switches on ("ACCOUNT CREATED",
"USERNAME ALREADY EXISTS", "INCORRECT PASSWORD", ...). Passwords never
leave Django's hasher: `create_user` / `check_password` do the PBKDF2 work.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from accounts.models import Profile

logger = logging.getLogger(__name__)

User = get_user_model()

# Fields a user may change through /update-account
PROFILE_FIELDS = ("display_name", "bio", "college", "major")
UPDATABLE_FIELDS = ("email",) + PROFILE_FIELDS


@dataclass
class SignUpResult:
    info: str = "CREATE ACCOUNT FAILED"
    account_created: bool = False
    user_id: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class LoginResult:
    info: str = "LOGIN FAILED"
    logged_in: bool = False
    user_id: int = 0

    def as_dict(self) -> dict:
        return {"info": self.info, "loggedIn": self.logged_in, "user_id": self.user_id}


@dataclass
class UpdateResult:
    info: str
    success: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


def username_exists(username: str) -> bool:
    return User.objects.filter(username=username).exists()


def email_exists(email: str, exclude_user=None) -> bool:
    qs = User.objects.filter(email__iexact=email)
    if exclude_user is not None:
        qs = qs.exclude(pk=exclude_user.pk)
    return qs.exists()


def _valid_email(email: str) -> bool:
    try:
        validate_email(email)
    except ValidationError:
        return False
    return True


def valid_user_pass_combo(username: str, password: str, email: str = "") -> bool:
    """
    Length floors from settings, the user model's username validator (letters,
    digits and @/./+/-/_ only, so every username fits a profile URL) and
    Django's AUTH_PASSWORD_VALIDATORS.
    """
    max_username = User._meta.get_field("username").max_length
    if not settings.ACCOUNT_MIN_USERNAME_LENGTH <= len(username) <= max_username:
        return False
    if len(password) < settings.ACCOUNT_MIN_PASSWORD_LENGTH:
        return False
    try:
        User.username_validator(username)
        validate_password(password, user=User(username=username, email=email))
    except ValidationError:
        return False
    return True


def sign_up(username: str, password: str, email: str) -> SignUpResult:
    """Create an account and its profile if every check passes."""
    username = (username or "").strip()
    email = (email or "").strip()
    password = password or ""

    if username_exists(username):
        return SignUpResult(info="USERNAME ALREADY EXISTS")
    if not valid_user_pass_combo(username, password, email):
        return SignUpResult(info="BAD USERNAME PASSWORD")
    if not _valid_email(email):
        return SignUpResult(info="BAD EMAIL")
    if email_exists(email):
        return SignUpResult(info="EMAIL TAKEN")

    try:
        with transaction.atomic():
            user = User.objects.create_user(username=username, email=email, password=password)
            Profile.objects.create(user=user)
    except IntegrityError:
        # Lost a race with a concurrent sign-up for the same username.
        logger.warning("Sign-up for %r collided with an existing account.", username)
        return SignUpResult(info="USERNAME ALREADY EXISTS")

    logger.info("Account created for %s (id=%s).", username, user.pk)
    return SignUpResult(info="ACCOUNT CREATED", account_created=True, user_id=user.pk)


def check_credentials(username: str, password: str):
    """
    Return (LoginResult, user). `user` is None unless the credentials are good.
    Issuing the session is left to the caller, which owns the request.
    """
    user = User.objects.filter(username=(username or "").strip()).first()
    if user is None:
        return LoginResult(info="ACCOUNT DOES NOT EXIST"), None
    if not user.check_password(password or ""):
        logger.info("Incorrect password for %s.", user.get_username())
        return LoginResult(info="INCORRECT PASSWORD"), None
    if not user.is_active:
        return LoginResult(info="ACCOUNT DISABLED"), None
    return LoginResult(info="LOGIN SUCCESSFUL", logged_in=True, user_id=user.pk), user


def get_account_username(user_id) -> str | None:
    try:
        return User.objects.only("username").get(pk=user_id).get_username()
    except (User.DoesNotExist, ValueError, TypeError):
        return None


def get_id_username(username: str) -> int | None:
    return User.objects.filter(username=username).values_list("pk", flat=True).first()


def get_profile(user) -> Profile:
    profile, _ = Profile.objects.get_or_create(user=user)
    return profile


def fetch_user_profile(username: str) -> dict | None:
    """Public profile payload, or None when the username is unknown."""
    user = User.objects.filter(username=username, is_active=True).first()
    if user is None:
        return None
    profile = get_profile(user)
    public = user.schedules.filter(is_public=True).order_by("name").values_list("name", flat=True)
    return {
        "username": user.get_username(),
        "display_name": profile.name,
        "bio": profile.bio,
        "college": profile.college,
        "major": profile.major,
        "joined": user.date_joined.isoformat(),
        "schedules": list(public),
    }


def update_account(user, field: str, value) -> UpdateResult:
    """Change a single whitelisted account/profile field."""
    if field not in UPDATABLE_FIELDS:
        return UpdateResult(info="INVALID FIELD")

    value = "" if value is None else str(value).strip()

    if field == "email":
        if not _valid_email(value):
            return UpdateResult(info="BAD EMAIL")
        if email_exists(value, exclude_user=user):
            return UpdateResult(info="EMAIL TAKEN")
        user.email = value
        user.save(update_fields=["email"])
    else:
        profile = get_profile(user)
        max_length = Profile._meta.get_field(field).max_length
        if max_length and len(value) > max_length:
            return UpdateResult(info="VALUE TOO LONG")
        setattr(profile, field, value)
        profile.save(update_fields=[field, "updated_at"])

    logger.info("Account %s updated field %s.", user.get_username(), field)
    return UpdateResult(info="ACCOUNT UPDATED", success=True)
