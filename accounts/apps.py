from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Django app configuration for the Accounts app.

    Owns sign-up, login/session verification and public profiles.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
