from django.urls import path
from . import views

app_name = "accounts"

urlpatterns = [
    # HTML pages
    path("accounts/signup/", views.signup, name="signup"),
    path("accounts/profile/", views.profile_edit, name="profile_edit"),
    path("profile/<str:username>/", views.profile_detail, name="profile"),

    # JSON API
    path("sign-up", views.sign_up_api, name="sign_up"),
    path("login", views.login_api, name="login"),
    path("logout", views.logout_api, name="logout"),
    path("verify-session", views.verify_session_api, name="verify_session"),
    path("fetch-user-profile", views.fetch_user_profile, name="fetch_user_profile"),
    path("update-account", views.update_account, name="update_account"),
]
