# ---- Django ------------------------------------------------------------------
from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.views.decorators.http import require_http_methods, require_GET, require_POST

# ---- App ---------------------------------------------------------------------
from core.utils import BadRequestBody, read_json, text_field

from .forms import SignUpForm, ProfileForm
from .services import accounts as account_service
from .services.sessions import (
    end_session,
    issue_session,
    session_required,
    verify_session,
)

User = get_user_model()

# Human wording for the sign-up status codes on the HTML form
SIGNUP_MESSAGES = {
    "USERNAME ALREADY EXISTS": "That username is already taken.",
    "BAD USERNAME PASSWORD": "Please choose a longer username and a stronger password.",
    "BAD EMAIL": "Please provide a valid email.",
    "EMAIL TAKEN": "An account with that email already exists.",
}


def _bad_body(e: BadRequestBody) -> JsonResponse:
    return JsonResponse({"success": False, "info": "BAD REQUEST", "error": str(e)}, status=400)


# =============================================================================
# HTML pages
# =============================================================================

@require_http_methods(["GET", "POST"])
def signup(request):
    if request.method == "POST":
        form = SignUpForm(request.POST)
        if form.is_valid():
            result = account_service.sign_up(
                form.cleaned_data["username"],
                form.cleaned_data["password"],
                form.cleaned_data["email"],
            )
            if result.account_created:
                issue_session(request, User.objects.get(pk=result.user_id))
                messages.success(request, "Your account has been created!")
                return redirect("core:schedule_list")
            form.add_error(None, SIGNUP_MESSAGES.get(result.info, result.info))
    else:
        form = SignUpForm()
    return render(request, "accounts/signup.html", {"form": form})


def profile_detail(request, username: str):
    owner = get_object_or_404(User, username=username, is_active=True)
    profile = account_service.get_profile(owner)
    schedules = owner.schedules.all()
    if request.user != owner:
        schedules = schedules.filter(is_public=True)
    return render(
        request,
        "accounts/profile.html",
        {"owner": owner, "profile": profile, "schedules": schedules},
    )


@login_required
@require_http_methods(["GET", "POST"])
def profile_edit(request):
    profile = account_service.get_profile(request.user)
    if request.method == "POST":
        form = ProfileForm(request.POST, instance=profile)
        if form.is_valid():
            form.save()
            messages.success(request, "Profile updated.")
            return redirect("accounts:profile", username=request.user.get_username())
        messages.error(request, "Please correct the errors.")
    else:
        form = ProfileForm(instance=profile)
    return render(request, "accounts/profile_form.html", {"form": form})


# =============================================================================
# JSON API
# =============================================================================

@require_POST
def sign_up_api(request):
    try:
        data = read_json(request)
        username = text_field(data, "username")
        password = text_field(data, "password")
        email = text_field(data, "email")
    except BadRequestBody as e:
        return _bad_body(e)
    result = account_service.sign_up(username, password, email)
    return JsonResponse(result.as_dict(), status=201 if result.account_created else 200)


@require_POST
def login_api(request):
    try:
        data = read_json(request)
        username = text_field(data, "username")
        password = text_field(data, "password")
    except BadRequestBody as e:
        return _bad_body(e)
    result, user = account_service.check_credentials(username, password)
    if user is not None:
        issue_session(request, user)
    return JsonResponse(result.as_dict())


@require_GET
def logout_api(request):
    end_session(request)
    return JsonResponse({"info": "LOGGED OUT", "success": True})


@require_GET
def verify_session_api(request):
    status = verify_session(request)
    payload = status.as_dict()
    payload["username"] = request.user.get_username() if status.valid else None
    return JsonResponse(payload)


@require_POST
def fetch_user_profile(request):
    try:
        data = read_json(request)
    except BadRequestBody as e:
        return _bad_body(e)
    profile = account_service.fetch_user_profile(str(data.get("username", "")))
    if profile is None:
        return JsonResponse({"success": False, "info": "USER NOT FOUND"}, status=404)
    return JsonResponse({"success": True, "info": "FOUND", "profile": profile})


@require_POST
@session_required
def update_account(request):
    try:
        data = read_json(request)
    except BadRequestBody as e:
        return _bad_body(e)
    result = account_service.update_account(
        request.user, str(data.get("field", "")), data.get("value")
    )
    return JsonResponse(result.as_dict(), status=200 if result.success else 400)
