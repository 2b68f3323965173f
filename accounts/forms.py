from django import forms
from django.conf import settings
from django.contrib.auth.validators import UnicodeUsernameValidator

from .models import Profile


class SignUpForm(forms.Form):
    username = forms.CharField(
        max_length=150,
        validators=[UnicodeUsernameValidator()],
        help_text="Letters, digits and @/./+/-/_ only.",
        widget=forms.TextInput(attrs={"class": "form-control", "autocomplete": "username"}),
    )
    email = forms.EmailField(
        widget=forms.EmailInput(attrs={"class": "form-control", "autocomplete": "email"}),
    )
    password = forms.CharField(
        widget=forms.PasswordInput(attrs={"class": "form-control", "autocomplete": "new-password"}),
    )
    confirm = forms.CharField(
        label="Confirm password",
        widget=forms.PasswordInput(attrs={"class": "form-control", "autocomplete": "new-password"}),
    )

    def clean_username(self):
        username = (self.cleaned_data.get("username") or "").strip()
        if len(username) < settings.ACCOUNT_MIN_USERNAME_LENGTH:
            raise forms.ValidationError(
                f"Usernames need at least {settings.ACCOUNT_MIN_USERNAME_LENGTH} characters."
            )
        return username

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("password") and cleaned.get("password") != cleaned.get("confirm"):
            self.add_error("confirm", "The passwords do not match.")
        return cleaned


class ProfileForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ["display_name", "bio", "college", "major"]
        widgets = {
            "display_name": forms.TextInput(attrs={"class": "form-control"}),
            "bio": forms.Textarea(attrs={"class": "form-control", "rows": 4}),
            "college": forms.TextInput(attrs={
                "class": "form-control",
                "placeholder": "e.g. UC Berkeley",
            }),
            "major": forms.TextInput(attrs={
                "class": "form-control",
                "placeholder": "e.g. Computer Science",
            }),
        }
