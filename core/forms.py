from django import forms
from django.conf import settings

from .models import Schedule
from .services.schedule_builder import BANK_HEADER


class ScheduleForm(forms.ModelForm):
    class Meta:
        model = Schedule
        fields = ["name", "columns", "is_public"]
        labels = {"columns": "Semesters", "is_public": "Visible on my profile"}
        widgets = {
            "name": forms.TextInput(attrs={
                "placeholder": "e.g. Transfer plan 2027",
                "class": "form-control"
            }),
            "columns": forms.NumberInput(attrs={"min": 1, "class": "form-control"}),
        }

    def __init__(self, *args, user=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = user
        self.fields["columns"].widget.attrs["max"] = settings.SCHEDULE_MAX_SEMESTERS

    def clean_name(self):
        name = (self.cleaned_data.get("name") or "").strip()
        if not name:
            raise forms.ValidationError("Please enter a schedule name.")
        if self.user is not None:
            clash = Schedule.objects.filter(user=self.user, name=name)
            if self.instance.pk:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise forms.ValidationError("You already have a schedule with that name.")
        return name

    def clean_columns(self):
        columns = self.cleaned_data.get("columns") or 0
        if not 1 <= columns <= settings.SCHEDULE_MAX_SEMESTERS:
            raise forms.ValidationError(
                f"Choose between 1 and {settings.SCHEDULE_MAX_SEMESTERS} semesters."
            )
        return columns


class CourseSearchForm(forms.Form):
    q = forms.CharField(
        required=False, label="Search",
        widget=forms.TextInput(attrs={"placeholder": "e.g. MATH-101 or calculus", "class": "form-control"}),
    )
    division = forms.CharField(
        required=False, max_length=16,
        widget=forms.TextInput(attrs={"placeholder": "e.g. CS", "class": "form-control"}),
    )


# ---- builder actions --------------------------------------------------------

class AddClassForm(forms.Form):
    course = forms.CharField(max_length=40, widget=forms.HiddenInput)


class RemoveClassForm(forms.Form):
    course = forms.CharField(max_length=40, widget=forms.HiddenInput)


class MoveClassForm(forms.Form):
    """Form fallback for dragging a class chip into another column."""

    course = forms.CharField(max_length=40, widget=forms.HiddenInput)
    target = forms.TypedChoiceField(choices=[], coerce=int)  # filled in __init__

    def __init__(self, *args, columns: int = 1, **kwargs):
        super().__init__(*args, **kwargs)
        choices = [(i, f"Semester {i + 1}") for i in range(columns)]
        choices.append((columns, BANK_HEADER))
        self.fields["target"].choices = choices


class ColumnsForm(forms.Form):
    columns = forms.IntegerField(
        min_value=1,
        widget=forms.NumberInput(attrs={"class": "form-control"}),
    )

    def clean_columns(self):
        columns = self.cleaned_data["columns"]
        if columns > settings.SCHEDULE_MAX_SEMESTERS:
            raise forms.ValidationError(
                f"A schedule can have at most {settings.SCHEDULE_MAX_SEMESTERS} semesters."
            )
        return columns
