# ---- stdlib -----------------------------------------------------------------
import json
import logging

# ---- Django ------------------------------------------------------------------
from django import forms
from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db import transaction, IntegrityError
from django.db.models import Q
from django.http import JsonResponse, Http404, HttpResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.views.decorators.http import require_http_methods, require_GET, require_POST

# ---- App models, forms & services --------------------------------------------
from accounts.services.sessions import session_required, verify_session

from .forms import (
    ScheduleForm,
    CourseSearchForm,
    AddClassForm,
    RemoveClassForm,
    MoveClassForm,
    ColumnsForm,
)
from .models import Schedule
from .services.catalog import get_courses, majors_by_college, search_courses
from .services.schedule_builder import (
    EMPTY_LABEL,
    ScheduleBuilder,
    ScheduleError,
    UnreadableSchedule,
    builder_for,
    normalize_acronym,
)
from .utils import BadRequestBody, as_int, bool_field, read_json


# ---- Logging -----------------------------------------------------------------
logger = logging.getLogger(__name__)

BATCH_DEFAULT_LIMIT = 20
BATCH_MAX_LIMIT = 100

UNREADABLE_MESSAGE = "This schedule could not be read. Its saved data was left as it is."


# =============================================================================
# Schedule helpers
# =============================================================================

def _max_semesters() -> int:
    return settings.SCHEDULE_MAX_SEMESTERS


def _load_builder(schedule: Schedule) -> ScheduleBuilder:
    return builder_for(schedule, max_columns=_max_semesters())


def _store(schedule: Schedule, builder: ScheduleBuilder) -> None:
    schedule.data = builder.to_document()
    schedule.columns = builder.columns
    schedule.save(update_fields=["data", "columns", "updated_at"])


def _require_known(acronyms) -> dict:
    """Resolve acronyms against the catalog, rejecting any that don't exist."""
    acronyms = [normalize_acronym(a) for a in acronyms]
    courses = get_courses(acronyms)
    missing = sorted(set(acronyms) - set(courses))
    if missing:
        raise ScheduleError(f"Unknown class: {', '.join(missing)}")
    return courses


def _apply_action(builder: ScheduleBuilder, action: str, course=None, target=None, columns=None) -> bool:
    """
    One edit on the grid; returns whether the grid changed.
    Shared by the JSON edit endpoint and the builder page forms.
    """
    if action == "add":
        _require_known([course])
        builder.add_class(course)
        return True
    if action == "remove":
        if not builder.remove_class(course):
            raise ScheduleError(f"{normalize_acronym(course)} is not in this schedule.")
        return True
    if action == "move":
        if target is None:
            raise ScheduleError("A target semester is required.")
        return builder.move_class(course, target)
    if action == "columns":
        if columns is None:
            raise ScheduleError("A number of semesters is required.")
        return builder.set_columns(columns)
    if action == "clear":
        placed = any(builder.semesters())
        builder.clear()
        return placed
    raise ScheduleError(f"Unknown action {action!r}.")


def _schedule_payload(schedule: Schedule, builder: ScheduleBuilder) -> dict:
    courses = get_courses(builder.classes())
    payload = schedule.summary()
    payload.update({
        "headers": builder.headers(),
        "schedule": builder.to_document(),
        "classes": {acr: c.as_class_dict() for acr, c in courses.items()},
        "units": [float(u) for u in builder.units_per_semester(courses)],
    })
    return payload


def _grid_columns(builder: ScheduleBuilder, courses: dict) -> list[dict]:
    """Column dicts for the builder template (semesters first, bank last)."""
    units = builder.units_per_semester(courses)
    out = []
    for index, (header, acrs) in enumerate(zip(builder.headers(), builder.grid())):
        out.append({
            "index": index,
            "header": header,
            "classes": acrs,
            "is_bank": index == builder.bank_index,
            "units": units[index] if index < builder.columns else None,
        })
    return out


def _json_error(info: str, status: int, **extra) -> JsonResponse:
    payload = {"success": False, "info": info}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def _unreadable(request, error: UnreadableSchedule):
    """Page views never rewrite a document they cannot load."""
    logger.error("%s", error)
    messages.error(request, UNREADABLE_MESSAGE)
    return redirect("core:schedule_list")


# =============================================================================
# Core pages
# =============================================================================

def home(request):
    return render(request, "core/home.html")


@login_required
@require_http_methods(["GET", "POST"])
def schedule_list(request):
    if request.method == "POST":
        form = ScheduleForm(request.POST, user=request.user)
        if form.is_valid():
            obj = form.save(commit=False)
            obj.user = request.user
            obj.data = ScheduleBuilder(obj.columns).to_document()
            try:
                obj.save()
            except IntegrityError:
                logger.exception("Could not save schedule.")
                messages.error(request, "You already have a schedule with that name.")
                return redirect("core:schedule_list")
            messages.success(request, f"Created {obj.name}.")
            return redirect("core:builder", pk=obj.pk)
        messages.error(request, "Please correct the errors.")
    else:
        form = ScheduleForm(user=request.user)
    schedules = request.user.schedules.all()
    return render(request, "core/schedule_list.html", {"schedules": schedules, "form": form})


@login_required
def builder(request, pk: int):
    schedule = get_object_or_404(Schedule, pk=pk, user=request.user)
    try:
        grid = _load_builder(schedule)
    except UnreadableSchedule as e:
        return _unreadable(request, e)

    search_form = CourseSearchForm(request.GET or None)
    results = []
    if search_form.is_valid() and (search_form.cleaned_data["q"] or search_form.cleaned_data["division"]):
        results = search_courses(search_form.cleaned_data["q"], search_form.cleaned_data["division"] or None)

    courses = get_courses(grid.classes())
    return render(
        request,
        "core/builder.html",
        {
            "schedule": schedule,
            "columns": _grid_columns(grid, courses),
            "courses": courses,
            "selected": set(grid.classes()),
            "empty_label": EMPTY_LABEL,
            "search_form": search_form,
            "results": results,
            "move_form": MoveClassForm(columns=grid.columns),
            "columns_form": ColumnsForm(initial={"columns": grid.columns}),
        },
    )


@login_required
@require_POST
def builder_action(request, pk: int, action: str):
    """Form posts from the builder page: add / remove / move / columns / clear."""
    forms_by_action = {
        "add": AddClassForm,
        "remove": RemoveClassForm,
        "move": MoveClassForm,
        "columns": ColumnsForm,
        "clear": forms.Form,
    }
    if action not in forms_by_action:
        raise Http404("Unknown builder action")

    with transaction.atomic():
        schedule = get_object_or_404(
            Schedule.objects.select_for_update(), pk=pk, user=request.user
        )
        try:
            grid = _load_builder(schedule)
        except UnreadableSchedule as e:
            return _unreadable(request, e)

        form_cls = forms_by_action[action]
        form = form_cls(request.POST, columns=grid.columns) if form_cls is MoveClassForm else form_cls(request.POST)
        if not form.is_valid():
            messages.error(request, "Please correct the errors.")
            return redirect("core:builder", pk=pk)

        data = form.cleaned_data
        try:
            changed = _apply_action(
                grid, action,
                course=data.get("course"),
                target=data.get("target"),
                columns=data.get("columns"),
            )
        except ScheduleError as e:
            messages.error(request, str(e))
            return redirect("core:builder", pk=pk)

        if changed:
            _store(schedule, grid)
    return redirect("core:builder", pk=pk)


@login_required
@require_POST
def schedule_delete(request, pk: int):
    schedule = get_object_or_404(Schedule, pk=pk, user=request.user)
    schedule.delete()
    logger.info("Schedule %r deleted by %s.", schedule.name, request.user)
    messages.info(request, f"Removed {schedule.name}.")
    return redirect("core:schedule_list")


@require_GET
def schedule_export(request, pk: int):
    """Download the semesters as schedule.json (owner, or anyone if public)."""
    schedule = get_object_or_404(Schedule, pk=pk)
    if not schedule.is_public and schedule.user != request.user:
        raise Http404("No such schedule")
    try:
        grid = _load_builder(schedule)
    except UnreadableSchedule as e:
        return _unreadable(request, e)
    body = json.dumps(grid.export(get_courses(grid.classes())))
    response = HttpResponse(body, content_type="application/json")
    response["Content-Disposition"] = 'attachment; filename="schedule.json"'
    return response


# =============================================================================
# Catalog API
# =============================================================================

@require_GET
def fetch_major_colleges(request):
    return JsonResponse({"success": True, "colleges": majors_by_college()})


@require_POST
def query_data(request):
    try:
        data = read_json(request)
    except BadRequestBody as e:
        return _json_error("BAD REQUEST", 400, error=str(e))
    courses = search_courses(
        str(data.get("query") or ""),
        division=str(data.get("division") or "") or None,
        limit=as_int(data.get("limit"), 50),
    )
    return JsonResponse({"success": True, "results": [c.as_class_dict() for c in courses]})


# =============================================================================
# Schedule API
# =============================================================================

@require_GET
@session_required
def get_user_schedules(request):
    schedules = request.user.schedules.select_related("user")
    return JsonResponse({"success": True, "schedules": [s.summary() for s in schedules]})


@require_POST
@session_required
def create_schedule(request):
    try:
        data = read_json(request)
        is_public = bool_field(data, "is_public")
    except BadRequestBody as e:
        return _json_error("BAD REQUEST", 400, error=str(e))

    name = str(data.get("name") or "").strip()
    if not name or len(name) > Schedule._meta.get_field("name").max_length:
        return _json_error("BAD NAME", 400)
    columns = as_int(data.get("columns", 1))
    if columns is None or not 1 <= columns <= _max_semesters():
        return _json_error("BAD COLUMNS", 400)

    try:
        with transaction.atomic():
            schedule = Schedule.objects.create(
                user=request.user,
                name=name,
                columns=columns,
                is_public=is_public,
                data=ScheduleBuilder(columns).to_document(),
            )
    except IntegrityError:
        return _json_error("SCHEDULE EXISTS", 409)

    logger.info("Schedule %r created by %s.", name, request.user)
    payload = _schedule_payload(schedule, _load_builder(schedule))
    payload.update({"success": True, "info": "SCHEDULE CREATED"})
    return JsonResponse(payload, status=201)


@require_POST
def fetch_schedule(request):
    """
    {"name": ...} fetches one of the caller's schedules;
    {"username": ..., "name": ...} fetches someone's public schedule.
    """
    try:
        data = read_json(request)
    except BadRequestBody as e:
        return _json_error("BAD REQUEST", 400, error=str(e))

    name = str(data.get("name") or "").strip()
    username = str(data.get("username") or "").strip()
    status = verify_session(request)

    if username and not (status.valid and username == request.user.get_username()):
        schedule = Schedule.objects.filter(
            user__username=username, name=name, is_public=True
        ).select_related("user").first()
    elif status.valid:
        schedule = Schedule.objects.filter(user=request.user, name=name).select_related("user").first()
    else:
        payload = status.as_dict()
        payload["success"] = False
        return JsonResponse(payload, status=401)

    if schedule is None:
        return _json_error("SCHEDULE NOT FOUND", 404)
    try:
        grid = _load_builder(schedule)
    except UnreadableSchedule as e:
        logger.error("%s", e)
        return _json_error("SCHEDULE CORRUPT", 409)

    payload = _schedule_payload(schedule, grid)
    payload.update({"success": True, "info": "FOUND"})
    return JsonResponse(payload)


@require_POST
@session_required
def edit_schedule(request):
    """Add, remove or move one class, or change the number of semesters."""
    try:
        data = read_json(request)
    except BadRequestBody as e:
        return _json_error("BAD REQUEST", 400, error=str(e))

    name = str(data.get("name") or "").strip()
    action = str(data.get("action") or "").strip().lower()

    with transaction.atomic():
        schedule = Schedule.objects.select_for_update().filter(user=request.user, name=name).first()
        if schedule is None:
            return _json_error("SCHEDULE NOT FOUND", 404)
        try:
            grid = _load_builder(schedule)
        except UnreadableSchedule as e:
            logger.error("%s", e)
            return _json_error("SCHEDULE CORRUPT", 409)
        try:
            changed = _apply_action(
                grid, action,
                course=data.get("class"),
                target=as_int(data.get("semester")),
                columns=as_int(data.get("columns")),
            )
        except ScheduleError as e:
            return _json_error("EDIT FAILED", 400, error=str(e))
        if changed:
            _store(schedule, grid)

    payload = _schedule_payload(schedule, grid)
    payload.update({"success": True, "changed": changed, "info": "SCHEDULE UPDATED"})
    return JsonResponse(payload)


@require_POST
@session_required
def post_schedule(request):
    """Save a whole builder document under a name (creating it if needed)."""
    try:
        data = read_json(request)
        is_public = bool_field(data, "is_public") if "is_public" in data else None
    except BadRequestBody as e:
        return _json_error("BAD REQUEST", 400, error=str(e))

    name = str(data.get("name") or "").strip()
    if not name or len(name) > Schedule._meta.get_field("name").max_length:
        return _json_error("BAD NAME", 400)
    document = data.get("schedule")
    if not isinstance(document, dict):
        return _json_error("BAD SCHEDULE", 400, error="'schedule' must be an object.")
    try:
        grid = ScheduleBuilder.from_document(document, max_columns=_max_semesters())
        _require_known(grid.classes())
    except ScheduleError as e:
        return _json_error("BAD SCHEDULE", 400, error=str(e))

    with transaction.atomic():
        schedule, created = Schedule.objects.select_for_update().get_or_create(
            user=request.user, name=name,
            defaults={"columns": grid.columns, "data": grid.to_document()},
        )
        if is_public is not None:
            schedule.is_public = is_public
            schedule.save(update_fields=["is_public", "updated_at"])
        if not created:
            _store(schedule, grid)

    payload = _schedule_payload(schedule, grid)
    payload.update({"success": True, "info": "SCHEDULE SAVED"})
    return JsonResponse(payload, status=201 if created else 200)


@require_POST
@session_required
def delete_schedule(request):
    try:
        data = read_json(request)
    except BadRequestBody as e:
        return _json_error("BAD REQUEST", 400, error=str(e))

    name = str(data.get("name") or "").strip()
    deleted, _ = Schedule.objects.filter(user=request.user, name=name).delete()
    if not deleted:
        return _json_error("SCHEDULE NOT FOUND", 404)
    logger.info("Schedule %r deleted by %s.", name, request.user)
    return JsonResponse({"success": True, "info": "SCHEDULE DELETED"})


@require_POST
def fetch_schedules_batch(request):
    """Public schedules (plus the caller's own) filtered by name and/or owner."""
    try:
        data = read_json(request)
    except BadRequestBody as e:
        return _json_error("BAD REQUEST", 400, error=str(e))

    visible = Q(is_public=True)
    if verify_session(request).valid:
        visible |= Q(user=request.user)
    qs = Schedule.objects.filter(visible).select_related("user")

    query = str(data.get("query") or "").strip()
    if query:
        qs = qs.filter(name__icontains=query)
    username = str(data.get("username") or "").strip()
    if username:
        qs = qs.filter(user__username__iexact=username)

    limit = as_int(data.get("limit"), BATCH_DEFAULT_LIMIT)
    limit = max(1, min(limit, BATCH_MAX_LIMIT))
    return JsonResponse({"success": True, "schedules": [s.summary() for s in qs[:limit]]})
