"""
The route table. Every endpoint of the API is listed here with its method,
path, handler and the model that validates its request body, and registered
from this table alone.
"""

from typing import Annotated, Any, Callable, NamedTuple, get_origin, get_type_hints

from fastapi import APIRouter
from pydantic import BaseModel

from groupcal.core.event import EventUpdate
from groupcal.core.models import (
    AddCalendarItemRequest,
    CredentialsRequest,
    EventCreationRequest,
    GroupCreationRequest,
    InviteRequest,
    PasswordUpdateRequest,
    UserNameUpdateRequest,
)

from . import calendar, events, groups, users


class Route(NamedTuple):
    method: str
    path: str
    endpoint: Callable[..., Any]
    request_model: type[BaseModel] | None
    summary: str
    tag: str


ROUTES: tuple[Route, ...] = (
    # Users and sessions
    Route("GET", "/session", users.get_session_user, None, "Current session user", "Users"),
    Route("GET", "/users", users.get_users, None, "List users", "Users"),
    Route("GET", "/users/{user_name}", users.get_user, None, "Look up a user", "Users"),
    Route("POST", "/users", users.create_user, CredentialsRequest, "Register", "Users"),
    Route("PATCH", "/users/username", users.update_user_name, UserNameUpdateRequest, "Change your user name", "Users"),
    Route("PATCH", "/users/password", users.update_password, PasswordUpdateRequest, "Change your password", "Users"),
    Route("DELETE", "/users", users.delete_user, None, "Delete your account", "Users"),
    Route("POST", "/login", users.log_in, CredentialsRequest, "Log in", "Users"),
    Route("POST", "/logout", users.log_out, None, "Log out", "Users"),
    # Calendars
    Route("POST", "/calendar", calendar.create_calendar, None, "Create your calendar", "Calendar"),
    Route("GET", "/calendar", calendar.get_calendar, None, "Your calendar, resolved", "Calendar"),
    Route("PUT", "/calendar", calendar.add_event_to_calendar, AddCalendarItemRequest, "Add an event to your calendar", "Calendar"),
    Route("PUT", "/calendar/event", calendar.add_event_to_calendar, AddCalendarItemRequest, "Add an event to your calendar", "Calendar"),
    Route("DELETE", "/calendar/{event_id}", calendar.delete_event_from_calendar, None, "Remove your event from a calendar", "Calendar"),
    Route("GET", "/calendar/group/{group_id}", calendar.get_group_calendar, None, "Calendar items of a group's members", "Calendar"),
    # Groups
    Route("POST", "/group", groups.create_group, GroupCreationRequest, "Create a group", "Groups"),
    Route("PUT", "/group/{user_id}", groups.add_to_group, InviteRequest, "Invite a user to your group", "Groups"),
    Route("GET", "/group/{group_id}/members", groups.get_group_members, None, "List group members", "Groups"),
    Route("DELETE", "/group/{group_id}", groups.leave_group, None, "Leave a group", "Groups"),
    # Events
    Route("POST", "/events", events.create_event, EventCreationRequest, "Create an event", "Events"),
    Route("GET", "/events", events.get_events, None, "List all events", "Events"),
    Route("GET", "/events/mine", events.get_my_events, None, "Events you attend", "Events"),
    Route("GET", "/events/group/{group_id}", events.get_group_events, None, "Events of a group", "Events"),
    Route("PATCH", "/events/{event_id}", events.update_event, EventUpdate, "Update your event", "Events"),
    Route("DELETE", "/events/{event_id}", events.delete_event, None, "Delete your event", "Events"),
    Route("PUT", "/events/{event_id}/attend", events.attend_event, None, "Attend an event", "Events"),
)


def body_model(endpoint: Callable[..., Any]) -> type[BaseModel] | None:
    """
    The pydantic model FastAPI validates the endpoint's request body with:
    the one parameter annotated with a model directly, rather than through
    an `Annotated` dependency.
    """
    hints = get_type_hints(endpoint, include_extras=True)
    hints.pop("return", None)

    models = [
        hint
        for hint in hints.values()
        if get_origin(hint) is not Annotated
        and isinstance(hint, type)
        and issubclass(hint, BaseModel)
    ]

    if len(models) > 1:
        raise ValueError(f"{endpoint.__name__} takes more than one request body")

    return models[0] if models else None


def build_router(routes: tuple[Route, ...] = ROUTES) -> APIRouter:
    """
    Register every route in the table on a fresh router.

    Raises
    ------
    ValueError
        If a route's request model is not the body its endpoint validates.
    """
    router = APIRouter()

    for route in routes:
        if body_model(route.endpoint) is not route.request_model:
            raise ValueError(
                f"{route.method} {route.path} lists request model "
                f"{route.request_model} but {route.endpoint.__name__} takes "
                f"{body_model(route.endpoint)}"
            )

        router.add_api_route(
            path=route.path,
            endpoint=route.endpoint,
            methods=[route.method],
            summary=route.summary,
            tags=[route.tag],
        )

    return router


def describe(routes: tuple[Route, ...] = ROUTES) -> list[str]:
    """
    One line per route: method, path, handler and request model.
    """
    return [
        f"{route.method:<7}{route.path:<30}{route.endpoint.__module__}.{route.endpoint.__name__}"
        + (f" [{route.request_model.__name__}]" if route.request_model else "")
        for route in routes
    ]
