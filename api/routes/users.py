"""
api/routes/users.py -- User CRUD, paging, filtering, and sorting routes.

Routes (static paths registered before /users/{user_id} so they are not
captured by the path parameter):
  GET    /users                 -- list all users
  GET    /users/pagination      -- one page (?page=0&size=10)
  GET    /users/filter          -- dynamic filter (?fullName=&email=&gender=&roleId=)
  GET    /users/sorted          -- sorted list (?sortBy=fullName&sortDirection=asc)
  GET    /users/{user_id}       -- one user
  PUT    /users/{user_id}       -- replace the updatable fields
  DELETE /users/{user_id}       -- hard delete

Empty results on list, pagination and filter answer 204 with no body. The
"no results" message goes to the log instead.

UserNotFoundError and InvalidArgumentError propagate to the handlers in
api/main.py. Update, delete and filter wrap anything else in a 500 with an
operation-specific message after logging the traceback.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from api.models import MessageResponse, UserPageResponse, UserResponse, UserUpdate
from auth.dependencies import get_current_user
from auth.tokens import hash_password
from users.exceptions import UserNotFoundError
from users.service import UserService

logger = logging.getLogger("ums.api")

# Auth policy: every route on this router requires a valid bearer token.
# Router-level dependency, so individual handlers don't each repeat it.
router = APIRouter(prefix="/users", dependencies=[Depends(get_current_user)])


def _no_content(request: Request, message: str) -> Response:
    logger.info("%s %s -> 204: %s", request.method, request.url.path, message)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Collection routes
# ---------------------------------------------------------------------------


@router.get("", response_model=list[UserResponse])
def list_users(request: Request) -> Response | list[UserResponse]:
    """Return every user, or 204 when the table is empty."""
    service: UserService = request.app.state.user_service
    users = service.get_all_users()
    if not users:
        return _no_content(request, "No users found.")
    return [UserResponse.from_domain(u) for u in users]


@router.get("/pagination", response_model=UserPageResponse)
def get_users_page(request: Request, page: int = 0, size: int = 10) -> Response | UserPageResponse:
    """Return one zero-based page of users with totalPages and currentPage.

    size below 1 is treated as 1 and a negative page as 0. A page past the
    end answers 204.
    """
    service: UserService = request.app.state.user_service
    result = service.get_users(page, size)
    if not result.users:
        return _no_content(request, "No users found for the given page.")
    return UserPageResponse.from_domain(result)


@router.get("/filter", response_model=list[UserResponse])
def filter_users(request: Request) -> Response | list[UserResponse]:
    """Filter by any combination of fullName, email, gender and roleId.

    Every query parameter is passed to the predicate builder; unrecognized
    names are ignored and recognized ones are AND-combined.
    """
    service: UserService = request.app.state.user_service
    filters = dict(request.query_params)
    try:
        users = service.filter_users(filters)
    except Exception as exc:
        logger.exception("Error filtering users with %r", filters)
        raise HTTPException(status_code=500, detail="Error filtering users.") from exc
    if not users:
        return _no_content(request, "No users found matching the filters.")
    return [UserResponse.from_domain(u) for u in users]


@router.get("/sorted", response_model=list[UserResponse])
def get_sorted_users(
    request: Request,
    sort_by: str = Query(default="fullName", alias="sortBy"),
    sort_direction: str = Query(default="asc", alias="sortDirection"),
) -> list[UserResponse]:
    """Return every user sorted by fullName, email, roleId or gender.

    An unknown sortBy raises InvalidArgumentError, which api/main.py renders
    as a 500. An empty table is a plain empty list here, not a 204.
    """
    service: UserService = request.app.state.user_service
    users = service.get_all_users_sorted(sort_by, sort_direction)
    return [UserResponse.from_domain(u) for u in users]


# ---------------------------------------------------------------------------
# Item routes
# ---------------------------------------------------------------------------


@router.get("/{user_id}", response_model=UserResponse)
def get_user(request: Request, user_id: int) -> UserResponse:
    service: UserService = request.app.state.user_service
    return UserResponse.from_domain(service.get_user_by_id(user_id))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(request: Request, user_id: int, body: UserUpdate) -> UserResponse:
    """Replace the updatable fields of a user.

    gender and phoneNumber in the body are ignored; see UPDATABLE_FIELDS in
    users/service.py.
    """
    service: UserService = request.app.state.user_service
    new_data = body.to_domain(password_hash=hash_password(body.password), enabled=body.enabled)
    try:
        updated = service.update_user(user_id, new_data)
    except UserNotFoundError:
        raise
    except Exception as exc:
        logger.exception("Error updating user %d", user_id)
        raise HTTPException(status_code=500, detail="Error updating user.") from exc
    return UserResponse.from_domain(updated)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(request: Request, user_id: int) -> MessageResponse:
    """Delete a user permanently. Deleting the same id twice answers 404 the second time."""
    service: UserService = request.app.state.user_service
    try:
        service.delete_user(user_id)
    except UserNotFoundError:
        raise
    except Exception as exc:
        logger.exception("Error deleting user %d", user_id)
        raise HTTPException(status_code=500, detail="Error deleting user.") from exc
    return MessageResponse(message="User deleted successfully.")
