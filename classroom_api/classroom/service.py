"""Read operations backing the classroom integration.

Both operations validate their input before touching the store and convert
any store failure into ``StoreUnavailable`` with a fixed message; the cause
is only logged.
"""

import logging

from classroom_api.classroom.normalize import normalize_date
from classroom_api.classroom.schemas import check_email, check_user_ids
from classroom_api.db import UserStore
from classroom_api.errors import InvalidInput, StoreUnavailable

logger = logging.getLogger(__name__)


def get_user_id(store: UserStore, email: str) -> dict:
    """Return ``{"userId": id}`` for the classroom account with this email, or an empty id."""
    try:
        email = check_email(email)
    except ValueError as e:
        raise InvalidInput(str(e)) from e

    try:
        user = store.find_one(
            {"email": email, "is_classroom_account": True},
            projection=["id"],
        )
    except Exception as e:
        logger.exception(f"Classroom user id lookup failed: {e}")
        raise StoreUnavailable("Failed to retrieve user id") from e

    # No classroom account is a normal outcome, not a 404
    return {"userId": user["id"] if user else ""}


def get_user_data(store: UserStore, user_ids: list[str]) -> dict:
    """Return completed challenges for every classroom account among ``user_ids``.

    Ids that are unknown or belong to non-classroom users are left out of
    the map entirely. Each entry carries only ``id`` and ``completedDate``.
    """
    try:
        user_ids = check_user_ids(user_ids)
    except ValueError as e:
        raise InvalidInput(str(e)) from e

    if not user_ids:
        return {"data": {}}

    try:
        users = store.find_many(
            {"id": {"in": user_ids}, "is_classroom_account": True},
            projection=["id", "completed_challenges"],
        )
        data = {
            user["id"]: [
                {"id": challenge["id"], "completedDate": normalize_date(challenge["completedDate"])}
                for challenge in user["completed_challenges"]
            ]
            for user in users
        }
    except Exception as e:
        logger.exception(f"Classroom user data lookup failed: {e}")
        raise StoreUnavailable("Failed to retrieve user data") from e

    return {"data": data}
