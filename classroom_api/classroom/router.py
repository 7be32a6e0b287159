from fastapi import APIRouter, Depends, Request

from classroom_api.auth.bearer import ServiceTokenRoute
from classroom_api.classroom import service
from classroom_api.classroom.schemas import GetUserDataRequest, GetUserIdRequest
from classroom_api.db import UserStore

# Every route checks the bearer token before its body is parsed.
router = APIRouter(
    prefix="/apps/classroom",
    tags=["classroom"],
    route_class=ServiceTokenRoute,
)


def get_store(request: Request) -> UserStore:
    return request.app.state.store


@router.post("/get-user-id")
async def get_user_id(payload: GetUserIdRequest, store: UserStore = Depends(get_store)):
    return service.get_user_id(store, payload.email)


@router.post("/get-user-data")
async def get_user_data(payload: GetUserDataRequest, store: UserStore = Depends(get_store)):
    return service.get_user_data(store, payload.user_ids)
