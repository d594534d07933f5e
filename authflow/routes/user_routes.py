from fastapi import APIRouter, Depends

from authflow.auth.dependencies import protect, restrict_to
from authflow.auth.issuer import serialize_user
from authflow.models.user import ROLE_ADMIN, User
from authflow.services.user_store import UserStore, get_user_store

router = APIRouter(tags=['users'])


@router.get('/me')
def me(current_user: User = Depends(protect)) -> dict:
    return {'status': 'success', 'data': {'user': serialize_user(current_user)}}


@router.get('', dependencies=[Depends(restrict_to(ROLE_ADMIN))])
def list_users(store: UserStore = Depends(get_user_store)) -> dict:
    users = [serialize_user(user) for user in store.list_users()]
    return {'status': 'success', 'results': len(users), 'data': {'users': users}}
