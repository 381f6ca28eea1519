# foodmap/api/deps.py
from fastapi import Request
from foodmap.domain.services.store_svc import StoreService
from foodmap.domain.services.user_svc import UserService


# Services are built once in the lifespan (see core/lifespan.build_services)
def store_service(request: Request) -> StoreService:
    return request.app.state.store_service


def user_service(request: Request) -> UserService:
    return request.app.state.user_service
