from fastapi import APIRouter

from twistlist.endpoints.v1 import auth_api, users_api, teams_api, projects_api, tasks_api

api_router = APIRouter()
api_router.include_router(auth_api.router)
api_router.include_router(users_api.router)
api_router.include_router(teams_api.router)
api_router.include_router(projects_api.router)
api_router.include_router(tasks_api.router)
