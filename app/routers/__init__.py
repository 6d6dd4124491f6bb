from fastapi import APIRouter
import logging

from . import albums, gallery, health, members, notices, schedules, settings, videos

ROUTERS = {
    "settings": settings.router,
    "members": members.router,
    "gallery": gallery.router,
    "notices": notices.router,
    "schedules": schedules.router,
    "albums": albums.router,
    "videos": videos.router,
    "health": health.router,
}


def build_router() -> APIRouter:
    router = APIRouter(prefix="/api")
    log = logging.getLogger("routers")
    for name, sub in ROUTERS.items():
        router.include_router(sub)
        log.info("Loaded router: %s", name)
    return router
