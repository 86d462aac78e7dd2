from __future__ import annotations

from fastapi import APIRouter, Depends

from tripbudget.dependencies import AppServices, get_services
from tripbudget.services.localization import SUPPORTED_LANGUAGES

router = APIRouter(prefix="/strings", tags=["strings"])


@router.get("/", summary="UI strings for the selected language")
async def list_strings(services: AppServices = Depends(get_services)):
    catalog = services.catalog
    return {"language": catalog.language, "strings": catalog.translations}


@router.get("/languages", summary="Languages offered in settings")
async def list_languages():
    return SUPPORTED_LANGUAGES
