from fastapi import APIRouter

from app.api.profiles import router as profiles_router

router = APIRouter()

router.include_router(profiles_router)


@router.get("/", tags=["root"])
def read_root() -> dict[str, str]:
    return {"message": "Welcome to the Storefront Social API"}
