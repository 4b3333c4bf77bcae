from fastapi import APIRouter

from linkhub.api.private import router as private_router
from linkhub.api.public import router as public_router

router = APIRouter()

router.include_router(public_router)
router.include_router(private_router)


@router.get("/", tags=["root"])
def read_root() -> dict[str, str]:
    return {"message": "Welcome to the Linkhub API"}
