from fastapi import APIRouter

from sb2backup.core.version import get_version_payload

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/version")
def version() -> dict[str, str]:
    return get_version_payload()
