import os

from fastapi import APIRouter, Response

router = APIRouter(prefix="/api", tags=["config"])


@router.get("/env", summary="Remote store endpoint and public key for clients")
def runtime_env(response: Response):
    # Served to browser clients of other origins as well.
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return {
        "SUPABASE_URL": os.getenv("SUPABASE_URL", ""),
        "SUPABASE_ANON_KEY": os.getenv("SUPABASE_ANON_KEY", ""),
    }
