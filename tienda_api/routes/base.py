from fastapi import APIRouter

APP_NAME = "tienda-api"
APP_VERSION = "1.0.0"

router = APIRouter()

@router.get("/")
def welcome():
    return {
        "mensaje": "¡Bienvenido a la API REST de Productos!",
        "version": APP_VERSION,
        "endpoints": {
            "productos": "/api/productos",
            "documentacion": "/docs",
        },
    }

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/version")
def version():
    return {"app": APP_NAME, "version": APP_VERSION}
