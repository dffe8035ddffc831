import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from .config import Settings, load_settings
from .database import Database
from .errors import DeviceNotFound, DuplicateMac, InvalidFormat, SendError, WolServerError
from .logging_config import setup_logging
from .schemas import ApiMessage, Device, DeviceIn, WakeRequest
from .wol import BroadcastSender, validate_and_parse, wake


logger = logging.getLogger("wolserver")

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

ERROR_STATUS = {
    InvalidFormat: 400,
    DeviceNotFound: 404,
    DuplicateMac: 409,
    SendError: 500,
}


def status_for(exc: WolServerError) -> int:
    for exc_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = load_settings()
    setup_logging(settings.log_level)

    db = Database(settings.db_path)
    db.init()

    sender = BroadcastSender(
        port=settings.wol_port,
        primary_address=settings.broadcast,
        fallback_address=settings.fallback_broadcast,
        timeout=settings.send_timeout,
    )
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    app = FastAPI(
        title="WOL Server",
        description="Wake-On-LAN web server with a persistent device list",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.db = db
    app.state.sender = sender

    @app.exception_handler(WolServerError)
    async def wolserver_error_handler(request: Request, exc: WolServerError):
        status_code = status_for(exc)
        logger.error(
            "request_failed",
            extra={"extra": {"path": request.url.path, "status": status_code, "error": str(exc)}},
        )
        return JSONResponse(status_code=status_code, content={"success": False, "message": str(exc)})

    @app.middleware("http")
    async def access_log_middleware(request: Request, call_next):
        response = await call_next(request)
        logger.info(
            "request",
            extra={
                "extra": {
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "client": request.client.host if request.client else "unknown",
                }
            },
        )
        return response

    def send_wake(mac: str) -> ApiMessage:
        result = wake(mac, sender=app.state.sender)
        return ApiMessage(
            success=True,
            message=f"Magic packet sent to {result.mac}",
            data={
                "mac": result.mac,
                "broadcast": result.send.address,
                "port": result.send.port,
                "fallback": result.send.used_fallback,
            },
        )

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request):
        return templates.TemplateResponse(
            request,
            "index.html",
            {"devices": db.list_devices()},
        )

    @app.get("/health", response_model=ApiMessage)
    def health():
        return ApiMessage(success=True, message="ok", data={"service": "wolserver"})

    @app.get("/api/devices", response_model=ApiMessage)
    def list_devices():
        devices = [Device(**row).model_dump() for row in db.list_devices()]
        return ApiMessage(success=True, message="Devices loaded", data={"devices": devices})

    @app.post("/api/devices", response_model=ApiMessage, status_code=201)
    def add_device(payload: DeviceIn):
        mac = str(validate_and_parse(payload.mac))
        name = payload.name
        device_id = db.add_device(name, mac)
        logger.info("device_created", extra={"extra": {"device_id": device_id, "name": name, "mac": mac}})
        device = Device(id=device_id, name=name, mac=mac)
        return ApiMessage(success=True, message="Device added", data={"device": device.model_dump()})

    @app.put("/api/devices/{device_id}", response_model=ApiMessage)
    def update_device(device_id: int, payload: DeviceIn):
        mac = str(validate_and_parse(payload.mac))
        name = payload.name
        if not db.update_device(device_id, name, mac):
            raise DeviceNotFound(f"Device {device_id} not found")
        logger.info("device_updated", extra={"extra": {"device_id": device_id, "mac": mac}})
        device = Device(id=device_id, name=name, mac=mac)
        return ApiMessage(success=True, message="Device updated", data={"device": device.model_dump()})

    @app.delete("/api/devices/{device_id}", response_model=ApiMessage)
    def delete_device(device_id: int):
        if not db.delete_device(device_id):
            raise DeviceNotFound(f"Device {device_id} not found")
        logger.info("device_deleted", extra={"extra": {"device_id": device_id}})
        return ApiMessage(success=True, message="Device deleted")

    @app.post("/api/wakeup/{device_id}", response_model=ApiMessage)
    def wake_device(device_id: int):
        return send_wake(db.get_mac(device_id))

    @app.post("/api/wake", response_model=ApiMessage)
    def wake_mac(payload: WakeRequest):
        return send_wake(payload.mac)

    return app
