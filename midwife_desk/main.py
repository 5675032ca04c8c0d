import logging

from fastapi import FastAPI

from midwife_desk.api.v1.account import router as account_router
from midwife_desk.api.v1.appointments import router as appointments_router
from midwife_desk.api.v1.bookings import router as bookings_router
from midwife_desk.api.v1.requests import router as requests_router
from midwife_desk.api.v1.scheduling import router as scheduling_router
from midwife_desk.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("midwife_id", "appointment_id", "service_code", "path", "status", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Midwife Desk", version="1.0.0")

app.include_router(account_router, prefix="/api/v1", tags=["account"])
app.include_router(scheduling_router, prefix="/api/v1", tags=["scheduling"])
app.include_router(appointments_router, prefix="/api/v1", tags=["appointments"])
app.include_router(bookings_router, prefix="/api/v1", tags=["bookings"])
app.include_router(requests_router, prefix="/api/v1", tags=["requests"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
