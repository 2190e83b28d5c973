# main.py
import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from convocation import config
from convocation.errors import FunctionError, function_error_handler
from convocation.routes.functions import router as functions_router
from convocation.routes.screens import router as screens_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="CUK Convocation Registration")

# ---------------- CORS ----------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(FunctionError, function_error_handler)
app.include_router(screens_router)
app.include_router(functions_router)


@app.get("/health")
def health():
    return {"ok": True, "time": datetime.utcnow().isoformat()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
