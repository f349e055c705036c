import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import client_settings as cs
from orchestrator import send_submission
from recommendations import HairProfile, images_for
from schemas import SubmissionRequest

app = FastAPI(title="MKH Hair Consultation API")

# Wizard front-ends may live on another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

logger = logging.getLogger('uvicorn')


def _base_url(request: Request) -> str:
    return cs.PUBLIC_BASE_URL or str(request.base_url).rstrip("/")


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected payload on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request data"})


@app.get("/api/health")
def health():
    return {"ok": True}


@app.post("/api/send-email")
def send_email(payload: SubmissionRequest, request: Request):
    result = send_submission(payload, base_url=_base_url(request))
    return JSONResponse(status_code=result.status_code, content=result.body)


@app.get("/api/test-images")
def test_images(request: Request):
    """Shows where the Blonde / Short / Classic photos are expected to live."""
    base_url = _base_url(request)
    paths = images_for(HairProfile("Blonde", "Short", "Classic"))
    return {
        "success": True,
        "baseUrl": base_url,
        "imagePaths": paths,
        "imageUrls": [f"{base_url}{p}" for p in paths],
        "message": "Image URLs generated successfully",
    }


if __name__ == "__main__":
    uvicorn.run("api:app", host="0.0.0.0", port=8000, reload=False)
