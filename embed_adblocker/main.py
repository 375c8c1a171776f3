import logging

from fastapi import FastAPI

from embed_adblocker.configs import settings
from embed_adblocker.middleware import CORSHeadersMiddleware, DocsAccessControlMiddleware
from embed_adblocker.routes import embed_router

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
app = FastAPI(title="Embed AdBlocker")
app.add_middleware(DocsAccessControlMiddleware)
app.add_middleware(CORSHeadersMiddleware)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


app.include_router(embed_router, tags=["embed"])


def run():
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8888, log_level="info")


if __name__ == "__main__":
    run()
