from dotenv import load_dotenv
load_dotenv()

import uvicorn

from mysticwriter.app import app
from mysticwriter.config import get_settings
from mysticwriter.routers import analytics, avatars, writing

app.include_router(analytics.router)
app.include_router(avatars.router)
app.include_router(writing.router)


@app.get("/health")
async def health():
    settings = get_settings()
    return {"status": "ok", "app": settings.app_name, "image_provider": settings.image_provider}


if __name__ == "__main__":
    uvicorn.run("mysticwriter.main:app", host="0.0.0.0", port=8000)
