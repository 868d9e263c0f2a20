from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os

# Only load .env file if not running on Heroku
if not os.getenv("DYNO"):  # DYNO is a Heroku-specific environment variable
    from dotenv import load_dotenv
    load_dotenv()
    print("🔧 Local development: Loaded .env file")
else:
    print("☁️ Running on Heroku: Using environment variables")

# Importing settings fails fast when the LaoZhang key or base URL is missing
from config.settings import settings
from api import image_edit, video, client_config

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(image_edit.router, prefix=settings.API_V1_STR)
app.include_router(video.router, prefix=settings.API_V1_STR)
app.include_router(client_config.router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": "Image Studio API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

@app.get("/api/health")
async def api_health_check():
    return {"status": "healthy", "service": "api"}

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", settings.PORT))
    uvicorn.run(app, host=settings.HOST, port=port)
