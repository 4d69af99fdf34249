import uvicorn

from healthmoney.core.config import Settings

if __name__ == "__main__":
    settings = Settings.from_env()
    uvicorn.run(
        "healthmoney.main:build_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env != "production"
    )
