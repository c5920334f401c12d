import uvicorn

from picito.config import settings

if __name__ == "__main__":
    uvicorn.run("picito.main:app", host=settings.app_host, port=settings.app_port, reload=settings.app_env == "dev")
