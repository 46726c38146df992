import uvicorn

from netmonitor.core.config import settings


def main():
    uvicorn.run(
        "netmonitor.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
