import uvicorn

from user_account_svc.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "user_account_svc.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
