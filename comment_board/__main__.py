import uvicorn

from comment_board.config import settings


def main() -> None:
    uvicorn.run(
        "comment_board.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
