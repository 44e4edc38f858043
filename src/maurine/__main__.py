import uvicorn
from maurine.config import settings


def main() -> None:
    uvicorn.run("maurine.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
