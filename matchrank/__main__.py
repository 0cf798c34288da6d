"""Run the API server: python -m matchrank"""

import uvicorn

from matchrank.config import Config


def main() -> None:
    uvicorn.run(
        "matchrank.api.app:create_app",
        factory=True,
        host=Config.API_HOST,
        port=Config.API_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
