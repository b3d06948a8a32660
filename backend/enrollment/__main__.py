"""Run the API with uvicorn: python -m enrollment"""

import uvicorn

from enrollment.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "enrollment.main:app", host="0.0.0.0", port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
