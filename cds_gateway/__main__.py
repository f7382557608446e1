"""Entry point: python -m cds_gateway"""

import uvicorn

from cds_gateway.core.config import settings


def main() -> None:
    uvicorn.run(
        "cds_gateway.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
