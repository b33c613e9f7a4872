from __future__ import annotations

import uvicorn

from preorder_api.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "preorder_api.asgi:create_asgi_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
