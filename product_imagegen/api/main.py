"""
Server entrypoint for the product image generator.

Architectural role:
- Configures process logging.
- Builds the FastAPI app once from environment configuration.
- Serves it with uvicorn.

Relevant environment variables:
- `HOST` (default `0.0.0.0`), `PORT` (default `3000`).
- `DEBUG=true` switches logging to debug level.
"""

import logging
import os

import uvicorn
from dotenv import load_dotenv

from product_imagegen.api.http_api import create_app

load_dotenv()

DEBUG = os.getenv("DEBUG") == "true"

logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


def main():
    """Run the HTTP server."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    logging.getLogger(__name__).info("Server is running on port %s", port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
