"""Run the verify-OTP front-end service with uvicorn."""

import uvicorn

from otp_flow.core.config import settings


def main() -> None:
    uvicorn.run("otp_flow.main:app", host=settings.APP_HOST, port=settings.APP_PORT)


if __name__ == "__main__":
    main()
