from otp_flow.api.routes.verify_otp import router as verify_otp_router

__all__ = ["verify_otp_router"]
