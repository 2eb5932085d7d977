"""Client-side OTP verification and password-reset flow."""
