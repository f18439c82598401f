"""User accounts service: credentials, token lifecycle and password reset."""
