"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt)
  • Signed session tokens (HS256 JWT)
  • ``AuthService`` register / login flows
  • Error types mapped to HTTP status codes
"""
