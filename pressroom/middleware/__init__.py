"""
Pressroom Backend: Middleware Package
=====================================

Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

Request ID runs first so the access log line and any error body share the id.
"""
