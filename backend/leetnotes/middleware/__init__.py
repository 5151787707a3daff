# Middleware package init
"""
LeetNotes Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Access Log] → [GZip] → [Rate Limit] → Route

    - CORS outermost so 429 and error responses still carry CORS headers
    - Request ID before the access log so each line carries the id
    - Rate Limit innermost; it only counts POST /api/fetch-data and
      POST /api/generate-notes/{id}
"""
