# Middleware package init
"""
SkillSwap Backend: Middleware Package
=====================================

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Rate limiting rejects abusive clients before any work is done; the
    request ID is assigned before the access log line is written so both
    share the same correlation id.

Authentication is not a middleware: routes that need the acting user declare
`Depends(get_current_user_id)`, and public routes (browse, health) do not.
"""
