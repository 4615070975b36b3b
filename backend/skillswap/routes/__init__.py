# Routes package init
"""
SkillSwap Backend: API Routes Package
=====================================

Route Inventory:
    - swap_requests.py:  POST   /api/swap-requests
                         GET    /api/swap-requests/me
                         PUT    /api/swap-requests/{id}/accept
                         PUT    /api/swap-requests/{id}/reject
                         DELETE /api/swap-requests/{id}
    - users.py:          GET    /api/users
                         GET    /api/users/{id}
                         PUT    /api/users/{id}
                         PUT    /api/users/{id}/profile-photo
                         GET    /api/files/{path}
    - health.py:         GET    /health, /api/health

Routes stay thin: they resolve the acting user, build a service over the
request's session and shape the response. Business rules live in services.
"""
