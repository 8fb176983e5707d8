# Routes package init
"""
Murmur Backend — API Routes Package
=====================================

Route Inventory:
    - auth.py:           POST /api/auth/register, /api/auth/login,
                         POST /api/secured/logout
    - users.py:          /api/secured/user/*
    - posts.py:          /api/secured/posts/*
    - notifications.py:  /api/secured/notifications[/read]
    - media.py:          GET /api/media/{path}
    - health.py:         GET /health

Routes stay thin: parse the request, resolve the session and collaborators
through Depends(), call a service, return its response model.
"""
