"""
Pressroom Backend: API Routes Package
=====================================

Route Inventory:
    - auth.py:        POST /signup, POST /login
    - posts.py:       /posts CRUD, /posts/{id}/like, /posts/{id}/dislike
    - news.py:        /news and /news-en CRUD, /news[-en]/image/{id}
    - files.py:       GET /files/{path}       (local storage backend)
    - contact.py:     POST /send-email
    - screenshot.py:  GET /screenshot/{url}
    - health.py:      GET /health

Routes stay thin: they read the request, call a service from app.state and
shape the response. Errors are raised as PressroomError subclasses and turned
into JSON by the handlers in main.py.
"""
