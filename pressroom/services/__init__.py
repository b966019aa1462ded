"""
Pressroom Backend: Services Layer
=================================

Service Inventory:
    - TokenService:        issue/verify one-hour bearer tokens (PyJWT)
    - AuthService:         signup and login (bcrypt)
    - ownership:           the single "may this identity change this post" rule
    - PostService:         post CRUD and atomic like/dislike counters
    - NewsService:         locale-scoped news CRUD with image storage
    - ObjectStorage:       image storage contract; LocalFileStorage, S3Storage
    - ContactService:      contact form → EmailMessage; Mailer / SMTPMailer
    - PageRenderer:        URL → full-page PNG; PlaywrightRenderer

Services take the request's AsyncSession as an argument and keep no per-request
state, so one instance per app (on app.state) serves every request.
"""
