# Services package init
"""
Murmur Backend — Services Layer
=================================

Business rules between the routes (HTTP) and the models (persistence).
Services are stateless module-level singletons; every method takes the
request's AsyncSession first, and the media store where images are involved.

Service Inventory:
    - AuthService:          register, login
    - UserService:          profiles, follow graph, suggestions, profile update
    - PostService:          posts, comments, likes, feeds
    - NotificationService:  list, mark read, delete
    - MediaStore (abstract): image host interface
      - LocalMediaStore / S3MediaStore
"""
