from library_app.api import books, loans, users

__all__ = ["books", "loans", "users"]
