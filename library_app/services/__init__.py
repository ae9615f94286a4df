from library_app.services import books, loans, users

__all__ = ["books", "loans", "users"]
