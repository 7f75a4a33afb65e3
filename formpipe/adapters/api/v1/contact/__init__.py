from .routes import create_contact_router, submit_contact

__all__ = ["create_contact_router", "submit_contact"]
