"""HTTP routers mounted under the API prefix (health is mounted at the root)."""

from storefront.api.routes import admin, auth, contact, health, inventory, orders

__all__ = ["admin", "auth", "contact", "health", "inventory", "orders"]
