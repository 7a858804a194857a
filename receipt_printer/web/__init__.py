"""
Web module for Receipt Printer.

Exposes blueprints for:
- Submission page and print endpoints: web_bp
- Admin page and acceptance toggle: admin_bp
- Health endpoint: health_bp
"""

from .admin import admin_bp
from .health import health_bp
from .routes import web_bp

__all__ = ["admin_bp", "health_bp", "web_bp"]
