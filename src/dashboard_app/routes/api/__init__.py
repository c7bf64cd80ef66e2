"""
Dashboard API - Modular Blueprint Structure

Each module handles one screen of the store dashboard. Every route is scoped to
a store through the /stores/<store_id> prefix.
"""

import logging

from flask import Blueprint

from balcao.supabase.storage import SupabaseStorage

logger = logging.getLogger(__name__)

# Create main API blueprint
api_bp = Blueprint("api", __name__)

# Import and register sub-blueprints
from .customers import customers_bp
from .marketing import marketing_bp
from .orders import orders_bp
from .store import store_bp
from .suppliers import suppliers_bp
from .till import till_bp

api_bp.register_blueprint(till_bp)
api_bp.register_blueprint(orders_bp)
api_bp.register_blueprint(marketing_bp)
api_bp.register_blueprint(store_bp)
api_bp.register_blueprint(customers_bp)
api_bp.register_blueprint(suppliers_bp)


# Health check endpoint
@api_bp.get("/health")
def health_check():
    """Simple health check endpoint"""
    return {
        "status": "ok",
        "service": "balcao-dashboard",
        "storage": SupabaseStorage.is_available(),
    }, 200


__all__ = ["api_bp"]
