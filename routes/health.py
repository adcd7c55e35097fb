from datetime import datetime

from flask import Blueprint, jsonify, current_app

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    return jsonify(
        status="OK",
        timestamp=datetime.utcnow().isoformat(),
        environment="test" if current_app.testing else ("development" if current_app.debug else "production"),
    ), 200


@health_bp.get("/")
def root():
    return jsonify(
        message="SmashLabs Backend API",
        version="1.0.0",
        endpoints={
            "bookings": "/api/bookings",
            "corporateBookings": "/api/corporate-bookings",
            "registrations": "/api/registrations",
            "contact": "/api/contact",
            "newsletter": "/api/newsletter",
            "admin": "/api/admin",
            "health": "/health",
        },
    ), 200
