import logging

import click
from flask import Flask, request, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from routes import (
    health_bp,
    bookings_bp,
    corporate_bp,
    registrations_bp,
    contact_bp,
    newsletter_bp,
    admin_bp,
)

from models import db
from models.booking import Booking
from models.corporate_booking import CorporateBooking
from lifecycle.errors import LifecycleError
from lifecycle.manager import get_lifecycle
from utils.emailer import init_mailer
from utils.audit import log_event
from utils.notify import send_transition


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(level)


def create_app(config=None, mailer=None):
    app = Flask(__name__)
    app.config.from_object(config or Config)

    configure_logging(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(bookings_bp)
    app.register_blueprint(corporate_bp)
    app.register_blueprint(registrations_bp)
    app.register_blueprint(contact_bp)
    app.register_blueprint(newsletter_bp)
    app.register_blueprint(admin_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # SMTP transport shared by the notification helpers
    init_mailer(app, mailer)

    # Tables for a fresh SQLite file; real deployments run `flask db upgrade`
    with app.app_context():
        db.create_all()

    @app.errorhandler(LifecycleError)
    def _lifecycle_error(e):
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify(success=False, message=f"Route {request.path} not found"), 404

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return jsonify(success=False, message="Method not allowed"), 405

    @app.errorhandler(Exception)
    def _unhandled(e):
        if isinstance(e, HTTPException):
            return jsonify(success=False, message=e.description), e.code
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(
            success=False,
            message="Internal server error",
            error=str(e) if app.config.get("DEBUG") else None,
        ), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"

        origin = request.headers.get("Origin")
        if origin and origin in app.config.get("CORS_ALLOWED_ORIGINS", []):
            resp.headers["Access-Control-Allow-Origin"] = origin
            resp.headers["Access-Control-Allow-Credentials"] = "true"
            resp.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
            resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
            resp.headers["Vary"] = "Origin"
        return resp

    register_cli(app)

    return app


#-------------------------
def _find_bookable(reference):
    lifecycle = get_lifecycle()
    model = CorporateBooking if reference.strip().upper().startswith("CORP-") else Booking
    return lifecycle, lifecycle.find_by_reference(model, reference)


def _entity_label(entity):
    return "corporate_booking" if isinstance(entity, CorporateBooking) else "booking"


def register_cli(app):
    @app.cli.command("confirm-booking")
    @click.argument("reference")
    def confirm_booking(reference):
        """Confirm a booking or corporate booking by its reference code."""
        lifecycle, entity = _find_bookable(reference)
        if not entity:
            click.echo("Booking not found")
            return

        try:
            lifecycle.confirm(entity)
        except LifecycleError as e:
            click.echo(e.message)
            return
        log_event("BOOKING_CONFIRM", entity=_entity_label(entity), entity_id=entity.id,
                  reference=entity.reference_code, metadata={"via": "cli"})
        send_transition(entity, "confirmed")
        click.echo(f"{entity.reference_code} confirmed")

    @app.cli.command("cancel-booking")
    @click.argument("reference")
    @click.option("--reason", default=None, help="Appended to the admin notes.")
    def cancel_booking(reference, reason):
        """Cancel a booking or corporate booking by its reference code."""
        lifecycle, entity = _find_bookable(reference)
        if not entity:
            click.echo("Booking not found")
            return

        try:
            lifecycle.cancel(entity, reason)
        except LifecycleError as e:
            click.echo(e.message)
            return
        log_event("BOOKING_CANCEL", entity=_entity_label(entity), entity_id=entity.id,
                  reference=entity.reference_code, metadata={"via": "cli", "reason": reason})
        send_transition(entity, "cancelled")
        click.echo(f"{entity.reference_code} cancelled")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
