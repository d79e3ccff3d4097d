"""WSGI entrypoint for deploying the SalesTax backend under Passenger."""

from salestax.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
