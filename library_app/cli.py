import click

from library_app.seed import seed_demo_data
from library_app.services.checkout_service import CheckoutService


def register_commands(app):
    @app.cli.command("seed-demo")
    def seed_demo():
        """Insert demo users, books and reviews."""
        counts = seed_demo_data()
        click.echo(f"Seeded {counts['users']} users, {counts['books']} books, {counts['reviews']} reviews.")

    @app.cli.command("check-availability")
    def check_availability():
        """Report books whose availability flag disagrees with their checkouts."""
        bad = CheckoutService.find_inconsistent_books()
        if not bad:
            click.echo("All books consistent.")
            return
        click.echo(f"Inconsistent books: {', '.join(str(b) for b in bad)}", err=True)
        raise SystemExit(1)
