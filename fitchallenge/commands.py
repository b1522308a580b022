import click

from fitchallenge.extensions import db
from fitchallenge.services import AuthError
from fitchallenge.services import users as user_service


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("name")
    @click.argument("password")
    def create_admin(email, name, password):
        """Create an admin account, or promote an existing user to admin."""
        try:
            user, created = user_service.ensure_admin(email, name, password)
        except AuthError as e:
            raise click.ClickException(e.message)
        if created:
            click.echo(f"Admin {user.email} created.")
        else:
            click.echo(f"User {user.email} promoted to admin.")
