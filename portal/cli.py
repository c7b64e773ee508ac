"""Municipal portal CLI tool (portalctl)."""

import typer
from sqlalchemy.engine import make_url

app = typer.Typer(name="portalctl", help="Municipal Portal CLI")
db_app = typer.Typer(help="Database management commands")
users_app = typer.Typer(help="User account commands")
app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


def _server_connection():
    """Connect to the MySQL server named in DATABASE_URL, without selecting the database."""
    import pymysql
    from portal.core.config import settings

    url = make_url(settings.DATABASE_URL)
    conn = pymysql.connect(
        host=url.host or "localhost",
        port=url.port or 3306,
        user=url.username,
        password=url.password or "",
    )
    return conn, url.database


@db_app.command("create")
def db_create():
    """Create the MySQL database if it doesn't exist."""
    conn, db_name = _server_connection()
    try:
        cursor = conn.cursor()
        cursor.execute(f"CREATE DATABASE IF NOT EXISTS `{db_name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
        typer.echo(f"Database '{db_name}' created (or already exists)")
    finally:
        conn.close()


@db_app.command("init")
def db_init():
    """Create all tables."""
    from portal.db.base import Base
    from portal.db.session import engine
    import portal.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    typer.echo("Tables created")


@db_app.command("seed")
def db_seed(sample: bool = typer.Option(True, help="Also insert sample staff and content")):
    """Seed the admin account and sample data."""
    from portal.db.session import SessionLocal
    from portal.db.seeds.seed_admin import seed_admin
    from portal.db.seeds.seed_sample_data import seed_sample_data

    db = SessionLocal()
    try:
        seed_admin(db)
        if sample:
            seed_sample_data(db)
    finally:
        db.close()
    typer.echo("All seeds applied")


@db_app.command("reset")
def db_reset():
    """Drop and recreate the database (DANGER)."""
    confirm = typer.confirm("This will DROP the entire database. Continue?")
    if not confirm:
        raise typer.Abort()
    conn, db_name = _server_connection()
    try:
        cursor = conn.cursor()
        cursor.execute(f"DROP DATABASE IF EXISTS `{db_name}`")
        cursor.execute(f"CREATE DATABASE `{db_name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
        typer.echo(f"Database '{db_name}' reset")
    finally:
        conn.close()


@users_app.command("create-admin")
def create_admin(
    email: str = typer.Option(..., prompt=True, help="Admin email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    name: str = typer.Option("Administrator", help="Display name"),
):
    """Create an administrator account."""
    from portal.db.session import SessionLocal
    from portal.db.seeds.seed_admin import seed_admin

    db = SessionLocal()
    try:
        seed_admin(db, email=email, password=password, name=name)
    finally:
        db.close()


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run("portal.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
