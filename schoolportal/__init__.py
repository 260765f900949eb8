"""App factory for the school portal (Flask)."""
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from .config import Config


db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

def create_app(config_object: type = Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    db.init_app(app); migrate.init_app(app, db)
    jwt.init_app(app)

    from .logging_config import init_logging
    init_logging(app)

    # registers the JWT user loader on import
    from . import models  # noqa: F401
    from .errors import register_error_handlers
    register_error_handlers(app)

    from .auth import auth_bp
    from .main import main_bp
    from .homework import homework_bp
    from .grades import grades_bp
    from .notifications import notifications_bp
    from .admin import admin_bp
    from .roster import roster_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(roster_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(homework_bp, url_prefix="/homeworks")
    app.register_blueprint(grades_bp, url_prefix="/grades")
    app.register_blueprint(notifications_bp, url_prefix="/notifications")
    app.register_blueprint(admin_bp, url_prefix="/admin")


    @app.cli.command("seed")
    def seed_command():
        from .seed import run_seed; run_seed(); print("Seed loaded.")

    @app.cli.command("reset-db")
    def reset_db_command():
        """
        Dev only: resets the database.
        - SQLite: deletes the file and creates the tables.
        - Then runs the seed.
        """
        from pathlib import Path
        uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
        if uri.startswith("sqlite:///"):
            db_path = uri.replace("sqlite:///", "")
            p = Path(db_path)
            if p.exists():
                p.unlink()
            with app.app_context():
                db.create_all()
                from .seed import run_seed
                run_seed()
            print(f"SQLite database recreated at {db_path} and seed loaded.")
        else:
            # other engines in dev: drop_all/create_all (no migrations)
            with app.app_context():
                db.drop_all()
                db.create_all()
                from .seed import run_seed
                run_seed()
            print("Database recreated (drop_all/create_all) and seed loaded.")

    return app
