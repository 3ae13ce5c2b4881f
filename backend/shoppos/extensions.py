# Overview: Extension singletons shared by the app factory, models and CLI.
# Bound to an app in create_app(); models import db from here, never from shoppos.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()
