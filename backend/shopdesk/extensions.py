# Overview: Flask extension instances for database, migrations and the shop state.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from .services.store import ShopState

db = SQLAlchemy()
migrate = Migrate()
shop = ShopState()
