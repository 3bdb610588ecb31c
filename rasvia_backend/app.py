# module rasvia_backend.app
from rasvia_backend.app_setup.factory import create_app

# App globale
app = create_app()
