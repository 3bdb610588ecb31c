from fastapi.templating import Jinja2Templates
from rasvia_backend.config import TEMPLATES_DIR

# Autoescape actif par défaut (Starlette)
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
