from .database import Base, SessionLocal, engine, make_engine
from . import models
