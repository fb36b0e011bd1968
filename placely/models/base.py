from placely.db import Base

__all__ = ["Base"]
