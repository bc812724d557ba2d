from app.models.upload import Upload
from app.models.user import User

__all__ = ["User", "Upload"]
