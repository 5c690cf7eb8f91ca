from hostel_admin.repositories.base import BaseRepository, PageResult

__all__ = ["BaseRepository", "PageResult"]
