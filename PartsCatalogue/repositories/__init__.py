from .parts_repository import PartsRepository, merge_part_records
from .bom_repository import BoMRepository
from .application_repository import ApplicationRepository

__all__ = ["PartsRepository", "merge_part_records", "BoMRepository", "ApplicationRepository"]
