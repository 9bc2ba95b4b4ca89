from realty_crm.services.organization_service import OrganizationService
from realty_crm.services.project_service import ProjectService
from realty_crm.services.unit_service import UnitService
from realty_crm.services.promotion_service import PromotionService
from realty_crm.services.lead_service import LeadService
from realty_crm.services.file_service import FileService
from realty_crm.services.storage_service import StorageService, storage_service, get_storage

__all__ = [
    "OrganizationService",
    "ProjectService",
    "UnitService",
    "PromotionService",
    "LeadService",
    "FileService",
    "StorageService",
    "storage_service",
    "get_storage",
]
