from realty_crm.models.organization import Organization
from realty_crm.models.employee import Employee
from realty_crm.models.project import Project
from realty_crm.models.unit import Unit
from realty_crm.models.promotion import Promotion, PromotionMetrics
from realty_crm.models.lead import Lead
from realty_crm.models.project_file import ProjectFile

__all__ = [
    "Organization",
    "Employee",
    "Project",
    "Unit",
    "Promotion",
    "PromotionMetrics",
    "Lead",
    "ProjectFile",
]
