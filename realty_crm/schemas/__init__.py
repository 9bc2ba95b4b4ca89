from realty_crm.schemas.auth import (
    RegisterRequest,
    OrganizationResponse,
    EmployeeResponse,
    ProfileResponse,
)
from realty_crm.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectListResponse,
)
from realty_crm.schemas.unit import (
    UnitRow,
    UnitSummary,
    UnitStatus,
    UnitCreate,
    UnitUpdate,
    UnitResponse,
)
from realty_crm.schemas.promotion import (
    PromotionCreate,
    PromotionUpdate,
    PromotionResponse,
)
from realty_crm.schemas.lead import (
    LeadCreate,
    LeadUpdate,
    LeadResponse,
)

__all__ = [
    # Auth
    "RegisterRequest",
    "OrganizationResponse",
    "EmployeeResponse",
    "ProfileResponse",
    # Project
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "ProjectListResponse",
    # Unit
    "UnitRow",
    "UnitSummary",
    "UnitStatus",
    "UnitCreate",
    "UnitUpdate",
    "UnitResponse",
    # Promotion
    "PromotionCreate",
    "PromotionUpdate",
    "PromotionResponse",
    # Lead
    "LeadCreate",
    "LeadUpdate",
    "LeadResponse",
]
