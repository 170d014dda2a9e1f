# File: admin_core/schemas/__init__.py

from admin_core.schemas.common import (
    BulkOperationResult,
    CanonicalModel,
    FindOptions,
    PaginatedResult,
    PaginationOptions,
    PrincipalContext,
)
from admin_core.schemas.language import (
    Language,
    LanguageCreate,
    LanguageSummary,
    LanguageUpdate,
)
from admin_core.schemas.dropdown_option import (
    BulkAction,
    DropdownOption,
    DropdownOptionCreate,
    DropdownOptionUpdate,
)
from admin_core.schemas.slider import Slider, SliderCreate, SliderUpdate
from admin_core.schemas.payment_gateway import (
    PaymentGateway,
    PaymentGatewayCreate,
    PaymentGatewayUpdate,
)
from admin_core.schemas.upload import UploadConstraints, UploadedFile
