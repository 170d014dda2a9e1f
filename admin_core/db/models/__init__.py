# File: admin_core/db/models/__init__.py

from admin_core.db.models.base import Base
from admin_core.db.models.language import LanguageModel
from admin_core.db.models.dropdown_option import DropdownOptionModel
from admin_core.db.models.slider import SliderModel
from admin_core.db.models.payment_gateway import PaymentGatewayModel
