"""Domain modules package."""

from app.modules.audit import models as audit_models  # noqa: F401
from app.modules.catalog import models as catalog_models  # noqa: F401
from app.modules.notifications import models as notifications_models  # noqa: F401
from app.modules.revenue import models as revenue_models  # noqa: F401
from app.modules.workflow import models as workflow_models  # noqa: F401
