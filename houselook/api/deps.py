# Re-exporting the dependencies for the endpoint modules
from houselook.core.dependencies import (
    get_current_admin_user,
    get_current_user,
    get_identity,
    get_session,
)
from houselook.db.database import get_store
