"""Named setups package."""

from .db import get_session, init_db
from .models import Setup
from .library import (
    SetupImportError,
    add_or_update_setup,
    clear_setups,
    delete_setup,
    export_setups_json,
    find_setup,
    import_setups_json,
    list_setups,
    move_setup_down,
    move_setup_up,
)

__all__ = [
    "get_session",
    "init_db",
    "Setup",
    "SetupImportError",
    "add_or_update_setup",
    "clear_setups",
    "delete_setup",
    "export_setups_json",
    "find_setup",
    "import_setups_json",
    "list_setups",
    "move_setup_down",
    "move_setup_up",
]
