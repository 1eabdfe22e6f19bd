"""
Settings component - Singleton system configuration.
"""

from ._impl import (
    NoOpCachePurger,
    SystemConfigService,
    create_config_service,
    get_default_config,
    new_client_secret,
    new_etag,
    validate_config,
    validate_domain,
    validate_email,
)
from .component import (
    run,
    run_get,
    run_render,
    run_save,
    run_update,
)
from .models import (
    GetConfigInput,
    GetConfigOutput,
    RenderConfigInput,
    RenderConfigOutput,
    SaveConfigInput,
    SaveConfigOutput,
    UpdateConfigInput,
    ValidationError,
)
from .ports import CachePurgePort, ClockPort, ConfigRepoPort

__all__ = [
    # Component entry points
    "run",
    "run_get",
    "run_render",
    "run_save",
    "run_update",
    # Models
    "GetConfigInput",
    "GetConfigOutput",
    "RenderConfigInput",
    "RenderConfigOutput",
    "SaveConfigInput",
    "SaveConfigOutput",
    "UpdateConfigInput",
    "ValidationError",
    # Ports
    "ConfigRepoPort",
    "CachePurgePort",
    "ClockPort",
    # Service
    "SystemConfigService",
    "NoOpCachePurger",
    "create_config_service",
    # Functions
    "get_default_config",
    "new_client_secret",
    "new_etag",
    "validate_config",
    "validate_domain",
    "validate_email",
]
