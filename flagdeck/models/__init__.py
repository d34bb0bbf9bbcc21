from .tenant import Tenant
from .user import User
from .project import Project
from .apikey import ApiKey, KEY_CLASS_SECRET, KEY_CLASS_PUBLIC
from .config_record import ConfigRecord
from .feature_flag import FeatureFlag
from .prompt import Prompt

__all__ = [
    "Tenant",
    "User",
    "Project",
    "ApiKey",
    "KEY_CLASS_SECRET",
    "KEY_CLASS_PUBLIC",
    "ConfigRecord",
    "FeatureFlag",
    "Prompt",
]
