from enum import Enum


class InstallationPriceSource(str, Enum):
    OVERRIDE = "override"   # Product-level override
    CATEGORY = "category"   # Category installation rule
    NONE = "none"           # Not offered / no rule matched
