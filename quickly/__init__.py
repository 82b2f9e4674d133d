"""On-the-fly image resizing proxy in front of an upstream origin."""

from .processor import BaseProcessor, StatelessAction
from .api import create_app, ServiceConfig
from .config import Settings
from .direct import OriginClient, run_blocking
from .params import FitType, ResizeRequest, TargetFormat, parse_resize_request
from .transform import ImageBuffer, transform
from .proxy import ImageProxyProcessor, create_proxy_app

__version__ = "1.0.0"


__all__ = [
    "BaseProcessor",
    "StatelessAction",
    "create_app",
    "ServiceConfig",
    "Settings",
    "OriginClient",
    "run_blocking",
    "FitType",
    "ResizeRequest",
    "TargetFormat",
    "parse_resize_request",
    "ImageBuffer",
    "transform",
    "ImageProxyProcessor",
    "create_proxy_app",
]
