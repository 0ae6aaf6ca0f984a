"""
Page Components

Typed, ordered content blocks and the read-time legacy store fallback.
"""

from bio_storefront.components.configs import CONFIG_MODELS, decode_config, parse_component_type
from bio_storefront.components.legacy import LegacyAdapter, synthesize_components
from bio_storefront.components.schemas import SyntheticComponent, render_components
from bio_storefront.components.store import ComponentStore

__all__ = [
    "CONFIG_MODELS",
    "ComponentStore",
    "LegacyAdapter",
    "SyntheticComponent",
    "decode_config",
    "parse_component_type",
    "render_components",
    "synthesize_components",
]
