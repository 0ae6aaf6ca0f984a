"""
Component Configuration Models

One pydantic model per component type. Configs travel as camelCase JSON
(the editor's shape) and are validated against the model chosen by the
component's ``type`` whenever they cross the store boundary. Every field has
a default so a freshly added block may start from ``{}``; unknown keys are
kept so newer editor fields survive a round trip.
"""

from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from bio_storefront.database.models import ComponentType
from bio_storefront.errors import ValidationError


class ConfigModel(BaseModel):
    """Base for every component config"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ButtonConfig(ConfigModel):
    type: Literal["whatsapp", "link"] = "link"
    text: str = ""
    url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    whatsapp_message: Optional[str] = None
    style: Literal["large", "medium"] = "large"
    icon: Optional[str] = None


class TextConfig(ConfigModel):
    content: str = ""
    alignment: Literal["left", "center", "right"] = "center"
    size: Literal["small", "medium", "large"] = "medium"
    bold: Optional[bool] = None
    italic: Optional[bool] = None


class ProductKit(ConfigModel):
    """
    A purchasable variant of a product (e.g. "3 jars").

    ``discount_links`` maps a discount percentage to the checkout link that
    applies at that discount; ``ignore_discount`` exempts the kit from the
    product's percentage.
    """

    id: Union[str, int]
    label: str = ""
    price: float = 0.0
    link: str = ""
    discount_links: Optional[Dict[int, str]] = None
    is_visible: bool = True
    is_special: Optional[bool] = None
    is_highlighted: Optional[bool] = None
    ignore_discount: Optional[bool] = None


class ProductConfig(ConfigModel):
    id: Optional[Union[str, int]] = None
    title: Optional[str] = ""
    description: Optional[str] = ""
    image: Optional[str] = ""
    image_scale: int = 100
    image_position_x: Optional[int] = Field(default=None, ge=0, le=100)
    image_position_y: Optional[int] = Field(default=None, ge=0, le=100)
    discount_percent: float = Field(default=0, ge=0, le=100)
    discount_end_date: Optional[str] = None
    kits: List[ProductKit] = Field(default_factory=list)
    display_style: Optional[Literal["card", "compact", "ecommerce"]] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    rating_count: Optional[int] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None
    alt: Optional[str] = None

    def find_kit(self, kit_id: str) -> Optional[ProductKit]:
        for kit in self.kits:
            if str(kit.id) == str(kit_id):
                return kit
        return None


class VideoConfig(ConfigModel):
    url: str = ""
    thumbnail: Optional[str] = None
    thumbnail_scale: Optional[int] = Field(default=None, ge=100, le=200)
    title: Optional[str] = None
    show_title: bool = False


class SocialLink(ConfigModel):
    id: str
    platform: Literal["instagram", "tiktok", "youtube", "facebook", "twitter", "custom"] = "custom"
    url: str = ""
    label: Optional[str] = None
    icon: Optional[str] = None


class SocialConfig(ConfigModel):
    links: List[SocialLink] = Field(default_factory=list)
    style: Literal["icons", "buttons"] = "icons"


class LinkConfig(ConfigModel):
    text: str = ""
    url: str = ""
    icon: Optional[str] = None
    style: Literal["large", "small"] = "large"
    background_color: Optional[str] = None
    shape: Optional[Literal["rounded", "pill", "square"]] = None
    variant: Optional[Literal["filled", "outline", "soft"]] = None
    animation: Optional[Literal["none", "pulse", "shine"]] = None
    badge: Optional[str] = None
    thumbnail: Optional[str] = None


class CarouselImage(ConfigModel):
    id: str
    url: str = ""
    type: Literal["image", "video"] = "image"
    thumbnail: Optional[str] = None
    badge: Optional[str] = None
    link: Optional[str] = None
    alt: Optional[str] = None


class CarouselConfig(ConfigModel):
    images: List[CarouselImage] = Field(default_factory=list, max_length=10)
    auto_play: Optional[bool] = None
    slide_interval: Optional[int] = Field(default=None, ge=1000, le=10000)
    show_dots: Optional[bool] = None
    aspect_ratio: Optional[Literal["square", "landscape", "portrait"]] = None


class CalendlyConfig(ConfigModel):
    url: str = ""
    embed_type: Literal["button", "inline"] = "button"
    button_text: Optional[str] = None
    height: Optional[int] = None


class MapsConfig(ConfigModel):
    embed_url: Optional[str] = None
    address: Optional[str] = None
    height: Optional[int] = None
    show_open_button: Optional[bool] = None


class PixConfig(ConfigModel):
    mode: Literal["qrcode", "copypaste"] = "copypaste"
    qrcode_image: Optional[str] = None
    pix_code: Optional[str] = None
    recipient_name: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None


class StoriesItem(ConfigModel):
    id: str
    url: str
    type: Literal["image", "video"] = "image"
    thumbnail: Optional[str] = None
    duration: Optional[float] = None
    link: Optional[str] = None


class StoriesConfig(ConfigModel):
    items: List[StoriesItem] = Field(default_factory=list)
    auto_play: bool = False
    show_on_carousel: bool = True


CONFIG_MODELS: Dict[ComponentType, Type[ConfigModel]] = {
    ComponentType.BUTTON: ButtonConfig,
    ComponentType.TEXT: TextConfig,
    ComponentType.PRODUCT: ProductConfig,
    ComponentType.VIDEO: VideoConfig,
    ComponentType.SOCIAL: SocialConfig,
    ComponentType.LINK: LinkConfig,
    ComponentType.CAROUSEL: CarouselConfig,
    ComponentType.CALENDLY: CalendlyConfig,
    ComponentType.MAPS: MapsConfig,
    ComponentType.PIX: PixConfig,
    ComponentType.STORIES: StoriesConfig,
}


def parse_component_type(value: Any) -> ComponentType:
    try:
        return ComponentType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in ComponentType)
        raise ValidationError(f"Invalid component type '{value}'. Expected one of: {allowed}")


def decode_config(component_type: ComponentType, payload: Optional[Dict[str, Any]]) -> ConfigModel:
    """
    Validate a raw config against the model for ``component_type``.

    Raises:
        ValidationError: payload is not an object or does not fit the model
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("config must be an object")
    model = CONFIG_MODELS[component_type]
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {component_type.value} config",
            details={"fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()]},
        )
