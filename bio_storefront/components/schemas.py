"""
Component Request/Response Models
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from bio_storefront.database.models import ComponentType, PageComponent


class ComponentOut(BaseModel):
    """A stored component as returned to clients"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    page_id: int
    type: ComponentType
    order_index: int
    config: Dict[str, Any]
    is_visible: bool
    synthetic: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SyntheticComponent(BaseModel):
    """
    Read-only component synthesized from a legacy store.

    Never persisted; its id is only meaningful inside the response that
    carries it. Mutating store operations refuse this type.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    page_id: int
    type: ComponentType
    order_index: int
    config: Dict[str, Any]
    is_visible: bool = True
    synthetic: Literal[True] = True


RenderedComponent = Union[PageComponent, SyntheticComponent]


def render_component(component: RenderedComponent) -> Dict[str, Any]:
    if isinstance(component, SyntheticComponent):
        return component.model_dump(mode="json")
    return ComponentOut.model_validate(component).model_dump(mode="json")


def render_components(components: List[RenderedComponent]) -> List[Dict[str, Any]]:
    return [render_component(c) for c in components]


class ComponentCreate(BaseModel):
    type: str
    config: Optional[Dict[str, Any]] = None


class ReorderRequest(BaseModel):
    componentIds: List[Any]
